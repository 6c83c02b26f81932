# workerforge/build/orchestrator.py
# Sequences the build: pages -> icon -> bundle -> (minify -> obfuscate) -> package.

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from workerforge.assets.discovery import discover_page_sets
from workerforge.assets.models import PageRegistry
from workerforge.assets.sanitizer import PageSanitizer
from workerforge.base.config import BuildConfig, get_config
from workerforge.build.bundler import ModuleBundler
from workerforge.build.constants import BuildConstants, build_constants, load_icon_constant
from workerforge.build.models import BuildArtifact, BuildState
from workerforge.build.obfuscator import ModuleMinifier, Obfuscator
from workerforge.build.packager import Packager
from workerforge.errors import handle_error
from workerforge.utils.async_helpers import ToolRunner, run_tool

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """
    Runs one build as a linear state machine.

    DISCOVERING -> SANITIZING_PAGES -> READING_ICON -> BUNDLING
        -> MINIFYING -> OBFUSCATING   (production)
        -> PASSING_THROUGH            (development)
        -> PACKAGING -> DONE

    Any exception moves the machine to FAILED and is re-raised as a
    BuildError. Nothing touches the output directory before PACKAGING.
    """

    def __init__(self, config: Optional[BuildConfig] = None, runner: Optional[ToolRunner] = None):
        self.config = config or get_config()
        runner = runner or run_tool
        cwd = self.config.paths.project_root

        self.sanitizer = PageSanitizer(self.config.pages)
        self.bundler = ModuleBundler(self.config.bundle, self.config.tools, runner=runner, cwd=cwd)
        self.minifier = ModuleMinifier(self.config.tools, runner=runner, cwd=cwd)
        self.obfuscator = Obfuscator(self.config.obfuscation, self.config.tools, runner=runner, cwd=cwd)
        self.packager = Packager(self.config.paths)

        self.state: Optional[BuildState] = None
        self.history: List[BuildState] = []
        self.registry = PageRegistry()
        self.constants: BuildConstants = {}

    def _enter(self, state: BuildState) -> None:
        if self.state is not None and self.state.is_terminal:
            raise RuntimeError(f"build already finished in state {self.state.value}")
        self.state = state
        self.history.append(state)
        logger.debug(f"[Orchestrator] -> {state.value}")

    async def run(self) -> BuildArtifact:
        self.state = None
        self.history = []
        self.registry = PageRegistry()
        self.constants = {}

        mode = self.config.mode
        logger.info(f"[Orchestrator] Starting {mode.value} build in {self.config.paths.project_root}")

        try:
            artifact = await self._run_stages()
        except Exception as e:
            failed_in = self.state
            self._enter(BuildState.FAILED)
            error = handle_error(e, context=f"{failed_in.value if failed_in else 'startup'} stage")
            error.details.setdefault("state", failed_in.value if failed_in else None)
            if error is e:
                raise
            raise error from e

        self._enter(BuildState.DONE)
        logger.info("✅ Done!")
        return artifact.model_copy(update={"states": list(self.history)})

    async def _run_stages(self) -> BuildArtifact:
        cfg = self.config

        self._enter(BuildState.DISCOVERING)
        page_sets = await asyncio.to_thread(discover_page_sets, cfg.paths.asset_path, cfg.pages)

        self._enter(BuildState.SANITIZING_PAGES)
        pages = await asyncio.gather(*(self.sanitizer.process(p) for p in page_sets))
        for page in pages:
            self.registry.register(page)
        logger.info("✅ Assets bundled successfully!")

        self._enter(BuildState.READING_ICON)
        icon_constant = await load_icon_constant(cfg.paths.icon_path)

        self._enter(BuildState.BUNDLING)
        self.constants = build_constants(
            self.registry,
            icon_constant,
            required_keys=cfg.pages.required_keys,
            icon_symbol=cfg.bundle.icon_symbol,
        )
        code = await self.bundler.bundle(cfg.paths.entry_path, self.constants)
        logger.info("✅ Worker built successfully!")

        if cfg.mode.is_production:
            self._enter(BuildState.MINIFYING)
            code = await self.minifier.minify(code)
            logger.info("✅ Worker minified successfully!")

            self._enter(BuildState.OBFUSCATING)
            code = await self.obfuscator.obfuscate(code)
            logger.info("✅ Worker obfuscated successfully!")
        else:
            self._enter(BuildState.PASSING_THROUGH)

        self._enter(BuildState.PACKAGING)
        return await self.packager.package(
            code,
            cfg.mode,
            pages=self.registry.keys_sorted(),
            states=self.history,
        )

    def run_sync(self) -> BuildArtifact:
        """Convenience wrapper to run the build in a synchronous context."""
        return asyncio.run(self.run())


__all__ = ["PipelineOrchestrator"]
