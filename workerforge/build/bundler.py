"""
Module Bundler - resolves the server module graph into one ES module.

esbuild does the actual resolution and concatenation. It is driven through a
short Node script so the constant table (which embeds whole HTML pages) is
passed in a JSON file instead of on the command line.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Optional

from workerforge.base.config import BundleConfig, ToolConfig
from workerforge.build.constants import BuildConstants, find_symbols, unresolved_symbols
from workerforge.build.module_graph import ModuleGraph
from workerforge.errors import BuildError, ErrorCode
from workerforge.utils.async_helpers import ToolRunner, run_tool

logger = logging.getLogger(__name__)

ESBUILD_DRIVER = """
import { readFileSync } from 'fs';
import { build } from 'esbuild';
const options = JSON.parse(readFileSync(process.argv[1], 'utf8'));
const result = await build({ ...options, bundle: true, write: false });
process.stdout.write(result.outputFiles[0].text);
"""


class ModuleBundler:
    def __init__(
        self,
        bundle: Optional[BundleConfig] = None,
        tools: Optional[ToolConfig] = None,
        runner: Optional[ToolRunner] = None,
        cwd: Optional[Path] = None,
    ):
        self.bundle_config = bundle or BundleConfig()
        self.tools = tools or ToolConfig()
        self.runner = runner or run_tool
        self.cwd = cwd

    def check_constants(self, entry: Path, constants: BuildConstants) -> ModuleGraph:
        """Fail before bundling if the module graph references an unknown symbol."""
        graph = ModuleGraph(entry).build()

        for cycle in graph.cycles():
            logger.warning(f"[Bundler] Import cycle: {' -> '.join(p.name for p in cycle)}")

        referenced = set()
        for source in graph.sources.values():
            referenced |= find_symbols(source)

        missing = unresolved_symbols(referenced, constants)
        if missing:
            raise BuildError(
                ErrorCode.BUNDLE_UNRESOLVED_CONSTANT,
                f"Unresolved build constant(s): {', '.join(missing)}",
                details={"symbols": missing, "entry": str(entry)},
            )
        return graph

    def esbuild_options(self, entry: Path, constants: BuildConstants) -> dict:
        return {
            "entryPoints": [str(entry)],
            "format": self.bundle_config.format,
            "platform": self.bundle_config.platform,
            "target": self.bundle_config.target,
            "external": list(self.bundle_config.external),
            "define": dict(constants),
        }

    async def bundle(self, entry: Path, constants: BuildConstants) -> str:
        graph = self.check_constants(entry, constants)
        logger.info(
            f"[Bundler] Bundling {entry.name} ({len(graph.modules)} local module(s), "
            f"{len(constants)} constant(s))"
        )

        with tempfile.TemporaryDirectory(prefix="workerforge-") as tmp:
            options_path = Path(tmp) / "esbuild-options.json"
            options_path.write_text(
                json.dumps(self.esbuild_options(entry, constants)), encoding="utf-8"
            )
            argv = [
                *self.tools.node_argv,
                "--input-type=module",
                "-e",
                ESBUILD_DRIVER,
                str(options_path),
            ]
            try:
                code = await self.runner(argv, tool="esbuild", cwd=self.cwd)
            except BuildError as e:
                if e.code is ErrorCode.TOOL_EXEC_FAILED:
                    raise BuildError(
                        ErrorCode.BUNDLE_FAILED,
                        f"esbuild failed for {entry.name}",
                        details=e.details,
                    ) from e
                raise

        if not code.strip():
            raise BuildError(ErrorCode.BUNDLE_FAILED, "esbuild produced no output")
        return code
