# ============================================================================
# workerforge/base/config.py
# Build Configuration Management
# ============================================================================
#
# PURPOSE:
# Every setting the build pipeline reads lives here: where the assets are,
# where the artifact goes, which external tools to call and with what
# options, and whether this is a development or production build.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses: one immutable section per concern
# 2. Environment variables: WORKERFORGE_* (plus NODE_ENV for the build mode)
# 3. BuildMode is evaluated once here and threaded through the orchestrator
#
# ============================================================================

from __future__ import annotations

import os
import logging
import shlex
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class BuildMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def is_production(self) -> bool:
        return self is BuildMode.PRODUCTION

    @classmethod
    def from_value(cls, value: Optional[str]) -> "BuildMode":
        # Anything that is not literally "production" builds in development mode
        if (value or "production").strip().lower() == "production":
            return cls.PRODUCTION
        return cls.DEVELOPMENT


@dataclass(frozen=True)
class PathsConfig:
    project_root: Path = field(default_factory=Path.cwd)
    asset_dir: str = "src/assets"
    entry_module: str = "src/worker.js"
    icon_file: str = "src/assets/favicon.ico"
    dist_dir: str = "dist"
    worker_file: str = "worker.js"
    archive_file: str = "worker.zip"
    archive_entry: str = "_worker.js"

    @property
    def asset_path(self) -> Path:
        return self.project_root / self.asset_dir

    @property
    def entry_path(self) -> Path:
        return self.project_root / self.entry_module

    @property
    def icon_path(self) -> Path:
        return self.project_root / self.icon_file

    @property
    def dist_path(self) -> Path:
        return self.project_root / self.dist_dir

    @property
    def worker_path(self) -> Path:
        return self.dist_path / self.worker_file

    @property
    def archive_path(self) -> Path:
        return self.dist_path / self.archive_file


@dataclass(frozen=True)
class PageConfig:
    template_name: str = "index.html"
    style_name: str = "style.css"
    script_name: str = "script.js"
    style_marker: str = "__STYLE__"
    script_marker: str = "__SCRIPT__"
    # Page keys the server module always references
    required_keys: Tuple[str, ...] = ("panel", "login", "error", "secrets")
    brand_name: str = "BPB-Worker-Panel"
    display_name: str = "BPB Panel"
    version_token: str = "v__PANEL_VERSION__"


@dataclass(frozen=True)
class BundleConfig:
    format: str = "esm"
    platform: str = "browser"
    target: str = "es2020"
    external: Tuple[str, ...] = ("cloudflare:sockets",)
    icon_symbol: str = "__ICON__"


@dataclass(frozen=True)
class ObfuscationConfig:
    string_array_threshold: float = 1.0
    string_array_encoding: Tuple[str, ...] = ("rc4",)
    numbers_to_expressions: bool = True
    transform_object_keys: bool = True
    rename_globals: bool = True
    dead_code_injection: bool = True
    dead_code_injection_threshold: float = 0.2
    target: str = "browser"

    def to_cli_args(self) -> List[str]:
        """Render the options as javascript-obfuscator CLI flags."""
        options: Dict[str, Union[str, float, bool]] = {
            "string-array": True,
            "string-array-threshold": self.string_array_threshold,
            "string-array-encoding": ",".join(self.string_array_encoding),
            "numbers-to-expressions": self.numbers_to_expressions,
            "transform-object-keys": self.transform_object_keys,
            "rename-globals": self.rename_globals,
            "dead-code-injection": self.dead_code_injection,
            "dead-code-injection-threshold": self.dead_code_injection_threshold,
            "target": self.target,
        }
        args: List[str] = []
        for name, value in options.items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            args.extend([f"--{name}", str(value)])
        return args


@dataclass(frozen=True)
class ToolConfig:
    node: str = "node"
    terser: str = "npx --yes terser"
    obfuscator: str = "npx --yes javascript-obfuscator"

    @property
    def node_argv(self) -> List[str]:
        return shlex.split(self.node)

    @property
    def terser_argv(self) -> List[str]:
        return shlex.split(self.terser)

    @property
    def obfuscator_argv(self) -> List[str]:
        return shlex.split(self.obfuscator)


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file_enabled: bool = False
    file_name: str = "workerforge.log"
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass(frozen=True)
class BuildConfig:
    mode: BuildMode = BuildMode.PRODUCTION
    paths: PathsConfig = field(default_factory=PathsConfig)
    pages: PageConfig = field(default_factory=PageConfig)
    bundle: BundleConfig = field(default_factory=BundleConfig)
    obfuscation: ObfuscationConfig = field(default_factory=ObfuscationConfig)
    tools: ToolConfig = field(default_factory=ToolConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def dev_mode(self) -> bool:
        return not self.mode.is_production

    def with_mode(self, mode: BuildMode) -> "BuildConfig":
        return replace(self, mode=mode)

    def with_root(self, root: Path) -> "BuildConfig":
        return replace(self, paths=replace(self.paths, project_root=Path(root)))

    @classmethod
    def from_env(cls) -> "BuildConfig":
        mode = BuildMode.from_value(
            os.getenv("WORKERFORGE_ENV") or os.getenv("NODE_ENV")
        )

        defaults = PathsConfig()
        paths = PathsConfig(
            project_root=Path(os.getenv("WORKERFORGE_ROOT", str(Path.cwd()))),
            asset_dir=os.getenv("WORKERFORGE_ASSET_DIR", defaults.asset_dir),
            entry_module=os.getenv("WORKERFORGE_ENTRY", defaults.entry_module),
            icon_file=os.getenv("WORKERFORGE_ICON", defaults.icon_file),
            dist_dir=os.getenv("WORKERFORGE_DIST_DIR", defaults.dist_dir),
        )

        page_defaults = PageConfig()
        keys_str = os.getenv("WORKERFORGE_PAGE_KEYS", "")
        required_keys = (
            tuple(k.strip() for k in keys_str.split(",") if k.strip())
            if keys_str else page_defaults.required_keys
        )
        pages = PageConfig(
            required_keys=required_keys,
            brand_name=os.getenv("WORKERFORGE_BRAND_NAME", page_defaults.brand_name),
            display_name=os.getenv("WORKERFORGE_DISPLAY_NAME", page_defaults.display_name),
        )

        tool_defaults = ToolConfig()
        tools = ToolConfig(
            node=os.getenv("WORKERFORGE_NODE", tool_defaults.node),
            terser=os.getenv("WORKERFORGE_TERSER", tool_defaults.terser),
            obfuscator=os.getenv("WORKERFORGE_OBFUSCATOR", tool_defaults.obfuscator),
        )

        log_file = os.getenv("WORKERFORGE_LOG_FILE", "")
        log = LogConfig(
            level=os.getenv("WORKERFORGE_LOG_LEVEL", "INFO"),
            file_enabled=bool(log_file),
            file_name=log_file or LogConfig().file_name,
        )

        return cls(mode=mode, paths=paths, pages=pages, tools=tools, log=log)


_config: Optional[BuildConfig] = None


def get_config() -> BuildConfig:
    global _config
    if _config is None:
        _config = BuildConfig.from_env()
    return _config


def set_config(config: Optional[BuildConfig]) -> None:
    """Replace the global configuration (mainly used for testing)."""
    global _config
    _config = config


def setup_logging(config: Optional[BuildConfig] = None) -> None:
    cfg = config or get_config()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        from logging.handlers import RotatingFileHandler
        log_path = Path(cfg.log.file_name)
        if not log_path.is_absolute():
            log_path = cfg.paths.project_root / log_path
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
            backupCount=cfg.log.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, cfg.log.level.upper(), logging.INFO),
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
