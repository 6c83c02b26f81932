"""
workerforge CLI: builds dist/worker.js and dist/worker.zip.

Usage examples:
    python -m workerforge.cli.build
    python -m workerforge.cli.build --dev
    NODE_ENV=development workerforge-build --report
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from workerforge.base.config import BuildConfig, BuildMode, set_config, setup_logging
from workerforge.build.orchestrator import PipelineOrchestrator
from workerforge.errors import BuildError, handle_error

logger = logging.getLogger("workerforge")

EXIT_OK = 0
EXIT_BUILD_FAILED = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bundle and obfuscate the edge worker")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dev", action="store_true", help="Skip minification and obfuscation")
    mode.add_argument("--production", action="store_true", help="Force a production build")
    parser.add_argument("--root", type=Path, help="Project root (defaults to WORKERFORGE_ROOT or cwd)")
    parser.add_argument("--log-level", help="Override WORKERFORGE_LOG_LEVEL")
    parser.add_argument("--report", action="store_true", help="Print the build artifact as JSON")
    return parser


def resolve_config(args: argparse.Namespace) -> BuildConfig:
    config = BuildConfig.from_env()
    if args.dev:
        config = config.with_mode(BuildMode.DEVELOPMENT)
    elif args.production:
        config = config.with_mode(BuildMode.PRODUCTION)
    if args.root:
        config = config.with_root(args.root.resolve())
    if args.log_level:
        config = replace(config, log=replace(config.log, level=args.log_level))
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = resolve_config(args)
    set_config(config)
    setup_logging(config)

    try:
        artifact = PipelineOrchestrator(config).run_sync()
    except BuildError as e:
        logger.error(f"❌ Build failed: {e}")
        logger.debug(e.to_json())
        return EXIT_BUILD_FAILED
    except Exception as e:
        logger.error(f"❌ Build failed: {handle_error(e)}", exc_info=True)
        return EXIT_BUILD_FAILED

    if args.report:
        print(artifact.model_dump_json(indent=2))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
