# workerforge/utils/async_helpers.py
"""
Async utilities for driving external build tools.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from workerforge.errors import BuildError, ErrorCode

logger = logging.getLogger(__name__)

# Signature shared by run_tool and the fakes used in tests
ToolRunner = Callable[..., Awaitable[str]]


async def run_tool(
    argv: Sequence[str],
    *,
    tool: str,
    cwd: Optional[Path] = None,
) -> str:
    """
    Run an external tool and return its stdout.

    Args:
        argv: Full command line; argv[0] must be on PATH or a path
        tool: Short tool name used in logs and error details
        cwd: Working directory for the subprocess

    Returns:
        Decoded stdout of the process

    Raises:
        BuildError: TOOL_NOT_INSTALLED if argv[0] cannot be found,
            TOOL_EXEC_FAILED if the process exits non-zero
    """
    if not argv:
        raise BuildError(ErrorCode.TOOL_NOT_INSTALLED, f"No command configured for {tool}")

    executable = argv[0]
    if shutil.which(executable) is None and not Path(executable).exists():
        raise BuildError(
            ErrorCode.TOOL_NOT_INSTALLED,
            f"{tool} requires '{executable}' on PATH",
            details={"tool": tool, "executable": executable},
        )

    logger.debug(f"[Tool:{tool}] {' '.join(str(a) for a in argv[:4])} ...")

    proc = await asyncio.create_subprocess_exec(
        *[str(a) for a in argv],
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
    )
    stdout, stderr = await proc.communicate()

    if proc.returncode != 0:
        err_text = stderr.decode("utf-8", errors="replace").strip()
        raise BuildError(
            ErrorCode.TOOL_EXEC_FAILED,
            f"{tool} exited with code {proc.returncode}",
            details={"tool": tool, "returncode": proc.returncode, "stderr": err_text[-4000:]},
        )

    return stdout.decode("utf-8")


async def read_text(path: Path) -> str:
    """Read a UTF-8 file without blocking the event loop."""
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


async def read_bytes(path: Path) -> bytes:
    return await asyncio.to_thread(path.read_bytes)
