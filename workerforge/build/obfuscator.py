"""
Production-only stages: module minification (terser) and obfuscation
(javascript-obfuscator).

Both tools read and write files, so each call works in its own temporary
directory.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional

from workerforge.base.config import ObfuscationConfig, ToolConfig
from workerforge.errors import BuildError, ErrorCode
from workerforge.utils.async_helpers import ToolRunner, run_tool

logger = logging.getLogger(__name__)


async def _run_file_tool(
    runner: ToolRunner,
    argv_prefix: list,
    code: str,
    extra_args: list,
    tool: str,
    failure_code: ErrorCode,
    cwd: Optional[Path],
) -> str:
    with tempfile.TemporaryDirectory(prefix="workerforge-") as tmp:
        src = Path(tmp) / "input.js"
        out = Path(tmp) / "output.js"
        src.write_text(code, encoding="utf-8")
        argv = [*argv_prefix, str(src), "--output", str(out), *extra_args]
        try:
            await runner(argv, tool=tool, cwd=cwd)
        except BuildError as e:
            if e.code is ErrorCode.TOOL_EXEC_FAILED:
                raise BuildError(failure_code, f"{tool} failed", details=e.details) from e
            raise
        if not out.is_file():
            raise BuildError(failure_code, f"{tool} wrote no output", details={"tool": tool})
        return out.read_text(encoding="utf-8")


class ModuleMinifier:
    """Minifies the bundled module as an ES module, dropping all comments."""

    ARGS = ["--module", "--compress", "--mangle", "--comments", "false"]

    def __init__(self, tools: Optional[ToolConfig] = None, runner: Optional[ToolRunner] = None,
                 cwd: Optional[Path] = None):
        self.tools = tools or ToolConfig()
        self.runner = runner or run_tool
        self.cwd = cwd

    async def minify(self, code: str) -> str:
        return await _run_file_tool(
            self.runner,
            self.tools.terser_argv,
            code,
            self.ARGS,
            tool="terser",
            failure_code=ErrorCode.TRANSFORM_MINIFY_FAILED,
            cwd=self.cwd,
        )


class Obfuscator:
    """
    String-array encoding of every literal (threshold 1, rc4), numeric
    expressions, object key transforms, global renaming and dead code
    injection at the configured density.
    """

    def __init__(
        self,
        options: Optional[ObfuscationConfig] = None,
        tools: Optional[ToolConfig] = None,
        runner: Optional[ToolRunner] = None,
        cwd: Optional[Path] = None,
    ):
        self.options = options or ObfuscationConfig()
        self.tools = tools or ToolConfig()
        self.runner = runner or run_tool
        self.cwd = cwd

    async def obfuscate(self, code: str) -> str:
        return await _run_file_tool(
            self.runner,
            self.tools.obfuscator_argv,
            code,
            self.options.to_cli_args(),
            tool="javascript-obfuscator",
            failure_code=ErrorCode.OBFUSCATION_FAILED,
            cwd=self.cwd,
        )
