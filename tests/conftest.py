"""Pytest configuration for workerforge."""
import json
import re
from pathlib import Path

import pytest

from workerforge.base.config import BuildConfig, BuildMode, set_config

OBFUSCATION_MARKER = "var _0x3f1a=['STRING_ARRAY'];"

SERVER_MODULE = """\
import { connect } from 'cloudflare:sockets';
import { renderPage } from './lib/render.js';

export default {
  async fetch(request) {
    const url = new URL(request.url);
    if (url.pathname === '/favicon.ico') return new Response(__ICON__);
    if (url.pathname === '/login') return renderPage(__LOGIN_HTML_CONTENT__);
    if (url.pathname === '/secrets') return renderPage(__SECRETS_HTML_CONTENT__);
    if (url.pathname === '/error') return renderPage(__ERROR_HTML_CONTENT__);
    return renderPage(__PANEL_HTML_CONTENT__, connect);
  }
};
"""

RENDER_MODULE = """\
export function renderPage(html) {
  return new Response(html, { headers: { 'Content-Type': 'text/html' } });
}
"""

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="generator" content="BPB-Worker-Panel v2.7.1">
  <title>{title}</title>
  __STYLE__
</head>
<body>
  <!-- {title} page -->
  <h1>BPB Panel v__PANEL_VERSION__</h1>
  <script>__SCRIPT__</script>
</body>
</html>
"""


def pytest_configure():
    set_config(None)


class FakeToolRunner:
    """
    Stands in for run_tool so the suite needs no Node installation.

    esbuild substitutes the define table into the entry source, terser
    collapses whitespace, javascript-obfuscator prepends a string array.
    """

    def __init__(self, fail_tool=None):
        self.calls = []
        self.fail_tool = fail_tool

    @property
    def tools(self):
        return [tool for tool, _argv in self.calls]

    async def __call__(self, argv, *, tool, cwd=None):
        from workerforge.errors import BuildError, ErrorCode

        self.calls.append((tool, list(argv)))
        if tool == self.fail_tool:
            raise BuildError(ErrorCode.TOOL_EXEC_FAILED, f"{tool} exited with code 1",
                             details={"tool": tool, "stderr": "boom"})

        if tool == "esbuild":
            options = json.loads(Path(argv[-1]).read_text(encoding="utf-8"))
            code = Path(options["entryPoints"][0]).read_text(encoding="utf-8")
            for symbol, literal in options["define"].items():
                code = code.replace(symbol, literal)
            return code

        src = Path(argv[argv.index("--output") - 1])
        out = Path(argv[argv.index("--output") + 1])
        code = src.read_text(encoding="utf-8")
        if tool == "terser":
            out.write_text(re.sub(r"\s+", " ", code).strip(), encoding="utf-8")
        elif tool == "javascript-obfuscator":
            out.write_text(OBFUSCATION_MARKER + code, encoding="utf-8")
        return ""


def write_page(asset_root: Path, key: str, title: str = None, style: str = "body{color:red}",
               script: str = "const x = 1 + 2;\n") -> Path:
    page_dir = asset_root / key
    page_dir.mkdir(parents=True, exist_ok=True)
    (page_dir / "index.html").write_text(PAGE_TEMPLATE.format(title=title or key.title()), encoding="utf-8")
    if style is not None:
        (page_dir / "style.css").write_text(style, encoding="utf-8")
    if script is not None:
        (page_dir / "script.js").write_text(script, encoding="utf-8")
    return page_dir


@pytest.fixture
def project(tmp_path):
    """A project root with panel and login pages, an icon and a server module."""
    assets = tmp_path / "src" / "assets"
    write_page(assets, "panel")
    write_page(assets, "login")
    (assets / "favicon.ico").write_bytes(b"\x00\x00\x01\x00icon-bytes")
    (tmp_path / "src" / "lib").mkdir(parents=True)
    (tmp_path / "src" / "worker.js").write_text(SERVER_MODULE, encoding="utf-8")
    (tmp_path / "src" / "lib" / "render.js").write_text(RENDER_MODULE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def dev_config(project):
    return BuildConfig().with_root(project).with_mode(BuildMode.DEVELOPMENT)


@pytest.fixture
def prod_config(project):
    return BuildConfig().with_root(project).with_mode(BuildMode.PRODUCTION)


@pytest.fixture
def fake_runner():
    return FakeToolRunner()


@pytest.fixture
def page_writer():
    return write_page


@pytest.fixture
def obfuscation_marker():
    return OBFUSCATION_MARKER


@pytest.fixture
def make_runner():
    return FakeToolRunner
