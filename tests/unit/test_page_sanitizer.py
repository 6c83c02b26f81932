import re

import pytest

from workerforge.assets.models import AssetPageSet
from workerforge.assets import sanitizer as sanitizer_module
from workerforge.assets.sanitizer import (
    PageSanitizer,
    insert_decoy,
    randomize_title,
    strip_comments,
    strip_identifying_meta,
)
from workerforge.errors import BuildError, ErrorCategory, ErrorCode

LOGIN_TEMPLATE = (
    "<!DOCTYPE html><html><head><title>Old</title>__STYLE__</head>"
    "<body><h1>Sign in</h1><script>__SCRIPT__</script></body></html>"
)

BRANDED_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="generator" content="static site">
  <meta name="Description" content="admin panel">
  <meta name="keywords" content="proxy, panel">
  <title>BPB-Worker-Panel</title>
</head>
<body class="main">
  <!-- build: BPB-Worker-Panel -->
  <header><span>BPB Panel</span><span>bpb panel</span></header>
  <p>Running BPB-Worker-Panel v__PANEL_VERSION__ (v2.10.3)</p>
  <a href="/login" class="btn">
      hello      world
  </a>
</body>
</html>
"""


def test_login_page_scenario():
    html = PageSanitizer().sanitize(LOGIN_TEMPLATE, "body{color:red}", "const x=1+2;")

    title = re.search(r"<title>([^<]*)</title>", html)
    assert title is not None
    assert title.group(1)
    assert title.group(1) != "Old"
    assert "Old" not in html
    assert "color:red" in html
    assert "const x = 1 + 2;" not in html
    assert "__STYLE__" not in html
    assert "__SCRIPT__" not in html


def test_identifying_literals_are_removed():
    html = PageSanitizer().sanitize(BRANDED_TEMPLATE, "", "")
    lowered = html.lower()

    assert "bpb-worker-panel" not in lowered
    assert "bpb panel" not in lowered
    assert "__panel_version__" not in lowered
    assert re.search(r"v\d+\.\d+\.\d+", html) is None


def test_same_literal_gets_one_replacement_per_page():
    html = PageSanitizer().sanitize(BRANDED_TEMPLATE, "", "")
    spans = re.findall(r"<span>([a-z0-9]+)</span>", html)

    assert len(spans) == 2
    assert spans[0] == spans[1]
    assert len(spans[0]) == 10


def test_replacements_differ_across_pages():
    sanitizer = PageSanitizer()
    first = re.findall(r"<span>([a-z0-9]+)</span>", sanitizer.sanitize(BRANDED_TEMPLATE, "", ""))
    second = re.findall(r"<span>([a-z0-9]+)</span>", sanitizer.sanitize(BRANDED_TEMPLATE, "", ""))
    assert first[0] != second[0]


def test_comments_and_meta_are_stripped():
    html = PageSanitizer().sanitize(BRANDED_TEMPLATE, "", "")
    lowered = html.lower()

    assert "<!--" not in html
    assert "generator" not in lowered
    assert "description" not in lowered
    assert "keywords" not in lowered
    # Unrelated meta tags survive
    assert "<meta charset" in lowered


def test_decoy_element_is_inserted():
    html = PageSanitizer().sanitize(BRANDED_TEMPLATE, "", "")
    assert re.search(r'<div style="?display:none"?>[a-z0-9]{16}</div>', html)


def test_document_is_minified():
    html = PageSanitizer().sanitize(BRANDED_TEMPLATE, "", "")
    assert "hello world" in html
    assert "hello      world" not in html
    assert "\n  " not in html
    assert "class=btn" in html


def test_resanitizing_does_not_reintroduce_stripped_content():
    sanitizer = PageSanitizer()
    once = sanitizer.sanitize(BRANDED_TEMPLATE, "p{margin:0}", "let a=1;")
    twice = sanitizer.sanitize(once, "", "")

    lowered = twice.lower()
    assert "<!--" not in twice
    assert "generator" not in lowered
    assert "keywords" not in lowered
    assert "bpb panel" not in lowered
    assert "<meta charset" in lowered


def test_randomize_title_only_touches_first_title():
    html = randomize_title("<title>One</title><svg><title>Two</title></svg>")
    assert "One" not in html
    assert "<title>Two</title>" in html
    assert re.match(r"<title>[a-z0-9]{10}</title>", html)


def test_strip_helpers():
    assert strip_comments("a<!-- x\n y -->b<!---->c") == "abc"
    assert strip_identifying_meta(
        '<meta name="KEYWORDS" content="a"><meta charset="utf-8">'
    ) == '<meta charset="utf-8">'


def test_insert_decoy_directly_after_body_tag():
    html = insert_decoy('<body class="x"><main></main></body>')
    assert re.match(r'<body class="x"><div style="display:none">[a-z0-9]{16}</div><main>', html)


def test_insert_decoy_without_body_is_noop():
    assert insert_decoy("<p>fragment</p>") == "<p>fragment</p>"


@pytest.mark.asyncio
async def test_process_reads_and_compacts_page_files(tmp_path):
    (tmp_path / "index.html").write_text(LOGIN_TEMPLATE, encoding="utf-8")
    (tmp_path / "style.css").write_text("body {\n  color: red;\n}\n", encoding="utf-8")
    (tmp_path / "script.js").write_text("// setup\nconst x = 1 + 2;\n", encoding="utf-8")
    page_set = AssetPageSet(
        key="login",
        directory=tmp_path,
        template_path=tmp_path / "index.html",
        style_path=tmp_path / "style.css",
        script_path=tmp_path / "script.js",
    )

    page = await PageSanitizer().process(page_set)

    assert page.key == "login"
    assert "color:red" in page.html
    assert "// setup" not in page.html
    assert "const x = 1 + 2;" not in page.html
    assert page.as_constant().startswith('"')


def _page_set(directory, key="login"):
    (directory / "index.html").write_text(LOGIN_TEMPLATE, encoding="utf-8")
    (directory / "style.css").write_text("p{margin:0}", encoding="utf-8")
    (directory / "script.js").write_text("let a = 1;", encoding="utf-8")
    return AssetPageSet(
        key=key,
        directory=directory,
        template_path=directory / "index.html",
        style_path=directory / "style.css",
        script_path=directory / "script.js",
    )


@pytest.mark.asyncio
async def test_undecodable_page_file_is_an_asset_error(tmp_path):
    page_set = _page_set(tmp_path)
    page_set.script_path.write_bytes(b"let a = '\xff\xfe';")

    with pytest.raises(BuildError) as exc_info:
        await PageSanitizer().process(page_set)

    err = exc_info.value
    assert err.code is ErrorCode.ASSET_PAGE_UNREADABLE
    assert err.category is ErrorCategory.MISSING_ASSET
    assert err.details["file"] == "script.js"
    assert err.details["page"] == "login"


@pytest.mark.asyncio
async def test_permission_denied_page_file_is_an_asset_error(tmp_path, monkeypatch):
    page_set = _page_set(tmp_path)

    async def denied(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(sanitizer_module, "read_text", denied)

    with pytest.raises(BuildError) as exc_info:
        await PageSanitizer().process(page_set)

    assert exc_info.value.code is ErrorCode.ASSET_PAGE_UNREADABLE
    assert exc_info.value.details["original_type"] == "PermissionError"


@pytest.mark.asyncio
async def test_page_file_removed_after_discovery(tmp_path):
    page_set = _page_set(tmp_path)
    page_set.style_path.unlink()

    with pytest.raises(BuildError) as exc_info:
        await PageSanitizer().process(page_set)

    assert exc_info.value.code is ErrorCode.ASSET_PAGE_FILE_MISSING
    assert exc_info.value.details["file"] == "style.css"
