import pytest

from workerforge.build.module_graph import ModuleGraph, collect_specifiers, is_local
from workerforge.errors import BuildError, ErrorCode


def test_collect_specifiers_handles_import_forms():
    source = """
import { connect } from 'cloudflare:sockets';
import def, { a,
  b } from "./lib/a.js";
import './side-effect.js';
export * from '../shared/b';
export { c } from './c.mjs';
const lazy = await import('./lazy.js');
export const notAnImport = "./nope.js";
"""
    assert collect_specifiers(source) == [
        "cloudflare:sockets",
        "./lib/a.js",
        "./side-effect.js",
        "../shared/b",
        "./c.mjs",
        "./lazy.js",
    ]


@pytest.mark.parametrize(
    "specifier,local",
    [("./a.js", True), ("../b", True), ("cloudflare:sockets", False), ("tweetnacl", False), ("/abs.js", False)],
)
def test_is_local(specifier, local):
    assert is_local(specifier) is local


def test_graph_follows_local_imports_only(project):
    graph = ModuleGraph(project / "src" / "worker.js").build()

    names = sorted(p.name for p in graph.modules)
    assert names == ["render.js", "worker.js"]
    assert graph.cycles() == []
    assert [p.name for p in graph.dependency_order()] == ["render.js", "worker.js"]


def test_graph_resolves_extensionless_and_index(tmp_path):
    (tmp_path / "utils").mkdir()
    (tmp_path / "entry.js").write_text("import a from './helpers';\nimport u from './utils';\n", encoding="utf-8")
    (tmp_path / "helpers.js").write_text("export default 1;\n", encoding="utf-8")
    (tmp_path / "utils" / "index.js").write_text("export default 2;\n", encoding="utf-8")

    graph = ModuleGraph(tmp_path / "entry.js").build()
    assert sorted(p.name for p in graph.modules) == ["entry.js", "helpers.js", "index.js"]


def test_graph_reports_cycles(tmp_path):
    (tmp_path / "a.js").write_text("import './b.js';\n", encoding="utf-8")
    (tmp_path / "b.js").write_text("import './a.js';\n", encoding="utf-8")

    graph = ModuleGraph(tmp_path / "a.js").build()
    cycles = graph.cycles()
    assert len(cycles) == 1
    assert sorted(p.name for p in cycles[0]) == ["a.js", "b.js"]


def test_unresolvable_local_import_is_left_to_bundler(tmp_path):
    (tmp_path / "entry.js").write_text("import x from './missing.js';\n", encoding="utf-8")
    graph = ModuleGraph(tmp_path / "entry.js").build()
    assert [p.name for p in graph.modules] == ["entry.js"]


def test_unreadable_entry(tmp_path):
    with pytest.raises(BuildError) as exc_info:
        ModuleGraph(tmp_path / "worker.js").build()
    assert exc_info.value.code is ErrorCode.ASSET_ENTRY_UNREADABLE


def test_undecodable_imported_module(tmp_path):
    (tmp_path / "entry.js").write_text("import './lib.js';\n", encoding="utf-8")
    (tmp_path / "lib.js").write_bytes(b"export const s = '\xff\xfe';\n")

    with pytest.raises(BuildError) as exc_info:
        ModuleGraph(tmp_path / "entry.js").build()

    err = exc_info.value
    assert err.code is ErrorCode.ASSET_ENTRY_UNREADABLE
    assert err.details["path"] == str((tmp_path / "lib.js").resolve())
    assert err.details["original_type"] == "UnicodeDecodeError"
