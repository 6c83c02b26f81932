"""
Local import graph of the server module.

Only relative specifiers (`./x`, `../y`) are followed: bare package names and
scheme imports such as `cloudflare:sockets` belong to the bundler or the
runtime. The graph is used to check constant references before the bundler
runs; resolving packages is left to the bundler itself.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

import networkx as nx

from workerforge.errors import BuildError, ErrorCode

logger = logging.getLogger(__name__)

IMPORT_RE = re.compile(
    r"""(?:\bimport|\bexport)\s+(?:[^'"`;]*?\s+from\s+)?['"]([^'"]+)['"]"""
    r"""|\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)""",
    re.MULTILINE,
)
RESOLVE_SUFFIXES = ("", ".js", ".mjs", ".ts", "/index.js", "/index.mjs")


def collect_specifiers(source: str) -> List[str]:
    specs = []
    for match in IMPORT_RE.finditer(source):
        spec = match.group(1) or match.group(2)
        if spec:
            specs.append(spec)
    return specs


def is_local(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../")


def resolve_specifier(specifier: str, from_file: Path) -> Optional[Path]:
    base = (from_file.parent / specifier)
    for suffix in RESOLVE_SUFFIXES:
        candidate = Path(f"{base}{suffix}")
        if candidate.is_file():
            return candidate.resolve()
    return None


class ModuleGraph:
    """Directed graph: module path -> modules it imports."""

    def __init__(self, entry: Path):
        self.entry = entry.resolve()
        self.graph: nx.DiGraph = nx.DiGraph()
        self.sources: Dict[Path, str] = {}

    def _read_module(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            kind = "entry module" if path == self.entry else "module"
            raise BuildError(
                ErrorCode.ASSET_ENTRY_UNREADABLE,
                f"Cannot read {kind} {path}: {e}",
                details={"path": str(path), "entry": str(self.entry), "original_type": type(e).__name__},
            ) from e

    def build(self) -> "ModuleGraph":
        entry_source = self._read_module(self.entry)

        self.graph.clear()
        self.sources = {self.entry: entry_source}
        self.graph.add_node(self.entry)

        stack = [self.entry]
        while stack:
            current = stack.pop()
            for spec in collect_specifiers(self.sources[current]):
                if not is_local(spec):
                    continue
                resolved = resolve_specifier(spec, current)
                if resolved is None:
                    # Left for the bundler to report with its own diagnostics
                    logger.debug(f"[ModuleGraph] Unresolved import '{spec}' in {current.name}")
                    continue
                self.graph.add_edge(current, resolved)
                if resolved not in self.sources:
                    self.sources[resolved] = self._read_module(resolved)
                    stack.append(resolved)

        return self

    @property
    def modules(self) -> List[Path]:
        return sorted(self.graph.nodes)

    def cycles(self) -> List[List[Path]]:
        return [list(c) for c in nx.simple_cycles(self.graph)]

    def dependency_order(self) -> List[Path]:
        """Dependencies before dependants; raises NetworkXUnfeasible on cycles."""
        return list(reversed(list(nx.topological_sort(self.graph))))
