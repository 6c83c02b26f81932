from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Mapping

EMPTY_CONSTANT = '""'


@dataclass(frozen=True)
class AssetPageSet:
    """The template/stylesheet/script trio of one page directory."""
    key: str
    directory: Path
    template_path: Path
    style_path: Path
    script_path: Path


@dataclass(frozen=True)
class ProcessedPage:
    key: str
    html: str

    def as_constant(self) -> str:
        """JSON string literal handed to the bundler as the page's value."""
        return json.dumps(self.html)


class PageRegistry(Mapping[str, ProcessedPage]):
    """
    Page key -> ProcessedPage for one build.

    Each key is written at most once; a second registration for the same key
    means two page sets resolved to one directory and is refused.
    """

    def __init__(self) -> None:
        self._pages: Dict[str, ProcessedPage] = {}

    def register(self, page: ProcessedPage) -> None:
        if page.key in self._pages:
            raise KeyError(f"page '{page.key}' already registered")
        self._pages[page.key] = page

    def constant_for(self, key: str) -> str:
        page = self._pages.get(key)
        return page.as_constant() if page else EMPTY_CONSTANT

    def keys_sorted(self) -> List[str]:
        return sorted(self._pages)

    def __getitem__(self, key: str) -> ProcessedPage:
        return self._pages[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)
