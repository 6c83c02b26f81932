from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List


@dataclass(frozen=True)
class Placeholder:
    marker: str
    resolver: Callable[[], str]


class PlaceholderInjector:
    """
    Replaces named markers in a template, in the order they were declared.

    Replacement is literal: resolved content is inserted as-is, so backslashes
    and `$` in scripts survive untouched. Content inserted by an earlier
    placeholder is visible to later ones.
    """

    def __init__(self, placeholders: Iterable[Placeholder] = ()):
        self.placeholders: List[Placeholder] = list(placeholders)

    def add(self, marker: str, resolver: Callable[[], str]) -> "PlaceholderInjector":
        self.placeholders.append(Placeholder(marker, resolver))
        return self

    def inject(self, template: str) -> str:
        result = template
        for placeholder in self.placeholders:
            if placeholder.marker in result:
                result = result.replace(placeholder.marker, placeholder.resolver())
        return result

    @classmethod
    def for_page(
        cls,
        style: str,
        script: str,
        style_marker: str = "__STYLE__",
        script_marker: str = "__SCRIPT__",
    ) -> "PlaceholderInjector":
        return cls([
            Placeholder(style_marker, lambda: f"<style>{style}</style>"),
            Placeholder(script_marker, lambda: script),
        ])
