"""
Page Sanitizer - folds one page's template, stylesheet and script into a
single self-contained HTML document with identifying text removed.

Order of operations (each step sees the previous step's output):
1. Randomize the first <title>.
2. Replace product-identifying literals (brand, display name, version).
3. Strip HTML comments.
4. Strip generator/description/keywords <meta> tags.
5. Insert a hidden decoy <div> right after <body>.
6. Inject the stylesheet and the compacted script into their placeholders.
7. Minify the whole document (whitespace, attribute quotes, inline CSS).

De-identification is best-effort: only the configured literals are replaced,
and a random replacement could in theory reproduce one of them.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

import minify_html

from workerforge.assets.compactor import compact_script
from workerforge.assets.models import AssetPageSet, ProcessedPage
from workerforge.assets.placeholders import PlaceholderInjector
from workerforge.assets.randomizer import random_identifier
from workerforge.base.config import PageConfig
from workerforge.errors import BuildError, ErrorCode
from workerforge.utils.async_helpers import read_text

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r"(<title\b[^>]*>).*?(</title>)", re.IGNORECASE | re.DOTALL)
COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
META_RE = re.compile(r"<meta[^>]+(?:generator|description|keywords)[^>]*>", re.IGNORECASE)
BODY_OPEN_RE = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
SEMVER_PATTERN = r"v\d+\.\d+\.\d+"

TITLE_LENGTH = 10
DECOY_LENGTH = 16


@dataclass(frozen=True)
class IdentifyingPattern:
    pattern: re.Pattern
    replacement_length: int

    @classmethod
    def literal(cls, text: str, length: int) -> "IdentifyingPattern":
        return cls(re.compile(re.escape(text), re.IGNORECASE), length)

    @classmethod
    def regex(cls, expr: str, length: int) -> "IdentifyingPattern":
        return cls(re.compile(expr, re.IGNORECASE), length)


def default_patterns(pages: PageConfig) -> List[IdentifyingPattern]:
    return [
        IdentifyingPattern.literal(pages.brand_name, 12),
        IdentifyingPattern.literal(pages.display_name, 10),
        IdentifyingPattern.literal(pages.version_token, 6),
        IdentifyingPattern.regex(SEMVER_PATTERN, 6),
    ]


class PageSanitizer:
    """Produces ProcessedPages from AssetPageSets."""

    def __init__(
        self,
        pages: Optional[PageConfig] = None,
        patterns: Optional[Iterable[IdentifyingPattern]] = None,
    ):
        self.pages = pages or PageConfig()
        self.patterns = list(patterns) if patterns is not None else default_patterns(self.pages)

    async def process(self, page_set: AssetPageSet) -> ProcessedPage:
        template, style, script = await asyncio.gather(
            _read_page_file(page_set.key, page_set.template_path),
            _read_page_file(page_set.key, page_set.style_path),
            _read_page_file(page_set.key, page_set.script_path),
        )
        compacted = await asyncio.to_thread(compact_script, script)
        html = await asyncio.to_thread(self.sanitize, template, style, compacted)
        logger.debug(f"[Sanitizer] {page_set.key}: {len(template)} -> {len(html)} chars")
        return ProcessedPage(key=page_set.key, html=html)

    def sanitize(self, template: str, style: str, script: str) -> str:
        html = randomize_title(template)
        html = self.replace_identifiers(html)
        html = strip_comments(html)
        html = strip_identifying_meta(html)
        html = insert_decoy(html)
        html = PlaceholderInjector.for_page(
            style,
            script,
            style_marker=self.pages.style_marker,
            script_marker=self.pages.script_marker,
        ).inject(html)
        return minify_document(html)

    def replace_identifiers(self, html: str) -> str:
        for identifying in self.patterns:
            # One token per pattern: every occurrence in this page gets the same value
            token = random_identifier(identifying.replacement_length)
            html = identifying.pattern.sub(lambda _m: token, html)
        return html


async def _read_page_file(key: str, path: Path) -> str:
    try:
        return await read_text(path)
    except FileNotFoundError as e:
        raise BuildError(
            ErrorCode.ASSET_PAGE_FILE_MISSING,
            f"Page '{key}' is missing {path.name}",
            details={"page": key, "file": path.name, "path": str(path)},
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise BuildError(
            ErrorCode.ASSET_PAGE_UNREADABLE,
            f"Cannot read {path.name} of page '{key}': {e}",
            details={"page": key, "file": path.name, "path": str(path), "original_type": type(e).__name__},
        ) from e


def randomize_title(html: str) -> str:
    token = random_identifier(TITLE_LENGTH)
    return TITLE_RE.sub(lambda m: f"{m.group(1)}{token}{m.group(2)}", html, count=1)


def strip_comments(html: str) -> str:
    return COMMENT_RE.sub("", html)


def strip_identifying_meta(html: str) -> str:
    return META_RE.sub("", html)


def insert_decoy(html: str) -> str:
    decoy = f'<div style="display:none">{random_identifier(DECOY_LENGTH)}</div>'
    return BODY_OPEN_RE.sub(lambda m: m.group(0) + decoy, html, count=1)


def minify_document(html: str) -> str:
    try:
        return minify_html.minify(html, minify_css=True)
    except Exception as e:
        raise BuildError(
            ErrorCode.TRANSFORM_HTML_FAILED,
            f"HTML minification failed: {e}",
            details={"original_type": type(e).__name__},
        ) from e
