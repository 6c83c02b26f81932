"""
Compile-time constants for the bundler.

Each page becomes one `__<KEY>_HTML_CONTENT__` symbol whose value is the
page HTML as a JSON string literal; the icon becomes `__ICON__` holding its
base64 text. The bundler substitutes every occurrence of a symbol in the
server module with the literal.
"""

from __future__ import annotations

import base64
import json
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from workerforge.assets.compactor import compact_script
from workerforge.assets.models import EMPTY_CONSTANT, PageRegistry
from workerforge.errors import BuildError, ErrorCode
from workerforge.utils.async_helpers import read_bytes

SYMBOL_RE = re.compile(r"\b__[A-Z][A-Z0-9_]*__\b")

BuildConstants = Dict[str, str]


def symbol_for_key(key: str) -> str:
    """`panel` -> `__PANEL_HTML_CONTENT__`, `admin/login` -> `__ADMIN_LOGIN_HTML_CONTENT__`."""
    normalized = re.sub(r"[^A-Za-z0-9]+", "_", key).strip("_").upper()
    return f"__{normalized}_HTML_CONTENT__"


def encode_icon(data: bytes) -> str:
    return json.dumps(base64.b64encode(data).decode("ascii"))


async def load_icon_constant(path: Path) -> str:
    try:
        data = await read_bytes(path)
    except OSError as e:
        raise BuildError(
            ErrorCode.ASSET_ICON_UNREADABLE,
            f"Cannot read icon {path}: {e}",
            details={"path": str(path)},
        ) from e
    return encode_icon(data)


def build_constants(
    registry: PageRegistry,
    icon_constant: str,
    required_keys: Iterable[str] = (),
    icon_symbol: str = "__ICON__",
) -> BuildConstants:
    """
    Assemble the symbol -> literal table.

    Discovered pages always get an entry; keys the server module expects but
    that have no page directory resolve to an empty string literal. Two keys
    that normalize to the same symbol are refused.
    """
    constants: BuildConstants = {}
    owners: Dict[str, str] = {}
    for key in sorted(set(registry) | set(required_keys)):
        symbol = symbol_for_key(key)
        if symbol in owners:
            raise BuildError(
                ErrorCode.CONFIG_INVALID,
                f"Page keys '{owners[symbol]}' and '{key}' both map to {symbol}",
                details={"symbol": symbol, "keys": [owners[symbol], key]},
            )
        owners[symbol] = key
        constants[symbol] = registry.constant_for(key)
    if icon_symbol in constants:
        raise BuildError(
            ErrorCode.CONFIG_INVALID,
            f"Icon symbol {icon_symbol} collides with page '{owners[icon_symbol]}'",
            details={"symbol": icon_symbol, "keys": [owners[icon_symbol]]},
        )
    constants[icon_symbol] = icon_constant
    return constants


def mask_literals(source: str) -> str:
    """
    Blank out string and template literal text, keeping `${...}` code.

    Masked characters become spaces so offsets and word boundaries survive.
    """
    out: List[str] = []
    # Brace depth inside each open template interpolation
    depths: List[int] = []
    quote: Optional[str] = None
    i, n = 0, len(source)
    while i < n:
        ch = source[i]
        if quote:
            if ch == "\\":
                out.append(" " * min(2, n - i))
                i += 2
                continue
            if quote == "`" and source.startswith("${", i):
                depths.append(0)
                quote = None
                out.append("  ")
                i += 2
                continue
            if ch == quote:
                quote = None
            out.append("\n" if ch == "\n" else " ")
        elif ch in "'\"`":
            quote = ch
            out.append(" ")
        elif depths and ch == "{":
            depths[-1] += 1
            out.append(ch)
        elif depths and ch == "}":
            if depths[-1] == 0:
                depths.pop()
                quote = "`"
                out.append(" ")
            else:
                depths[-1] -= 1
                out.append(ch)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def find_symbols(source: str) -> Set[str]:
    """Constant-shaped identifiers in code, ignoring comments and literals."""
    return set(SYMBOL_RE.findall(mask_literals(compact_script(source))))


def unresolved_symbols(referenced: Iterable[str], constants: BuildConstants) -> list:
    return sorted(s for s in set(referenced) if s not in constants)


__all__ = [
    "BuildConstants",
    "EMPTY_CONSTANT",
    "build_constants",
    "encode_icon",
    "find_symbols",
    "load_icon_constant",
    "mask_literals",
    "symbol_for_key",
    "unresolved_symbols",
]
