from __future__ import annotations

"""Treatment-code -> marker symbol/color attribute map."""

import math
from typing import Any, Dict, List, Optional, Sequence

import polars as pl

from .types import (
    AttributeEntry,
    AttributeMapError,
    AttributeTable,
    MarkerStyle,
    MarkerStyleMap,
    UnmappedTreatmentError,
)


def normalize_code(value: Any) -> Optional[Any]:
    """
    Integral numerics (1, 1.0, "1") become ``int``; other non-null values are
    returned unchanged; null/NaN becomes None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return None
        return int(value) if value.is_integer() else value
    text = str(value).strip()
    if not text:
        return None
    try:
        num = float(text)
    except ValueError:
        return text
    if math.isnan(num):
        return None
    return int(num) if num.is_integer() else num


def build_marker_styles(
    symbols: Sequence[str],
    colors: Sequence[str],
    *,
    mismatch_policy: str = "warn",
) -> MarkerStyleMap:
    symbols = [str(s).strip() for s in symbols]
    colors = [str(c).strip() for c in colors]
    if not symbols or not colors:
        raise AttributeMapError("[attrmap] symbol and color lists must both be non-empty")

    warnings: List[str] = []
    if len(symbols) != len(colors):
        msg = (
            f"[attrmap] Warning: {len(symbols)} symbol(s) but {len(colors)} color(s); "
            f"only treatment codes 1..{min(len(symbols), len(colors))} can be mapped"
        )
        if mismatch_policy == "error":
            raise AttributeMapError(msg.replace("Warning: ", ""))
        print(msg)
        warnings.append(msg)

    styles: Dict[int, MarkerStyle] = {}
    for i, (symbol, color) in enumerate(zip(symbols, colors), start=1):
        styles[i] = MarkerStyle(symbol=symbol, color=color)
    return MarkerStyleMap(styles=styles, warnings=tuple(warnings))


def build_attribute_table(
    df: pl.DataFrame,
    symbols: Sequence[str],
    colors: Sequence[str],
    *,
    code_col: str,
    label_col: str,
    unmapped_policy: str = "warn",
    mismatch_policy: str = "warn",
) -> AttributeTable:
    """
    Build one AttributeEntry per treatment code present in ``df``.

    Code ``i`` takes the i-th symbol and color (1-based). Entries keep the
    order in which codes first appear; the display value is the label of the
    last row seen for that code. Codes with no list position are reported
    according to ``unmapped_policy`` (ignore / warn / error).
    """
    missing = [c for c in (code_col, label_col) if c not in df.columns]
    if missing:
        raise ValueError(f"[attrmap] missing column(s): {missing}")

    style_map = build_marker_styles(symbols, colors, mismatch_policy=mismatch_policy)
    warnings = list(style_map.warnings)

    values: Dict[int, str] = {}
    unmapped: List[Any] = []
    for raw_code, raw_label in df.select([code_col, label_col]).iter_rows():
        code = normalize_code(raw_code)
        style = style_map.get(code) if isinstance(code, int) else None
        if style is None:
            marker = "<null>" if code is None else code
            if marker not in unmapped:
                unmapped.append(marker)
            continue
        values[code] = "" if raw_label is None else str(raw_label)

    if unmapped:
        if unmapped_policy == "error":
            raise UnmappedTreatmentError(unmapped)
        if unmapped_policy == "warn":
            msg = (
                f"[attrmap] Warning: treatment code(s) {unmapped} have no symbol/color position "
                f"(1..{len(style_map.styles)}); their rows are excluded"
            )
            print(msg)
            warnings.append(msg)

    entries = []
    for code, value in values.items():
        style = style_map.styles[code]
        entries.append(AttributeEntry(code=code, value=value, symbol=style.symbol, color=style.color))

    return AttributeTable(entries=tuple(entries), unmapped_codes=tuple(unmapped), warnings=tuple(warnings))
