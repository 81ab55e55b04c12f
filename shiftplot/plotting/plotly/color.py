from __future__ import annotations

import re
from typing import Any

_TAB10_HEX = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)

_MPL_SHORT_TO_HEX = {
    "k": "#000000",
    "r": "#ff0000",
    "g": "#008000",
    "b": "#0000ff",
    "c": "#00ffff",
    "m": "#ff00ff",
    "y": "#ffff00",
    "w": "#ffffff",
}

_TAB_NAMES = ("blue", "orange", "green", "red", "purple", "brown", "pink", "gray", "olive", "cyan")

_HEX_RE = re.compile(r"^#?(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_MPL_CYCLE_RE = re.compile(r"^C(\d+)$")

# Symbol names -> Plotly marker symbols. "-open" variants match hollow matplotlib markers.
_SYMBOL_TO_PLOTLY = {
    "circle": "circle-open",
    "circlefilled": "circle",
    "square": "square-open",
    "squarefilled": "square",
    "triangle": "triangle-up-open",
    "trianglefilled": "triangle-up",
    "triangledown": "triangle-down-open",
    "triangledownfilled": "triangle-down",
    "triangleleft": "triangle-left-open",
    "triangleleftfilled": "triangle-left",
    "triangleright": "triangle-right-open",
    "trianglerightfilled": "triangle-right",
    "diamond": "diamond-open",
    "diamondfilled": "diamond",
    "star": "star-open",
    "starfilled": "star",
    "hexagon": "hexagon-open",
    "hexagonfilled": "hexagon",
    "dot": "circle",
    "x": "x-thin-open",
    "plus": "cross-thin-open",
    "asterisk": "asterisk-open",
    "o": "circle",
    "s": "square",
    "^": "triangle-up",
    "v": "triangle-down",
    "d": "diamond",
    "*": "star",
    "+": "cross-thin-open",
}


def normalize_plotly_color(value: Any, *, default: str = "#000000") -> str:
    """
    Map matplotlib color shorthands ("C0", "tab:red", "r") to Plotly colors.

    CSS names and hex strings pass through.
    """
    if value is None:
        return default
    text = str(value).strip()
    if not text or text.lower() in ("none", "null"):
        return default

    m = _MPL_CYCLE_RE.match(text)
    if m:
        return _TAB10_HEX[int(m.group(1)) % len(_TAB10_HEX)]

    lower = text.lower()
    if lower.startswith("tab:") and lower[4:] in _TAB_NAMES:
        return _TAB10_HEX[_TAB_NAMES.index(lower[4:])]
    if lower in _MPL_SHORT_TO_HEX:
        return _MPL_SHORT_TO_HEX[lower]
    if _HEX_RE.match(text):
        return text if text.startswith("#") else f"#{text}"
    return text


def plotly_symbol(symbol: Any, *, default: str = "circle") -> str:
    text = str(symbol or "").strip()
    key = text.lower().replace("_", "").replace(" ", "")
    return _SYMBOL_TO_PLOTLY.get(key, _SYMBOL_TO_PLOTLY.get(text, default))
