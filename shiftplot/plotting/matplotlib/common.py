from __future__ import annotations

"""Matplotlib helpers shared by the shift-plot renderer and task dispatch."""

from pathlib import Path
from typing import Any, Dict, Sequence, Tuple

# name -> (matplotlib marker, filled). Open shapes are drawn with an edge only.
_SYMBOL_MARKERS: Dict[str, Tuple[Any, bool]] = {
    "circle": ("o", False),
    "circlefilled": ("o", True),
    "square": ("s", False),
    "squarefilled": ("s", True),
    "triangle": ("^", False),
    "trianglefilled": ("^", True),
    "triangledown": ("v", False),
    "triangledownfilled": ("v", True),
    "triangleleft": ("<", False),
    "triangleleftfilled": ("<", True),
    "triangleright": (">", False),
    "trianglerightfilled": (">", True),
    "diamond": ("D", False),
    "diamondfilled": ("D", True),
    "star": ("*", False),
    "starfilled": ("*", True),
    "hexagon": ("h", False),
    "hexagonfilled": ("h", True),
    "dot": (".", True),
    "x": ("x", True),
    "plus": ("+", True),
    "asterisk": ((6, 2, 0), True),
}

_LINE_MARKERS = {"x", "+", "1", "2", "3", "4", "|", "_"}


def resolve_marker(symbol: Any) -> Tuple[Any, bool]:
    """
    Map a symbol name (circle, X, squarefilled, ...) to a matplotlib marker.

    Raw matplotlib marker codes ("o", "^", ...) pass through as filled markers.
    """
    text = str(symbol).strip()
    key = text.lower().replace("_", "").replace(" ", "")
    if key in _SYMBOL_MARKERS:
        return _SYMBOL_MARKERS[key]

    from matplotlib.markers import MarkerStyle

    if text in MarkerStyle.markers:
        return text, True
    raise ValueError(f"[marker] unknown marker symbol: {symbol!r}")


def marker_kwargs(symbol: Any, color: str, *, linewidth: float) -> Dict[str, Any]:
    marker, filled = resolve_marker(symbol)
    if filled or (isinstance(marker, str) and marker in _LINE_MARKERS):
        return {"marker": marker, "color": color, "linewidths": linewidth}
    return {"marker": marker, "facecolors": "none", "edgecolors": color, "linewidths": linewidth}


def _safe_filename(text: Any) -> str:
    out = str(text)
    for ch in ("/", "\\", ":", "*", "?", '"', "<", ">", "|", "\n", "\r", "\t", " "):
        out = out.replace(ch, "_")
    out = out.strip("._")
    return out if out else "untitled"


def _format_title(by_labels: Sequence[Tuple[str, str]]) -> str:
    if not by_labels:
        return ""
    return ", ".join(f"{field}={value}" for field, value in by_labels)


def _savefig_and_close(fig: Any, output_path: Path, *, dpi: int, common_style: Dict[str, Any]) -> None:
    import matplotlib.pyplot as plt

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.savefig(output_path, dpi=dpi, facecolor=common_style.get("savefig_facecolor", "white"))
    finally:
        plt.close(fig)
