from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .color import normalize_plotly_color, plotly_symbol


def _html_path_for_output_path(output_path: Path) -> Path:
    if output_path.suffix:
        return output_path.with_suffix(".html")
    return output_path.parent / f"{output_path.name}.html"


def _mpl_linestyle_to_plotly_dash(style: Any) -> str:
    if isinstance(style, str):
        s = style.strip()
        if s == "--":
            return "dash"
        if s == ":":
            return "dot"
        if s == "-.":
            return "dashdot"
    return "solid"


def write_shift_html(
    *,
    html_path: Path,
    title: str,
    x: Sequence[Any],
    y: Sequence[Any],
    codes: Sequence[Optional[int]],
    attribute_map: Sequence[Dict[str, Any]],
    x_label: str,
    y_label: str,
    width_px: int,
    height_px: int,
    shift_style: Dict[str, Any],
) -> Path:
    """Interactive companion of the matplotlib shift panel (same styling tables)."""
    import plotly.graph_objects as go

    html_path = Path(html_path)
    html_path.parent.mkdir(parents=True, exist_ok=True)

    x_arr = np.asarray([np.nan if v is None else v for v in x], dtype=float)
    y_arr = np.asarray([np.nan if v is None else v for v in y], dtype=float)
    code_arr = np.asarray([-1 if c is None else int(c) for c in codes], dtype=int)
    valid = np.isfinite(x_arr) & np.isfinite(y_arr)

    fig = go.Figure()
    for entry in sorted(attribute_map, key=lambda e: int(e["code"])):
        mask = valid & (code_arr == int(entry["code"]))
        if not mask.any():
            continue
        fig.add_trace(
            go.Scatter(
                x=x_arr[mask],
                y=y_arr[mask],
                mode="markers",
                name=str(entry["value"]),
                marker=dict(
                    symbol=plotly_symbol(entry["symbol"]),
                    color=normalize_plotly_color(entry["color"]),
                    size=8,
                ),
            )
        )

    if valid.any():
        lo = float(min(x_arr[valid].min(), y_arr[valid].min()))
        hi = float(max(x_arr[valid].max(), y_arr[valid].max()))
        fig.add_shape(
            type="line",
            x0=lo,
            y0=lo,
            x1=hi,
            y1=hi,
            line=dict(
                color=normalize_plotly_color(shift_style.get("refline_color"), default="#7f7f7f"),
                dash=_mpl_linestyle_to_plotly_dash(shift_style.get("refline_linestyle", "--")),
                width=1,
            ),
            layer="below",
        )

    fig.update_layout(
        title=dict(text=title),
        width=int(width_px),
        height=int(height_px),
        template="simple_white",
        legend=dict(orientation="h", yanchor="top", y=-0.2, xanchor="center", x=0.5),
        margin=dict(l=60, r=20, t=50, b=90),
    )
    fig.update_xaxes(title_text=x_label)
    fig.update_yaxes(title_text=y_label)
    fig.write_html(html_path, include_plotlyjs="cdn")
    return html_path


def export_task_html(task: Dict[str, Any]) -> Path:
    return write_shift_html(
        html_path=_html_path_for_output_path(Path(task["output_path"])),
        title=str(task.get("title", "")),
        x=task["x"],
        y=task["y"],
        codes=task["codes"],
        attribute_map=task["attribute_map"],
        x_label=task["x_label"],
        y_label=task["y_label"],
        width_px=int(task["width_px"]),
        height_px=int(task["height_px"]),
        shift_style=task["shift_style"],
    )
