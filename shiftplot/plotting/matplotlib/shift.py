from __future__ import annotations

"""Baseline vs. post-baseline scatter panel for one by-group."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .common import _savefig_and_close, marker_kwargs


def _finite_mask(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return np.isfinite(x) & np.isfinite(y)


def _row_major_order(n: int, ncol: int) -> List[int]:
    """
    Handle order for ``fig.legend`` so entries read left to right, then down.

    matplotlib fills legend columns top to bottom.
    """
    if ncol <= 1:
        return list(range(n))
    return [i for c in range(ncol) for i in range(c, n, ncol)]


def plot_shift(
    *,
    output_path: Path,
    title: str,
    x: np.ndarray,
    y: np.ndarray,
    codes: Sequence[Optional[int]],
    attribute_map: Sequence[Dict[str, Any]],
    x_label: str,
    y_label: str,
    width_px: int,
    height_px: int,
    dpi: int,
    shift_style: Dict[str, Any],
    common_style: Dict[str, Any],
) -> None:
    import matplotlib.pyplot as plt

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    code_arr = np.asarray([-1 if c is None else int(c) for c in codes], dtype=int)
    if not (x.size == y.size == code_arr.size):
        raise ValueError(f"[shift] x/y/codes length mismatch: {x.size}, {y.size}, {code_arr.size}")

    fig, ax = plt.subplots(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)

    valid = _finite_mask(x, y)
    # Legend order follows ascending treatment code.
    for entry in sorted(attribute_map, key=lambda e: int(e["code"])):
        mask = valid & (code_arr == int(entry["code"]))
        if not mask.any():
            continue
        ax.scatter(
            x[mask],
            y[mask],
            s=shift_style["marker_size"],
            alpha=shift_style["marker_alpha"],
            label=str(entry["value"]),
            zorder=3,
            **marker_kwargs(entry["symbol"], entry["color"], linewidth=shift_style["marker_linewidth"]),
        )

    ax.axline(
        (0.0, 0.0),
        slope=1.0,
        color=shift_style["refline_color"],
        linestyle=shift_style["refline_linestyle"],
        linewidth=shift_style["refline_linewidth"],
        zorder=1,
    )
    if shift_style.get("equal_axes", False):
        ax.set_aspect("equal", adjustable="datalim")

    ax.set_xlabel(x_label, fontsize=common_style["label_fontsize"])
    ax.set_ylabel(y_label, fontsize=common_style["label_fontsize"])
    ax.tick_params(axis="both", labelsize=common_style["tick_labelsize"], width=0.4, length=2.0)
    for spine in ax.spines.values():
        spine.set_linewidth(0.4)
    if common_style.get("show_grid", False):
        ax.grid(True, alpha=common_style["grid_alpha"], linewidth=0.3)

    if title and common_style.get("show_title", True):
        ax.set_title(
            title,
            fontsize=common_style["title_fontsize"],
            fontweight=common_style["title_fontweight"],
            pad=common_style["title_pad"],
        )

    bottom = 0.0
    handles, labels = ax.get_legend_handles_labels()
    if handles and common_style.get("show_legend", True):
        bottom = float(shift_style["legend_bottom_margin"])
        ncol = max(1, min(int(shift_style["legend_ncol"]), len(handles)))
        order = _row_major_order(len(handles), ncol)
        fig.legend(
            [handles[i] for i in order],
            [labels[i] for i in order],
            loc="lower center",
            ncol=ncol,
            fontsize=shift_style["legend_fontsize"],
            framealpha=common_style["legend_framealpha"],
            bbox_to_anchor=(0.5, 0.0),
        )
    fig.tight_layout(rect=(0.0, bottom, 1.0, 1.0), pad=0.4)
    _savefig_and_close(fig, output_path, dpi=dpi, common_style=common_style)
