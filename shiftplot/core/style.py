from __future__ import annotations

from typing import Any, Dict

from .config import _coerce_bool

# Defaults are sized for the 840x480 px @ 300 dpi image (2.8 x 1.6 in).
_COMMON_DEFAULTS: Dict[str, Any] = {
    "font_family": None,
    "title_fontsize": 5.0,
    "title_fontweight": "bold",
    "title_pad": 2.0,
    "label_fontsize": 4.5,
    "tick_labelsize": 4.0,
    "grid_alpha": 0.3,
    "legend_framealpha": 0.8,
    "savefig_facecolor": "white",
    "show_title": True,
    "show_grid": False,
    "show_legend": True,
}

_SHIFT_DEFAULTS: Dict[str, Any] = {
    "marker_size": 6.0,
    "marker_alpha": 0.9,
    "marker_linewidth": 0.5,
    "refline_color": "gray",
    "refline_linestyle": "--",
    "refline_linewidth": 0.5,
    "legend_ncol": 4,
    "legend_fontsize": 4.0,
    "legend_bottom_margin": 0.16,
    "equal_axes": False,
}


def _merge(defaults: Dict[str, Any], cfg: Any) -> Dict[str, Any]:
    out = dict(defaults)
    if isinstance(cfg, dict):
        for key, value in cfg.items():
            if key in out and value is not None:
                out[key] = value
    return out


def build_common_style(cfg: Any) -> Dict[str, Any]:
    out = _merge(_COMMON_DEFAULTS, cfg)
    for key in ("show_title", "show_grid", "show_legend"):
        out[key] = _coerce_bool(out[key], bool(_COMMON_DEFAULTS[key]))
    for key in ("title_fontsize", "title_pad", "label_fontsize", "tick_labelsize", "grid_alpha", "legend_framealpha"):
        out[key] = float(out[key])
    return out


def build_shift_style(cfg: Any) -> Dict[str, Any]:
    out = _merge(_SHIFT_DEFAULTS, cfg)
    out["legend_ncol"] = max(1, int(out["legend_ncol"]))
    out["equal_axes"] = _coerce_bool(out["equal_axes"], False)
    for key in ("marker_size", "marker_alpha", "marker_linewidth", "refline_linewidth", "legend_fontsize"):
        out[key] = float(out[key])
    out["legend_bottom_margin"] = min(0.5, max(0.0, float(out["legend_bottom_margin"])))
    return out
