from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import polars as pl
import yaml

_BOM = "\ufeff"

DEFAULT_SYMBOLS: Tuple[str, ...] = ("circle", "X", "square")
DEFAULT_COLORS: Tuple[str, ...] = ("red", "blue", "green")
UNMAPPED_POLICIES = ("ignore", "warn", "error")
MISMATCH_POLICIES = ("warn", "error")
CONFLICT_POLICIES = ("last", "error")
WORK_DIR_ALIASES = ("work", "temp", "tmp")


def load_config(config_path: Path) -> Dict[str, Any]:
    config_path = Path(config_path)
    with config_path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    return cfg if isinstance(cfg, dict) else {}


def resolve_path(base_dir: Path, maybe_path: str | Path) -> Path:
    path = Path(maybe_path)
    if path.is_absolute():
        return path
    return (Path(base_dir) / path).resolve()


def get_output_base_dir(base_dir: Path, config: Dict[str, Any]) -> Path:
    output_base = (config.get("output") or {}).get("base_dir", "output")
    return resolve_path(base_dir, output_base)


def resolve_output_dir(base_dir: Path, config: Dict[str, Any], output_dir: Optional[str | Path]) -> Path:
    """
    Resolve where images are written.

      - "" / None          -> <base_dir>/<output.base_dir>
      - "work" (or temp)   -> a fresh directory under the system temp dir
      - absolute path      -> used as-is
      - relative path      -> <base_dir>/<output.base_dir>/<output_dir>
    """
    text = "" if output_dir is None else str(output_dir).strip()
    if not text:
        return get_output_base_dir(base_dir, config)
    if text.lower() in WORK_DIR_ALIASES:
        return Path(tempfile.mkdtemp(prefix="shiftplot_"))

    out_dir_path = Path(text)
    if out_dir_path.is_absolute():
        return out_dir_path

    return (get_output_base_dir(base_dir, config) / out_dir_path).resolve()


def bom_rename_map(columns: Sequence[str]) -> Dict[str, str]:
    rename: Dict[str, str] = {}
    for col in columns:
        if col.startswith(_BOM):
            rename[col] = col.lstrip(_BOM)
    return rename


def strip_bom_columns(df: pl.DataFrame) -> pl.DataFrame:
    rename = bom_rename_map(df.columns)
    return df.rename(rename) if rename else df


def _coerce_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return bool(default)
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "y", "on"):
        return True
    if text in ("0", "false", "no", "n", "off"):
        return False
    return bool(default)


def _coerce_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return int(default)
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(str(value).strip().lower().removesuffix("px")))
        except (TypeError, ValueError):
            return int(default)


def _str_list(value: Any, default: Sequence[str]) -> Tuple[str, ...]:
    if value is None:
        return tuple(default)
    if isinstance(value, str):
        # "circle X square" is accepted as well as a YAML list.
        items = value.replace(",", " ").split()
    elif isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value if v is not None]
    else:
        return tuple(default)
    return tuple(item for item in items if item)


def _policy(value: Any, allowed: Sequence[str], default: str, *, key: str) -> str:
    if value is None:
        return default
    text = str(value).strip().lower()
    if text not in allowed:
        raise ValueError(f"[config] {key} must be one of {list(allowed)}, got {value!r}")
    return text


def _default_max_workers() -> int:
    return max(1, min(8, os.cpu_count() or 1))


@dataclass(frozen=True)
class ColumnConfig:
    x: str = "BASE"
    y: str = "AVAL"
    treatment_label: str = "TRTA"
    treatment_code: str = "TRTAN"
    parameter_label: str = "PARAM"
    parameter_code: str = "PARAMN"
    by: Tuple[str, ...] = ()

    @property
    def by_columns(self) -> Tuple[str, ...]:
        return self.by if self.by else (self.parameter_code,)

    def required(self) -> List[str]:
        cols = [
            *self.by_columns,
            self.x,
            self.y,
            self.treatment_label,
            self.treatment_code,
            self.parameter_label,
            self.parameter_code,
        ]
        return list(dict.fromkeys(cols))


@dataclass(frozen=True)
class ShiftPlotConfig:
    base_dir: Path
    input_file: Optional[Path]
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    row_filter: Dict[str, Any] = field(default_factory=dict)
    x_label: str = "Baseline Value"
    y_label: str = "Post-baseline Value"
    symbols: Tuple[str, ...] = DEFAULT_SYMBOLS
    colors: Tuple[str, ...] = DEFAULT_COLORS
    unmapped_policy: str = "warn"
    mismatch_policy: str = "warn"
    conflict_policy: str = "last"
    width_px: int = 840
    height_px: int = 480
    dpi: int = 300
    output_dir: str = ""
    image_name: str = "shiftplot"
    image_format: str = "png"
    print_code: bool = False
    plotly_html: bool = False
    max_workers: int = field(default_factory=_default_max_workers)
    raw: Dict[str, Any] = field(default_factory=dict)

    def with_overrides(self, **overrides: Any) -> "ShiftPlotConfig":
        updates = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **updates) if updates else self


def parse_config(config: Dict[str, Any], base_dir: Path) -> ShiftPlotConfig:
    data_cfg = config.get("data") or {}
    cols_cfg = data_cfg.get("columns") or {}
    axes_cfg = config.get("axes") or {}
    attr_cfg = config.get("attributes") or {}
    fmt_cfg = config.get("formats") or {}
    out_cfg = config.get("output") or {}
    perf_cfg = config.get("performance") or {}

    defaults = ColumnConfig()
    by_raw = cols_cfg.get("by")
    if isinstance(by_raw, str):
        by_cols = tuple(c for c in by_raw.split() if c)
    elif isinstance(by_raw, (list, tuple)):
        by_cols = tuple(str(c).strip() for c in by_raw if c is not None and str(c).strip())
    else:
        by_cols = ()

    columns = ColumnConfig(
        x=str(cols_cfg.get("x", defaults.x)),
        y=str(cols_cfg.get("y", defaults.y)),
        treatment_label=str(cols_cfg.get("treatment_label", defaults.treatment_label)),
        treatment_code=str(cols_cfg.get("treatment_code", defaults.treatment_code)),
        parameter_label=str(cols_cfg.get("parameter_label", defaults.parameter_label)),
        parameter_code=str(cols_cfg.get("parameter_code", defaults.parameter_code)),
        by=by_cols,
    )

    input_raw = data_cfg.get("input_file")
    input_file = resolve_path(base_dir, input_raw) if input_raw else None

    row_filter = data_cfg.get("filter")
    if not isinstance(row_filter, dict):
        row_filter = {}

    max_workers_raw = perf_cfg.get("max_workers")
    max_workers = _default_max_workers() if max_workers_raw is None else max(1, _coerce_int(max_workers_raw, 1))

    image_format = str(out_cfg.get("image_format") or "png").strip().lstrip(".").lower()

    return ShiftPlotConfig(
        base_dir=Path(base_dir),
        input_file=input_file,
        columns=columns,
        row_filter=dict(row_filter),
        x_label=str(axes_cfg.get("x_label", "Baseline Value")),
        y_label=str(axes_cfg.get("y_label", "Post-baseline Value")),
        symbols=_str_list(attr_cfg.get("symbols"), DEFAULT_SYMBOLS),
        colors=_str_list(attr_cfg.get("colors"), DEFAULT_COLORS),
        unmapped_policy=_policy(
            attr_cfg.get("unmapped_policy"), UNMAPPED_POLICIES, "warn", key="attributes.unmapped_policy"
        ),
        mismatch_policy=_policy(
            attr_cfg.get("mismatch_policy"), MISMATCH_POLICIES, "warn", key="attributes.mismatch_policy"
        ),
        conflict_policy=_policy(
            fmt_cfg.get("conflict_policy"), CONFLICT_POLICIES, "last", key="formats.conflict_policy"
        ),
        width_px=max(1, _coerce_int(out_cfg.get("width_px"), 840)),
        height_px=max(1, _coerce_int(out_cfg.get("height_px"), 480)),
        dpi=max(1, _coerce_int(out_cfg.get("dpi"), 300)),
        output_dir=str(out_cfg.get("output_dir") or ""),
        image_name=str(out_cfg.get("image_name") or "shiftplot"),
        image_format=image_format or "png",
        print_code=_coerce_bool(out_cfg.get("print_code"), False),
        plotly_html=_coerce_bool(out_cfg.get("plotly_html"), False),
        max_workers=max_workers,
        raw=dict(config),
    )


def load_shiftplot_config(config_path: Path) -> ShiftPlotConfig:
    config_path = Path(config_path)
    return parse_config(load_config(config_path), config_path.parent)
