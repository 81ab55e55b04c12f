from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import polars as pl

from .config import ColumnConfig, strip_bom_columns


def load_rows(path: Path) -> pl.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"[data] input file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        df = pl.read_parquet(path)
    elif suffix in (".csv", ".txt"):
        df = pl.read_csv(path, infer_schema_length=10000)
    else:
        raise ValueError(f"[data] unsupported input format {suffix!r} (expected .csv or .parquet)")
    return strip_bom_columns(df)


def apply_row_filter(
    df: pl.DataFrame,
    filter_cfg: Optional[Dict[str, Any]],
    warnings: Optional[List[str]] = None,
) -> pl.DataFrame:
    if not filter_cfg:
        return df
    # 모든 조건을 AND로 결합: {SAFFL: "Y", ANL01FL: "Y"}
    for col, val in filter_cfg.items():
        if col not in df.columns:
            msg = f"[data] Warning: filter column '{col}' not found in input, skipping this filter"
            print(msg)
            if warnings is not None:
                warnings.append(msg)
            continue
        if isinstance(val, (list, tuple)):
            df = df.filter(pl.col(col).is_in(list(val)))
        elif val is None:
            df = df.filter(pl.col(col).is_null())
        else:
            df = df.filter(pl.col(col) == val)
    return df


def prepare_rows(df: pl.DataFrame, columns: ColumnConfig) -> pl.DataFrame:
    """Select the plotting columns, cast x/y to floats and sort by the by-keys."""
    required = columns.required()
    missing = [c for c in required if c not in df.columns]
    if missing:
        available = ", ".join(df.columns)
        raise ValueError(f"[data] missing column(s) {missing}. Available: {available}")

    out = df.select(required).with_columns(
        [
            pl.col(columns.x).cast(pl.Float64, strict=False).alias(columns.x),
            pl.col(columns.y).cast(pl.Float64, strict=False).alias(columns.y),
        ]
    )
    return out.sort(list(columns.by_columns), nulls_last=True, maintain_order=True)


def partition_by_groups(df: pl.DataFrame, by_cols: Sequence[str]) -> List[Tuple[Tuple[Any, ...], pl.DataFrame]]:
    if df.is_empty():
        return []
    by_cols = list(by_cols)
    parts = df.partition_by(by_cols, maintain_order=True, include_key=True)
    out: List[Tuple[Tuple[Any, ...], pl.DataFrame]] = []
    for part in parts:
        key = tuple(part.row(0, named=True)[c] for c in by_cols)
        out.append((key, part))
    return out
