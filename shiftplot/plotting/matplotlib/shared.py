from __future__ import annotations

"""Shared conversion helpers for matplotlib task/plot modules."""

from pathlib import Path
from typing import Any, List, Optional

import numpy as np


def as_output_path(value: Any) -> Path:
    return Path(value)


def as_ndarray(values: Any) -> np.ndarray:
    # None -> NaN so missing baseline/post values drop out of the scatter.
    return np.asarray([np.nan if v is None else v for v in values], dtype=float)


def as_codes(values: Any) -> List[Optional[int]]:
    out: List[Optional[int]] = []
    for v in values:
        if v is None:
            out.append(None)
            continue
        try:
            out.append(int(v))
        except (TypeError, ValueError):
            out.append(None)
    return out
