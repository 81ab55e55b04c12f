from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

import polars as pl

from .attrmap import normalize_code
from .types import PARAMETER, TREATMENT, FormatConflictError, FormatEntry, FormatTable


def _collect_dimension(
    df: pl.DataFrame,
    *,
    dimension: str,
    code_col: str,
    label_col: str,
    conflict_policy: str,
    warnings: List[str],
) -> List[FormatEntry]:
    labels: Dict[Any, str] = {}
    conflicts: Dict[Any, List[str]] = {}
    for raw_code, raw_label in df.select([code_col, label_col]).iter_rows():
        code = normalize_code(raw_code)
        if code is None:
            continue
        label = str(code) if raw_label is None else str(raw_label)
        previous = labels.get(code)
        if previous is not None and previous != label:
            seen = conflicts.setdefault(code, [previous])
            if label not in seen:
                seen.append(label)
        labels[code] = label

    for code, seen in conflicts.items():
        if conflict_policy == "error":
            raise FormatConflictError(
                f"[formats] {dimension} code {code!r} has conflicting labels: {seen}"
            )
        msg = f"[formats] Warning: {dimension} code {code!r} has conflicting labels {seen}; using {labels[code]!r}"
        print(msg)
        warnings.append(msg)

    return [FormatEntry(dimension=dimension, code=code, label=label) for code, label in labels.items()]


def build_format_table(
    df: pl.DataFrame,
    *,
    treatment_cols: Tuple[str, str],
    parameter_cols: Tuple[str, str],
    conflict_policy: str = "last",
) -> FormatTable:
    """
    Collect distinct (dimension, code, label) triples.

    ``treatment_cols`` and ``parameter_cols`` are ``(code_col, label_col)``.
    When one code carries several labels the last one wins (with a warning),
    or FormatConflictError is raised when ``conflict_policy == "error"``.
    """
    pairs: Sequence[Tuple[str, Tuple[str, str]]] = (
        (TREATMENT, treatment_cols),
        (PARAMETER, parameter_cols),
    )
    missing = [c for _, cols in pairs for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"[formats] missing column(s): {sorted(set(missing))}")

    warnings: List[str] = []
    entries: List[FormatEntry] = []
    for dimension, (code_col, label_col) in pairs:
        entries.extend(
            _collect_dimension(
                df,
                dimension=dimension,
                code_col=code_col,
                label_col=label_col,
                conflict_policy=conflict_policy,
                warnings=warnings,
            )
        )
    return FormatTable(entries=tuple(entries), warnings=tuple(warnings))
