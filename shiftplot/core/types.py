from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

TREATMENT = "treatment"
PARAMETER = "parameter"
DIMENSIONS = (TREATMENT, PARAMETER)


class ShiftPlotError(ValueError):
    pass


class AttributeMapError(ShiftPlotError):
    pass


class UnmappedTreatmentError(AttributeMapError):
    def __init__(self, codes: List[Any]) -> None:
        self.codes = list(codes)
        super().__init__(
            f"[attrmap] treatment code(s) without a symbol/color position: {self.codes}"
        )


class FormatConflictError(ShiftPlotError):
    pass


@dataclass(frozen=True)
class MarkerStyle:
    symbol: str
    color: str


@dataclass(frozen=True)
class AttributeEntry:
    code: int
    value: str
    symbol: str
    color: str

    def as_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "value": self.value, "symbol": self.symbol, "color": self.color}


@dataclass(frozen=True)
class FormatEntry:
    dimension: str
    code: Any
    label: str


@dataclass(frozen=True)
class MarkerStyleMap:
    styles: Dict[int, MarkerStyle]
    warnings: Tuple[str, ...] = ()

    def get(self, code: Optional[int]) -> Optional[MarkerStyle]:
        if code is None:
            return None
        return self.styles.get(code)


@dataclass(frozen=True)
class AttributeTable:
    entries: Tuple[AttributeEntry, ...]
    unmapped_codes: Tuple[Any, ...] = ()
    warnings: Tuple[str, ...] = ()

    def by_code(self) -> Dict[int, AttributeEntry]:
        return {e.code: e for e in self.entries}

    def as_records(self) -> List[Dict[str, Any]]:
        return [e.as_dict() for e in self.entries]


@dataclass(frozen=True)
class FormatTable:
    entries: Tuple[FormatEntry, ...]
    warnings: Tuple[str, ...] = ()

    def labels(self, dimension: str) -> Dict[Any, str]:
        return {e.code: e.label for e in self.entries if e.dimension == dimension}

    def codes(self, dimension: str) -> Dict[str, Any]:
        return {e.label: e.code for e in self.entries if e.dimension == dimension}

    def label(self, dimension: str, code: Any, default: Optional[str] = None) -> str:
        labels = self.labels(dimension)
        if code in labels:
            return labels[code]
        return str(code) if default is None else default


@dataclass
class ShiftPlotResult:
    output_paths: List[Any] = field(default_factory=list)
    attribute_table: Optional[AttributeTable] = None
    format_table: Optional[FormatTable] = None
    commands_path: Optional[Any] = None
    warnings: List[str] = field(default_factory=list)
