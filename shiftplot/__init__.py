"""Shift plots (post-baseline vs. baseline scatter by treatment arm) for clinical trial data."""

from __future__ import annotations

from .core.attrmap import build_attribute_table, build_marker_styles
from .core.config import ShiftPlotConfig, load_shiftplot_config, parse_config
from .core.formats import build_format_table
from .core.types import (
    AttributeEntry,
    AttributeMapError,
    FormatConflictError,
    FormatEntry,
    ShiftPlotResult,
    UnmappedTreatmentError,
)
from .core.visualizer import ShiftPlotVisualizer

__version__ = "0.1.0"

__all__ = [
    "AttributeEntry",
    "AttributeMapError",
    "FormatConflictError",
    "FormatEntry",
    "ShiftPlotConfig",
    "ShiftPlotResult",
    "ShiftPlotVisualizer",
    "UnmappedTreatmentError",
    "build_attribute_table",
    "build_format_table",
    "build_marker_styles",
    "load_shiftplot_config",
    "parse_config",
]
