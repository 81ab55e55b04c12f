from __future__ import annotations

import concurrent.futures
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import polars as pl

from .attrmap import build_attribute_table, normalize_code
from .codegen import write_commands_script
from .config import ShiftPlotConfig, load_shiftplot_config, resolve_output_dir
from .data import apply_row_filter, load_rows, partition_by_groups, prepare_rows
from .formats import build_format_table
from .style import build_common_style, build_shift_style
from .types import PARAMETER, TREATMENT, AttributeTable, FormatTable, ShiftPlotResult
from ..plotting.matplotlib.common import _format_title, _safe_filename, resolve_marker
from ..plotting.matplotlib.task import plot_task, plot_worker_init
from ..plotting.plotly.shift_html import _html_path_for_output_path


def _clean_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    f = float(value)
    return f if math.isfinite(f) else None


class ShiftPlotVisualizer:
    def __init__(self, config_path: Optional[Path] = None, *, config: Optional[ShiftPlotConfig] = None) -> None:
        if config is None:
            if config_path is None:
                raise ValueError("[run] either config_path or config is required")
            config = load_shiftplot_config(Path(config_path))
        self.config = config
        self.base_dir = Path(config.base_dir)
        self.columns = config.columns

        style_cfg = config.raw.get("plot_style") or {}
        self.common_style = build_common_style(style_cfg.get("common"))
        self.shift_style = build_shift_style(style_cfg.get("shift"))

    def run(self, *, sample: bool = False, rows: Optional[pl.DataFrame] = None) -> ShiftPlotResult:
        """
        Build the attribute map and format tables, then render one image per by-group.

        ``rows`` bypasses ``data.input_file`` (the frame is used as loaded input).
        """
        cfg = self.config
        result = ShiftPlotResult()

        if rows is None:
            if cfg.input_file is None:
                raise ValueError("[data] data.input_file is not configured")
            rows = load_rows(cfg.input_file)
        rows = apply_row_filter(rows, cfg.row_filter, result.warnings)
        rows = prepare_rows(rows, self.columns)
        print(f"[data] {rows.height} row(s) after filtering")

        # Fail on unknown symbols before any table is built or image written.
        for symbol in cfg.symbols:
            resolve_marker(symbol)

        attribute_table = build_attribute_table(
            rows,
            cfg.symbols,
            cfg.colors,
            code_col=self.columns.treatment_code,
            label_col=self.columns.treatment_label,
            unmapped_policy=cfg.unmapped_policy,
            mismatch_policy=cfg.mismatch_policy,
        )
        format_table = build_format_table(
            rows,
            treatment_cols=(self.columns.treatment_code, self.columns.treatment_label),
            parameter_cols=(self.columns.parameter_code, self.columns.parameter_label),
            conflict_policy=cfg.conflict_policy,
        )
        result.attribute_table = attribute_table
        result.format_table = format_table
        result.warnings.extend(attribute_table.warnings)
        result.warnings.extend(format_table.warnings)

        output_dir = resolve_output_dir(self.base_dir, cfg.raw, cfg.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        tasks = self._build_plot_tasks(
            rows, attribute_table, format_table, output_dir, sample=sample, warnings=result.warnings
        )

        if cfg.print_code:
            result.commands_path = write_commands_script(
                output_dir / f"{_safe_filename(cfg.image_name)}_commands.py",
                tasks,
                font_family=self.common_style.get("font_family"),
                attribute_map=attribute_table.as_records(),
                formats={TREATMENT: format_table.labels(TREATMENT), PARAMETER: format_table.labels(PARAMETER)},
            )
            print(f"[run] wrote plotting commands: {result.commands_path}")

        self._run_plot_tasks(tasks)
        result.output_paths = self._collect_existing_outputs(tasks)
        if cfg.plotly_html:
            result.output_paths.extend(self._collect_existing_plotly_html_outputs(tasks))
        self._log_generated_outputs(result.output_paths)
        return result

    def _by_labels(self, key: Tuple[Any, ...], format_table: FormatTable) -> List[Tuple[str, str]]:
        labels: List[Tuple[str, str]] = []
        for col, value in zip(self.columns.by_columns, key):
            if col == self.columns.parameter_code:
                labels.append((self.columns.parameter_label, format_table.label(PARAMETER, normalize_code(value))))
            elif col == self.columns.treatment_code:
                labels.append((self.columns.treatment_label, format_table.label(TREATMENT, normalize_code(value))))
            else:
                labels.append((col, "" if value is None else str(value)))
        return labels

    def _output_path_for_key(self, output_dir: Path, key: Tuple[Any, ...], used: set[str]) -> Path:
        cfg = self.config
        stem = "_".join([_safe_filename(cfg.image_name), *[_safe_filename(v) for v in key]])
        name = stem
        suffix = 2
        while name in used:
            name = f"{stem}_{suffix}"
            suffix += 1
        used.add(name)
        return output_dir / f"{name}.{cfg.image_format}"

    def _build_plot_tasks(
        self,
        rows: pl.DataFrame,
        attribute_table: AttributeTable,
        format_table: FormatTable,
        output_dir: Path,
        *,
        sample: bool = False,
        warnings: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        cfg = self.config
        cols = self.columns
        entries_by_code = attribute_table.by_code()

        groups = partition_by_groups(rows, cols.by_columns)
        if sample and groups:
            groups = groups[:1]

        tasks: List[Dict[str, Any]] = []
        used_names: set[str] = set()
        for key, part in groups:
            xs: List[Optional[float]] = []
            ys: List[Optional[float]] = []
            codes: List[int] = []
            for x_val, y_val, raw_code in part.select([cols.x, cols.y, cols.treatment_code]).iter_rows():
                code = normalize_code(raw_code)
                if code not in entries_by_code:
                    continue
                xs.append(_clean_float(x_val))
                ys.append(_clean_float(y_val))
                codes.append(int(code))

            title = _format_title(self._by_labels(key, format_table))
            if not codes:
                msg = f"[run] Warning: no rows with a mapped treatment code for {title or key}; panel skipped"
                print(msg)
                if warnings is not None:
                    warnings.append(msg)
                continue

            present = set(codes)
            tasks.append(
                {
                    "kind": "shift",
                    "output_path": str(self._output_path_for_key(output_dir, key, used_names)),
                    "title": title,
                    "x": xs,
                    "y": ys,
                    "codes": codes,
                    "attribute_map": [entries_by_code[c].as_dict() for c in sorted(present)],
                    "x_label": cfg.x_label,
                    "y_label": cfg.y_label,
                    "width_px": cfg.width_px,
                    "height_px": cfg.height_px,
                    "dpi": cfg.dpi,
                    "shift_style": dict(self.shift_style),
                    "common_style": dict(self.common_style),
                    "plotly_html": cfg.plotly_html,
                }
            )
        return tasks

    def _run_plot_tasks(self, tasks: List[Dict[str, Any]]) -> None:
        if not tasks:
            return
        max_workers = min(self.config.max_workers, len(tasks))
        font_family = self.common_style.get("font_family")
        if max_workers <= 1:
            plot_worker_init(font_family)
            for task in tasks:
                plot_task(task)
            return
        try:
            with concurrent.futures.ProcessPoolExecutor(
                max_workers=max_workers,
                initializer=plot_worker_init,
                initargs=(font_family,),
            ) as ex:
                list(ex.map(plot_task, tasks, chunksize=max(1, len(tasks) // (max_workers * 4))))
        except PermissionError:
            plot_worker_init(font_family)
            for task in tasks:
                plot_task(task)

    @staticmethod
    def _collect_existing_outputs(tasks: Sequence[Dict[str, Any]]) -> List[Path]:
        paths = [Path(task["output_path"]) for task in tasks if task.get("output_path")]
        return [path for path in paths if path.exists()]

    @staticmethod
    def _collect_existing_plotly_html_outputs(tasks: Sequence[Dict[str, Any]]) -> List[Path]:
        html_paths: List[Path] = []
        for task in tasks:
            if not bool(task.get("plotly_html", False)):
                continue
            output_path = task.get("output_path")
            if not output_path:
                continue
            html_path = _html_path_for_output_path(Path(output_path))
            if html_path.exists():
                html_paths.append(html_path)
        return html_paths

    def _log_generated_outputs(self, output_paths: Iterable[Path]) -> None:
        unique_paths = list(dict.fromkeys(Path(p).resolve() for p in output_paths))
        if not unique_paths:
            print("[run] generated files: none")
            return

        base_dir = self.base_dir.resolve()
        counts: Dict[str, int] = {}
        for path in unique_paths:
            try:
                parent = path.relative_to(base_dir).parent
            except ValueError:
                parent = path.parent
            counts[str(parent)] = counts.get(str(parent), 0) + 1

        print("[run] generated files (summary):")
        for parent_str in sorted(counts):
            print(f"  - {parent_str}: {counts[parent_str]} files")
