import ast
import tempfile
import unittest
from pathlib import Path

import matplotlib

matplotlib.use("Agg", force=True)
import polars as pl  # noqa: E402

from shiftplot.core.attrmap import build_attribute_table  # noqa: E402
from shiftplot.core.config import parse_config  # noqa: E402
from shiftplot.core.formats import build_format_table  # noqa: E402
from shiftplot.core.types import UnmappedTreatmentError  # noqa: E402
from shiftplot.core.visualizer import ShiftPlotVisualizer  # noqa: E402


def _rows() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "USUBJID": ["01", "02", "03", "04", "01", "02", "03", "04"],
            "SAFFL": ["Y", "Y", "Y", "N", "Y", "Y", "Y", "N"],
            "PARAMN": [1, 1, 1, 1, 2, 2, 2, 2],
            "PARAM": ["ALT (U/L)"] * 4 + ["AST (U/L)"] * 4,
            "TRTAN": [1, 2, 3, 4, 1, 2, 3, 4],
            "TRTA": ["Placebo", "Low", "High", "Other"] * 2,
            "BASE": [20.0, 25.0, 30.0, 35.0, 18.0, 22.0, 26.0, 40.0],
            "AVAL": [21.0, 30.0, 45.0, 36.0, 17.0, 25.0, 39.0, 41.0],
        }
    )


def _visualizer(tmp: str, **sections) -> ShiftPlotVisualizer:
    config = {
        "output": {"base_dir": "out", "width_px": 400, "height_px": 200, "dpi": 100},
        "performance": {"max_workers": 1},
    }
    for key, value in sections.items():
        config.setdefault(key, {}).update(value)
    return ShiftPlotVisualizer(config=parse_config(config, Path(tmp)))


class TestShiftPlotVisualizer(unittest.TestCase):
    def test_one_image_per_parameter(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            result = _visualizer(tmp).run(rows=_rows())
            names = sorted(p.name for p in result.output_paths)
            self.assertEqual(names, ["shiftplot_1.png", "shiftplot_2.png"])
            self.assertTrue(all(p.parent == (Path(tmp) / "out").resolve() for p in result.output_paths))
            self.assertEqual([e.code for e in result.attribute_table.entries], [1, 2, 3])
            self.assertEqual(result.attribute_table.unmapped_codes, (4,))
            self.assertEqual(len(result.warnings), 1)
            self.assertIsNone(result.commands_path)

    def test_filter_removes_unmapped_arm(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, data={"filter": {"SAFFL": "Y"}}, attributes={"unmapped_policy": "error"})
            result = vis.run(rows=_rows())
            self.assertEqual(len(result.output_paths), 2)
            self.assertEqual(result.warnings, [])

    def test_unmapped_error_stops_before_rendering(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, attributes={"unmapped_policy": "error"})
            with self.assertRaises(UnmappedTreatmentError):
                vis.run(rows=_rows())
            self.assertFalse((Path(tmp) / "out").exists())

    def test_unknown_symbol_fails_early(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, attributes={"symbols": ["circle", "blob"]})
            with self.assertRaises(ValueError):
                vis.run(rows=_rows())

    def test_print_code_and_sample(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, output={"print_code": True, "image_name": "lb shift"})
            result = vis.run(rows=_rows(), sample=True)
            self.assertEqual([p.name for p in result.output_paths], ["lb_shift_1.png"])
            self.assertIsNotNone(result.commands_path)
            source = Path(result.commands_path).read_text(encoding="utf-8")
            ast.parse(source)
            self.assertIn("PARAM=ALT (U/L)", source)
            self.assertNotIn("'code': 4", source)

    def test_tasks_exclude_unmapped_rows(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, attributes={"unmapped_policy": "ignore"})
            result_rows = _rows()
            output_dir = Path(tmp) / "out"
            attr = build_attribute_table(
                result_rows, vis.config.symbols, vis.config.colors, code_col="TRTAN", label_col="TRTA",
                unmapped_policy="ignore",
            )
            fmt = build_format_table(
                result_rows, treatment_cols=("TRTAN", "TRTA"), parameter_cols=("PARAMN", "PARAM")
            )
            tasks = vis._build_plot_tasks(result_rows.sort("PARAMN"), attr, fmt, output_dir)
            self.assertEqual(len(tasks), 2)
            self.assertEqual(tasks[0]["codes"], [1, 2, 3])
            self.assertEqual(tasks[0]["title"], "PARAM=ALT (U/L)")
            self.assertEqual(tasks[1]["x"], [18.0, 22.0, 26.0])

    def test_panel_without_mapped_codes_is_skipped(self) -> None:
        ast_rows = pl.col("PARAMN") == 2
        rows = _rows().with_columns(
            pl.when(ast_rows).then(4).otherwise(pl.col("TRTAN")).alias("TRTAN"),
            pl.when(ast_rows).then(pl.lit("Other")).otherwise(pl.col("TRTA")).alias("TRTA"),
        )
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, attributes={"unmapped_policy": "ignore"})
            result = vis.run(rows=rows)
            self.assertEqual([p.name for p in result.output_paths], ["shiftplot_1.png"])
            self.assertFalse((Path(tmp) / "out" / "shiftplot_2.png").exists())
            self.assertEqual(len(result.warnings), 1)
            self.assertTrue(result.warnings[0].startswith("[run] Warning:"))
            self.assertIn("AST (U/L)", result.warnings[0])

    def test_plotly_html_listed_in_outputs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            vis = _visualizer(tmp, output={"plotly_html": True})
            result = vis.run(rows=_rows(), sample=True)
            self.assertEqual(
                [p.name for p in result.output_paths],
                ["shiftplot_1.png", "shiftplot_1.html"],
            )
            self.assertTrue(all(p.exists() for p in result.output_paths))

    def test_input_file_from_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _rows().write_csv(Path(tmp) / "adlb.csv")
            vis = _visualizer(tmp, data={"input_file": "adlb.csv", "columns": {"by": ["PARAMN", "SAFFL"]}})
            with self.assertRaises(ValueError):
                vis.run(rows=_rows().drop("TRTA"))
            result = vis.run()
            self.assertEqual(
                sorted(p.name for p in result.output_paths),
                ["shiftplot_1_N.png", "shiftplot_1_Y.png", "shiftplot_2_N.png", "shiftplot_2_Y.png"],
            )


if __name__ == "__main__":
    unittest.main()
