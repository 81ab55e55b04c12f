import tempfile
import unittest
from pathlib import Path

import polars as pl

from shiftplot.core.config import ColumnConfig
from shiftplot.core.data import apply_row_filter, load_rows, partition_by_groups, prepare_rows


def _frame() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "PARAMN": [2, 1, 2, 1],
            "PARAM": ["AST", "ALT", "AST", "ALT"],
            "TRTAN": [1, 1, 2, 2],
            "TRTA": ["Placebo", "Placebo", "Drug", "Drug"],
            "BASE": ["10", "12", "n/a", "8"],
            "AVAL": [11.0, 13.0, 9.0, None],
            "SAFFL": ["Y", "Y", "N", "Y"],
        }
    )


class TestLoadRows(unittest.TestCase):
    def test_csv_strips_bom(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "adlb.csv"
            path.write_text("\ufeffPARAMN,BASE\n1,2.5\n", encoding="utf-8")
            df = load_rows(path)
            self.assertEqual(df.columns, ["PARAMN", "BASE"])

    def test_parquet(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "adlb.parquet"
            _frame().write_parquet(path)
            self.assertEqual(load_rows(path).height, 4)

    def test_missing_and_unsupported(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_rows(Path(tmp) / "nope.csv")
            bad = Path(tmp) / "adlb.xpt"
            bad.write_bytes(b"")
            with self.assertRaises(ValueError):
                load_rows(bad)


class TestRowFilter(unittest.TestCase):
    def test_and_combined(self) -> None:
        df = apply_row_filter(_frame(), {"SAFFL": "Y", "TRTAN": 1})
        self.assertEqual(df["PARAMN"].to_list(), [2, 1])

    def test_list_values(self) -> None:
        df = apply_row_filter(_frame(), {"PARAMN": [1]})
        self.assertEqual(df.height, 2)

    def test_unknown_column_skipped_with_warning(self) -> None:
        warnings = []
        df = apply_row_filter(_frame(), {"ANL01FL": "Y"}, warnings)
        self.assertEqual(df.height, 4)
        self.assertEqual(len(warnings), 1)


class TestPrepareRows(unittest.TestCase):
    def test_casts_and_sorts(self) -> None:
        df = prepare_rows(_frame(), ColumnConfig())
        self.assertEqual(df["PARAMN"].to_list(), [1, 1, 2, 2])
        self.assertEqual(df.schema["BASE"], pl.Float64)
        self.assertEqual(df.filter(pl.col("PARAMN") == 2)["BASE"].to_list(), [10.0, None])
        self.assertNotIn("SAFFL", df.columns)

    def test_missing_columns(self) -> None:
        with self.assertRaises(ValueError):
            prepare_rows(_frame().drop("TRTA"), ColumnConfig())

    def test_partition_in_key_order(self) -> None:
        df = prepare_rows(_frame(), ColumnConfig(by=("PARAMN", "TRTAN")))
        groups = partition_by_groups(df, ("PARAMN", "TRTAN"))
        self.assertEqual([key for key, _ in groups], [(1, 1), (1, 2), (2, 1), (2, 2)])
        self.assertTrue(all(part.height == 1 for _, part in groups))

    def test_partition_empty(self) -> None:
        df = prepare_rows(_frame().clear(), ColumnConfig())
        self.assertEqual(partition_by_groups(df, ("PARAMN",)), [])


if __name__ == "__main__":
    unittest.main()
