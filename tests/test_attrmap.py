import unittest

import polars as pl

from shiftplot.core.attrmap import build_attribute_table, build_marker_styles, normalize_code
from shiftplot.core.types import AttributeEntry, AttributeMapError, UnmappedTreatmentError


def _rows(codes, labels):
    return pl.DataFrame({"TRTAN": codes, "TRTA": labels})


class TestNormalizeCode(unittest.TestCase):
    def test_values(self) -> None:
        self.assertEqual(normalize_code(1), 1)
        self.assertEqual(normalize_code(2.0), 2)
        self.assertEqual(normalize_code(" 3 "), 3)
        self.assertEqual(normalize_code(1.5), 1.5)
        self.assertEqual(normalize_code("A"), "A")
        self.assertIsNone(normalize_code(None))
        self.assertIsNone(normalize_code(float("nan")))
        self.assertIsNone(normalize_code(""))


class TestMarkerStyles(unittest.TestCase):
    def test_one_based_positions(self) -> None:
        styles = build_marker_styles(["circle", "X", "square"], ["red", "blue", "green"])
        self.assertEqual(sorted(styles.styles), [1, 2, 3])
        self.assertEqual(styles.get(2).symbol, "X")
        self.assertEqual(styles.get(2).color, "blue")
        self.assertIsNone(styles.get(0))
        self.assertEqual(styles.warnings, ())

    def test_mismatch_warns_and_uses_shorter_list(self) -> None:
        styles = build_marker_styles(["circle", "X"], ["red", "blue", "green"])
        self.assertEqual(sorted(styles.styles), [1, 2])
        self.assertEqual(len(styles.warnings), 1)
        self.assertIn("2 symbol(s) but 3 color(s)", styles.warnings[0])

    def test_mismatch_error_policy(self) -> None:
        with self.assertRaises(AttributeMapError):
            build_marker_styles(["circle"], ["red", "blue"], mismatch_policy="error")

    def test_empty_lists_rejected(self) -> None:
        with self.assertRaises(AttributeMapError):
            build_marker_styles([], ["red"])


class TestAttributeTable(unittest.TestCase):
    def test_three_arms(self) -> None:
        df = _rows([1, 2, 3, 1, 2, 3], ["Placebo", "Low", "High", "Placebo", "Low", "High"])
        table = build_attribute_table(
            df, ["circle", "X", "square"], ["red", "blue", "green"], code_col="TRTAN", label_col="TRTA"
        )
        self.assertEqual(
            list(table.entries),
            [
                AttributeEntry(1, "Placebo", "circle", "red"),
                AttributeEntry(2, "Low", "X", "blue"),
                AttributeEntry(3, "High", "square", "green"),
            ],
        )
        self.assertEqual(table.unmapped_codes, ())
        self.assertEqual(table.warnings, ())

    def test_one_entry_per_code_in_range(self) -> None:
        df = _rows([2, 1, 2, 2, 1], ["B", "A", "B", "B", "A"])
        table = build_attribute_table(
            df, ["circle", "X", "square"], ["red", "blue", "green"], code_col="TRTAN", label_col="TRTA"
        )
        codes = [e.code for e in table.entries]
        self.assertEqual(codes, [2, 1])
        self.assertEqual(len(codes), len(set(codes)))
        self.assertTrue(all(1 <= c <= 3 for c in codes))

    def test_mismatched_lists_leave_code_three_unmapped(self) -> None:
        df = _rows([1, 2, 3], ["A", "B", "C"])
        table = build_attribute_table(
            df, ["circle", "X"], ["red", "blue", "green"], code_col="TRTAN", label_col="TRTA"
        )
        self.assertEqual(
            list(table.entries),
            [AttributeEntry(1, "A", "circle", "red"), AttributeEntry(2, "B", "X", "blue")],
        )
        self.assertEqual(table.unmapped_codes, (3,))
        self.assertEqual(len(table.warnings), 2)

    def test_unmapped_ignore_is_silent(self) -> None:
        df = _rows([1, 7], ["A", "Z"])
        table = build_attribute_table(
            df, ["circle"], ["red"], code_col="TRTAN", label_col="TRTA", unmapped_policy="ignore"
        )
        self.assertEqual([e.code for e in table.entries], [1])
        self.assertEqual(table.unmapped_codes, (7,))
        self.assertEqual(table.warnings, ())

    def test_unmapped_error(self) -> None:
        df = _rows([1, 4, None], ["A", "D", None])
        with self.assertRaises(UnmappedTreatmentError) as ctx:
            build_attribute_table(
                df, ["circle"], ["red"], code_col="TRTAN", label_col="TRTA", unmapped_policy="error"
            )
        self.assertEqual(ctx.exception.codes, [4, "<null>"])

    def test_conflicting_labels_keep_single_entry(self) -> None:
        df = _rows([1, 1], ["Drug A", "DRUG A"])
        table = build_attribute_table(df, ["circle"], ["red"], code_col="TRTAN", label_col="TRTA")
        self.assertEqual(list(table.entries), [AttributeEntry(1, "DRUG A", "circle", "red")])

    def test_missing_column(self) -> None:
        with self.assertRaises(ValueError):
            build_attribute_table(
                pl.DataFrame({"TRTAN": [1]}), ["circle"], ["red"], code_col="TRTAN", label_col="TRTA"
            )


if __name__ == "__main__":
    unittest.main()
