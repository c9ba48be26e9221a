"""
Unit tests for the Metrics Calculator module.
Covers per-language aggregation, range totals, rates and sort orders.
"""

import unittest
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from error_handling import MetricsCalculationError
from metrics_calculator import (
    UsageMetricsCalculator,
    aggregate_language_usage,
    merge_language_usage,
    calculate_totals,
    acceptance_rate,
    format_rate,
    escape_language,
    sort_by_acceptances,
    top_languages_by_suggestions,
)
from models import UsageRecord


def _entry(language, editor="vscode", suggestions=0, acceptances=0,
           lines_suggested=0, lines_accepted=0, active_users=0):
    return {
        "language": language,
        "editor": editor,
        "suggestions_count": suggestions,
        "acceptances_count": acceptances,
        "lines_suggested": lines_suggested,
        "lines_accepted": lines_accepted,
        "active_users": active_users,
    }


def _record(day, suggestions, acceptances, breakdown=None, **totals):
    data = {
        "day": day,
        "total_suggestions_count": suggestions,
        "total_acceptances_count": acceptances,
        "total_lines_suggested": totals.get("lines_suggested", 0),
        "total_lines_accepted": totals.get("lines_accepted", 0),
        "total_active_users": totals.get("active_users", 0),
        "total_chat_acceptances": totals.get("chat_acceptances", 0),
        "total_chat_turns": totals.get("chat_turns", 0),
        "total_active_chat_users": totals.get("active_chat_users", 0),
        "breakdown": breakdown or [],
    }
    return UsageRecord.model_validate(data)


SAMPLE_RECORDS = [
    _record("2024-01-01", 100, 40, [
        _entry("python", "vscode", 60, 30, 120, 50, 4),
        _entry("python", "jetbrains", 10, 2, 15, 3, 1),
        _entry("typescript", "vscode", 30, 8, 40, 10, 2),
    ], lines_accepted=63),
    _record("2024-01-02", 50, 50, [
        _entry("typescript", "neovim", 20, 20, 25, 25, 1),
        _entry("c-sharp", "visualstudio", 30, 30, 45, 45, 3),
    ], lines_accepted=70),
]


class TestAggregateLanguageUsage(unittest.TestCase):
    """Tests for per-language summation."""

    def test_same_language_on_different_days_is_summed(self):
        records = [
            _record("2024-01-01", 10, 0, [_entry("python", suggestions=10)]),
            _record("2024-01-02", 20, 0, [_entry("python", suggestions=20)]),
        ]
        usage = aggregate_language_usage(records)
        self.assertEqual(usage["python"].suggestions_count, 30)

    def test_same_language_different_editors_summed_not_overwritten(self):
        usage = aggregate_language_usage(SAMPLE_RECORDS)
        python = usage["python"]
        self.assertEqual(python.suggestions_count, 70)
        self.assertEqual(python.acceptances_count, 32)
        self.assertEqual(python.lines_suggested, 135)
        self.assertEqual(python.lines_accepted, 53)
        self.assertEqual(python.active_users, 5)

    def test_first_seen_editor_retained(self):
        usage = aggregate_language_usage(SAMPLE_RECORDS)
        self.assertEqual(usage["python"].editor, "vscode")
        self.assertEqual(usage["typescript"].editor, "vscode")

    def test_insertion_order_is_first_seen(self):
        usage = aggregate_language_usage(SAMPLE_RECORDS)
        self.assertEqual(list(usage), ["python", "typescript", "c-sharp"])

    def test_key_uses_raw_language_identifier(self):
        usage = aggregate_language_usage(SAMPLE_RECORDS)
        self.assertIn("c-sharp", usage)
        self.assertEqual(usage["c-sharp"].language, "c-sharp")

    def test_no_breakdown_gives_empty_aggregate(self):
        self.assertEqual(aggregate_language_usage([_record("2024-01-01", 5, 1)]), {})

    def test_does_not_mutate_records(self):
        before = [r.model_dump() for r in SAMPLE_RECORDS]
        aggregate_language_usage(SAMPLE_RECORDS)
        self.assertEqual([r.model_dump() for r in SAMPLE_RECORDS], before)


class TestMergeLanguageUsage(unittest.TestCase):
    """Aggregating two halves and merging equals aggregating the whole."""

    def _assert_split_merge_equal(self, records, split_at):
        whole = aggregate_language_usage(records)
        merged = merge_language_usage(
            aggregate_language_usage(records[:split_at]),
            aggregate_language_usage(records[split_at:]),
        )
        self.assertEqual(
            {k: v.model_dump() for k, v in merged.items()},
            {k: v.model_dump() for k, v in whole.items()},
        )

    def test_split_in_half(self):
        self._assert_split_merge_equal(SAMPLE_RECORDS, 1)

    def test_split_at_edges(self):
        self._assert_split_merge_equal(SAMPLE_RECORDS, 0)
        self._assert_split_merge_equal(SAMPLE_RECORDS, len(SAMPLE_RECORDS))

    def test_merge_does_not_mutate_inputs(self):
        left = aggregate_language_usage(SAMPLE_RECORDS[:1])
        right = aggregate_language_usage(SAMPLE_RECORDS[1:])
        merge_language_usage(left, right)
        self.assertEqual(left["typescript"].suggestions_count, 30)
        self.assertEqual(right["typescript"].suggestions_count, 20)


class TestTotalsAndRates(unittest.TestCase):
    """Tests for range totals and acceptance rate formatting."""

    def test_range_totals_example(self):
        totals = calculate_totals(SAMPLE_RECORDS)
        self.assertEqual(totals.total_suggestions_count, 150)
        self.assertEqual(totals.total_acceptances_count, 90)
        self.assertEqual(totals.total_lines_accepted, 133)
        rate = acceptance_rate(totals.total_acceptances_count, totals.total_suggestions_count)
        self.assertEqual(format_rate(rate), "60.00%")

    def test_totals_first_and_last_day(self):
        totals = calculate_totals(SAMPLE_RECORDS)
        self.assertEqual(totals.first_day.isoformat(), "2024-01-01")
        self.assertEqual(totals.last_day.isoformat(), "2024-01-02")

    def test_zero_suggestions_rate_is_na(self):
        self.assertIsNone(acceptance_rate(0, 0))
        self.assertEqual(format_rate(acceptance_rate(0, 0)), "N/A")

    def test_rate_two_decimals(self):
        self.assertEqual(format_rate(acceptance_rate(1, 3)), "33.33%")

    def test_escape_language(self):
        self.assertEqual(escape_language("c-sharp"), "c&#8209;sharp")
        self.assertEqual(escape_language("python"), "python")


class TestSortOrders(unittest.TestCase):
    """Tests for table and pie chart orderings."""

    def test_sort_by_acceptances_descending(self):
        usage = aggregate_language_usage(SAMPLE_RECORDS)
        ordered = [u.language for u in sort_by_acceptances(usage)]
        self.assertEqual(ordered, ["python", "c-sharp", "typescript"])

    def test_top_languages_limited_to_20(self):
        records = [_record("2024-01-01", 0, 0, [
            _entry(f"lang{i}", suggestions=i) for i in range(30)
        ])]
        top = top_languages_by_suggestions(aggregate_language_usage(records))
        self.assertEqual(len(top), 20)
        self.assertEqual(top[0].language, "lang29")
        self.assertEqual(top[-1].language, "lang10")

    def test_sort_is_stable_for_ties(self):
        records = [_record("2024-01-01", 0, 0, [
            _entry("b", suggestions=5, acceptances=1),
            _entry("a", suggestions=5, acceptances=1),
        ])]
        usage = aggregate_language_usage(records)
        self.assertEqual([u.language for u in sort_by_acceptances(usage)], ["b", "a"])
        self.assertEqual([u.language for u in top_languages_by_suggestions(usage)], ["b", "a"])


class TestUsageMetricsCalculator(unittest.TestCase):
    """Tests for the calculator wrapper."""

    def test_calculate_all_metrics(self):
        metrics = UsageMetricsCalculator(SAMPLE_RECORDS).calculate_all_metrics()
        self.assertEqual(metrics['acceptance_rate'], "60.00%")
        self.assertEqual(metrics['totals']['total_suggestions_count'], 150)
        self.assertEqual(metrics['totals']['first_day'], "2024-01-01")
        self.assertEqual(metrics['languages'][0]['language'], "python")

    def test_empty_dataset_raises(self):
        with self.assertRaises(MetricsCalculationError):
            UsageMetricsCalculator([]).calculate_all_metrics()


class TestUsageRecordModel(unittest.TestCase):
    """Tests for the usage record schema."""

    def test_schema_example_is_a_valid_record(self):
        example = UsageRecord.model_json_schema()["example"]
        record = UsageRecord.model_validate(example)
        self.assertEqual(record.total_suggestions_count, 1000)
        self.assertEqual(record.breakdown[0].language, "python")


if __name__ == '__main__':
    unittest.main()
