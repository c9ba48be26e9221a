"""
Unit tests for the CSV export and its read-back validation.
"""

import unittest
import os
import sys
import tempfile

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from error_handling import DataValidationError, WriteError
from export_metrics import CSV_COLUMNS, create_csv, export_usage_to_csv
from models import UsageRecord
from validate_export import validate_usage_csv, main as validate_main

RECORDS = [
    UsageRecord.model_validate({
        "day": f"2024-01-{day:02d}",
        "total_suggestions_count": 100 * day,
        "total_acceptances_count": 40 * day,
        "total_lines_suggested": 150 * day,
        "total_lines_accepted": 60 * day,
        "total_active_users": day,
        "total_chat_acceptances": 2 * day,
        "total_chat_turns": 10 * day,
        "total_active_chat_users": day + 1,
        "breakdown": [
            {"language": "python", "editor": "vscode", "suggestions_count": 1,
             "acceptances_count": 1, "lines_suggested": 1, "lines_accepted": 1,
             "active_users": 1},
        ],
    })
    for day in range(1, 6)
]


class TestCreateCSV(unittest.TestCase):
    """Tests for CSV text generation."""

    def test_header(self):
        csv_text = create_csv(RECORDS)
        self.assertEqual(
            csv_text.split('\n')[0],
            'Day,Total Suggestions,Total Acceptances,Total Lines Suggested,'
            'Total Lines Accepted,Total Active Users,Total Chat Acceptances,'
            'Total Chat Turns,Total Active Chat Users',
        )

    def test_line_count_is_records_plus_header(self):
        lines = create_csv(RECORDS).splitlines()
        self.assertEqual(len(lines), len(RECORDS) + 1)

    def test_rows_parse_back_to_day_level_fields(self):
        lines = create_csv(RECORDS).splitlines()
        for line, record in zip(lines[1:], RECORDS):
            fields = line.split(',')
            self.assertEqual(fields, [
                record.day.isoformat(),
                str(record.total_suggestions_count),
                str(record.total_acceptances_count),
                str(record.total_lines_suggested),
                str(record.total_lines_accepted),
                str(record.total_active_users),
                str(record.total_chat_acceptances),
                str(record.total_chat_turns),
                str(record.total_active_chat_users),
            ])

    def test_rows_end_with_newline(self):
        csv_text = create_csv(RECORDS)
        self.assertTrue(csv_text.endswith('\n'))
        self.assertNotIn('\r', csv_text)

    def test_empty_dataset_header_only(self):
        self.assertEqual(create_csv([]), ','.join(CSV_COLUMNS) + '\n')


class TestExportUsageToCSV(unittest.TestCase):
    """Tests for writing and validating the CSV file."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, 'copilot-usage.csv')

    def tearDown(self):
        self.tmp.cleanup()

    def test_export_creates_csv(self):
        written = export_usage_to_csv(RECORDS, self.path)
        self.assertEqual(written, self.path)
        with open(self.path, newline='') as f:
            self.assertEqual(f.read(), create_csv(RECORDS))

    def test_exported_csv_passes_validation(self):
        export_usage_to_csv(RECORDS, self.path)
        df = validate_usage_csv(self.path, expected_rows=len(RECORDS))
        self.assertEqual(list(df.columns), CSV_COLUMNS)
        self.assertEqual(df['Total Suggestions'].sum(), sum(r.total_suggestions_count for r in RECORDS))
        self.assertEqual(df['Day'].iloc[0], '2024-01-01')

    def test_validation_row_count_mismatch(self):
        export_usage_to_csv(RECORDS, self.path)
        with self.assertRaises(DataValidationError):
            validate_usage_csv(self.path, expected_rows=3)

    def test_validation_wrong_columns(self):
        with open(self.path, 'w') as f:
            f.write('Date,ACUs_Consumed\n2024-01-01,5\n')
        with self.assertRaises(DataValidationError):
            validate_usage_csv(self.path)

    def test_validation_negative_value(self):
        with open(self.path, 'w') as f:
            f.write(','.join(CSV_COLUMNS) + '\n')
            f.write('2024-01-01,-1,0,0,0,0,0,0,0\n')
        with self.assertRaises(DataValidationError):
            validate_usage_csv(self.path)

    def test_validation_bad_day(self):
        with open(self.path, 'w') as f:
            f.write(','.join(CSV_COLUMNS) + '\n')
            f.write('yesterday,1,0,0,0,0,0,0,0\n')
        with self.assertRaises(DataValidationError):
            validate_usage_csv(self.path)

    def test_validation_missing_file(self):
        with self.assertRaises(DataValidationError):
            validate_usage_csv(os.path.join(self.tmp.name, 'missing.csv'))

    def test_validate_main_exit_codes(self):
        export_usage_to_csv(RECORDS, self.path)
        self.assertEqual(validate_main([self.path]), 0)
        self.assertEqual(validate_main([os.path.join(self.tmp.name, 'missing.csv')]), 1)

    def test_write_to_invalid_path_raises(self):
        with self.assertRaises(WriteError):
            export_usage_to_csv(RECORDS, '/nonexistent/dir/copilot-usage.csv')


if __name__ == '__main__':
    unittest.main()
