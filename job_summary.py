"""
Job Summary Generator for Copilot usage.
Renders headline numbers, mermaid charts and usage tables into the
GitHub Actions job summary (or a local markdown file outside a runner).
"""

import os
import logging
from typing import Dict, List, Any, Optional

import mermaid_charts
from error_handling import handle_pipeline_phase, WriteError, DataValidationError
from metrics_calculator import (
    UsageMetricsCalculator,
    escape_language,
    format_rate,
    acceptance_rate,
)
from models import UsageRecord, LanguageUsage

logger = logging.getLogger(__name__)

LANGUAGE_TABLE_HEADERS = [
    'Language',
    'Suggestions',
    'Acceptances',
    'Acceptance Rate',
    'Lines Suggested',
    'Lines Accepted',
    'Active Users',
]

DAILY_TABLE_HEADERS = [
    'Day',
    'Total Suggestions',
    'Total Acceptances',
    'Total Lines Suggested',
    'Total Lines Accepted',
    'Total Active Users',
    'Total Chat Acceptances',
    'Total Chat Turns',
    'Total Active Chat Users',
]


class JobSummary:
    """Accumulates summary markup and appends it to a summary file."""

    def __init__(self):
        self._buffer = ""

    def add_raw(self, text: str, add_eol: bool = False) -> "JobSummary":
        self._buffer += text
        if add_eol:
            self._buffer += os.linesep
        return self

    def add_heading(self, text: str, level: int = 1) -> "JobSummary":
        tag = f"h{level}" if 1 <= level <= 6 else "h1"
        return self.add_raw(f"<{tag}>{text}</{tag}>", add_eol=True)

    def add_table(self, rows: List[List[Dict[str, Any]]]) -> "JobSummary":
        """Add an HTML table; each cell is {'data': str, 'header': bool}."""
        html_rows = []
        for row in rows:
            cells = "".join(
                f"<th>{cell['data']}</th>" if cell.get('header') else f"<td>{cell['data']}</td>"
                for cell in row
            )
            html_rows.append(f"<tr>{cells}</tr>")
        return self.add_raw(f"<table>{''.join(html_rows)}</table>", add_eol=True)

    def stringify(self) -> str:
        return self._buffer

    def is_empty(self) -> bool:
        return len(self._buffer) == 0

    def write(self, path: str) -> None:
        with open(path, 'a', encoding='utf-8') as f:
            f.write(self._buffer)
        self._buffer = ""


def _header_row(headers: List[str]) -> List[Dict[str, Any]]:
    return [{'data': h, 'header': True} for h in headers]


def _data_row(values: List[Any]) -> List[Dict[str, Any]]:
    return [{'data': str(v), 'header': False} for v in values]


def get_table_language_data(languages: List[LanguageUsage]) -> List[List[Dict[str, Any]]]:
    rows = [_header_row(LANGUAGE_TABLE_HEADERS)]
    for usage in languages:
        rows.append(_data_row([
            escape_language(usage.language),
            usage.suggestions_count,
            usage.acceptances_count,
            format_rate(acceptance_rate(usage.acceptances_count, usage.suggestions_count)),
            usage.lines_suggested,
            usage.lines_accepted,
            usage.active_users,
        ]))
    return rows


def get_table_data(records: List[UsageRecord]) -> List[List[Dict[str, Any]]]:
    rows = [_header_row(DAILY_TABLE_HEADERS)]
    for record in records:
        rows.append(_data_row([
            record.day.isoformat().replace('-', '&#8209;'),
            record.total_suggestions_count,
            record.total_acceptances_count,
            record.total_lines_suggested,
            record.total_lines_accepted,
            record.total_active_users,
            record.total_chat_acceptances,
            record.total_chat_turns,
            record.total_active_chat_users,
        ]))
    return rows


def build_job_summary(records: List[UsageRecord]) -> JobSummary:
    """
    Build the usage report for a non-empty, day-ordered dataset.

    Raises:
        DataValidationError: If the dataset is empty.
    """
    if not records:
        raise DataValidationError("Cannot build a usage report from an empty dataset")

    calculator = UsageMetricsCalculator(records)
    totals = calculator.calculate_totals()
    rate = format_rate(calculator.calculate_acceptance_rate())

    summary = JobSummary()
    summary.add_heading(f"Copilot Usage Results for {totals.first_day} to {totals.last_day}")
    summary.add_heading(f"Suggestions: {totals.total_suggestions_count:,}")
    summary.add_heading(f"Acceptances: {totals.total_acceptances_count:,}")
    summary.add_heading(f"Acceptance Rate: {rate}")
    summary.add_heading(f"Lines of Code Accepted: {totals.total_lines_accepted:,}")
    summary.add_raw(mermaid_charts.acceptance_rate_chart(records))
    summary.add_raw(mermaid_charts.daily_active_users_chart(records))
    summary.add_heading('Language Usage')
    summary.add_raw(mermaid_charts.language_pie_chart(calculator.top_languages()))
    summary.add_table(get_table_language_data(calculator.languages_by_acceptances()))
    summary.add_heading('Daily Usage')
    summary.add_table(get_table_data(records))
    return summary


@handle_pipeline_phase(phase_name="SUMMARY", error_cls=WriteError)
def create_job_summary(records: List[UsageRecord], fallback_file: Optional[str] = None) -> str:
    """
    Render the usage report and append it to the job summary.

    Args:
        records: Day-ordered usage records (non-empty)
        fallback_file: File used when GITHUB_STEP_SUMMARY is not set

    Returns:
        Path of the file the report was written to
    """
    summary = build_job_summary(records)
    path = os.getenv('GITHUB_STEP_SUMMARY') or fallback_file
    if not path:
        raise WriteError("GITHUB_STEP_SUMMARY is not set and no fallback file was given")

    summary.write(path)
    logger.info("[SUMMARY] Usage report written to %s", path)
    return path
