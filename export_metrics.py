"""
Export module for Copilot usage data.
Provides functionality to export day-level usage totals to CSV format.
"""

import csv
import io
import logging
from typing import List

from error_handling import handle_pipeline_phase, WriteError
from models import UsageRecord

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
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


def create_csv(records: List[UsageRecord]) -> str:
    """
    Serialize day-level totals to CSV text; language breakdowns are omitted.

    Every field is a date or an integer, so no quoting is ever produced.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_COLUMNS)
    for record in records:
        writer.writerow([
            record.day.isoformat(),
            record.total_suggestions_count,
            record.total_acceptances_count,
            record.total_lines_suggested,
            record.total_lines_accepted,
            record.total_active_users,
            record.total_chat_acceptances,
            record.total_chat_turns,
            record.total_active_chat_users,
        ])
    return buffer.getvalue()


@handle_pipeline_phase(phase_name="EXPORT_CSV", error_cls=WriteError)
def export_usage_to_csv(
    records: List[UsageRecord],
    output_filename: str = 'copilot-usage.csv'
) -> str:
    """
    Write day-level usage totals to a CSV file.

    Args:
        records: Usage records to export
        output_filename: Output CSV filename

    Returns:
        The path written

    Raises:
        WriteError: If the file cannot be written.
    """
    logger.info(
        "[EXPORT_CSV] Exporting %d days of usage to %s",
        len(records),
        output_filename,
    )

    with open(output_filename, 'w', newline='', encoding='utf-8') as csvfile:
        csvfile.write(create_csv(records))

    logger.info(
        "[EXPORT_CSV] Successfully exported %d records to %s",
        len(records),
        output_filename,
    )
    return output_filename
