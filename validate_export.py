"""
CSV Export Validation

Reads an exported copilot-usage.csv back with pandas and checks its
structure before it is uploaded as an artifact.
"""

import sys
import logging
from typing import Optional

import pandas as pd

from error_handling import DataValidationError
from export_metrics import CSV_COLUMNS

logger = logging.getLogger(__name__)


def validate_csv_structure(df: pd.DataFrame) -> bool:
    """
    Validate that the CSV has the expected columns, in order.

    Raises:
        ValueError: If structure validation fails
    """
    if list(df.columns) != CSV_COLUMNS:
        raise ValueError(
            f"CSV columns mismatch. Expected {CSV_COLUMNS}, "
            f"got {list(df.columns)}"
        )

    logger.debug("CSV structure validation passed: %d columns", len(CSV_COLUMNS))
    return True


def validate_row_count(df: pd.DataFrame, expected_rows: int) -> bool:
    if len(df) != expected_rows:
        raise ValueError(
            f"CSV row count mismatch. Expected {expected_rows} days, found {len(df)}"
        )
    return True


def validate_usage_values(df: pd.DataFrame) -> bool:
    """
    Validate that every day is a YYYY-MM-DD date and every counter is a
    non-negative integer.

    Raises:
        ValueError: If any value check fails
    """
    if df.empty:
        return True

    days = pd.to_datetime(df['Day'], format='%Y-%m-%d', errors='coerce')
    bad_days = df.loc[days.isna(), 'Day']
    if not bad_days.empty:
        raise ValueError(f"Invalid day values: {', '.join(map(str, bad_days))}")

    for column in CSV_COLUMNS[1:]:
        if not pd.api.types.is_integer_dtype(df[column]):
            raise ValueError(f"Column '{column}' contains non-integer values")
        if (df[column] < 0).any():
            raise ValueError(f"Column '{column}' contains negative values")

    logger.debug("CSV value validation passed for %d rows", len(df))
    return True


def validate_usage_csv(csv_file: str, expected_rows: Optional[int] = None) -> pd.DataFrame:
    """
    Load and validate an exported usage CSV.

    Args:
        csv_file: Path of the exported CSV
        expected_rows: Number of day rows the file must contain, if known

    Returns:
        The loaded DataFrame

    Raises:
        DataValidationError: If the file cannot be read or fails a check.
    """
    try:
        df = pd.read_csv(csv_file, dtype={'Day': str})
        validate_csv_structure(df)
        if expected_rows is not None:
            validate_row_count(df, expected_rows)
        validate_usage_values(df)
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise DataValidationError(
            f"CSV validation failed for {csv_file}: {exc}",
            details={"file_path": csv_file, "error": str(exc)},
        ) from exc

    logger.info("[VALIDATION] %s passed validation (%d days)", csv_file, len(df))
    return df


def main(argv=None):
    """Validate a usage CSV given on the command line."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    argv = sys.argv[1:] if argv is None else argv
    csv_file = argv[0] if argv else 'copilot-usage.csv'

    try:
        validate_usage_csv(csv_file)
    except DataValidationError as e:
        logger.error("Validation FAILED: %s", e)
        return 1

    print(f"+ {csv_file} is a valid Copilot usage export.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
