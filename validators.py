"""
Pydantic Validation Models for the Copilot usage pipeline.
Provides validation for API query parameters and fetched usage records.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from error_handling import DataValidationError
from models import UsageRecord

logger = logging.getLogger(__name__)

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?)?$"


class UsageQueryParams(BaseModel):
    """Validation model for Copilot usage API query parameters."""

    since: Optional[str] = Field(
        default=None,
        pattern=ISO_DATE_PATTERN,
        description="Start of the range, ISO 8601 date or timestamp",
    )
    until: Optional[str] = Field(
        default=None,
        pattern=ISO_DATE_PATTERN,
        description="End of the range, ISO 8601 date or timestamp",
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Number of days per page",
    )

    @model_validator(mode="after")
    def validate_date_range(self) -> "UsageQueryParams":
        if self.since and self.until and self.since[:10] > self.until[:10]:
            raise ValueError(
                f"since ({self.since}) must not be after until ({self.until})"
            )
        return self

    def to_params(self) -> Dict[str, str]:
        """Query string parameters, omitting unset dates."""
        params = {"per_page": str(self.per_page)}
        if self.since:
            params["since"] = self.since
        if self.until:
            params["until"] = self.until
        return params


def validate_usage_records(raw_records: List[Dict[str, Any]]) -> List[UsageRecord]:
    """
    Validate the raw usage payload into UsageRecord models.

    Args:
        raw_records: Day-level usage objects as returned by the API.

    Returns:
        Parsed records, in the order received.

    Raises:
        DataValidationError: If the payload is not a list or a record is malformed.
    """
    if not isinstance(raw_records, list):
        raise DataValidationError(
            f"Expected a list of usage records, got {type(raw_records).__name__}",
            details={"received_type": type(raw_records).__name__},
        )

    records = []
    for idx, raw in enumerate(raw_records):
        try:
            records.append(UsageRecord.model_validate(raw))
        except ValidationError as exc:
            logger.error("[VALIDATION] Invalid usage record at index %d: %s", idx, exc)
            raise DataValidationError(
                f"Invalid usage record at index {idx}",
                details={"index": idx, "error": str(exc)},
            ) from exc

    logger.debug("[VALIDATION] %d usage records validated", len(records))
    return records
