"""
Metrics Calculator Module for Copilot usage data.
Aggregates day-level usage records into per-language and range-wide totals.
"""

import logging
from typing import Dict, List, Any, Optional

from models import UsageRecord, LanguageUsage, UsageTotals
from error_handling import MetricsCalculationError

logger = logging.getLogger(__name__)

NON_BREAKING_HYPHEN = "&#8209;"
PIE_CHART_LANGUAGE_LIMIT = 20


def aggregate_language_usage(records: List[UsageRecord]) -> Dict[str, LanguageUsage]:
    """
    Sum breakdown counters per language across every day.

    Entries sharing a language (different editors, or different days) are
    added together. Keys keep first-seen order; the editor of the first
    entry seen for a language is retained.
    """
    usage: Dict[str, LanguageUsage] = {}
    for record in records:
        for entry in record.breakdown:
            bucket = usage.get(entry.language)
            if bucket is None:
                bucket = usage[entry.language] = LanguageUsage(
                    language=entry.language,
                    editor=entry.editor,
                )
            bucket.add(entry)
    return usage


def merge_language_usage(
    left: Dict[str, LanguageUsage],
    right: Dict[str, LanguageUsage],
) -> Dict[str, LanguageUsage]:
    """Combine two aggregates; counters for shared languages are summed."""
    merged = {language: usage.model_copy() for language, usage in left.items()}
    for language, usage in right.items():
        if language not in merged:
            merged[language] = usage.model_copy()
            continue
        bucket = merged[language]
        bucket.suggestions_count += usage.suggestions_count
        bucket.acceptances_count += usage.acceptances_count
        bucket.lines_suggested += usage.lines_suggested
        bucket.lines_accepted += usage.lines_accepted
        bucket.active_users += usage.active_users
    return merged


def calculate_totals(records: List[UsageRecord]) -> UsageTotals:
    totals = UsageTotals()
    if records:
        totals.first_day = records[0].day
        totals.last_day = records[-1].day
    for record in records:
        totals.total_suggestions_count += record.total_suggestions_count
        totals.total_acceptances_count += record.total_acceptances_count
        totals.total_lines_suggested += record.total_lines_suggested
        totals.total_lines_accepted += record.total_lines_accepted
        totals.total_chat_acceptances += record.total_chat_acceptances
        totals.total_chat_turns += record.total_chat_turns
    return totals


def acceptance_rate(acceptances: int, suggestions: int) -> Optional[float]:
    """Accepted / suggested as a percentage, or None when nothing was suggested."""
    if suggestions == 0:
        return None
    return acceptances / suggestions * 100


def format_rate(rate: Optional[float]) -> str:
    if rate is None:
        return "N/A"
    return f"{rate:.2f}%"


def escape_language(language: str) -> str:
    """Display form of a language id: hyphens become non-breaking hyphens."""
    return language.replace("-", NON_BREAKING_HYPHEN)


def sort_by_acceptances(usage: Dict[str, LanguageUsage]) -> List[LanguageUsage]:
    return sorted(usage.values(), key=lambda u: u.acceptances_count, reverse=True)


def top_languages_by_suggestions(
    usage: Dict[str, LanguageUsage],
    limit: int = PIE_CHART_LANGUAGE_LIMIT,
) -> List[LanguageUsage]:
    ranked = sorted(usage.values(), key=lambda u: u.suggestions_count, reverse=True)
    return ranked[:limit]


class UsageMetricsCalculator:
    """
    Computes the report metrics for one usage dataset.
    The dataset is read-only; results are computed on demand.
    """

    def __init__(self, records: List[UsageRecord]):
        self.records = records
        self._language_usage: Optional[Dict[str, LanguageUsage]] = None

    @property
    def language_usage(self) -> Dict[str, LanguageUsage]:
        if self._language_usage is None:
            self._language_usage = aggregate_language_usage(self.records)
        return self._language_usage

    def calculate_totals(self) -> UsageTotals:
        return calculate_totals(self.records)

    def calculate_acceptance_rate(self) -> Optional[float]:
        totals = self.calculate_totals()
        return acceptance_rate(totals.total_acceptances_count, totals.total_suggestions_count)

    def languages_by_acceptances(self) -> List[LanguageUsage]:
        return sort_by_acceptances(self.language_usage)

    def top_languages(self, limit: int = PIE_CHART_LANGUAGE_LIMIT) -> List[LanguageUsage]:
        return top_languages_by_suggestions(self.language_usage, limit)

    def calculate_all_metrics(self) -> Dict[str, Any]:
        """
        Calculate the range totals and language breakdown.

        Returns:
            Dictionary with 'totals', 'acceptance_rate' and 'languages'

        Raises:
            MetricsCalculationError: If the dataset is empty.
        """
        if not self.records:
            raise MetricsCalculationError(
                "No usage records to calculate metrics from",
                details={"records": 0},
            )

        totals = self.calculate_totals()
        metrics = {
            'totals': totals.model_dump(mode='json'),
            'acceptance_rate': format_rate(self.calculate_acceptance_rate()),
            'languages': [u.model_dump() for u in self.languages_by_acceptances()],
        }
        logger.info(
            "[CALCULATE] %d days, %d languages, %d suggestions, %d acceptances",
            len(self.records),
            len(self.language_usage),
            totals.total_suggestions_count,
            totals.total_acceptances_count,
        )
        return metrics
