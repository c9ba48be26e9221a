"""
Data Adapter Module for GitHub Copilot usage.
Resolves the query window and fetches the usage dataset for the configured scope.
"""

import logging
from datetime import date, timedelta
from typing import List, Dict, Any, Optional

import github_adapter
from config import UsageReportConfig, EnterpriseScope, OrganizationScope, TeamScope
from error_handling import handle_pipeline_phase, FetchError
from validators import UsageQueryParams

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """Configure centralized logging for the usage report pipeline."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    # urllib3 logs every request at DEBUG, including the full URL
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_query_params(config: UsageReportConfig, today: Optional[date] = None) -> Dict[str, str]:
    """
    Build the usage API query parameters.

    When ``days`` is set, ``since`` is today minus that many days and any
    explicit since/until is ignored. Otherwise explicit since/until are
    forwarded as given.
    """
    if config.days:
        today = today or date.today()
        since = (today - timedelta(days=config.days)).isoformat()
        query = UsageQueryParams(since=since)
    else:
        query = UsageQueryParams(since=config.since, until=config.until)
    return query.to_params()


@handle_pipeline_phase(phase_name="FETCH", error_cls=FetchError)
def fetch_copilot_usage(config: UsageReportConfig, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Fetch every page of Copilot usage for the configured scope.

    Args:
        config: Resolved report configuration
        today: Reference date for the ``days`` window (defaults to today)

    Returns:
        Day-level usage objects in the order the API returned them

    Raises:
        FetchError: For transport, authentication or API errors.
    """
    params = build_query_params(config, today)
    scope = config.scope
    logger.info("Fetching Copilot usage for %s", scope.describe())
    logger.debug("Query parameters: %s", params)

    if isinstance(scope, EnterpriseScope):
        data = github_adapter.fetch_enterprise_copilot_usage(
            scope.enterprise, config.token, params, api_base=config.api_url
        )
    elif isinstance(scope, OrganizationScope):
        data = github_adapter.fetch_org_copilot_usage(
            scope.organization, config.token, params, api_base=config.api_url
        )
    elif isinstance(scope, TeamScope):
        data = github_adapter.fetch_team_copilot_usage(
            scope.organization, scope.team, config.token, params, api_base=config.api_url
        )
    else:
        raise FetchError(f"Unsupported scope: {scope!r}")

    logger.info("Data fetch complete: %d days of usage", len(data))
    return data
