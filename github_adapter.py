"""
GitHub REST API Adapter for Copilot usage metrics.

Provides paginated reads of the enterprise, organization and team
Copilot usage endpoints. Pagination follows the ``Link`` response header.
"""

import logging
from typing import Dict, List, Any, Optional

import requests

from error_handling import handle_api_errors

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
REQUEST_TIMEOUT = 30


def _github_headers(token: str) -> Dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


@handle_api_errors(max_attempts=3, base_delay=1.0)
def _github_get(url: str, headers: Dict[str, str], params: Optional[Dict[str, str]] = None) -> requests.Response:
    response = requests.get(url, headers=headers, params=params, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response


def paginate(url: str, token: str, params: Optional[Dict[str, str]] = None) -> List[Any]:
    """GET every page of a list endpoint and concatenate the items in order.

    The first request carries ``params``; later requests use the ``next``
    URL from the Link header verbatim, since it already encodes the query.
    """
    headers = _github_headers(token)
    items: List[Any] = []
    next_url: Optional[str] = url
    page_params = params
    page = 0
    while next_url:
        page += 1
        resp = _github_get(next_url, headers, page_params)
        data = resp.json()
        if data:
            items.extend(data)
        logger.info("Fetched page %d from %s: %d items", page, url, len(data or []))
        next_url = resp.links.get("next", {}).get("url")
        page_params = None
    return items


def fetch_enterprise_copilot_usage(
    enterprise: str,
    token: str,
    params: Optional[Dict[str, str]] = None,
    api_base: str = GITHUB_API_BASE,
) -> List[Dict[str, Any]]:
    """GET /enterprises/{enterprise}/copilot/usage"""
    url = f"{api_base}/enterprises/{enterprise}/copilot/usage"
    return paginate(url, token, params)


def fetch_org_copilot_usage(
    org: str,
    token: str,
    params: Optional[Dict[str, str]] = None,
    api_base: str = GITHUB_API_BASE,
) -> List[Dict[str, Any]]:
    """GET /orgs/{org}/copilot/usage"""
    url = f"{api_base}/orgs/{org}/copilot/usage"
    return paginate(url, token, params)


def fetch_team_copilot_usage(
    org: str,
    team: str,
    token: str,
    params: Optional[Dict[str, str]] = None,
    api_base: str = GITHUB_API_BASE,
) -> List[Dict[str, Any]]:
    """GET /orgs/{org}/team/{team}/copilot/usage"""
    url = f"{api_base}/orgs/{org}/team/{team}/copilot/usage"
    return paginate(url, token, params)
