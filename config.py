"""
Configuration module for the Copilot usage report.
Resolves the flat action inputs into a validated report configuration.
"""

import os
from typing import Annotated, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from action_runtime import get_input, parse_boolean_input
from error_handling import ConfigError
from validators import UsageQueryParams

DEFAULT_API_URL = "https://api.github.com"

INPUT_NAMES = (
    "github-token",
    "enterprise",
    "organization",
    "team",
    "days",
    "since",
    "until",
    "job-summary",
    "csv",
)


class EnterpriseScope(BaseModel):
    kind: Literal["enterprise"] = "enterprise"
    enterprise: str

    def describe(self) -> str:
        return f"enterprise {self.enterprise}"


class OrganizationScope(BaseModel):
    kind: Literal["organization"] = "organization"
    organization: str

    def describe(self) -> str:
        return f"organization {self.organization}"


class TeamScope(BaseModel):
    kind: Literal["team"] = "team"
    organization: str
    team: str

    def describe(self) -> str:
        return f"team {self.team} inside organization {self.organization}"


Scope = Annotated[
    Union[EnterpriseScope, OrganizationScope, TeamScope],
    Field(discriminator="kind"),
]


class UsageReportConfig:
    """Resolved configuration for one report run."""

    def __init__(
        self,
        token: str,
        scope: Scope,
        days: Optional[int] = None,
        since: Optional[str] = None,
        until: Optional[str] = None,
        job_summary: bool = True,
        csv: bool = False,
        api_url: str = DEFAULT_API_URL,
        csv_filename: str = "copilot-usage.csv",
        artifact_name: str = "copilot-usage",
        summary_fallback_file: str = "copilot-usage-summary.md",
    ):
        """
        Initialize the report configuration.

        Args:
            token: GitHub token used to authenticate API requests
            scope: Enterprise, organization or team to query
            days: Number of days back from today to request
            since: Explicit start of the range (ignored when days is set)
            until: Explicit end of the range (ignored when days is set)
            job_summary: Whether to write the markdown report
            csv: Whether to export and upload the CSV artifact
            api_url: Base URL of the GitHub REST API
            csv_filename: File the CSV export is written to
            artifact_name: Name of the uploaded CSV artifact
            summary_fallback_file: Report file used outside a runner
        """
        self.token = token
        self.scope = scope
        self.days = days
        self.since = since
        self.until = until
        self.job_summary = job_summary
        self.csv = csv
        self.api_url = api_url.rstrip("/")
        self.csv_filename = csv_filename
        self.artifact_name = artifact_name
        self.summary_fallback_file = summary_fallback_file

    def to_dict(self):
        """Convert configuration to dictionary, with the token masked."""
        return {
            'token': '***' if self.token else '',
            'scope': self.scope.model_dump(),
            'days': self.days,
            'since': self.since,
            'until': self.until,
            'job_summary': self.job_summary,
            'csv': self.csv,
            'api_url': self.api_url,
            'csv_filename': self.csv_filename,
            'artifact_name': self.artifact_name,
        }


def _select_scope(enterprise: str, organization: str, team: str) -> Scope:
    if enterprise:
        return EnterpriseScope(enterprise=enterprise)
    # A team always comes with its organization, so it narrows the
    # organization scope rather than competing with it.
    if team:
        return TeamScope(organization=organization, team=team)
    return OrganizationScope(organization=organization)


def _parse_days(value: str) -> Optional[int]:
    if not value:
        return None
    try:
        days = int(value)
    except ValueError as exc:
        raise ConfigError("days must be an integer", details={"days": value}) from exc
    return days if days > 0 else None


def resolve_inputs(values: Mapping[str, Optional[str]], api_url: Optional[str] = None) -> UsageReportConfig:
    """
    Validate the flat input values and build the report configuration.

    Args:
        values: Input name -> raw string value (see INPUT_NAMES)
        api_url: GitHub REST API base URL; defaults to GITHUB_API_URL or api.github.com

    Raises:
        ConfigError: On the first violated rule.
    """
    def value_of(name: str) -> str:
        return (values.get(name) or "").strip()

    token = value_of("github-token")
    enterprise = value_of("enterprise")
    organization = value_of("organization")
    team = value_of("team")

    if not token:
        raise ConfigError("github-token is required")
    if not organization and not enterprise and not team:
        raise ConfigError("organization, enterprise or team is required")
    if team and not organization:
        raise ConfigError("organization is required when team is provided")

    job_summary = parse_boolean_input("job-summary", value_of("job-summary"), default=True)
    csv = parse_boolean_input("csv", value_of("csv"), default=False)
    days = _parse_days(value_of("days"))
    since = value_of("since") or None
    until = value_of("until") or None

    try:
        UsageQueryParams(since=since, until=until)
    except ValidationError as exc:
        raise ConfigError(
            f"since/until must be ISO 8601 dates: {exc.errors()[0]['msg']}",
            details={"since": since, "until": until},
        ) from exc

    return UsageReportConfig(
        token=token,
        scope=_select_scope(enterprise, organization, team),
        days=days,
        since=since,
        until=until,
        job_summary=job_summary,
        csv=csv,
        api_url=api_url or os.getenv("GITHUB_API_URL") or DEFAULT_API_URL,
    )


def read_action_inputs(environ: Optional[Mapping[str, str]] = None) -> dict:
    """Collect every known action input from the environment."""
    return {name: get_input(name, environ) for name in INPUT_NAMES}
