"""
Generate the GitHub Copilot Usage Report

Fetches Copilot usage for an enterprise, organization or team, writes the
job summary report and the CSV artifact, and publishes the raw usage as the
``result`` output. Runs as a GitHub Action (inputs from INPUT_* variables)
or from the command line.
"""

import os
import sys
import json
import logging
import argparse
from typing import Any, Dict, List, Optional

import data_adapter
from action_runtime import is_actions_runner, set_output
from artifact_client import upload_artifact
from config import UsageReportConfig, resolve_inputs, read_action_inputs
from error_handling import PipelinePhaseError
from export_metrics import export_usage_to_csv
from job_summary import create_job_summary
from validate_export import validate_usage_csv
from validators import validate_usage_records

logger = logging.getLogger(__name__)


def run_usage_report(config: UsageReportConfig) -> Optional[List[Dict[str, Any]]]:
    """
    Run the report pipeline for a resolved configuration.

    Returns:
        The raw usage payload, or None when the API returned no usage.
    """
    logger.info("Configuration: %s", config.to_dict())

    raw_usage = data_adapter.fetch_copilot_usage(config)
    if not raw_usage:
        logger.info("No Copilot usage data returned, nothing to report")
        return None

    records = validate_usage_records(raw_usage)

    if config.job_summary:
        create_job_summary(records, fallback_file=config.summary_fallback_file)

    if config.csv:
        export_usage_to_csv(records, config.csv_filename)
        validate_usage_csv(config.csv_filename, expected_rows=len(records))
        upload_artifact(
            config.artifact_name,
            [config.csv_filename],
            root_directory=os.path.dirname(os.path.abspath(config.csv_filename)),
        )

    set_output('result', json.dumps(raw_usage, separators=(',', ':')))
    return raw_usage


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Report GitHub Copilot usage for an enterprise, organization or team. '
                    'Unset options fall back to the INPUT_* action inputs.'
    )
    parser.add_argument(
        '--github-token',
        type=str,
        default=None,
        help='GitHub token (defaults to INPUT_GITHUB-TOKEN, then GITHUB_TOKEN)'
    )
    parser.add_argument('--enterprise', type=str, default=None, help='Enterprise slug')
    parser.add_argument('--organization', type=str, default=None, help='Organization slug')
    parser.add_argument('--team', type=str, default=None, help='Team slug (requires --organization)')
    parser.add_argument(
        '--days',
        type=str,
        default=None,
        help='Number of days of usage to report, counted back from today'
    )
    parser.add_argument('--since', type=str, default=None, help='Start date (YYYY-MM-DD)')
    parser.add_argument('--until', type=str, default=None, help='End date (YYYY-MM-DD)')
    parser.add_argument(
        '--job-summary',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Write the markdown usage report (default: on)'
    )
    parser.add_argument(
        '--csv',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Export copilot-usage.csv and upload it as an artifact (default: off)'
    )
    parser.add_argument(
        '--api-url',
        type=str,
        default=None,
        help='GitHub REST API base URL (defaults to GITHUB_API_URL or https://api.github.com)'
    )
    parser.add_argument('--log-file', type=str, default=None, help='Also write DEBUG logs to this file')
    parser.add_argument('--verbose', action='store_true', help='Log DEBUG messages to the console')
    return parser


def collect_inputs(args: argparse.Namespace, environ=None) -> Dict[str, str]:
    """Merge command-line options over the action inputs."""
    environ = os.environ if environ is None else environ
    values = read_action_inputs(environ)

    overrides = {
        'github-token': args.github_token,
        'enterprise': args.enterprise,
        'organization': args.organization,
        'team': args.team,
        'days': args.days,
        'since': args.since,
        'until': args.until,
    }
    for name, value in overrides.items():
        if value is not None:
            values[name] = value
    if args.job_summary is not None:
        values['job-summary'] = 'true' if args.job_summary else 'false'
    if args.csv is not None:
        values['csv'] = 'true' if args.csv else 'false'

    if not values.get('github-token'):
        values['github-token'] = environ.get('GITHUB_TOKEN', '')
    return values


def main(argv=None) -> int:
    """Main execution function for report generation."""
    args = build_parser().parse_args(argv)

    data_adapter.setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    try:
        config = resolve_inputs(collect_inputs(args), api_url=args.api_url)
        result = run_usage_report(config)
    except PipelinePhaseError as e:
        logger.error("[%s] %s", e.phase or "PIPELINE", e)
        if is_actions_runner():
            print(f"::error::{e}")
        print(f"\n- FAILED: {e}")
        return 1

    if result is None:
        print("\n+ SUCCESS: No Copilot usage data for the requested range.")
    else:
        print(f"\n+ SUCCESS: Copilot usage report generated for {len(result)} days.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
