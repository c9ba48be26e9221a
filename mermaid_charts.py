"""
Mermaid chart markup for the usage report.

Charts are emitted as fenced ``mermaid`` blocks; rendering is left to
whatever displays the markdown (the Actions job summary renders them).
"""

from typing import List

from models import UsageRecord, LanguageUsage

CHART_HEIGHT = 500
CHART_WIDTH_PER_DAY = 50
Y_AXIS_HEADROOM = 10


def _number(value: float) -> str:
    # xychart values are plain decimals; exponent notation does not parse
    return f"{value:.6f}".rstrip("0").rstrip(".")


def _day_label(record: UsageRecord) -> str:
    # "2024-01-05" -> "01/05"
    return record.day.isoformat().replace("-", "/")[5:]


def _xychart_header(day_count: int) -> str:
    return f"""---
config:
    xyChart:
        width: {day_count * CHART_WIDTH_PER_DAY}
        height: {CHART_HEIGHT}
        xAxis:
            labelPadding: 20
    themeVariables:
        xyChart:
            backgroundColor: "transparent"
---"""


def _x_axis(records: List[UsageRecord]) -> str:
    return ", ".join(f'"{_day_label(r)}"' for r in records)


def _fence(body: str) -> str:
    return f"\n```mermaid\n{body}\n```\n"


def acceptance_rate_chart(records: List[UsageRecord]) -> str:
    """
    Bar chart of daily acceptances with the daily acceptance rate drawn as a
    line scaled onto the same y-axis (rate 1.0 == top of the axis).
    """
    max_acceptances = max(r.total_acceptances_count for r in records) + Y_AXIS_HEADROOM
    bars = ", ".join(str(r.total_acceptances_count) for r in records)
    line = ", ".join(
        _number(r.total_acceptances_count / r.total_suggestions_count * max_acceptances)
        if r.total_suggestions_count else "0"
        for r in records
    )
    body = f"""{_xychart_header(len(records))}
xychart-beta
  title "Accepts & Acceptance Rate"
  x-axis [{_x_axis(records)}]
  y-axis "Acceptances" 0 --> {max_acceptances}
  bar [{bars}]
  line [{line}]"""
    return _fence(body)


def daily_active_users_chart(records: List[UsageRecord]) -> str:
    max_active_users = max(r.total_active_users for r in records) + Y_AXIS_HEADROOM
    line = ", ".join(str(r.total_active_users) for r in records)
    body = f"""{_xychart_header(len(records))}
xychart-beta
  title "Daily Active Users"
  x-axis [{_x_axis(records)}]
  y-axis "Active Users" 0 --> {max_active_users}
  line [{line}]"""
    return _fence(body)


def language_pie_chart(languages: List[LanguageUsage]) -> str:
    """Pie of suggestion counts; callers pass the languages already ranked."""
    slices = "\n".join(f'    "{u.language}" : {u.suggestions_count}' for u in languages)
    body = f"""pie showData
title Language Usage
{slices}"""
    return _fence(body)
