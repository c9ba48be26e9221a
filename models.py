from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BreakdownEntry(BaseModel):
    language: str = Field(..., description="Language identifier, e.g. 'python'")
    editor: str = Field(..., description="Editor identifier, e.g. 'vscode'")
    suggestions_count: int = Field(..., description="Suggestions shown", ge=0)
    acceptances_count: int = Field(..., description="Suggestions accepted", ge=0)
    lines_suggested: int = Field(..., description="Lines of code suggested", ge=0)
    lines_accepted: int = Field(..., description="Lines of code accepted", ge=0)
    active_users: int = Field(..., description="Users active in this language/editor", ge=0)


class UsageRecord(BaseModel):
    day: date = Field(..., description="Calendar day of the usage record")
    total_suggestions_count: int = Field(..., ge=0)
    total_acceptances_count: int = Field(..., ge=0)
    total_lines_suggested: int = Field(..., ge=0)
    total_lines_accepted: int = Field(..., ge=0)
    total_active_users: int = Field(..., ge=0)
    total_chat_acceptances: int = Field(0, ge=0)
    total_chat_turns: int = Field(0, ge=0)
    total_active_chat_users: int = Field(0, ge=0)
    breakdown: List[BreakdownEntry] = Field(default_factory=list)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "day": "2024-01-01",
            "total_suggestions_count": 1000,
            "total_acceptances_count": 800,
            "total_lines_suggested": 1800,
            "total_lines_accepted": 1200,
            "total_active_users": 10,
            "total_chat_acceptances": 32,
            "total_chat_turns": 200,
            "total_active_chat_users": 4,
            "breakdown": [
                {
                    "language": "python",
                    "editor": "vscode",
                    "suggestions_count": 300,
                    "acceptances_count": 250,
                    "lines_suggested": 900,
                    "lines_accepted": 700,
                    "active_users": 5
                }
            ]
        }
    })


class LanguageUsage(BaseModel):
    """Running totals for one language across the whole date range."""

    language: str
    editor: str = ""
    suggestions_count: int = 0
    acceptances_count: int = 0
    lines_suggested: int = 0
    lines_accepted: int = 0
    active_users: int = 0

    def add(self, entry: BreakdownEntry) -> None:
        self.suggestions_count += entry.suggestions_count
        self.acceptances_count += entry.acceptances_count
        self.lines_suggested += entry.lines_suggested
        self.lines_accepted += entry.lines_accepted
        self.active_users += entry.active_users


class UsageTotals(BaseModel):
    first_day: Optional[date] = None
    last_day: Optional[date] = None
    total_suggestions_count: int = 0
    total_acceptances_count: int = 0
    total_lines_suggested: int = 0
    total_lines_accepted: int = 0
    total_chat_acceptances: int = 0
    total_chat_turns: int = 0
