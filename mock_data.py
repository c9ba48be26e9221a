import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from models import UsageRecord

LANGUAGES = [
    "python", "typescript", "javascript", "go", "java", "c-sharp", "ruby",
    "rust", "markdown", "yaml", "shell", "html", "css", "sql", "kotlin",
    "swift", "php", "cpp", "c", "scala", "terraform", "dockerfile",
]
EDITORS = ["vscode", "jetbrains", "neovim", "visualstudio"]


def generate_mock_usage(
    days: int = 28,
    end: Optional[date] = None,
    seed: int = 42,
) -> List[Dict[str, Any]]:
    """Generate ``days`` consecutive usage records ending at ``end`` (default yesterday)."""
    rng = random.Random(seed)
    end = end or date.today() - timedelta(days=1)
    start = end - timedelta(days=days - 1)

    records = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        weekend = day.weekday() >= 5

        breakdown = []
        for language in rng.sample(LANGUAGES, k=rng.randint(3, 10)):
            for editor in rng.sample(EDITORS, k=rng.randint(1, 2)):
                suggestions = rng.randint(5, 60 if weekend else 400)
                acceptances = rng.randint(0, suggestions)
                lines_suggested = suggestions * rng.randint(1, 3)
                breakdown.append({
                    "language": language,
                    "editor": editor,
                    "suggestions_count": suggestions,
                    "acceptances_count": acceptances,
                    "lines_suggested": lines_suggested,
                    "lines_accepted": rng.randint(0, lines_suggested),
                    "active_users": rng.randint(1, 3 if weekend else 25),
                })

        max_users = max(b["active_users"] for b in breakdown)
        sum_users = sum(b["active_users"] for b in breakdown)
        active_chat_users = rng.randint(0, max_users)
        chat_turns = active_chat_users * rng.randint(0, 12)

        record = {
            "day": day.isoformat(),
            "total_suggestions_count": sum(b["suggestions_count"] for b in breakdown),
            "total_acceptances_count": sum(b["acceptances_count"] for b in breakdown),
            "total_lines_suggested": sum(b["lines_suggested"] for b in breakdown),
            "total_lines_accepted": sum(b["lines_accepted"] for b in breakdown),
            "total_active_users": rng.randint(max_users, sum_users),
            "total_chat_acceptances": rng.randint(0, chat_turns),
            "total_chat_turns": chat_turns,
            "total_active_chat_users": active_chat_users,
            "breakdown": breakdown,
        }
        UsageRecord.model_validate(record)
        records.append(record)

    return records


MOCK_USAGE = generate_mock_usage(28)
