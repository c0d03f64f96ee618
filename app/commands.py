"""Closed set of chat commands and what each one is allowed to do."""

import enum
from dataclasses import dataclass
from typing import Dict, Optional

from models import PoopType


class Command(str, enum.Enum):
    HELP = "/help"
    RANK = "/rank"
    DAILY_RANK = "/today"
    WEEKLY_RANK = "/week"
    MONTHLY_RANK = "/month"
    SUMMARIZE = "/stats"
    GROUP_SUMMARIZE = "/groupstats"
    POOP_KING = "/king"
    GOOD_POOP = "💩"
    STUCK_POOP = "💩💩"
    BAD_POOP = "💩💩💩"

    @classmethod
    def parse(cls, text: str) -> Optional["Command"]:
        """Match a message exactly (ignoring surrounding whitespace); None if unknown."""
        text = text.strip()
        if text.lower() in ALIASES:
            return ALIASES[text.lower()]
        try:
            return cls(text)
        except ValueError:
            return None


ALIASES = {
    "poop": Command.GOOD_POOP,
}


@dataclass(frozen=True)
class CommandSpec:
    """Static descriptor bound to a Command."""
    handler: str
    description: str
    allow_one_to_one: bool = True
    allow_group: bool = True
    category: Optional[PoopType] = None

    def allows(self, is_group: bool) -> bool:
        return self.allow_group if is_group else self.allow_one_to_one


COMMANDS: Dict[Command, CommandSpec] = {
    Command.HELP: CommandSpec("show_help", "list commands"),
    Command.RANK: CommandSpec("show_rank", "weekly and monthly ranking", allow_one_to_one=False),
    Command.DAILY_RANK: CommandSpec("show_daily_rank", "today's ranking", allow_one_to_one=False),
    Command.WEEKLY_RANK: CommandSpec("show_weekly_rank", "this week's ranking", allow_one_to_one=False),
    Command.MONTHLY_RANK: CommandSpec("show_monthly_rank", "this month's ranking", allow_one_to_one=False),
    Command.SUMMARIZE: CommandSpec("show_summary", "personal statistics"),
    Command.GROUP_SUMMARIZE: CommandSpec(
        "show_group_summary", "group statistics", allow_one_to_one=False
    ),
    Command.POOP_KING: CommandSpec("show_poop_king", "who is the poop king this week", allow_one_to_one=False),
    Command.GOOD_POOP: CommandSpec("record", "smooth poop", category=PoopType.GOOD),
    Command.STUCK_POOP: CommandSpec("record", "constipated", category=PoopType.STUCK),
    Command.BAD_POOP: CommandSpec("record", "diarrhea", category=PoopType.BAD),
}


def help_text(table: Dict[Command, CommandSpec] = COMMANDS) -> str:
    lines = [f"{command.value} - {spec.description}" for command, spec in table.items()]
    lines.append("Send 💩 to record a poop, or /rank to see the leaderboard")
    return "\n".join(lines)
