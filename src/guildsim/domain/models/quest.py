from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class QuestDifficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuestStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Quest:
    """Read-only catalog record supplied by the quest board."""

    id: str
    name: str
    description: str = ""
    reward: int = 0
    duration_days: float = 1.0
    min_level: int = 1
    preferred_classes: Tuple[str, ...] = ()
    difficulty: QuestDifficulty = QuestDifficulty.EASY


@dataclass
class ActiveQuest:
    quest: Quest
    assigned_adventurers: Tuple[str, ...]
    started_at: float
    status: QuestStatus = QuestStatus.ACTIVE
    synergy: float = 1.0

    @property
    def id(self) -> str:
        return self.quest.id

    def due_at(self, seconds_per_day: float) -> float:
        return float(self.started_at) + float(self.quest.duration_days) * float(seconds_per_day)
