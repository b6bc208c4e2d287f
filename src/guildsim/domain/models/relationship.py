from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

RELATIONSHIP_STRENGTH_MIN = 0
RELATIONSHIP_STRENGTH_MAX = 100
RELATIONSHIP_HISTORY_LIMIT = 5


class RelationshipType(str, Enum):
    FRIENDSHIP = "friendship"
    RIVALRY = "rivalry"
    ROMANCE = "romance"


class RelationshipEventType(str, Enum):
    CONFLICT = "conflict"
    BONDING = "bonding"
    ROMANCE = "romance"
    RIVALRY_START = "rivalry_start"
    FRIENDSHIP_DEEPENS = "friendship_deepens"


def clamp_strength(value: int) -> int:
    return max(RELATIONSHIP_STRENGTH_MIN, min(RELATIONSHIP_STRENGTH_MAX, int(value)))


@dataclass
class Relationship:
    """Directed social edge owned by the source adventurer."""

    target_id: str
    type: RelationshipType = RelationshipType.FRIENDSHIP
    strength: int = 0
    history: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = RelationshipType(self.type)
        self.strength = clamp_strength(self.strength)
        if len(self.history) > RELATIONSHIP_HISTORY_LIMIT:
            del self.history[:-RELATIONSHIP_HISTORY_LIMIT]

    def apply(self, relationship_type: RelationshipType, delta: int, description: str) -> None:
        self.type = RelationshipType(relationship_type)
        self.strength = clamp_strength(self.strength + int(delta))
        self.history.append(str(description))
        if len(self.history) > RELATIONSHIP_HISTORY_LIMIT:
            del self.history[:-RELATIONSHIP_HISTORY_LIMIT]


@dataclass(frozen=True)
class RelationshipChange:
    adventurer_id: str
    target_id: str
    relationship_type: RelationshipType
    strength_change: int


@dataclass(frozen=True)
class SkillBonus:
    adventurer_id: str
    skill_type: str
    bonus: int
    duration_days: int


@dataclass(frozen=True)
class RelationshipEvent:
    id: str
    participant_ids: Tuple[str, ...]
    type: RelationshipEventType
    description: str
    relationship_changes: Tuple[RelationshipChange, ...] = ()
    morale_change: Optional[int] = None
    skill_bonuses: Tuple[SkillBonus, ...] = ()
