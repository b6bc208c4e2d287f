from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from guildsim.domain.models.adventurer import Adventurer, EquipmentItem
from guildsim.domain.models.retirement import RetiredAdventurer


class BonusCategory(str, Enum):
    EXPERIENCE = "experience"
    GOLD = "gold"
    REPUTATION = "reputation"
    SKILL = "skill"
    RECRUITMENT = "recruitment"
    QUEST_ACCESS = "quest_access"


MULTIPLIER_CATEGORIES = (
    BonusCategory.EXPERIENCE,
    BonusCategory.GOLD,
    BonusCategory.REPUTATION,
    BonusCategory.SKILL,
    BonusCategory.RECRUITMENT,
)


class TransitionReason(str, Enum):
    TIME_PASSED = "time_passed"
    CATASTROPHIC_EVENT = "catastrophic_event"
    VOLUNTARY_SUCCESSION = "voluntary_succession"
    GUILD_DISSOLUTION = "guild_dissolution"

    @classmethod
    def from_value(cls, value: "TransitionReason | str | None") -> "TransitionReason":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.TIME_PASSED


@dataclass(frozen=True)
class UnlockCondition:
    """Thresholds left at None are not checked."""

    generation: Optional[int] = None
    total_quests_completed: Optional[int] = None
    total_gold_earned: Optional[int] = None
    total_reputation_gained: Optional[int] = None
    legendary_items_obtained: Optional[int] = None
    retired_adventurers: Optional[int] = None


@dataclass(frozen=True)
class LegacyBonus:
    id: str
    name: str
    description: str
    category: BonusCategory
    value: float
    unlock_condition: UnlockCondition
    persistent: bool = True


@dataclass(frozen=True)
class LegendaryAdventurer:
    name: str
    adventurer_class: str
    achievements: Tuple[str, ...]
    generation: int


@dataclass(frozen=True)
class FamousQuest:
    quest_name: str
    completed_by: Tuple[str, ...]
    generation: int
    legendary: bool = False


@dataclass(frozen=True)
class ChronicleStats:
    level: int
    reputation: int
    gold: int
    adventurers: int


@dataclass(frozen=True)
class ChronicleEntry:
    generation: int
    major_events: Tuple[str, ...]
    notable_achievements: Tuple[str, ...]
    final_stats: ChronicleStats


@dataclass
class GuildLegacy:
    total_generations: int = 1
    total_quests_completed: int = 0
    total_gold_earned: int = 0
    total_reputation_gained: int = 0
    total_retired: int = 0
    legendary_adventurers: List[LegendaryAdventurer] = field(default_factory=list)
    famous_quests: List[FamousQuest] = field(default_factory=list)
    heirloom_items: List[EquipmentItem] = field(default_factory=list)
    active_bonuses: List[LegacyBonus] = field(default_factory=list)
    chronicles: List[ChronicleEntry] = field(default_factory=list)

    def has_bonus(self, bonus_id: str) -> bool:
        return any(bonus.id == bonus_id for bonus in self.active_bonuses)

    def legendary_item_count(self) -> int:
        return sum(1 for item in self.heirloom_items if item.rarity.value == "legendary")


@dataclass(frozen=True)
class SurvivingElements:
    heirloom_items: Tuple[EquipmentItem, ...]
    retired_adventurers_as_npcs: Tuple[RetiredAdventurer, ...]
    legacy_knowledge: Tuple[str, ...]
    territory_influence: Mapping[str, int]


@dataclass(frozen=True)
class NewGenerationPlan:
    starting_bonuses: Mapping[str, float]
    inherited_reputation: int
    inherited_gold: int
    starting_adventurers: Tuple[Adventurer, ...]


@dataclass(frozen=True)
class GenerationTransition:
    reason: TransitionReason
    description: str
    surviving_elements: SurvivingElements
    new_generation: NewGenerationPlan


@dataclass(frozen=True)
class LegacyMultipliers:
    experience: float = 1.0
    gold: float = 1.0
    reputation: float = 1.0
    skill: float = 1.0
    recruitment: float = 1.0

    @classmethod
    def from_mapping(cls, values: Mapping[str, float] | None) -> "LegacyMultipliers":
        values = values or {}
        kwargs: Dict[str, float] = {}
        for category in MULTIPLIER_CATEGORIES:
            raw = values.get(category.value, 1.0)
            try:
                kwargs[category.value] = float(raw)
            except (TypeError, ValueError):
                kwargs[category.value] = 1.0
        return cls(**kwargs)
