from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from guildsim.domain.models.adventurer import Adventurer


class RetirementRole(str, Enum):
    TRAINER = "trainer"
    ADVISOR = "advisor"
    RECRUITER = "recruiter"
    QUARTERMASTER = "quartermaster"


class RetirementReason(str, Enum):
    AGE = "age"
    INJURY = "injury"
    ACHIEVEMENT = "achievement"
    RELATIONSHIP = "relationship"
    WEALTH = "wealth"
    VOLUNTARY = "voluntary"


@dataclass(frozen=True)
class RetirementBenefits:
    training_bonus: int = 0
    recruit_cost_reduction: int = 0
    quest_advice: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.training_bonus or self.recruit_cost_reduction or self.quest_advice)


@dataclass(frozen=True)
class SkillRequirement:
    skill: str
    min_value: int


@dataclass(frozen=True)
class TraitRequirement:
    trait: str
    min_value: int


@dataclass(frozen=True)
class RoleRequirements:
    min_level: int = 0
    min_quests_completed: int = 0
    skills: Tuple[SkillRequirement, ...] = ()
    personality: Tuple[TraitRequirement, ...] = ()


@dataclass(frozen=True)
class RetirementOption:
    role: RetirementRole
    name: str
    description: str
    requirements: RoleRequirements
    benefits: RetirementBenefits


@dataclass(frozen=True)
class RetirementEvent:
    id: str
    adventurer_id: str
    reason: RetirementReason
    description: str
    benefits: RetirementBenefits
    farewell_message: str


@dataclass(frozen=True)
class RetiredAdventurer:
    """Snapshot taken at retirement time. ``role`` is None when no role qualified."""

    id: str
    original_adventurer: Adventurer
    retirement_time: float
    role: Optional[RetirementRole]
    benefits: RetirementBenefits = field(default_factory=RetirementBenefits)
    reason: RetirementReason = RetirementReason.VOLUNTARY
    farewell_message: str = ""


@dataclass(frozen=True)
class RetirementParty:
    cost: int
    description: str
    morale_bonus: int
    reputation_gain: int
    guild_loyalty: int
