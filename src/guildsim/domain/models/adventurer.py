from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from guildsim.domain.models.relationship import Relationship, RelationshipType


class AdventurerClass(str, Enum):
    WARRIOR = "Warrior"
    MAGE = "Mage"
    ROGUE = "Rogue"
    ARCHER = "Archer"

    @classmethod
    def from_value(cls, value: "AdventurerClass | str | None") -> "AdventurerClass":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return cls.WARRIOR


class AdventurerStatus(str, Enum):
    AVAILABLE = "available"
    ON_QUEST = "on_quest"
    RETIRED = "retired"
    INJURED = "injured"

    @classmethod
    def from_value(cls, value: "AdventurerStatus | str | None") -> "AdventurerStatus":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.AVAILABLE


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    def upgraded(self) -> "Rarity":
        order = list(Rarity)
        index = order.index(self)
        return order[min(index + 1, len(order) - 1)]


PERSONALITY_TRAITS = ("courage", "loyalty", "ambition", "teamwork", "greed")

SKILL_CATEGORIES: Dict[str, tuple[str, ...]] = {
    "combat": ("weaponMastery", "tacticalKnowledge", "battleRage"),
    "magic": ("spellPower", "manaEfficiency", "elementalMastery"),
    "stealth": ("lockpicking", "sneaking", "assassination"),
    "survival": ("tracking", "herbalism", "animalHandling"),
}


@dataclass
class BaseStats:
    strength: int = 10
    intelligence: int = 10
    dexterity: int = 10
    vitality: int = 10

    def scaled(self, factor: float) -> "BaseStats":
        """Return a copy with every stat multiplied by ``factor`` and floored."""

        return BaseStats(
            strength=max(0, int(self.strength * factor)),
            intelligence=max(0, int(self.intelligence * factor)),
            dexterity=max(0, int(self.dexterity * factor)),
            vitality=max(0, int(self.vitality * factor)),
        )


@dataclass
class Personality:
    courage: float = 50
    loyalty: float = 50
    ambition: float = 50
    teamwork: float = 50
    greed: float = 50

    def __post_init__(self) -> None:
        for trait in PERSONALITY_TRAITS:
            try:
                value = float(getattr(self, trait))
            except (TypeError, ValueError):
                value = 50.0
            setattr(self, trait, max(0.0, min(100.0, value)))

    def trait(self, name: str) -> float:
        if name not in PERSONALITY_TRAITS:
            return 0.0
        return float(getattr(self, name))


@dataclass
class SkillTree:
    combat: Dict[str, int] = field(default_factory=dict)
    magic: Dict[str, int] = field(default_factory=dict)
    stealth: Dict[str, int] = field(default_factory=dict)
    survival: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for category, skills in SKILL_CATEGORIES.items():
            raw = getattr(self, category)
            raw = raw if isinstance(raw, dict) else {}
            normalized: Dict[str, int] = {}
            for skill in skills:
                try:
                    normalized[skill] = max(0, int(raw.get(skill, 0) or 0))
                except (TypeError, ValueError):
                    normalized[skill] = 0
            setattr(self, category, normalized)

    def value(self, skill_path: str) -> int:
        """Look up a ``"<category>.<skill>"`` path; unknown paths read as zero."""

        parts = str(skill_path or "").split(".")
        if len(parts) != 2:
            return 0
        category, skill = parts
        if category not in SKILL_CATEGORIES:
            return 0
        return int(getattr(self, category).get(skill, 0) or 0)

    def items(self):
        for category in SKILL_CATEGORIES:
            for skill, value in getattr(self, category).items():
                yield category, skill, int(value)

    def scaled(self, factor: float) -> "SkillTree":
        scaled = {category: {} for category in SKILL_CATEGORIES}
        for category, skill, value in self.items():
            scaled[category][skill] = int(value * factor)
        return SkillTree(**scaled)

    @classmethod
    def from_potential(cls, potential: Dict[str, int]) -> "SkillTree":
        seeded: Dict[str, Dict[str, int]] = {category: {} for category in SKILL_CATEGORIES}
        for path, value in (potential or {}).items():
            parts = str(path).split(".")
            if len(parts) != 2 or parts[0] not in SKILL_CATEGORIES:
                continue
            seeded[parts[0]][parts[1]] = int(value)
        return cls(**seeded)


@dataclass
class EquipmentItem:
    id: str
    name: str
    slot: str
    rarity: Rarity = Rarity.COMMON
    stats: Dict[str, int] = field(default_factory=dict)
    crafted: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.rarity, Rarity):
            try:
                self.rarity = Rarity(str(self.rarity).strip().lower())
            except ValueError:
                self.rarity = Rarity.COMMON


@dataclass
class Equipment:
    weapon: Optional[EquipmentItem] = None
    armor: Optional[EquipmentItem] = None
    accessory: Optional[EquipmentItem] = None


@dataclass
class Adventurer:
    id: str
    name: str
    adventurer_class: AdventurerClass = AdventurerClass.WARRIOR
    rank: str = "Novice"
    level: int = 1
    experience: int = 0
    status: AdventurerStatus = AdventurerStatus.AVAILABLE
    stats: BaseStats = field(default_factory=BaseStats)
    personality: Personality = field(default_factory=Personality)
    skills: SkillTree = field(default_factory=SkillTree)
    equipment: Equipment = field(default_factory=Equipment)
    relationships: List[Relationship] = field(default_factory=list)
    quests_completed: int = 0
    years_in_guild: int = 0
    retirement_eligible: bool = False
    descendant_of: Optional[str] = None
    # Guild day the adventurer joined the roster; anniversaries count from here.
    joined_day: int = 0

    def __post_init__(self) -> None:
        self.adventurer_class = AdventurerClass.from_value(self.adventurer_class)
        self.status = AdventurerStatus.from_value(self.status)
        self.level = max(1, int(self.level or 1))
        self.experience = max(0, int(self.experience or 0))
        self.quests_completed = max(0, int(self.quests_completed or 0))
        self.years_in_guild = max(0, int(self.years_in_guild or 0))
        self.joined_day = max(0, int(self.joined_day or 0))

    def relationship_with(self, target_id: str) -> Optional[Relationship]:
        for relationship in self.relationships:
            if relationship.target_id == target_id:
                return relationship
        return None

    def has_romance(self, min_strength: int = 0) -> bool:
        return any(
            rel.type == RelationshipType.ROMANCE and rel.strength >= min_strength
            for rel in self.relationships
        )
