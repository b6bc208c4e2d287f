from dataclasses import dataclass


@dataclass
class DayAdvanced:
    day_after: int
    now: float


@dataclass
class QuestStarted:
    quest_id: str
    adventurer_ids: tuple
    synergy: float


@dataclass
class QuestCompleted:
    quest_id: str
    adventurer_ids: tuple
    gold_reward: int
    reputation_gain: int
    xp_reward: int


@dataclass
class AdventurerLeveledUp:
    adventurer_id: str
    from_level: int
    to_level: int


@dataclass
class RelationshipEventApplied:
    event_id: str
    event_type: str
    participant_ids: tuple
    morale_change: int


@dataclass
class AdventurerRetired:
    adventurer_id: str
    name: str
    adventurer_class: str
    level: int
    quests_completed: int
    role: str | None
    reason: str


@dataclass
class LegacyBonusUnlocked:
    bonus_id: str
    category: str
    value: float
    generation: int


@dataclass
class GenerationAdvanced:
    from_generation: int
    to_generation: int
    reason: str
    inherited_gold: int
    inherited_reputation: int
    heir_count: int
