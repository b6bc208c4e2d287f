from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class ActionResult:
    messages: List[str] = field(default_factory=list)
    ok: bool = True


@dataclass
class AdventurerView:
    id: str
    name: str
    class_name: str
    rank: str
    level: int
    status: str
    quests_completed: int
    years_in_guild: int
    retirement_eligible: bool


@dataclass
class ActiveQuestView:
    quest_id: str
    name: str
    adventurer_names: List[str]
    synergy: float
    days_remaining: float


@dataclass
class RetiredAdventurerView:
    name: str
    role: Optional[str]
    reason: str
    farewell_message: str


@dataclass
class GuildSummaryView:
    generation: int
    day: int
    gold: int
    reputation: int
    level: int
    morale: int
    adventurers: List[AdventurerView] = field(default_factory=list)
    active_quests: List[ActiveQuestView] = field(default_factory=list)
    retired: List[RetiredAdventurerView] = field(default_factory=list)
    multipliers: Dict[str, float] = field(default_factory=dict)
    legacy_bonuses: List[str] = field(default_factory=list)
    chronicle_count: int = 0
