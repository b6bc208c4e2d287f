from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from guildsim.domain.models.adventurer import Adventurer
from guildsim.domain.models.legacy import LegacyMultipliers
from guildsim.domain.models.quest import ActiveQuest
from guildsim.domain.models.recruit import Recruit
from guildsim.domain.models.retirement import RetiredAdventurer


@dataclass(frozen=True)
class Campaign:
    id: str
    name: str
    completed: bool = False


@dataclass(frozen=True)
class WorldEvent:
    id: str
    name: str
    active: bool = False


@dataclass(frozen=True)
class Territory:
    id: str
    name: str
    controlled: bool = False
    influence_level: int = 0


@dataclass
class GuildState:
    gold: int = 1000
    reputation: int = 0
    level: int = 1
    morale: int = 100
    generation: int = 1
    adventurers: List[Adventurer] = field(default_factory=list)
    active_quests: List[ActiveQuest] = field(default_factory=list)
    completed_quests: List[str] = field(default_factory=list)
    recruits: List[Recruit] = field(default_factory=list)
    retired_adventurers: List[RetiredAdventurer] = field(default_factory=list)
    legacy_multipliers: LegacyMultipliers = field(default_factory=LegacyMultipliers)
    materials: Dict[str, int] = field(default_factory=dict)
    facilities: List[Any] = field(default_factory=list)
    campaigns: List[Campaign] = field(default_factory=list)
    world_events: List[WorldEvent] = field(default_factory=list)
    rival_guilds: List[Any] = field(default_factory=list)
    territories: List[Territory] = field(default_factory=list)
    active_votes: List[Any] = field(default_factory=list)
    current_season: str = "spring"
    days_elapsed: int = 0

    def find_adventurer(self, adventurer_id: str) -> Adventurer | None:
        for adventurer in self.adventurers:
            if adventurer.id == adventurer_id:
                return adventurer
        return None

    def find_active_quest(self, quest_id: str) -> ActiveQuest | None:
        for active in self.active_quests:
            if active.id == quest_id:
                return active
        return None
