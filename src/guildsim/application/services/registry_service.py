from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from guildsim.application.services.balance_tables import HIRED_STAT_PER_LEVEL, MAX_ADVENTURERS
from guildsim.domain.models.adventurer import Adventurer, AdventurerStatus, BaseStats, SkillTree
from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.recruit import Recruit

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS = {
    AdventurerStatus.AVAILABLE: {AdventurerStatus.ON_QUEST, AdventurerStatus.RETIRED, AdventurerStatus.INJURED},
    AdventurerStatus.ON_QUEST: {AdventurerStatus.AVAILABLE},
    AdventurerStatus.INJURED: {AdventurerStatus.AVAILABLE, AdventurerStatus.RETIRED},
    AdventurerStatus.RETIRED: set(),
}


def can_transition(current: AdventurerStatus, target: AdventurerStatus) -> bool:
    return AdventurerStatus.from_value(target) in _ALLOWED_TRANSITIONS.get(AdventurerStatus.from_value(current), set())


class AdventurerRegistry:
    """Owns the active roster of one guild state and its status machine."""

    def __init__(self, state: GuildState, *, max_adventurers: int = MAX_ADVENTURERS) -> None:
        self.state = state
        self.max_adventurers = int(max_adventurers)

    def bind(self, state: GuildState) -> None:
        self.state = state

    def get(self, adventurer_id: str) -> Optional[Adventurer]:
        return self.state.find_adventurer(adventurer_id)

    def list_all(self) -> List[Adventurer]:
        return list(self.state.adventurers)

    def list_by_status(self, status: AdventurerStatus | str) -> List[Adventurer]:
        wanted = AdventurerStatus.from_value(status)
        return [adventurer for adventurer in self.state.adventurers if adventurer.status == wanted]

    def list_available(self) -> List[Adventurer]:
        return self.list_by_status(AdventurerStatus.AVAILABLE)

    def is_full(self) -> bool:
        return len(self.state.adventurers) >= self.max_adventurers

    def transition(self, adventurer_id: str, target: AdventurerStatus | str) -> bool:
        adventurer = self.get(adventurer_id)
        if adventurer is None:
            return False
        wanted = AdventurerStatus.from_value(target)
        if not can_transition(adventurer.status, wanted):
            logger.debug("Rejected status change %s: %s -> %s", adventurer_id, adventurer.status.value, wanted.value)
            return False
        adventurer.status = wanted
        return True

    def assign_to_quest(self, adventurer_ids: Iterable[str]) -> List[str]:
        """Move every listed available adventurer to on_quest; returns the ids that moved."""

        moved: List[str] = []
        for adventurer_id in adventurer_ids:
            if adventurer_id in moved:
                continue
            if self.transition(adventurer_id, AdventurerStatus.ON_QUEST):
                moved.append(adventurer_id)
        return moved

    def release_from_quest(self, adventurer_ids: Iterable[str]) -> List[Adventurer]:
        released: List[Adventurer] = []
        for adventurer_id in adventurer_ids:
            adventurer = self.get(adventurer_id)
            if adventurer is None or adventurer.status != AdventurerStatus.ON_QUEST:
                continue
            adventurer.status = AdventurerStatus.AVAILABLE
            released.append(adventurer)
        return released

    def remove_for_retirement(self, adventurer_id: str) -> Optional[Adventurer]:
        adventurer = self.get(adventurer_id)
        if adventurer is None:
            return None
        if not self.transition(adventurer_id, AdventurerStatus.RETIRED):
            return None
        self.state.adventurers = [row for row in self.state.adventurers if row.id != adventurer_id]
        logger.info("Removed %s from the active roster", adventurer.name)
        return adventurer

    def add(self, adventurer: Adventurer) -> bool:
        if self.is_full() or self.get(adventurer.id) is not None:
            return False
        self.state.adventurers.append(adventurer)
        return True

    def hire(self, recruit: Recruit) -> Optional[Adventurer]:
        adventurer = adventurer_from_recruit(recruit)
        if not self.add(adventurer):
            return None
        return adventurer


def adventurer_from_recruit(recruit: Recruit) -> Adventurer:
    stat = int(recruit.level) * HIRED_STAT_PER_LEVEL
    return Adventurer(
        id=recruit.id,
        name=recruit.name,
        adventurer_class=recruit.adventurer_class,
        rank="Novice",
        level=recruit.level,
        experience=0,
        status=AdventurerStatus.AVAILABLE,
        stats=BaseStats(strength=stat, intelligence=stat, dexterity=stat, vitality=stat),
        personality=replace(recruit.personality),
        skills=SkillTree.from_potential(recruit.potential_skills),
        descendant_of=recruit.descendant_of,
    )
