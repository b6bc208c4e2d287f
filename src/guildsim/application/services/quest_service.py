from __future__ import annotations

import logging
import math
from typing import List, Sequence

from guildsim.application.dtos import ActionResult
from guildsim.application.services.balance_tables import (
    HEIR_RANK,
    SECONDS_PER_DAY,
    XP_PER_LEVEL,
    quest_base_reward,
    quest_xp_reward,
    rank_for_level,
)
from guildsim.application.services.clock import Clock
from guildsim.application.services.event_bus import EventBus
from guildsim.application.services.registry_service import AdventurerRegistry
from guildsim.application.services.relationship_service import RelationshipEngine
from guildsim.domain.events import AdventurerLeveledUp, QuestCompleted, QuestStarted
from guildsim.domain.models.adventurer import Adventurer, AdventurerStatus
from guildsim.domain.models.quest import ActiveQuest, Quest, QuestStatus
from guildsim.domain.repositories import QuestCatalog

logger = logging.getLogger(__name__)


class QuestAssignmentCoordinator:
    def __init__(
        self,
        registry: AdventurerRegistry,
        relationships: RelationshipEngine,
        catalog: QuestCatalog,
        clock: Clock,
        event_bus: EventBus,
    ) -> None:
        self.registry = registry
        self.relationships = relationships
        self.catalog = catalog
        self.clock = clock
        self.event_bus = event_bus

    @property
    def state(self):
        return self.registry.state

    def available_quests(self) -> List[Quest]:
        return self.catalog.list_available({active.id for active in self.state.active_quests})

    def recommended_adventurers(self, quest: Quest) -> List[Adventurer]:
        preferred = set(quest.preferred_classes)
        return [
            adventurer
            for adventurer in self.registry.list_available()
            if adventurer.level >= quest.min_level
            and (not preferred or adventurer.adventurer_class.value in preferred)
        ]

    def can_start_quest(self, quest_id: str, adventurer_ids: Sequence[str]) -> ActionResult:
        quest = self.catalog.get(quest_id)
        if quest is None:
            return ActionResult(messages=[f"Unknown quest: {quest_id}"], ok=False)
        if self.state.find_active_quest(quest.id) is not None:
            return ActionResult(messages=[f"{quest.name} is already under way."], ok=False)

        messages: List[str] = []
        ready = 0
        for adventurer_id in dict.fromkeys(adventurer_ids):
            adventurer = self.registry.get(adventurer_id)
            if adventurer is None:
                messages.append(f"No adventurer with id {adventurer_id}.")
                continue
            if adventurer.status != AdventurerStatus.AVAILABLE:
                messages.append(f"{adventurer.name} is {adventurer.status.value} and cannot join.")
                continue
            if adventurer.level < quest.min_level:
                messages.append(f"{adventurer.name} needs level {quest.min_level} for {quest.name}.")
                return ActionResult(messages=messages, ok=False)
            ready += 1

        if ready == 0:
            messages.append(f"No available adventurers were assigned to {quest.name}.")
            return ActionResult(messages=messages, ok=False)
        return ActionResult(messages=messages, ok=True)

    def start_quest(self, quest_id: str, adventurer_ids: Sequence[str]) -> ActionResult:
        check = self.can_start_quest(quest_id, adventurer_ids)
        if not check.ok:
            return check

        quest = self.catalog.get(quest_id)
        assigned = self.registry.assign_to_quest(adventurer_ids)
        synergy = self.relationships.calculate_team_synergy(assigned, self.registry.list_all())
        active = ActiveQuest(
            quest=quest,
            assigned_adventurers=tuple(assigned),
            started_at=float(self.clock.now()),
            synergy=synergy,
        )
        self.state.active_quests.append(active)

        names = [self.registry.get(adventurer_id).name for adventurer_id in assigned]
        messages = list(check.messages)
        messages.append(f"{', '.join(names)} set out on {quest.name} (synergy {synergy:.2f}).")
        logger.debug("Started quest %s with %s", quest.id, assigned)
        self.event_bus.publish(QuestStarted(quest_id=quest.id, adventurer_ids=tuple(assigned), synergy=synergy))
        return ActionResult(messages=messages, ok=True)

    def complete_quest(self, quest_id: str) -> ActionResult:
        active = self.state.find_active_quest(quest_id)
        if active is None:
            return ActionResult(messages=[f"{quest_id} is not an active quest."], ok=False)

        quest = active.quest
        multipliers = self.state.legacy_multipliers
        reward = int(
            math.floor(
                quest_base_reward(quest.min_level, quest.difficulty.value)
                * float(active.synergy)
                * float(multipliers.gold)
            )
        )
        reputation = int(math.floor(reward / 10 * float(multipliers.reputation)))
        xp = int(math.floor(quest_xp_reward(quest.min_level) * float(multipliers.experience)))

        messages = [f"{quest.name} completed: +{reward} gold, +{reputation} reputation."]
        level_ups: List[AdventurerLeveledUp] = []
        for adventurer in self.registry.release_from_quest(active.assigned_adventurers):
            adventurer.experience += xp
            adventurer.quests_completed += 1
            if adventurer.experience >= adventurer.level * XP_PER_LEVEL:
                from_level = adventurer.level
                adventurer.level += 1
                if adventurer.rank != HEIR_RANK:
                    adventurer.rank = rank_for_level(adventurer.level)
                level_ups.append(AdventurerLeveledUp(adventurer.id, from_level, adventurer.level))
                messages.append(f"{adventurer.name} reached level {adventurer.level}.")

        self.state.gold += reward
        self.state.reputation += reputation
        self.state.completed_quests.append(quest.id)
        active.status = QuestStatus.COMPLETED
        self.state.active_quests = [row for row in self.state.active_quests if row.id != quest.id]

        self.event_bus.publish(
            QuestCompleted(
                quest_id=quest.id,
                adventurer_ids=tuple(active.assigned_adventurers),
                gold_reward=reward,
                reputation_gain=reputation,
                xp_reward=xp,
            )
        )
        self.event_bus.publish_all(level_ups)
        return ActionResult(messages=messages, ok=True)

    def advance(self, now: float | None = None) -> List[ActionResult]:
        """Complete every active quest whose duration has elapsed by ``now``."""

        current = float(self.clock.now() if now is None else now)
        due = [active.id for active in self.state.active_quests if active.due_at(SECONDS_PER_DAY) <= current]
        return [self.complete_quest(quest_id) for quest_id in due]
