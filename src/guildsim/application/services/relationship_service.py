from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from guildsim.application.services.balance_tables import (
    CRISIS_RIVALRY_THRESHOLD,
    NEW_RELATIONSHIP_CHANCE,
    RELATIONSHIP_EVOLUTION_CHANCE,
    RELATIONSHIP_UPDATE_INTERVAL_S,
    STRONG_RELATIONSHIP_THRESHOLD,
    SYNERGY_FRIENDSHIP_WEIGHT,
    SYNERGY_MAX,
    SYNERGY_MIN,
    SYNERGY_RIVALRY_WEIGHT,
    SYNERGY_ROMANCE_WEIGHT,
    clamp,
)
from guildsim.application.services.clock import Clock
from guildsim.application.services.random_source import RandomSource, chance, pick
from guildsim.domain.models.adventurer import Adventurer, AdventurerStatus, Personality
from guildsim.domain.models.relationship import (
    Relationship,
    RelationshipChange,
    RelationshipEvent,
    RelationshipEventType,
    RelationshipType,
    SkillBonus,
)

logger = logging.getLogger(__name__)

_SYNERGY_WEIGHTS = {
    RelationshipType.FRIENDSHIP: SYNERGY_FRIENDSHIP_WEIGHT,
    RelationshipType.ROMANCE: SYNERGY_ROMANCE_WEIGHT,
    RelationshipType.RIVALRY: SYNERGY_RIVALRY_WEIGHT,
}

_SUMMARY_LEVELS = (
    (80, "very close"),
    (60, "close"),
    (40, "good"),
    (20, "casual"),
)

_SUMMARY_NOUNS = {
    RelationshipType.FRIENDSHIP: "friendship",
    RelationshipType.ROMANCE: "romantic partnership",
    RelationshipType.RIVALRY: "rivalry",
}


def _find(adventurers: Iterable[Adventurer], adventurer_id: str) -> Optional[Adventurer]:
    for adventurer in adventurers:
        if adventurer.id == adventurer_id:
            return adventurer
    return None


def _mutual(first: Adventurer, second: Adventurer, relationship_type: RelationshipType, delta: int) -> tuple:
    return (
        RelationshipChange(first.id, second.id, relationship_type, delta),
        RelationshipChange(second.id, first.id, relationship_type, delta),
    )


class RelationshipEngine:
    """Generates, evolves and scores the guild's social graph.

    ``update`` is gated to once per ``update_interval`` seconds of the injected
    clock; every probability is drawn from the injected random source.
    """

    def __init__(
        self,
        rng: RandomSource,
        clock: Clock,
        *,
        update_interval: float = RELATIONSHIP_UPDATE_INTERVAL_S,
    ) -> None:
        self.rng = rng
        self.clock = clock
        self.update_interval = float(update_interval)
        self.last_update = float(clock.now())
        self._sequence = 0

    def _event_id(self, prefix: str) -> str:
        self._sequence += 1
        return f"{prefix}_{int(self.clock.now())}_{self._sequence}"

    def update(self, adventurers: Sequence[Adventurer]) -> List[RelationshipEvent]:
        now = float(self.clock.now())
        if now - self.last_update < self.update_interval:
            return []
        self.last_update = now

        events: List[RelationshipEvent] = []
        available = [adv for adv in adventurers if adv.status == AdventurerStatus.AVAILABLE]

        if len(available) >= 2 and chance(self.rng, NEW_RELATIONSHIP_CHANCE):
            event = self._generate_relationship_event(available)
            if event is not None:
                events.append(event)

        for adventurer in available:
            for relationship in list(adventurer.relationships):
                if not chance(self.rng, RELATIONSHIP_EVOLUTION_CHANCE):
                    continue
                evolved = self._evolve_relationship(adventurer, relationship, adventurers)
                if evolved is not None:
                    events.append(evolved)

        if events:
            logger.debug("Relationship update produced %d event(s)", len(events))
        return events

    def _generate_relationship_event(self, available: Sequence[Adventurer]) -> Optional[RelationshipEvent]:
        if len(available) < 2:
            return None
        first = pick(self.rng, available)
        others = [adv for adv in available if adv.id != first.id]
        if not others:
            return None
        second = pick(self.rng, others)

        existing = first.relationship_with(second.id)
        if existing is not None and existing.strength > STRONG_RELATIONSHIP_THRESHOLD:
            return None

        event_type = self.determine_event_type(first.personality, second.personality)
        return self._create_relationship_event(first, second, event_type)

    def determine_event_type(self, first: Personality, second: Personality) -> RelationshipEventType:
        if first.teamwork > 70 and second.teamwork > 70:
            if chance(self.rng, 0.7):
                return RelationshipEventType.BONDING
            return RelationshipEventType.FRIENDSHIP_DEEPENS

        if first.ambition > 75 and second.ambition > 75:
            if chance(self.rng, 0.6):
                return RelationshipEventType.RIVALRY_START
            return RelationshipEventType.CONFLICT

        if first.loyalty > 60 and second.loyalty > 60 and first.courage > 50 and second.courage > 50:
            if chance(self.rng, 0.3):
                return RelationshipEventType.ROMANCE
            return RelationshipEventType.BONDING

        if chance(self.rng, 0.7):
            return RelationshipEventType.BONDING
        return RelationshipEventType.CONFLICT

    def _create_relationship_event(
        self,
        first: Adventurer,
        second: Adventurer,
        event_type: RelationshipEventType,
    ) -> RelationshipEvent:
        participants = (first.id, second.id)
        event_id = self._event_id("relationship")

        if event_type == RelationshipEventType.ROMANCE:
            return RelationshipEvent(
                id=event_id,
                participant_ids=participants,
                type=event_type,
                description=f"{first.name} and {second.name} have developed romantic feelings for each other.",
                relationship_changes=_mutual(first, second, RelationshipType.ROMANCE, 25),
                skill_bonuses=(
                    SkillBonus(first.id, "teamwork", 10, 30),
                    SkillBonus(second.id, "teamwork", 10, 30),
                ),
            )

        if event_type == RelationshipEventType.RIVALRY_START:
            return RelationshipEvent(
                id=event_id,
                participant_ids=participants,
                type=event_type,
                description=(
                    f"{first.name} and {second.name} have developed a competitive rivalry, "
                    "constantly trying to outdo each other."
                ),
                relationship_changes=_mutual(first, second, RelationshipType.RIVALRY, 20),
                skill_bonuses=(
                    SkillBonus(first.id, "combat.battleRage", 5, 14),
                    SkillBonus(second.id, "combat.battleRage", 5, 14),
                ),
            )

        if event_type == RelationshipEventType.CONFLICT:
            return RelationshipEvent(
                id=event_id,
                participant_ids=participants,
                type=event_type,
                description=(
                    f"{first.name} and {second.name} had a heated argument about quest tactics, "
                    "straining their relationship."
                ),
                relationship_changes=_mutual(first, second, RelationshipType.RIVALRY, -10),
                morale_change=-5,
            )

        if event_type == RelationshipEventType.FRIENDSHIP_DEEPENS:
            return RelationshipEvent(
                id=event_id,
                participant_ids=participants,
                type=event_type,
                description=f"{first.name} and {second.name} fought back to back and their friendship grew deeper.",
                relationship_changes=_mutual(first, second, RelationshipType.FRIENDSHIP, 15),
            )

        return RelationshipEvent(
            id=event_id,
            participant_ids=participants,
            type=RelationshipEventType.BONDING,
            description=f"{first.name} and {second.name} shared stories over a campfire, growing closer as friends.",
            relationship_changes=_mutual(first, second, RelationshipType.FRIENDSHIP, 15),
        )

    def _evolve_relationship(
        self,
        adventurer: Adventurer,
        relationship: Relationship,
        all_adventurers: Sequence[Adventurer],
    ) -> Optional[RelationshipEvent]:
        target = _find(all_adventurers, relationship.target_id)
        if target is None:
            return None

        if (
            relationship.type == RelationshipType.FRIENDSHIP
            and relationship.strength > 60
            and chance(self.rng, 0.2)
        ):
            return RelationshipEvent(
                id=self._event_id("evolve"),
                participant_ids=(adventurer.id, target.id),
                type=RelationshipEventType.ROMANCE,
                description=f"{adventurer.name} and {target.name}'s friendship has blossomed into something deeper.",
                relationship_changes=(
                    RelationshipChange(adventurer.id, target.id, RelationshipType.ROMANCE, 20),
                ),
            )

        if relationship.type != RelationshipType.RIVALRY:
            return None

        if relationship.strength > 80 and chance(self.rng, 0.3):
            return RelationshipEvent(
                id=self._event_id("evolve"),
                participant_ids=(adventurer.id, target.id),
                type=RelationshipEventType.CONFLICT,
                description=(
                    f"The rivalry between {adventurer.name} and {target.name} has reached a breaking point, "
                    "causing tension in the guild."
                ),
                relationship_changes=(
                    RelationshipChange(adventurer.id, target.id, RelationshipType.RIVALRY, 10),
                ),
                morale_change=-10,
            )

        if relationship.strength < 30 and chance(self.rng, 0.4):
            return RelationshipEvent(
                id=self._event_id("evolve"),
                participant_ids=(adventurer.id, target.id),
                type=RelationshipEventType.FRIENDSHIP_DEEPENS,
                description=f"{adventurer.name} and {target.name} have resolved their differences and are becoming friends.",
                relationship_changes=(
                    RelationshipChange(adventurer.id, target.id, RelationshipType.FRIENDSHIP, 25),
                ),
            )

        return None

    def apply_relationship_event(self, event: RelationshipEvent, adventurers: Sequence[Adventurer]) -> None:
        for change in event.relationship_changes:
            adventurer = _find(adventurers, change.adventurer_id)
            if adventurer is None:
                continue
            relationship = adventurer.relationship_with(change.target_id)
            if relationship is None:
                relationship = Relationship(target_id=change.target_id, type=change.relationship_type, strength=0)
                adventurer.relationships.append(relationship)
            relationship.apply(change.relationship_type, change.strength_change, event.description)

    def calculate_team_synergy(self, adventurer_ids: Sequence[str], all_adventurers: Sequence[Adventurer]) -> float:
        """Squad multiplier in [0.5, 1.5].

        Pairs whose members are both on the roster are evaluated, looking up
        the edge held by the earlier squad member. Pairs without an edge
        contribute zero but still count toward the average.
        """

        ids = list(adventurer_ids)
        if len(ids) < 2:
            return 1.0

        total = 0.0
        evaluated = 0
        for i in range(len(ids) - 1):
            for j in range(i + 1, len(ids)):
                first = _find(all_adventurers, ids[i])
                second = _find(all_adventurers, ids[j])
                if first is None or second is None:
                    continue
                relationship = first.relationship_with(second.id)
                if relationship is not None:
                    total += _SYNERGY_WEIGHTS.get(relationship.type, 0.0) * relationship.strength / 100
                evaluated += 1

        average = total / evaluated if evaluated else 0.0
        return clamp(1.0 + average, SYNERGY_MIN, SYNERGY_MAX)

    def get_relationship_summary(self, adventurer: Adventurer, all_adventurers: Sequence[Adventurer]) -> List[str]:
        summaries: List[str] = []
        for relationship in adventurer.relationships:
            target = _find(all_adventurers, relationship.target_id)
            if target is None:
                continue
            level = "acquaintance"
            for threshold, label in _SUMMARY_LEVELS:
                if relationship.strength >= threshold:
                    level = label
                    break
            noun = _SUMMARY_NOUNS.get(relationship.type, "relationship")
            summaries.append(f"{adventurer.name} has a {level} {noun} with {target.name}.")
        return summaries

    def trigger_relationship_crisis(self, adventurers: Sequence[Adventurer]) -> Optional[RelationshipEvent]:
        problematic: List[tuple[Adventurer, Adventurer]] = []
        for adventurer in adventurers:
            for relationship in adventurer.relationships:
                if relationship.type != RelationshipType.RIVALRY or relationship.strength <= CRISIS_RIVALRY_THRESHOLD:
                    continue
                target = _find(adventurers, relationship.target_id)
                if target is not None:
                    problematic.append((adventurer, target))

        if not problematic:
            return None

        first, second = pick(self.rng, problematic)
        return RelationshipEvent(
            id=self._event_id("crisis"),
            participant_ids=(first.id, second.id),
            type=RelationshipEventType.CONFLICT,
            description=(
                f"The intense rivalry between {first.name} and {second.name} is causing major disruption "
                "in the guild. Some adventurers are taking sides!"
            ),
            relationship_changes=(
                RelationshipChange(first.id, second.id, RelationshipType.RIVALRY, 15),
            ),
            morale_change=-20,
        )
