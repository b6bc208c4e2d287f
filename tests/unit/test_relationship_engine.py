import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from guildsim.application.services.clock import SimulationClock
from guildsim.application.services.random_source import ScriptedRandomSource
from guildsim.application.services.relationship_service import RelationshipEngine
from guildsim.domain.models.adventurer import Adventurer, AdventurerStatus, Personality
from guildsim.domain.models.relationship import (
    Relationship,
    RelationshipChange,
    RelationshipEvent,
    RelationshipEventType,
    RelationshipType,
)


def _adventurer(adventurer_id: str, name: str, **personality) -> Adventurer:
    return Adventurer(id=adventurer_id, name=name, personality=Personality(**personality))


def _engine(values=(), fallback=None, start: float = 0.0):
    clock = SimulationClock(start)
    rng = ScriptedRandomSource(values, fallback=fallback)
    return RelationshipEngine(rng, clock), clock, rng


class RelationshipUpdateTests(unittest.TestCase):
    def test_update_is_noop_until_a_day_has_passed(self) -> None:
        engine, clock, rng = _engine()
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]

        self.assertEqual([], engine.update(roster))
        clock.advance(86399)
        self.assertEqual([], engine.update(roster))
        self.assertEqual(0, rng.consumed)

    def test_update_generates_bonding_event_for_average_personalities(self) -> None:
        engine, clock, _ = _engine([0.1, 0.0, 0.0, 0.5])
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]
        clock.advance_days(1)

        events = engine.update(roster)

        self.assertEqual(1, len(events))
        event = events[0]
        self.assertEqual(RelationshipEventType.BONDING, event.type)
        self.assertEqual(("a", "b"), event.participant_ids)
        self.assertEqual("relationship_86400_1", event.id)
        self.assertEqual(
            {("a", "b", 15), ("b", "a", 15)},
            {(row.adventurer_id, row.target_id, row.strength_change) for row in event.relationship_changes},
        )

    def test_second_update_on_the_same_day_is_gated(self) -> None:
        engine, clock, _ = _engine([0.9], fallback=0.9)
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]
        clock.advance_days(1)
        engine.update(roster)

        clock.advance(3600)

        self.assertEqual([], engine.update(roster))

    def test_update_ignores_adventurers_who_are_not_available(self) -> None:
        engine, clock, rng = _engine()
        busy = _adventurer("b", "Bryn Holt")
        busy.status = AdventurerStatus.ON_QUEST
        roster = [_adventurer("a", "Ari Vale"), busy]
        clock.advance_days(1)

        self.assertEqual([], engine.update(roster))
        self.assertEqual(0, rng.consumed)

    def test_strong_existing_pair_is_not_given_a_new_event(self) -> None:
        engine, clock, _ = _engine([0.1, 0.0, 0.0, 0.9])
        first = _adventurer("a", "Ari Vale")
        first.relationships.append(Relationship("b", RelationshipType.FRIENDSHIP, 75))
        roster = [first, _adventurer("b", "Bryn Holt")]
        clock.advance_days(1)

        self.assertEqual([], engine.update(roster))

    def test_strong_friendship_can_blossom_into_romance(self) -> None:
        engine, clock, _ = _engine([0.9, 0.1, 0.1])
        first = _adventurer("a", "Ari Vale")
        first.relationships.append(Relationship("b", RelationshipType.FRIENDSHIP, 65))
        second = _adventurer("b", "Bryn Holt")
        roster = [first, second]
        clock.advance_days(1)

        events = engine.update(roster)

        self.assertEqual(1, len(events))
        self.assertEqual(RelationshipEventType.ROMANCE, events[0].type)
        engine.apply_relationship_event(events[0], roster)
        edge = first.relationship_with("b")
        self.assertEqual(RelationshipType.ROMANCE, edge.type)
        self.assertEqual(85, edge.strength)
        self.assertIsNone(second.relationship_with("a"))

    def test_bitter_rivalry_escalates_into_conflict_with_morale_loss(self) -> None:
        engine, clock, _ = _engine([0.9, 0.1, 0.2])
        first = _adventurer("a", "Ari Vale")
        first.relationships.append(Relationship("b", RelationshipType.RIVALRY, 85))
        roster = [first, _adventurer("b", "Bryn Holt")]
        clock.advance_days(1)

        events = engine.update(roster)

        self.assertEqual(RelationshipEventType.CONFLICT, events[0].type)
        self.assertEqual(-10, events[0].morale_change)
        engine.apply_relationship_event(events[0], roster)
        self.assertEqual(95, first.relationship_with("b").strength)

    def test_weak_rivalry_can_resolve_into_friendship(self) -> None:
        engine, clock, _ = _engine([0.9, 0.1, 0.3])
        first = _adventurer("a", "Ari Vale")
        first.relationships.append(Relationship("b", RelationshipType.RIVALRY, 20))
        roster = [first, _adventurer("b", "Bryn Holt")]
        clock.advance_days(1)

        events = engine.update(roster)
        engine.apply_relationship_event(events[0], roster)

        edge = first.relationship_with("b")
        self.assertEqual(RelationshipEventType.FRIENDSHIP_DEEPENS, events[0].type)
        self.assertEqual(RelationshipType.FRIENDSHIP, edge.type)
        self.assertEqual(45, edge.strength)


class EventTypeSelectionTests(unittest.TestCase):
    def _pick(self, draw: float, first: Personality, second: Personality) -> RelationshipEventType:
        engine, _, _ = _engine([draw])
        return engine.determine_event_type(first, second)

    def test_team_players_bond_or_deepen_friendship(self) -> None:
        team = Personality(teamwork=80)
        self.assertEqual(RelationshipEventType.BONDING, self._pick(0.5, team, team))
        self.assertEqual(RelationshipEventType.FRIENDSHIP_DEEPENS, self._pick(0.8, team, team))

    def test_ambitious_pairs_become_rivals(self) -> None:
        driven = Personality(ambition=80)
        self.assertEqual(RelationshipEventType.RIVALRY_START, self._pick(0.5, driven, driven))
        self.assertEqual(RelationshipEventType.CONFLICT, self._pick(0.7, driven, driven))

    def test_loyal_and_brave_pairs_may_fall_in_love(self) -> None:
        devoted = Personality(loyalty=70, courage=60)
        self.assertEqual(RelationshipEventType.ROMANCE, self._pick(0.2, devoted, devoted))
        self.assertEqual(RelationshipEventType.BONDING, self._pick(0.5, devoted, devoted))

    def test_teamwork_rule_wins_over_ambition_rule(self) -> None:
        both = Personality(teamwork=90, ambition=90)
        self.assertEqual(RelationshipEventType.BONDING, self._pick(0.1, both, both))

    def test_default_pairs_mostly_bond(self) -> None:
        plain = Personality()
        self.assertEqual(RelationshipEventType.BONDING, self._pick(0.69, plain, plain))
        self.assertEqual(RelationshipEventType.CONFLICT, self._pick(0.75, plain, plain))


class ApplyRelationshipEventTests(unittest.TestCase):
    def _event(self, delta: int, description: str = "sparring", kind=RelationshipType.FRIENDSHIP) -> RelationshipEvent:
        return RelationshipEvent(
            id="evt",
            participant_ids=("a", "b"),
            type=RelationshipEventType.BONDING,
            description=description,
            relationship_changes=(RelationshipChange("a", "b", kind, delta),),
        )

    def test_strength_stays_within_bounds_for_any_delta(self) -> None:
        engine, _, _ = _engine()
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]

        engine.apply_relationship_event(self._event(500), roster)
        self.assertEqual(100, roster[0].relationship_with("b").strength)

        engine.apply_relationship_event(self._event(-900), roster)
        self.assertEqual(0, roster[0].relationship_with("b").strength)

    def test_negative_delta_on_new_edge_starts_from_zero(self) -> None:
        engine, _, _ = _engine()
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]

        engine.apply_relationship_event(self._event(-10, kind=RelationshipType.RIVALRY), roster)

        edge = roster[0].relationship_with("b")
        self.assertEqual(RelationshipType.RIVALRY, edge.type)
        self.assertEqual(0, edge.strength)

    def test_history_keeps_the_five_most_recent_descriptions(self) -> None:
        engine, _, _ = _engine()
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]

        for index in range(7):
            engine.apply_relationship_event(self._event(1, description=f"entry {index}"), roster)

        history = roster[0].relationship_with("b").history
        self.assertEqual(["entry 2", "entry 3", "entry 4", "entry 5", "entry 6"], history)

    def test_changes_for_unknown_adventurers_are_skipped(self) -> None:
        engine, _, _ = _engine()
        roster = [_adventurer("b", "Bryn Holt")]

        engine.apply_relationship_event(self._event(10), roster)

        self.assertEqual([], roster[0].relationships)


class TeamSynergyTests(unittest.TestCase):
    def _squad(self, kind: RelationshipType, strength: int):
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt"), _adventurer("c", "Cass Reed")]
        roster[0].relationships.append(Relationship("b", kind, strength))
        roster[0].relationships.append(Relationship("c", kind, strength))
        roster[1].relationships.append(Relationship("c", kind, strength))
        return roster

    def test_single_member_and_unknown_pairs_are_neutral(self) -> None:
        engine, _, _ = _engine()
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt")]

        self.assertEqual(1.0, engine.calculate_team_synergy(["a"], roster))
        self.assertEqual(1.0, engine.calculate_team_synergy([], roster))
        self.assertEqual(1.0, engine.calculate_team_synergy(["a", "b"], roster))

    def test_friendship_squad_beats_rivalry_squad(self) -> None:
        engine, _, _ = _engine()
        friends = self._squad(RelationshipType.FRIENDSHIP, 80)
        rivals = self._squad(RelationshipType.RIVALRY, 80)

        friendly = engine.calculate_team_synergy(["a", "b", "c"], friends)
        hostile = engine.calculate_team_synergy(["a", "b", "c"], rivals)

        self.assertAlmostEqual(1.16, friendly)
        self.assertAlmostEqual(0.92, hostile)
        self.assertGreater(friendly, hostile)

    def test_romance_is_weighted_above_friendship(self) -> None:
        engine, _, _ = _engine()
        roster = self._squad(RelationshipType.ROMANCE, 100)

        self.assertAlmostEqual(1.3, engine.calculate_team_synergy(["a", "b", "c"], roster))

    def test_pairs_without_edges_dilute_the_average(self) -> None:
        engine, _, _ = _engine()
        roster = [_adventurer("a", "Ari Vale"), _adventurer("b", "Bryn Holt"), _adventurer("c", "Cass Reed")]
        roster[0].relationships.append(Relationship("b", RelationshipType.FRIENDSHIP, 100))

        synergy = engine.calculate_team_synergy(["a", "b", "c"], roster)

        self.assertAlmostEqual(1.0 + 0.2 / 3, synergy)
        self.assertGreaterEqual(synergy, 0.5)
        self.assertLessEqual(synergy, 1.5)


class RelationshipHelperTests(unittest.TestCase):
    def test_summary_describes_each_edge_by_strength(self) -> None:
        engine, _, _ = _engine()
        first = _adventurer("a", "Ari Vale")
        second = _adventurer("b", "Bryn Holt")
        third = _adventurer("c", "Cass Reed")
        first.relationships.append(Relationship("b", RelationshipType.FRIENDSHIP, 85))
        first.relationships.append(Relationship("c", RelationshipType.ROMANCE, 45))

        summary = engine.get_relationship_summary(first, [first, second, third])

        self.assertEqual(
            [
                "Ari Vale has a very close friendship with Bryn Holt.",
                "Ari Vale has a good romantic partnership with Cass Reed.",
            ],
            summary,
        )

    def test_crisis_is_none_without_bitter_rivalries(self) -> None:
        engine, _, rng = _engine()
        first = _adventurer("a", "Ari Vale")
        first.relationships.append(Relationship("b", RelationshipType.RIVALRY, 70))

        self.assertIsNone(engine.trigger_relationship_crisis([first, _adventurer("b", "Bryn Holt")]))
        self.assertEqual(0, rng.consumed)

    def test_crisis_targets_a_bitter_rivalry(self) -> None:
        engine, _, _ = _engine([0.0])
        first = _adventurer("a", "Ari Vale")
        first.relationships.append(Relationship("b", RelationshipType.RIVALRY, 75))
        roster = [first, _adventurer("b", "Bryn Holt")]

        event = engine.trigger_relationship_crisis(roster)

        self.assertEqual(RelationshipEventType.CONFLICT, event.type)
        self.assertEqual(-20, event.morale_change)
        self.assertEqual(("a", "b"), event.participant_ids)
        self.assertTrue(event.id.startswith("crisis_"))


if __name__ == "__main__":
    unittest.main()
