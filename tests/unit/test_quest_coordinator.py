import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from guildsim.application.services.clock import SimulationClock
from guildsim.application.services.event_bus import EventBus
from guildsim.application.services.quest_service import QuestAssignmentCoordinator
from guildsim.application.services.random_source import ScriptedRandomSource
from guildsim.application.services.registry_service import AdventurerRegistry
from guildsim.application.services.relationship_service import RelationshipEngine
from guildsim.domain.events import AdventurerLeveledUp, QuestCompleted, QuestStarted
from guildsim.domain.models.adventurer import Adventurer, AdventurerClass, AdventurerStatus
from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.legacy import LegacyMultipliers
from guildsim.domain.models.quest import QuestStatus
from guildsim.domain.models.relationship import Relationship, RelationshipType
from guildsim.infrastructure.inmemory.inmemory_quest_catalog import InMemoryQuestCatalog


class QuestCoordinatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.state = GuildState(
            gold=0,
            adventurers=[
                Adventurer(id="a", name="Thrain Ironfist", adventurer_class=AdventurerClass.WARRIOR, level=1, experience=60),
                Adventurer(id="b", name="Raven Quickblade", adventurer_class=AdventurerClass.ROGUE, level=3),
                Adventurer(id="c", name="Elara Stormweaver", adventurer_class=AdventurerClass.MAGE, level=5),
            ],
        )
        self.clock = SimulationClock(0.0)
        self.bus = EventBus()
        self.seen = []
        for event_type in (QuestStarted, QuestCompleted, AdventurerLeveledUp):
            self.bus.subscribe(event_type, self.seen.append)
        self.registry = AdventurerRegistry(self.state)
        relationships = RelationshipEngine(ScriptedRandomSource([]), self.clock)
        self.coordinator = QuestAssignmentCoordinator(
            self.registry, relationships, InMemoryQuestCatalog(), self.clock, self.bus
        )

    def test_start_quest_sends_the_squad_out(self) -> None:
        result = self.coordinator.start_quest("goblin_camp", ["a", "b"])

        self.assertTrue(result.ok)
        self.assertEqual(AdventurerStatus.ON_QUEST, self.registry.get("a").status)
        self.assertEqual(AdventurerStatus.ON_QUEST, self.registry.get("b").status)
        active = self.state.find_active_quest("goblin_camp")
        self.assertEqual(("a", "b"), active.assigned_adventurers)
        self.assertEqual(1.0, active.synergy)
        self.assertIsInstance(self.seen[0], QuestStarted)

    def test_synergy_is_recorded_at_departure(self) -> None:
        self.registry.get("b").relationships.append(Relationship("c", RelationshipType.FRIENDSHIP, 100))

        self.coordinator.start_quest("bandit_ambush", ["b", "c"])

        self.assertAlmostEqual(1.2, self.state.find_active_quest("bandit_ambush").synergy)

    def test_unknown_or_running_quests_are_rejected(self) -> None:
        self.assertFalse(self.coordinator.start_quest("sky_castle", ["a"]).ok)

        self.coordinator.start_quest("goblin_camp", ["a"])
        again = self.coordinator.start_quest("goblin_camp", ["b"])

        self.assertFalse(again.ok)
        self.assertEqual(AdventurerStatus.AVAILABLE, self.registry.get("b").status)

    def test_under_level_member_blocks_the_whole_squad(self) -> None:
        result = self.coordinator.start_quest("dragon_hunt", ["c", "a"])

        self.assertFalse(result.ok)
        self.assertIn("needs level 5", result.messages[-1])
        self.assertEqual(AdventurerStatus.AVAILABLE, self.registry.get("c").status)
        self.assertEqual([], self.state.active_quests)

    def test_squad_with_nobody_available_is_rejected(self) -> None:
        self.registry.get("a").status = AdventurerStatus.INJURED

        result = self.coordinator.start_quest("goblin_camp", ["a", "ghost"])

        self.assertFalse(result.ok)
        self.assertEqual([], self.state.active_quests)

    def test_busy_members_are_skipped_when_others_can_go(self) -> None:
        self.coordinator.start_quest("goblin_camp", ["a"])

        result = self.coordinator.start_quest("bandit_ambush", ["a", "b"])

        self.assertTrue(result.ok)
        self.assertEqual(("b",), self.state.find_active_quest("bandit_ambush").assigned_adventurers)

    def test_completion_pays_out_and_levels_up(self) -> None:
        self.coordinator.start_quest("goblin_camp", ["a"])

        result = self.coordinator.complete_quest("goblin_camp")

        adventurer = self.registry.get("a")
        self.assertTrue(result.ok)
        self.assertEqual(25, self.state.gold)
        self.assertEqual(2, self.state.reputation)
        self.assertEqual(110, adventurer.experience)
        self.assertEqual(2, adventurer.level)
        self.assertEqual("Apprentice", adventurer.rank)
        self.assertEqual(1, adventurer.quests_completed)
        self.assertEqual(AdventurerStatus.AVAILABLE, adventurer.status)
        self.assertEqual(["goblin_camp"], self.state.completed_quests)
        self.assertEqual([], self.state.active_quests)
        completed = [event for event in self.seen if isinstance(event, QuestCompleted)]
        self.assertEqual(25, completed[0].gold_reward)
        self.assertTrue(any(isinstance(event, AdventurerLeveledUp) for event in self.seen))

    def test_quests_run_from_active_to_completed(self) -> None:
        self.assertEqual(["active", "completed"], [status.value for status in QuestStatus])
        self.coordinator.start_quest("goblin_camp", ["a"])
        active = self.state.find_active_quest("goblin_camp")
        self.assertEqual(QuestStatus.ACTIVE, active.status)

        self.coordinator.complete_quest("goblin_camp")

        self.assertEqual(QuestStatus.COMPLETED, active.status)

    def test_heirs_keep_their_rank_on_level_up(self) -> None:
        heir = self.registry.get("a")
        heir.rank = "Heir"
        self.coordinator.start_quest("goblin_camp", ["a"])

        self.coordinator.complete_quest("goblin_camp")

        self.assertEqual("Heir", heir.rank)
        self.assertEqual(2, heir.level)

    def test_rewards_apply_difficulty_and_legacy_multipliers(self) -> None:
        self.state.legacy_multipliers = LegacyMultipliers(gold=2.0, reputation=1.5, experience=1.1)
        self.coordinator.start_quest("dragon_hunt", ["c"])

        self.coordinator.complete_quest("dragon_hunt")

        # 5 * 25 * 2 (hard) * 2.0 gold multiplier
        self.assertEqual(500, self.state.gold)
        self.assertEqual(75, self.state.reputation)
        self.assertEqual(275, self.registry.get("c").experience)

    def test_completing_an_inactive_quest_fails_quietly(self) -> None:
        self.assertFalse(self.coordinator.complete_quest("goblin_camp").ok)

    def test_advance_completes_only_due_quests(self) -> None:
        self.coordinator.start_quest("goblin_camp", ["a"])
        self.coordinator.start_quest("bandit_ambush", ["b"])

        self.clock.advance_days(1)
        self.assertEqual([], self.coordinator.advance())

        self.clock.advance_days(1)
        results = self.coordinator.advance()

        self.assertEqual(1, len(results))
        self.assertEqual(["goblin_camp"], self.state.completed_quests)
        self.assertIsNotNone(self.state.find_active_quest("bandit_ambush"))

    def test_recommendations_respect_level_and_preferred_classes(self) -> None:
        quest = InMemoryQuestCatalog().get("bandit_ambush")

        self.assertEqual(["b"], [row.id for row in self.coordinator.recommended_adventurers(quest)])

    def test_available_quests_exclude_running_ones(self) -> None:
        self.coordinator.start_quest("goblin_camp", ["a"])

        ids = [quest.id for quest in self.coordinator.available_quests()]

        self.assertNotIn("goblin_camp", ids)
        self.assertIn("dragon_hunt", ids)


if __name__ == "__main__":
    unittest.main()
