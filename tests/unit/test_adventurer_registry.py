import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from guildsim.application.services.registry_service import AdventurerRegistry, can_transition
from guildsim.domain.models.adventurer import Adventurer, AdventurerClass, AdventurerStatus, Personality
from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.recruit import Recruit


def _registry(*adventurers: Adventurer, max_adventurers: int = 10) -> AdventurerRegistry:
    return AdventurerRegistry(GuildState(adventurers=list(adventurers)), max_adventurers=max_adventurers)


class StatusMachineTests(unittest.TestCase):
    def test_allowed_and_rejected_transitions(self) -> None:
        self.assertTrue(can_transition(AdventurerStatus.AVAILABLE, AdventurerStatus.ON_QUEST))
        self.assertTrue(can_transition(AdventurerStatus.ON_QUEST, AdventurerStatus.AVAILABLE))
        self.assertTrue(can_transition(AdventurerStatus.AVAILABLE, AdventurerStatus.RETIRED))
        self.assertTrue(can_transition(AdventurerStatus.INJURED, AdventurerStatus.AVAILABLE))
        self.assertFalse(can_transition(AdventurerStatus.ON_QUEST, AdventurerStatus.RETIRED))
        self.assertFalse(can_transition(AdventurerStatus.ON_QUEST, AdventurerStatus.ON_QUEST))
        self.assertFalse(can_transition(AdventurerStatus.RETIRED, AdventurerStatus.AVAILABLE))

    def test_string_statuses_are_normalized(self) -> None:
        self.assertTrue(can_transition("available", "on quest"))

    def test_transition_returns_false_instead_of_raising(self) -> None:
        registry = _registry(Adventurer(id="a", name="Ari Vale", status=AdventurerStatus.ON_QUEST))

        self.assertFalse(registry.transition("a", AdventurerStatus.RETIRED))
        self.assertFalse(registry.transition("missing", AdventurerStatus.ON_QUEST))
        self.assertEqual(AdventurerStatus.ON_QUEST, registry.get("a").status)

    def test_assignment_moves_only_available_adventurers_once(self) -> None:
        registry = _registry(
            Adventurer(id="a", name="Ari Vale"),
            Adventurer(id="b", name="Bryn Holt", status=AdventurerStatus.INJURED),
        )

        moved = registry.assign_to_quest(["a", "b", "a"])

        self.assertEqual(["a"], moved)
        self.assertEqual(AdventurerStatus.ON_QUEST, registry.get("a").status)
        self.assertEqual(AdventurerStatus.INJURED, registry.get("b").status)
        self.assertEqual([], registry.assign_to_quest(["a"]))

    def test_release_returns_adventurers_to_available(self) -> None:
        registry = _registry(Adventurer(id="a", name="Ari Vale", status=AdventurerStatus.ON_QUEST))

        released = registry.release_from_quest(["a", "ghost"])

        self.assertEqual(["a"], [row.id for row in released])
        self.assertEqual([registry.get("a")], registry.list_available())

    def test_retirement_removes_from_roster(self) -> None:
        registry = _registry(Adventurer(id="a", name="Ari Vale"), Adventurer(id="b", name="Bryn Holt"))

        removed = registry.remove_for_retirement("a")

        self.assertEqual(AdventurerStatus.RETIRED, removed.status)
        self.assertEqual(["b"], [row.id for row in registry.list_all()])
        self.assertIsNone(registry.remove_for_retirement("a"))


class HiringTests(unittest.TestCase):
    def _recruit(self, recruit_id: str = "r1", level: int = 3) -> Recruit:
        return Recruit(
            id=recruit_id,
            name="Raven Quickblade",
            level=level,
            adventurer_class=AdventurerClass.ROGUE,
            cost=144,
            personality=Personality(courage=64),
            potential_skills={"stealth.sneaking": 6, "bogus": 3},
            descendant_of="adv_old",
        )

    def test_hired_recruit_becomes_a_novice_adventurer(self) -> None:
        registry = _registry()

        adventurer = registry.hire(self._recruit())

        self.assertEqual("r1", adventurer.id)
        self.assertEqual(AdventurerClass.ROGUE, adventurer.adventurer_class)
        self.assertEqual("Novice", adventurer.rank)
        self.assertEqual(30, adventurer.stats.strength)
        self.assertEqual(30, adventurer.stats.vitality)
        self.assertEqual(6, adventurer.skills.value("stealth.sneaking"))
        self.assertEqual(64, adventurer.personality.courage)
        self.assertEqual("adv_old", adventurer.descendant_of)
        self.assertEqual(AdventurerStatus.AVAILABLE, adventurer.status)

    def test_full_roster_rejects_hires(self) -> None:
        registry = _registry(Adventurer(id="a", name="Ari Vale"), max_adventurers=1)

        self.assertTrue(registry.is_full())
        self.assertIsNone(registry.hire(self._recruit()))
        self.assertEqual(1, len(registry.list_all()))

    def test_duplicate_ids_are_rejected(self) -> None:
        registry = _registry()
        registry.hire(self._recruit())

        self.assertIsNone(registry.hire(self._recruit()))


if __name__ == "__main__":
    unittest.main()
