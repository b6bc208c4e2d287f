import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.legacy import GuildLegacy
from guildsim.infrastructure.inmemory.atomic_persistence import create_inmemory_atomic_persistor
from guildsim.infrastructure.inmemory.inmemory_guild_repo import InMemoryGuildRepository, InMemoryLegacyRepository
from guildsim.infrastructure.inmemory.inmemory_quest_catalog import InMemoryQuestCatalog


class AtomicPersistenceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.guild_repo = InMemoryGuildRepository(GuildState(gold=300))
        self.legacy_repo = InMemoryLegacyRepository(GuildLegacy(total_generations=2))
        self.persist = create_inmemory_atomic_persistor(self.guild_repo, self.legacy_repo)

    def test_state_and_legacy_are_saved_together(self) -> None:
        state = GuildState(gold=900, generation=3)
        legacy = GuildLegacy(total_generations=3)
        ran = []

        self.persist(state, legacy, operations=[ran.append])

        self.assertIs(state, self.guild_repo.load())
        self.assertIs(legacy, self.legacy_repo.load())
        self.assertEqual([None], ran)
        self.assertEqual(1, self.guild_repo.save_count)

    def test_failed_operation_restores_both_repositories(self) -> None:
        def fail(_):
            raise RuntimeError("write failed")

        with self.assertRaises(RuntimeError):
            self.persist(GuildState(gold=5, generation=3), GuildLegacy(total_generations=3), operations=[fail])

        self.assertEqual(300, self.guild_repo.load().gold)
        self.assertEqual(1, self.guild_repo.load().generation)
        self.assertEqual(2, self.legacy_repo.load().total_generations)

    def test_failed_legacy_save_restores_the_guild(self) -> None:
        class BrokenLegacyRepository(InMemoryLegacyRepository):
            def save(self, legacy):
                raise OSError("legacy store offline")

        legacy_repo = BrokenLegacyRepository()
        persist = create_inmemory_atomic_persistor(self.guild_repo, legacy_repo)

        with self.assertRaises(OSError):
            persist(GuildState(gold=5), GuildLegacy())

        self.assertEqual(300, self.guild_repo.load().gold)


class InMemoryRepositoryTests(unittest.TestCase):
    def test_new_guild_starts_with_configured_gold(self) -> None:
        state = InMemoryGuildRepository(starting_gold=2500).load()

        self.assertEqual(2500, state.gold)
        self.assertEqual(1, state.generation)
        self.assertEqual([], state.adventurers)

    def test_new_legacy_is_the_first_generation(self) -> None:
        legacy = InMemoryLegacyRepository().load()

        self.assertEqual(1, legacy.total_generations)
        self.assertEqual([], legacy.active_bonuses)

    def test_default_catalog_lists_the_four_quests(self) -> None:
        catalog = InMemoryQuestCatalog()

        self.assertEqual(
            ["goblin_camp", "dragon_hunt", "bandit_ambush", "treasure_hunt"],
            [quest.id for quest in catalog.list_all()],
        )
        self.assertEqual(5, catalog.get("dragon_hunt").duration_days)
        self.assertIsNone(catalog.get("sky_castle"))
        self.assertEqual(
            ["dragon_hunt", "treasure_hunt"],
            [quest.id for quest in catalog.list_available({"goblin_camp", "bandit_ambush"})],
        )


if __name__ == "__main__":
    unittest.main()
