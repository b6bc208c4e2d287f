from typing import Dict, List, Optional

from guildsim.domain.models.quest import Quest, QuestDifficulty
from guildsim.domain.repositories import QuestCatalog

DEFAULT_QUESTS = (
    Quest(
        id="goblin_camp",
        name="Clear Goblin Camp",
        description="A goblin camp has been established near the village. Clear it out to protect the locals.",
        reward=150,
        duration_days=2,
        min_level=1,
        preferred_classes=("Warrior", "Rogue"),
        difficulty=QuestDifficulty.EASY,
    ),
    Quest(
        id="dragon_hunt",
        name="Dragon Hunt",
        description="A dragon has been terrorizing the countryside. Hunt it down and claim the reward.",
        reward=500,
        duration_days=5,
        min_level=5,
        preferred_classes=("Warrior", "Mage"),
        difficulty=QuestDifficulty.HARD,
    ),
    Quest(
        id="bandit_ambush",
        name="Bandit Ambush",
        description="Bandits have set up an ambush on the main trade route. Deal with them.",
        reward=300,
        duration_days=3,
        min_level=3,
        preferred_classes=("Rogue", "Archer"),
        difficulty=QuestDifficulty.MEDIUM,
    ),
    Quest(
        id="treasure_hunt",
        name="Lost Treasure",
        description="Locate and retrieve the lost treasure from the ancient ruins.",
        reward=400,
        duration_days=4,
        min_level=4,
        preferred_classes=("Mage", "Rogue"),
        difficulty=QuestDifficulty.MEDIUM,
    ),
)


class InMemoryQuestCatalog(QuestCatalog):
    def __init__(self, quests: Optional[Dict[str, Quest]] = None):
        if quests is not None:
            self._quests = dict(quests)
            return
        self._quests = {quest.id: quest for quest in DEFAULT_QUESTS}

    def get(self, quest_id: str) -> Optional[Quest]:
        return self._quests.get(quest_id)

    def list_all(self) -> List[Quest]:
        return list(self._quests.values())
