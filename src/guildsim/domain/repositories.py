from abc import ABC, abstractmethod
from typing import List, Optional

from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.legacy import GuildLegacy
from guildsim.domain.models.quest import Quest


class GuildRepository(ABC):
    @abstractmethod
    def load(self) -> GuildState:
        raise NotImplementedError

    @abstractmethod
    def save(self, state: GuildState) -> None:
        raise NotImplementedError


class LegacyRepository(ABC):
    @abstractmethod
    def load(self) -> GuildLegacy:
        raise NotImplementedError

    @abstractmethod
    def save(self, legacy: GuildLegacy) -> None:
        raise NotImplementedError


class QuestCatalog(ABC):
    @abstractmethod
    def get(self, quest_id: str) -> Optional[Quest]:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[Quest]:
        raise NotImplementedError

    def list_available(self, active_ids: set[str]) -> List[Quest]:
        """Catalog quests that are not currently running."""
        return [quest for quest in self.list_all() if quest.id not in active_ids]
