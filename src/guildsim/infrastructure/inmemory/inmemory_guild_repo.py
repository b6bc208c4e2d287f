from typing import Optional

from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.legacy import GuildLegacy
from guildsim.domain.repositories import GuildRepository, LegacyRepository


class InMemoryGuildRepository(GuildRepository):
    def __init__(self, state: Optional[GuildState] = None, *, starting_gold: int = 1000):
        self._state = state if state is not None else GuildState(gold=int(starting_gold))
        self.save_count = 0

    def load(self) -> GuildState:
        return self._state

    def save(self, state: GuildState) -> None:
        self._state = state
        self.save_count += 1


class InMemoryLegacyRepository(LegacyRepository):
    def __init__(self, legacy: Optional[GuildLegacy] = None):
        self._legacy = legacy if legacy is not None else GuildLegacy()

    def load(self) -> GuildLegacy:
        return self._legacy

    def save(self, legacy: GuildLegacy) -> None:
        self._legacy = legacy
