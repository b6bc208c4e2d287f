from __future__ import annotations

import copy
from collections.abc import Callable, Sequence

from guildsim.domain.models.guild import GuildState
from guildsim.domain.models.legacy import GuildLegacy


def create_inmemory_atomic_persistor(guild_repo, legacy_repo) -> Callable[..., None]:
    """Save guild state and legacy together, restoring both repos if any step fails."""

    def _persist(
        state: GuildState,
        legacy: GuildLegacy,
        operations: Sequence[Callable[[object], None]] | None = None,
    ) -> None:
        snapshot = {
            "state": copy.deepcopy(getattr(guild_repo, "_state", None)),
            "legacy": copy.deepcopy(getattr(legacy_repo, "_legacy", None)),
        }
        try:
            guild_repo.save(state)
            legacy_repo.save(legacy)
            for operation in operations or ():
                operation(None)
        except Exception:
            if hasattr(guild_repo, "_state"):
                guild_repo._state = snapshot["state"]
            if hasattr(legacy_repo, "_legacy"):
                legacy_repo._legacy = snapshot["legacy"]
            raise

    return _persist
