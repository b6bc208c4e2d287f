import logging
import os

from guildsim.application.services.balance_tables import RELATIONSHIP_UPDATE_INTERVAL_S
from guildsim.application.services.clock import SimulationClock, SystemClock
from guildsim.application.services.event_bus import EventBus
from guildsim.application.services.legacy_service import LegacyEngine
from guildsim.application.services.random_source import derive_random_source
from guildsim.application.services.relationship_service import RelationshipEngine
from guildsim.application.services.retirement_service import RetirementEngine
from guildsim.application.services.simulation_service import GuildSimulation
from guildsim.domain.models.adventurer import Adventurer, AdventurerClass, BaseStats, Personality
from guildsim.infrastructure.inmemory.atomic_persistence import create_inmemory_atomic_persistor
from guildsim.infrastructure.inmemory.inmemory_guild_repo import InMemoryGuildRepository, InMemoryLegacyRepository
from guildsim.infrastructure.inmemory.inmemory_quest_catalog import InMemoryQuestCatalog

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed %s=%r", name, raw)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed %s=%r", name, raw)
        return default


def configure_logging() -> None:
    level_name = os.getenv("GUILD_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _founding_roster():
    return [
        Adventurer(
            id="adv_001",
            name="Thrain Ironfist",
            adventurer_class=AdventurerClass.WARRIOR,
            rank="Journeyman",
            level=3,
            experience=150,
            stats=BaseStats(strength=35, intelligence=15, dexterity=20, vitality=30),
            personality=Personality(courage=80, loyalty=75, ambition=55, teamwork=72, greed=30),
        ),
        Adventurer(
            id="adv_002",
            name="Elara Stormweaver",
            adventurer_class=AdventurerClass.MAGE,
            rank="Apprentice",
            level=2,
            experience=75,
            stats=BaseStats(strength=10, intelligence=30, dexterity=15, vitality=20),
            personality=Personality(courage=60, loyalty=68, ambition=70, teamwork=74, greed=40),
        ),
    ]


def create_simulation(*, seed=None, founding_roster: bool = True) -> GuildSimulation:
    world_seed = _env_int("GUILD_SEED", 1) if seed is None else int(seed)
    interval = _env_float("GUILD_RELATIONSHIP_INTERVAL_S", float(RELATIONSHIP_UPDATE_INTERVAL_S))
    starting_gold = _env_int("GUILD_STARTING_GOLD", 1000)

    clock_mode = os.getenv("GUILD_CLOCK", "simulated").strip().lower()
    if clock_mode == "system":
        start = SystemClock().now()
    else:
        start = 0.0
    # Day ticks always move the simulated clock; system mode only anchors its start.
    clock = SimulationClock(start)

    guild_repo = InMemoryGuildRepository(starting_gold=starting_gold)
    legacy_repo = InMemoryLegacyRepository()
    if founding_roster:
        guild_repo.load().adventurers.extend(_founding_roster())

    event_bus = EventBus()
    simulation = GuildSimulation(
        guild_repo,
        legacy_repo,
        InMemoryQuestCatalog(),
        clock=clock,
        relationships=RelationshipEngine(
            derive_random_source("relationships", {"seed": world_seed}),
            clock,
            update_interval=interval,
        ),
        retirement=RetirementEngine(derive_random_source("retirement", {"seed": world_seed}), clock),
        legacy=LegacyEngine(derive_random_source("legacy", {"seed": world_seed}), clock),
        recruit_rng=derive_random_source("recruits", {"seed": world_seed}),
        event_bus=event_bus,
        persist=create_inmemory_atomic_persistor(guild_repo, legacy_repo),
    )
    logger.debug("Created guild simulation seed=%s interval=%s clock=%s", world_seed, interval, clock_mode)
    return simulation
