from __future__ import annotations

import copy
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from guildsim.application.services.balance_tables import (
    CHRONICLE_EVENT_LIMIT,
    HEIR_LEVEL_FACTOR,
    HEIR_LIMIT,
    HEIR_LINEAGE_NAME_CHANCE,
    HEIR_RANK,
    HEIR_SKILL_FACTOR,
    HEIR_STAT_FACTOR,
    HEIRLOOM_LIMIT,
    HEIRLOOM_STAT_FACTOR,
    INHERITED_GOLD_FACTOR,
    INHERITED_REPUTATION_FACTOR,
    LEGACY_KNOWLEDGE_LIMIT,
    LEGENDARY_ANCESTOR_LEVEL,
    LEGENDARY_ANCESTOR_QUESTS,
    LEGENDARY_RECORD_LEVEL,
    LEGENDARY_RECORD_QUESTS,
    NPC_CARRYOVER_LIMIT,
    TERRITORY_CARRYOVER_FACTOR,
    TERRITORY_CARRYOVER_MIN_INFLUENCE,
    ordinal_suffix,
)
from guildsim.application.services.clock import Clock
from guildsim.application.services.inheritance import inherit_personality
from guildsim.application.services.name_tables import heir_name
from guildsim.application.services.random_source import RandomSource, pick
from guildsim.domain.models.adventurer import Adventurer, AdventurerStatus, Equipment, EquipmentItem, Rarity
from guildsim.domain.models.guild import GuildState, Territory
from guildsim.domain.models.legacy import (
    MULTIPLIER_CATEGORIES,
    BonusCategory,
    ChronicleEntry,
    ChronicleStats,
    FamousQuest,
    GenerationTransition,
    GuildLegacy,
    LegacyBonus,
    LegacyMultipliers,
    LegendaryAdventurer,
    NewGenerationPlan,
    SurvivingElements,
    TransitionReason,
    UnlockCondition,
)
from guildsim.domain.models.quest import Quest

logger = logging.getLogger(__name__)

LEGACY_BONUSES: Tuple[LegacyBonus, ...] = (
    LegacyBonus(
        id="founding_wisdom",
        name="Founding Wisdom",
        description="The wisdom of your guild's founders guides new generations.",
        category=BonusCategory.EXPERIENCE,
        value=1.1,
        unlock_condition=UnlockCondition(generation=2),
    ),
    LegacyBonus(
        id="golden_legacy",
        name="Golden Legacy",
        description="Your guild's reputation for success attracts better paying clients.",
        category=BonusCategory.GOLD,
        value=1.15,
        unlock_condition=UnlockCondition(total_gold_earned=50000),
    ),
    LegacyBonus(
        id="heroic_reputation",
        name="Heroic Reputation",
        description="Stories of your guild's heroic deeds spread far and wide.",
        category=BonusCategory.REPUTATION,
        value=1.2,
        unlock_condition=UnlockCondition(total_quests_completed=200),
    ),
    LegacyBonus(
        id="master_trainers",
        name="Master Trainers",
        description="Retired masters provide exceptional training for new recruits.",
        category=BonusCategory.SKILL,
        value=1.25,
        unlock_condition=UnlockCondition(retired_adventurers=10),
    ),
    LegacyBonus(
        id="legendary_connections",
        name="Legendary Connections",
        description="Access to exclusive quests through legendary connections.",
        category=BonusCategory.QUEST_ACCESS,
        value=1,
        unlock_condition=UnlockCondition(total_reputation_gained=5000),
    ),
    LegacyBonus(
        id="renowned_guild",
        name="Renowned Guild",
        description="Your guild's fame attracts higher quality recruits.",
        category=BonusCategory.RECRUITMENT,
        value=1.3,
        unlock_condition=UnlockCondition(generation=3, total_quests_completed=300),
    ),
    LegacyBonus(
        id="ancient_knowledge",
        name="Ancient Knowledge",
        description="Accumulated knowledge from multiple generations provides wisdom.",
        category=BonusCategory.EXPERIENCE,
        value=1.5,
        unlock_condition=UnlockCondition(generation=5, legendary_items_obtained=10),
    ),
    LegacyBonus(
        id="dynasty_power",
        name="Dynasty Power",
        description="The power of a true guild dynasty affects all operations.",
        category=BonusCategory.GOLD,
        value=2.0,
        unlock_condition=UnlockCondition(generation=10, total_gold_earned=500000),
    ),
)

TRANSITION_DESCRIPTIONS: Dict[TransitionReason, str] = {
    TransitionReason.TIME_PASSED: "Many years have passed, and a new generation has taken over the guild's operations.",
    TransitionReason.CATASTROPHIC_EVENT: "A great catastrophe has befallen the land, forcing the guild to rebuild with new leadership.",
    TransitionReason.VOLUNTARY_SUCCESSION: "The guild leadership has voluntarily passed the torch to the next generation of adventurers.",
    TransitionReason.GUILD_DISSOLUTION: "The old guild has disbanded, but its legacy lives on in a new organization founded by former members.",
}

# (predicate, badge) pairs evaluated against the finishing guild state.
_ACHIEVEMENT_BADGES = (
    (lambda state: state.gold > 10000, "Accumulated vast wealth"),
    (lambda state: state.reputation > 500, "Achieved legendary reputation"),
    (lambda state: state.level > 8, "Reached master guild status"),
    (lambda state: len(state.completed_quests) > 100, "Completed over 100 quests"),
    (lambda state: len(state.adventurers) > 15, "Built a large adventuring force"),
)

_HEIRLOOM_SLOTS = ("weapon", "armor")
_HEIRLOOM_RARITIES = {Rarity.EPIC, Rarity.LEGENDARY}


def meets_unlock_condition(condition: UnlockCondition, legacy: GuildLegacy) -> bool:
    checks = (
        (condition.generation, legacy.total_generations),
        (condition.total_quests_completed, legacy.total_quests_completed),
        (condition.total_gold_earned, legacy.total_gold_earned),
        (condition.total_reputation_gained, legacy.total_reputation_gained),
        (condition.legendary_items_obtained, legacy.legendary_item_count()),
        (condition.retired_adventurers, legacy.total_retired),
    )
    for threshold, actual in checks:
        if threshold is not None and int(actual) < int(threshold):
            return False
    return True


class LegacyEngine:
    """Tracks cross-generation history and rebuilds the guild for each new generation.

    Planning is side-effect free apart from random draws. Execution builds new
    state and legacy objects and leaves its inputs untouched; committing the
    result is the caller's job.
    """

    def __init__(self, rng: RandomSource, clock: Clock, *, bonuses: Sequence[LegacyBonus] = LEGACY_BONUSES) -> None:
        self.rng = rng
        self.clock = clock
        self.bonuses = tuple(bonuses)

    @staticmethod
    def initialize_guild_legacy() -> GuildLegacy:
        return GuildLegacy()

    def check_for_legacy_bonuses(self, legacy: GuildLegacy) -> List[LegacyBonus]:
        unlocked: List[LegacyBonus] = []
        for bonus in self.bonuses:
            if legacy.has_bonus(bonus.id):
                continue
            if any(row.id == bonus.id for row in unlocked):
                continue
            if meets_unlock_condition(bonus.unlock_condition, legacy):
                unlocked.append(bonus)
        return unlocked

    @staticmethod
    def record_legendary_adventurer(
        legacy: GuildLegacy,
        adventurer: Adventurer,
        generation: int,
        achievements: Iterable[str] = (),
    ) -> Optional[LegendaryAdventurer]:
        if adventurer.level < LEGENDARY_RECORD_LEVEL or adventurer.quests_completed < LEGENDARY_RECORD_QUESTS:
            return None
        for existing in legacy.legendary_adventurers:
            if existing.name == adventurer.name and existing.generation == int(generation):
                return None
        record = LegendaryAdventurer(
            name=adventurer.name,
            adventurer_class=adventurer.adventurer_class.value,
            achievements=tuple(achievements),
            generation=int(generation),
        )
        legacy.legendary_adventurers.append(record)
        logger.info("Recorded %s as a legend of generation %s", adventurer.name, generation)
        return record

    @staticmethod
    def record_famous_quest(
        legacy: GuildLegacy,
        quest: Quest,
        completed_by: Iterable[str],
        generation: int,
        legendary: bool = False,
    ) -> FamousQuest:
        record = FamousQuest(
            quest_name=quest.name,
            completed_by=tuple(completed_by),
            generation=int(generation),
            legendary=bool(legendary),
        )
        legacy.famous_quests.append(record)
        return record

    def create_heirloom_item(self, item: EquipmentItem, owner: Adventurer, generation: int) -> EquipmentItem:
        templates = (
            f"{owner.name}'s {item.name}",
            f"Legacy {item.name}",
            f"Ancestral {item.name}",
            f"{item.name} of the {generation}{ordinal_suffix(generation)} Generation",
        )
        stats = {key: int(math.floor(int(value or 0) * HEIRLOOM_STAT_FACTOR)) for key, value in item.stats.items()}
        return EquipmentItem(
            id=f"heirloom_{item.id}_gen{generation}",
            name=pick(self.rng, templates),
            slot=item.slot,
            rarity=item.rarity.upgraded(),
            stats=stats,
            crafted=False,
        )

    def plan_generation_transition(
        self,
        state: GuildState,
        legacy: GuildLegacy,
        reason: TransitionReason | str,
    ) -> GenerationTransition:
        reason = TransitionReason.from_value(reason)

        new_heirlooms: List[EquipmentItem] = []
        for adventurer in state.adventurers:
            for slot in _HEIRLOOM_SLOTS:
                item = getattr(adventurer.equipment, slot)
                if item is not None and item.rarity in _HEIRLOOM_RARITIES:
                    new_heirlooms.append(self.create_heirloom_item(item, adventurer, legacy.total_generations))

        # Existing heirlooms are kept first; overflow from this generation is dropped.
        heirlooms = tuple(copy.deepcopy(list(legacy.heirloom_items)) + new_heirlooms)[:HEIRLOOM_LIMIT]

        surviving = SurvivingElements(
            heirloom_items=heirlooms,
            retired_adventurers_as_npcs=tuple(state.retired_adventurers[:NPC_CARRYOVER_LIMIT]),
            legacy_knowledge=tuple(self.legacy_knowledge(state, legacy)),
            territory_influence=self.inherited_territory_influence(state.territories),
        )

        plan = NewGenerationPlan(
            starting_bonuses=self.starting_bonuses(legacy),
            inherited_reputation=int(math.floor(state.reputation * INHERITED_REPUTATION_FACTOR)),
            inherited_gold=int(math.floor(state.gold * INHERITED_GOLD_FACTOR)),
            starting_adventurers=tuple(self.generate_heirs(state, legacy.total_generations + 1)),
        )
        logger.debug(
            "Planned %s transition: %s heirs, %s heirlooms",
            reason.value,
            len(plan.starting_adventurers),
            len(heirlooms),
        )
        return GenerationTransition(
            reason=reason,
            description=TRANSITION_DESCRIPTIONS[reason],
            surviving_elements=surviving,
            new_generation=plan,
        )

    @staticmethod
    def legacy_knowledge(state: GuildState, legacy: GuildLegacy) -> List[str]:
        knowledge: List[str] = []
        for campaign in state.campaigns:
            if campaign.completed:
                knowledge.append(
                    f"Campaign Mastery: {campaign.name} - Provides insight into similar future challenges."
                )
        for event in state.world_events:
            if event.active:
                knowledge.append(
                    f"Event Experience: {event.name} - Understanding of how to handle similar crises."
                )
        for hero in legacy.legendary_adventurers:
            detail = f" and {', '.join(hero.achievements)}" if hero.achievements else ""
            knowledge.append(
                f"{hero.name}'s Wisdom - Specialized knowledge in {hero.adventurer_class} tactics{detail}."
            )
        return knowledge[:LEGACY_KNOWLEDGE_LIMIT]

    @staticmethod
    def inherited_territory_influence(territories: Iterable[Territory]) -> Dict[str, int]:
        inherited: Dict[str, int] = {}
        for territory in territories:
            if territory.controlled and territory.influence_level > TERRITORY_CARRYOVER_MIN_INFLUENCE:
                inherited[territory.id] = int(math.floor(territory.influence_level * TERRITORY_CARRYOVER_FACTOR))
        return inherited

    @staticmethod
    def starting_bonuses(legacy: GuildLegacy) -> Dict[str, float]:
        """Persistent bonus values keyed by category; bonuses sharing a category multiply."""

        bonuses: Dict[str, float] = {}
        for bonus in legacy.active_bonuses:
            if not bonus.persistent:
                continue
            key = BonusCategory(bonus.category).value
            bonuses[key] = bonuses.get(key, 1.0) * float(bonus.value)
        return bonuses

    @staticmethod
    def legendary_ancestors(state: GuildState) -> List[Adventurer]:
        candidates = list(state.adventurers) + [row.original_adventurer for row in state.retired_adventurers]
        return [
            adventurer
            for adventurer in candidates
            if adventurer.level >= LEGENDARY_ANCESTOR_LEVEL
            and adventurer.quests_completed >= LEGENDARY_ANCESTOR_QUESTS
        ]

    def generate_heirs(self, state: GuildState, new_generation: int) -> List[Adventurer]:
        heirs: List[Adventurer] = []
        for index, ancestor in enumerate(self.legendary_ancestors(state)[:HEIR_LIMIT]):
            heirs.append(self.create_heir(ancestor, new_generation, index))
        return heirs

    def create_heir(self, ancestor: Adventurer, new_generation: int, index: int = 0) -> Adventurer:
        name = heir_name(self.rng, ancestor.name, new_generation, lineage_chance=HEIR_LINEAGE_NAME_CHANCE)
        personality = inherit_personality(self.rng, ancestor.personality)
        return Adventurer(
            id=f"descendant_{ancestor.id}_gen{new_generation}",
            name=name,
            adventurer_class=ancestor.adventurer_class,
            rank=HEIR_RANK,
            level=max(1, int(math.floor(ancestor.level * HEIR_LEVEL_FACTOR)) + int(index)),
            experience=0,
            status=AdventurerStatus.AVAILABLE,
            stats=ancestor.stats.scaled(HEIR_STAT_FACTOR),
            personality=personality,
            skills=ancestor.skills.scaled(HEIR_SKILL_FACTOR),
            equipment=Equipment(),
            relationships=[],
            quests_completed=0,
            years_in_guild=0,
            retirement_eligible=False,
            descendant_of=ancestor.id,
        )

    @staticmethod
    def major_events(state: GuildState) -> List[str]:
        events: List[str] = []
        for campaign in state.campaigns:
            if campaign.completed:
                events.append(f"Completed the legendary {campaign.name} campaign")
        for adventurer in state.adventurers:
            if adventurer.level >= LEGENDARY_RECORD_LEVEL:
                events.append(
                    f"{adventurer.name} reached legendary status as a {adventurer.adventurer_class.value}"
                )
        for territory in state.territories:
            if territory.controlled:
                events.append(f"Established control over {territory.name}")
        return events[:CHRONICLE_EVENT_LIMIT]

    @staticmethod
    def notable_achievements(state: GuildState) -> List[str]:
        return [badge for predicate, badge in _ACHIEVEMENT_BADGES if predicate(state)]

    def execute_generation_transition(
        self,
        state: GuildState,
        legacy: GuildLegacy,
        transition: GenerationTransition,
    ) -> Tuple[GuildState, GuildLegacy]:
        chronicle = ChronicleEntry(
            generation=legacy.total_generations,
            major_events=tuple(self.major_events(state)),
            notable_achievements=tuple(self.notable_achievements(state)),
            final_stats=ChronicleStats(
                level=state.level,
                reputation=state.reputation,
                gold=state.gold,
                adventurers=len(state.adventurers),
            ),
        )

        updated = copy.deepcopy(legacy)
        updated.total_generations = legacy.total_generations + 1
        updated.total_quests_completed = legacy.total_quests_completed + len(state.completed_quests)
        updated.total_gold_earned = legacy.total_gold_earned + max(0, int(state.gold))
        updated.total_reputation_gained = legacy.total_reputation_gained + max(0, int(state.reputation))
        updated.heirloom_items = list(copy.deepcopy(transition.surviving_elements.heirloom_items))
        updated.chronicles.append(chronicle)

        unlocked = self.check_for_legacy_bonuses(updated)
        updated.active_bonuses.extend(unlocked)
        for bonus in unlocked:
            logger.info("Legacy bonus unlocked: %s (%s x%s)", bonus.name, bonus.category.value, bonus.value)

        plan = transition.new_generation
        new_state = GuildState(
            gold=int(plan.inherited_gold),
            reputation=int(plan.inherited_reputation),
            level=1,
            morale=state.morale,
            generation=updated.total_generations,
            adventurers=[copy.deepcopy(heir) for heir in plan.starting_adventurers],
            legacy_multipliers=LegacyMultipliers.from_mapping(plan.starting_bonuses),
            current_season="spring",
        )
        logger.info(
            "Guild entered generation %s (%s): gold=%s reputation=%s heirs=%s",
            new_state.generation,
            transition.reason.value,
            new_state.gold,
            new_state.reputation,
            len(new_state.adventurers),
        )
        return new_state, updated

    @staticmethod
    def calculate_legacy_multipliers(legacy: GuildLegacy) -> LegacyMultipliers:
        totals = {category.value: 1.0 for category in MULTIPLIER_CATEGORIES}
        for bonus in legacy.active_bonuses:
            key = BonusCategory(bonus.category).value
            if key in totals:
                totals[key] *= float(bonus.value)
        return LegacyMultipliers(**totals)

    @staticmethod
    def new_bonus_ids(before: GuildLegacy, after: GuildLegacy) -> List[str]:
        known = {bonus.id for bonus in before.active_bonuses}
        return [bonus.id for bonus in after.active_bonuses if bonus.id not in known]
