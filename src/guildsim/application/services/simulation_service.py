from __future__ import annotations

import copy
import logging
import math
import threading
from typing import Callable, List, Optional, Sequence

from guildsim.application.dtos import (
    ActionResult,
    ActiveQuestView,
    AdventurerView,
    GuildSummaryView,
    RetiredAdventurerView,
)
from guildsim.application.services.balance_tables import (
    DAYS_PER_YEAR,
    MAX_ADVENTURERS,
    MORALE_MAX,
    MORALE_MIN,
    RECRUIT_BATCH_SIZE,
    RECRUIT_MAX_LEVEL,
    RECRUIT_REFRESH_COST,
    SECONDS_PER_DAY,
    clamp,
    recruit_cost,
)
from guildsim.application.services.clock import SimulationClock
from guildsim.application.services.event_bus import EventBus
from guildsim.application.services.legacy_service import LegacyEngine
from guildsim.application.services.name_tables import RECRUIT_NAMES
from guildsim.application.services.quest_service import QuestAssignmentCoordinator
from guildsim.application.services.random_source import RandomSource, pick
from guildsim.application.services.registry_service import AdventurerRegistry
from guildsim.application.services.relationship_service import RelationshipEngine
from guildsim.application.services.retirement_service import RetirementEngine
from guildsim.domain.events import (
    AdventurerRetired,
    DayAdvanced,
    GenerationAdvanced,
    LegacyBonusUnlocked,
    QuestCompleted,
    RelationshipEventApplied,
)
from guildsim.domain.models.adventurer import PERSONALITY_TRAITS, AdventurerClass, AdventurerStatus, Personality
from guildsim.domain.models.legacy import GenerationTransition, TransitionReason
from guildsim.domain.models.quest import QuestDifficulty
from guildsim.domain.models.recruit import Recruit
from guildsim.domain.models.retirement import RetiredAdventurer, RetirementBenefits
from guildsim.domain.repositories import GuildRepository, LegacyRepository, QuestCatalog

logger = logging.getLogger(__name__)


class GuildSimulation:
    """Top-level driver that owns one guild and its legacy.

    Every mutating call runs under a single lock and ends with one atomic
    commit of the guild state and legacy through ``persist``. The driver
    works on its own copies and commits copies of them, so the repositories
    only ever hold committed data. When a commit fails the working state is
    reloaded from the repositories and the error is re-raised; the clock is
    not rewound.

    Each adventurer ages one year for every full year since the day they
    joined the roster (``Adventurer.joined_day``).
    """

    def __init__(
        self,
        guild_repo: GuildRepository,
        legacy_repo: LegacyRepository,
        catalog: QuestCatalog,
        *,
        clock: SimulationClock,
        relationships: RelationshipEngine,
        retirement: RetirementEngine,
        legacy: LegacyEngine,
        recruit_rng: RandomSource,
        event_bus: EventBus,
        persist: Callable[..., None],
        max_adventurers: int = MAX_ADVENTURERS,
    ) -> None:
        self.guild_repo = guild_repo
        self.legacy_repo = legacy_repo
        self.catalog = catalog
        self.clock = clock
        self.relationships = relationships
        self.retirement = retirement
        self.legacy_engine = legacy
        self.recruit_rng = recruit_rng
        self.event_bus = event_bus
        self.persist = persist

        self.state = copy.deepcopy(guild_repo.load())
        self.legacy = copy.deepcopy(legacy_repo.load())
        self.registry = AdventurerRegistry(self.state, max_adventurers=max_adventurers)
        self.quests = QuestAssignmentCoordinator(self.registry, relationships, catalog, clock, event_bus)
        self.last_transition: Optional[GenerationTransition] = None
        self._recruit_sequence = 0
        self._lock = threading.RLock()
        self.register_handlers()

    def register_handlers(self) -> None:
        self.event_bus.subscribe(QuestCompleted, self.on_quest_completed, priority=20)

    def on_quest_completed(self, event: QuestCompleted) -> None:
        quest = self.catalog.get(event.quest_id)
        if quest is None:
            return
        names = []
        for adventurer_id in event.adventurer_ids:
            adventurer = self.registry.get(adventurer_id)
            names.append(adventurer.name if adventurer is not None else adventurer_id)
        self.legacy_engine.record_famous_quest(
            self.legacy,
            quest,
            names,
            self.state.generation,
            legendary=quest.difficulty == QuestDifficulty.HARD,
        )

    def _save(self, state, legacy) -> None:
        self.persist(copy.deepcopy(state), copy.deepcopy(legacy))

    def _commit(self) -> None:
        try:
            self._save(self.state, self.legacy)
        except Exception:
            logger.error("Commit failed on day %s; reloading the last committed state", self.state.days_elapsed)
            self.state = copy.deepcopy(self.guild_repo.load())
            self.legacy = copy.deepcopy(self.legacy_repo.load())
            self.registry.bind(self.state)
            raise

    def retirement_benefits(self) -> RetirementBenefits:
        return self.retirement.get_retirement_benefits(self.state.retired_adventurers)

    def tick_day(self) -> ActionResult:
        with self._lock:
            self.clock.advance_days(1)
            self.state.days_elapsed += 1
            messages: List[str] = []

            for result in self.quests.advance():
                messages.extend(result.messages)

            for event in self.relationships.update(self.state.adventurers):
                self.relationships.apply_relationship_event(event, self.state.adventurers)
                if event.morale_change:
                    self.state.morale = int(clamp(self.state.morale + event.morale_change, MORALE_MIN, MORALE_MAX))
                messages.append(event.description)
                self.event_bus.publish(
                    RelationshipEventApplied(
                        event_id=event.id,
                        event_type=event.type.value,
                        participant_ids=tuple(event.participant_ids),
                        morale_change=int(event.morale_change or 0),
                    )
                )

            for adventurer in self.state.adventurers:
                served = self.state.days_elapsed - adventurer.joined_day
                if served > 0 and served % DAYS_PER_YEAR == 0:
                    adventurer.years_in_guild += 1
                    messages.append(f"{adventurer.name} marks another year with the guild.")

            for adventurer in self.state.adventurers:
                adventurer.retirement_eligible = self.retirement.check_for_retirement_eligibility(adventurer)

            self._commit()
            self.event_bus.publish(DayAdvanced(day_after=self.state.days_elapsed, now=self.clock.now()))
            return ActionResult(messages=messages, ok=True)

    def run_days(self, days: int) -> List[str]:
        messages: List[str] = []
        for _ in range(max(0, int(days))):
            messages.extend(self.tick_day().messages)
        return messages

    def _next_recruit_id(self) -> str:
        self._recruit_sequence += 1
        return f"recruit_{int(self.clock.now())}_{self._recruit_sequence}"

    def _generate_recruit(self, reduction_percent: int) -> Recruit:
        level = int(math.floor(self.recruit_rng.next() * RECRUIT_MAX_LEVEL)) + 1
        adventurer_class = pick(self.recruit_rng, tuple(AdventurerClass))
        name = pick(self.recruit_rng, RECRUIT_NAMES[adventurer_class.value])
        traits = {trait: round(self.recruit_rng.next() * 100) for trait in PERSONALITY_TRAITS}
        return Recruit(
            id=self._next_recruit_id(),
            name=name,
            level=level,
            adventurer_class=adventurer_class,
            cost=recruit_cost(level, reduction_percent),
            personality=Personality(**traits),
        )

    def refresh_recruits(self, *, charge: bool = True) -> ActionResult:
        with self._lock:
            if charge:
                if self.state.gold < RECRUIT_REFRESH_COST:
                    return ActionResult(messages=["Not enough gold to refresh recruits."], ok=False)
                self.state.gold -= RECRUIT_REFRESH_COST

            reduction = self.retirement_benefits().recruit_cost_reduction
            descendants = [recruit for recruit in self.state.recruits if recruit.descendant_of]
            fresh = [self._generate_recruit(reduction) for _ in range(RECRUIT_BATCH_SIZE)]
            self.state.recruits = descendants + fresh
            self._commit()
            return ActionResult(messages=[f"{len(fresh)} new recruits arrived at the hiring hall."], ok=True)

    def hire(self, recruit_id: str) -> ActionResult:
        with self._lock:
            recruit = next((row for row in self.state.recruits if row.id == recruit_id), None)
            if recruit is None:
                return ActionResult(messages=[f"No recruit with id {recruit_id}."], ok=False)
            if self.registry.is_full():
                return ActionResult(messages=["The guild roster is full."], ok=False)
            if self.state.gold < recruit.cost:
                return ActionResult(messages=[f"Not enough gold to hire {recruit.name}."], ok=False)

            adventurer = self.registry.hire(recruit)
            if adventurer is None:
                return ActionResult(messages=[f"{recruit.name} could not join the roster."], ok=False)
            adventurer.joined_day = self.state.days_elapsed

            multipliers = self.state.legacy_multipliers
            if multipliers.recruitment != 1.0:
                adventurer.stats = adventurer.stats.scaled(multipliers.recruitment)
            if multipliers.skill != 1.0:
                adventurer.skills = adventurer.skills.scaled(multipliers.skill)

            self.state.gold -= recruit.cost
            self.state.recruits = [row for row in self.state.recruits if row.id != recruit_id]
            self._commit()
            return ActionResult(messages=[f"{adventurer.name} joined the guild for {recruit.cost} gold."], ok=True)

    def start_quest(self, quest_id: str, adventurer_ids: Sequence[str]) -> ActionResult:
        with self._lock:
            result = self.quests.start_quest(quest_id, adventurer_ids)
            if result.ok:
                self._commit()
            return result

    def retire(self, adventurer_id: str, *, throw_party: bool = False) -> ActionResult:
        with self._lock:
            adventurer = self.registry.get(adventurer_id)
            if adventurer is None:
                return ActionResult(messages=[f"No adventurer with id {adventurer_id}."], ok=False)
            if adventurer.status not in (AdventurerStatus.AVAILABLE, AdventurerStatus.INJURED):
                return ActionResult(messages=[f"{adventurer.name} cannot retire while {adventurer.status.value}."], ok=False)
            if not self.retirement.check_for_retirement_eligibility(adventurer):
                return ActionResult(messages=[f"{adventurer.name} is not yet eligible to retire."], ok=False)

            # The snapshot must be taken before the registry marks the adventurer retired.
            retired = self.retirement.process_retirement(adventurer)
            self.registry.remove_for_retirement(adventurer_id)
            messages = [
                self.retirement.retirement_description(adventurer, retired.reason),
                f"{adventurer.name}: {retired.farewell_message}",
            ]

            if throw_party:
                messages.extend(self._throw_party(retired))

            self.state.retired_adventurers.append(retired)
            self.legacy.total_retired += 1
            self.legacy_engine.record_legendary_adventurer(
                self.legacy,
                retired.original_adventurer,
                self.state.generation,
                achievements=(f"{retired.original_adventurer.quests_completed} quests completed",),
            )

            recruit = self.retirement.generate_descendant_recruit(retired)
            self.state.recruits.append(recruit)
            messages.append(f"{recruit.name} has come to the hiring hall to carry on the family name.")

            unlocked = self._unlock_bonuses()
            self._commit()

            self.event_bus.publish(
                AdventurerRetired(
                    adventurer_id=adventurer.id,
                    name=adventurer.name,
                    adventurer_class=adventurer.adventurer_class.value,
                    level=adventurer.level,
                    quests_completed=adventurer.quests_completed,
                    role=retired.role.value if retired.role is not None else None,
                    reason=retired.reason.value,
                )
            )
            self.event_bus.publish_all(unlocked)
            return ActionResult(messages=messages, ok=True)

    def _throw_party(self, retired: RetiredAdventurer) -> List[str]:
        party = self.retirement.plan_retirement_party(retired.original_adventurer)
        if self.state.gold < party.cost:
            return [f"The guild cannot afford a {party.cost} gold retirement party."]
        self.state.gold -= party.cost
        self.state.morale = int(clamp(self.state.morale + party.morale_bonus, MORALE_MIN, MORALE_MAX))
        self.state.reputation += party.reputation_gain
        return [party.description]

    def _unlock_bonuses(self) -> List[LegacyBonusUnlocked]:
        unlocked = self.legacy_engine.check_for_legacy_bonuses(self.legacy)
        if not unlocked:
            return []
        self.legacy.active_bonuses.extend(unlocked)
        self.state.legacy_multipliers = self.legacy_engine.calculate_legacy_multipliers(self.legacy)
        return [
            LegacyBonusUnlocked(
                bonus_id=bonus.id,
                category=bonus.category.value,
                value=float(bonus.value),
                generation=self.legacy.total_generations,
            )
            for bonus in unlocked
        ]

    def advance_generation(self, reason: TransitionReason | str = TransitionReason.TIME_PASSED) -> ActionResult:
        with self._lock:
            transition = self.legacy_engine.plan_generation_transition(self.state, self.legacy, reason)
            new_state, new_legacy = self.legacy_engine.execute_generation_transition(
                self.state, self.legacy, transition
            )
            new_bonus_ids = set(self.legacy_engine.new_bonus_ids(self.legacy, new_legacy))

            self._save(new_state, new_legacy)

            previous_generation = self.state.generation
            self.state = new_state
            self.legacy = new_legacy
            self.registry.bind(new_state)
            self.last_transition = transition

            plan = transition.new_generation
            self.event_bus.publish(
                GenerationAdvanced(
                    from_generation=previous_generation,
                    to_generation=new_state.generation,
                    reason=transition.reason.value,
                    inherited_gold=plan.inherited_gold,
                    inherited_reputation=plan.inherited_reputation,
                    heir_count=len(plan.starting_adventurers),
                )
            )
            self.event_bus.publish_all(
                LegacyBonusUnlocked(
                    bonus_id=bonus.id,
                    category=bonus.category.value,
                    value=float(bonus.value),
                    generation=new_legacy.total_generations,
                )
                for bonus in new_legacy.active_bonuses
                if bonus.id in new_bonus_ids
            )

            messages = [transition.description]
            messages.extend(f"{heir.name} steps forward as an heir." for heir in new_state.adventurers)
            return ActionResult(messages=messages, ok=True)

    def summary(self) -> GuildSummaryView:
        now = float(self.clock.now())
        adventurers = [
            AdventurerView(
                id=adventurer.id,
                name=adventurer.name,
                class_name=adventurer.adventurer_class.value,
                rank=adventurer.rank,
                level=adventurer.level,
                status=adventurer.status.value,
                quests_completed=adventurer.quests_completed,
                years_in_guild=adventurer.years_in_guild,
                retirement_eligible=adventurer.retirement_eligible,
            )
            for adventurer in self.state.adventurers
        ]
        active = []
        for quest in self.state.active_quests:
            names = [row.name for row in self.state.adventurers if row.id in quest.assigned_adventurers]
            remaining = max(0.0, (quest.due_at(SECONDS_PER_DAY) - now) / SECONDS_PER_DAY)
            active.append(
                ActiveQuestView(
                    quest_id=quest.id,
                    name=quest.quest.name,
                    adventurer_names=names,
                    synergy=round(quest.synergy, 2),
                    days_remaining=round(remaining, 1),
                )
            )
        retired = [
            RetiredAdventurerView(
                name=row.original_adventurer.name,
                role=row.role.value if row.role is not None else None,
                reason=row.reason.value,
                farewell_message=row.farewell_message,
            )
            for row in self.state.retired_adventurers
        ]
        multipliers = self.state.legacy_multipliers
        return GuildSummaryView(
            generation=self.state.generation,
            day=self.state.days_elapsed,
            gold=self.state.gold,
            reputation=self.state.reputation,
            level=self.state.level,
            morale=self.state.morale,
            adventurers=adventurers,
            active_quests=active,
            retired=retired,
            multipliers={
                "experience": multipliers.experience,
                "gold": multipliers.gold,
                "reputation": multipliers.reputation,
                "skill": multipliers.skill,
                "recruitment": multipliers.recruitment,
            },
            legacy_bonuses=[bonus.name for bonus in self.legacy.active_bonuses],
            chronicle_count=len(self.legacy.chronicles),
        )
