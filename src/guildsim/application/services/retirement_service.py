from __future__ import annotations

import copy
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from guildsim.application.services.balance_tables import (
    DESCENDANT_CLASS_INHERIT_CHANCE,
    DESCENDANT_LEVEL_FACTOR,
    DESCENDANT_SKILL_SEED_FACTOR,
    DESCENDANT_SKILL_SEED_JITTER,
    RETIREMENT_ACHIEVEMENT_LEVEL,
    RETIREMENT_ACHIEVEMENT_QUESTS,
    RETIREMENT_AGE_YEARS,
    RETIREMENT_FORCED_AGE_YEARS,
    RETIREMENT_PARTY_BASE_COST,
    RETIREMENT_PARTY_COST_PER_LEVEL,
    RETIREMENT_ROMANCE_STRENGTH,
    RETIREMENT_VETERAN_LEVEL,
    RETIREMENT_VETERAN_QUESTS,
    RETIREMENT_WEALTH_GREED,
    descendant_recruit_cost,
)
from guildsim.application.services.clock import Clock
from guildsim.application.services.inheritance import inherit_personality
from guildsim.application.services.name_tables import descendant_recruit_name
from guildsim.application.services.random_source import RandomSource, chance, pick
from guildsim.domain.models.adventurer import Adventurer, AdventurerClass, AdventurerStatus
from guildsim.domain.models.recruit import Recruit
from guildsim.domain.models.retirement import (
    RetiredAdventurer,
    RetirementBenefits,
    RetirementEvent,
    RetirementOption,
    RetirementParty,
    RetirementReason,
    RetirementRole,
    RoleRequirements,
    SkillRequirement,
    TraitRequirement,
)

logger = logging.getLogger(__name__)

# Declaration order is the documented tie-break when two roles score the same.
RETIREMENT_ROLES: Tuple[RetirementOption, ...] = (
    RetirementOption(
        role=RetirementRole.TRAINER,
        name="Guild Trainer",
        description="Share knowledge and skills with new recruits, helping them grow faster.",
        requirements=RoleRequirements(
            min_level=5,
            min_quests_completed=20,
            skills=(
                SkillRequirement("combat.weaponMastery", 20),
                SkillRequirement("magic.spellPower", 15),
            ),
        ),
        benefits=RetirementBenefits(training_bonus=25),
    ),
    RetirementOption(
        role=RetirementRole.ADVISOR,
        name="Strategic Advisor",
        description="Provide wisdom and counsel for difficult quests and guild decisions.",
        requirements=RoleRequirements(
            min_level=6,
            min_quests_completed=30,
            skills=(SkillRequirement("combat.tacticalKnowledge", 20),),
            personality=(
                TraitRequirement("loyalty", 70),
                TraitRequirement("ambition", 60),
            ),
        ),
        benefits=RetirementBenefits(quest_advice=True),
    ),
    RetirementOption(
        role=RetirementRole.RECRUITER,
        name="Talent Scout",
        description="Use connections and experience to find better recruits for the guild.",
        requirements=RoleRequirements(
            min_level=4,
            min_quests_completed=25,
            personality=(TraitRequirement("teamwork", 60),),
        ),
        benefits=RetirementBenefits(recruit_cost_reduction=30),
    ),
    RetirementOption(
        role=RetirementRole.QUARTERMASTER,
        name="Guild Quartermaster",
        description="Manage guild resources and equipment with experienced efficiency.",
        requirements=RoleRequirements(
            min_level=5,
            min_quests_completed=15,
            personality=(
                TraitRequirement("loyalty", 80),
                TraitRequirement("greed", 30),
            ),
        ),
        benefits=RetirementBenefits(quest_advice=True),
    ),
)

_DESCRIPTIONS: Dict[RetirementReason, str] = {
    RetirementReason.AGE: "{name} feels the weight of years of adventuring and wishes to settle into a quieter role within the guild.",
    RetirementReason.INJURY: "{name} has sustained injuries that prevent them from continuing active duty, but they wish to serve the guild in other ways.",
    RetirementReason.ACHIEVEMENT: "{name} has achieved legendary status and wants to pass on their knowledge to the next generation.",
    RetirementReason.RELATIONSHIP: "{name} has found love and wishes to start a family while remaining connected to the guild.",
    RetirementReason.WEALTH: "{name} has accumulated enough wealth from adventuring to live comfortably, but wants to give back to the guild.",
    RetirementReason.VOLUNTARY: "{name} has decided it's time to step back from active adventuring and take on a supporting role.",
}

_FAREWELLS: Dict[RetirementReason, Tuple[str, ...]] = {
    RetirementReason.AGE: (
        '"My bones creak like old floorboards, but my spirit remains with this guild forever."',
        '"I may be stepping down, but I\'ll always be here if you need guidance."',
        '"Time to let younger heroes take the spotlight. I\'ll be cheering from the sidelines."',
    ),
    RetirementReason.INJURY: (
        '"This body may be broken, but my dedication to this guild is unbreakable."',
        '"I can\'t swing a sword anymore, but I can still train others to swing theirs better."',
    ),
    RetirementReason.ACHIEVEMENT: (
        '"I\'ve climbed every mountain there is to climb. Now I want to help others reach those same peaks."',
        '"They say legends never die. I plan to live on through the adventurers I train."',
    ),
    RetirementReason.RELATIONSHIP: (
        '"Adventure called to me once, but now love calls louder. I\'ll serve the guild in new ways."',
        '"Starting a family doesn\'t mean ending my loyalty to this guild."',
    ),
    RetirementReason.WEALTH: (
        '"I have enough gold to last several lifetimes. Time to invest in the guild\'s future instead."',
        '"Riches are meaningless without purpose. My purpose is helping this guild thrive."',
    ),
    RetirementReason.VOLUNTARY: (
        '"It\'s been an honor serving alongside all of you. Time for the next chapter."',
        '"I\'m not leaving, just changing how I contribute to our shared mission."',
    ),
}


class RetirementEngine:
    def __init__(self, rng: RandomSource, clock: Clock, *, roles: Sequence[RetirementOption] = RETIREMENT_ROLES) -> None:
        self.rng = rng
        self.clock = clock
        self.roles = tuple(roles)

    @staticmethod
    def check_for_retirement_eligibility(adventurer: Adventurer) -> bool:
        age = adventurer.years_in_guild >= RETIREMENT_AGE_YEARS
        achievement = (
            adventurer.level >= RETIREMENT_ACHIEVEMENT_LEVEL
            and adventurer.quests_completed >= RETIREMENT_ACHIEVEMENT_QUESTS
        )
        veteran = (
            adventurer.level >= RETIREMENT_VETERAN_LEVEL
            and adventurer.quests_completed >= RETIREMENT_VETERAN_QUESTS
        )
        return age or achievement or veteran

    @staticmethod
    def determine_retirement_reason(adventurer: Adventurer) -> RetirementReason:
        if adventurer.years_in_guild >= RETIREMENT_FORCED_AGE_YEARS:
            return RetirementReason.AGE
        if (
            adventurer.level >= RETIREMENT_ACHIEVEMENT_LEVEL
            and adventurer.quests_completed >= RETIREMENT_ACHIEVEMENT_QUESTS
        ):
            return RetirementReason.ACHIEVEMENT
        if adventurer.status == AdventurerStatus.INJURED:
            return RetirementReason.INJURY
        if adventurer.personality.greed >= RETIREMENT_WEALTH_GREED:
            return RetirementReason.WEALTH
        if adventurer.has_romance(RETIREMENT_ROMANCE_STRENGTH):
            return RetirementReason.RELATIONSHIP
        return RetirementReason.VOLUNTARY

    @staticmethod
    def retirement_description(adventurer: Adventurer, reason: RetirementReason) -> str:
        template = _DESCRIPTIONS.get(reason, _DESCRIPTIONS[RetirementReason.VOLUNTARY])
        return template.format(name=adventurer.name)

    def farewell_message(self, reason: RetirementReason) -> str:
        pool = _FAREWELLS.get(reason) or _FAREWELLS[RetirementReason.VOLUNTARY]
        return pick(self.rng, pool)

    @staticmethod
    def meets_requirements(adventurer: Adventurer, requirements: RoleRequirements) -> bool:
        if adventurer.level < requirements.min_level:
            return False
        if adventurer.quests_completed < requirements.min_quests_completed:
            return False
        for skill_req in requirements.skills:
            if adventurer.skills.value(skill_req.skill) < skill_req.min_value:
                return False
        for trait_req in requirements.personality:
            if adventurer.personality.trait(trait_req.trait) < trait_req.min_value:
                return False
        return True

    @staticmethod
    def role_fitness(adventurer: Adventurer, option: RetirementOption) -> float:
        score = adventurer.level * 2 + adventurer.quests_completed
        for skill_req in option.requirements.skills:
            score += max(0, adventurer.skills.value(skill_req.skill) - skill_req.min_value)
        for trait_req in option.requirements.personality:
            score += max(0.0, adventurer.personality.trait(trait_req.trait) - trait_req.min_value)
        return score

    def get_best_retirement_role(self, adventurer: Adventurer) -> Optional[RetirementOption]:
        ranked: List[tuple[float, int, RetirementOption]] = []
        for index, option in enumerate(self.roles):
            if self.meets_requirements(adventurer, option.requirements):
                ranked.append((-self.role_fitness(adventurer, option), index, option))
        if not ranked:
            return None
        ranked.sort(key=lambda row: (row[0], row[1]))
        return ranked[0][2]

    def generate_retirement_event(self, adventurer: Adventurer) -> RetirementEvent:
        reason = self.determine_retirement_reason(adventurer)
        option = self.get_best_retirement_role(adventurer)
        return RetirementEvent(
            id=f"retirement_{adventurer.id}_{int(self.clock.now())}",
            adventurer_id=adventurer.id,
            reason=reason,
            description=self.retirement_description(adventurer, reason),
            benefits=option.benefits if option is not None else RetirementBenefits(),
            farewell_message=self.farewell_message(reason),
        )

    def process_retirement(self, adventurer: Adventurer) -> RetiredAdventurer:
        event = self.generate_retirement_event(adventurer)
        option = self.get_best_retirement_role(adventurer)

        snapshot = copy.deepcopy(adventurer)
        snapshot.status = AdventurerStatus.RETIRED
        snapshot.retirement_eligible = True

        retired = RetiredAdventurer(
            id=f"retired_{adventurer.id}",
            original_adventurer=snapshot,
            retirement_time=float(self.clock.now()),
            role=option.role if option is not None else None,
            benefits=event.benefits,
            reason=event.reason,
            farewell_message=event.farewell_message,
        )
        logger.info(
            "%s retired (%s) as %s",
            adventurer.name,
            event.reason.value,
            retired.role.value if retired.role is not None else "no role",
        )
        return retired

    def generate_descendant_recruit(self, retired: RetiredAdventurer) -> Recruit:
        parent = retired.original_adventurer

        personality = inherit_personality(self.rng, parent.personality)

        if chance(self.rng, DESCENDANT_CLASS_INHERIT_CHANCE):
            adventurer_class = parent.adventurer_class
        else:
            adventurer_class = pick(self.rng, tuple(AdventurerClass))

        level = max(1, int(math.floor(parent.level * DESCENDANT_LEVEL_FACTOR)) + int(math.floor(self.rng.next() * 3)))

        potential: Dict[str, int] = {}
        for category, skill, value in parent.skills.items():
            if value <= 0:
                continue
            seeded = int(
                math.floor(value * DESCENDANT_SKILL_SEED_FACTOR + self.rng.next() * DESCENDANT_SKILL_SEED_JITTER)
            )
            if seeded > 0:
                potential[f"{category}.{skill}"] = seeded

        return Recruit(
            id=f"descendant_{parent.id}_{int(self.clock.now())}",
            name=descendant_recruit_name(self.rng, parent.name),
            level=level,
            adventurer_class=adventurer_class,
            cost=descendant_recruit_cost(level),
            personality=personality,
            potential_skills=potential,
            descendant_of=parent.id,
        )

    @staticmethod
    def get_retirement_benefits(retired_adventurers: Iterable[RetiredAdventurer]) -> RetirementBenefits:
        training = 0
        cost_reduction = 0
        advice = False
        for retired in retired_adventurers:
            training += int(retired.benefits.training_bonus or 0)
            cost_reduction += int(retired.benefits.recruit_cost_reduction or 0)
            advice = advice or bool(retired.benefits.quest_advice)
        return RetirementBenefits(
            training_bonus=training,
            recruit_cost_reduction=cost_reduction,
            quest_advice=advice,
        )

    @staticmethod
    def plan_retirement_party(adventurer: Adventurer) -> RetirementParty:
        return RetirementParty(
            cost=RETIREMENT_PARTY_BASE_COST + adventurer.level * RETIREMENT_PARTY_COST_PER_LEVEL,
            description=(
                f"Throw a grand retirement party for {adventurer.name} "
                "to celebrate their years of service to the guild."
            ),
            morale_bonus=15 + adventurer.level * 2,
            reputation_gain=20 + adventurer.quests_completed,
            guild_loyalty=25,
        )
