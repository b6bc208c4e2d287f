from __future__ import annotations

import math


SECONDS_PER_DAY = 24 * 60 * 60
DAYS_PER_YEAR = 365

RELATIONSHIP_UPDATE_INTERVAL_S = SECONDS_PER_DAY
NEW_RELATIONSHIP_CHANCE = 0.30
RELATIONSHIP_EVOLUTION_CHANCE = 0.15
STRONG_RELATIONSHIP_THRESHOLD = 70
CRISIS_RIVALRY_THRESHOLD = 70

SYNERGY_FRIENDSHIP_WEIGHT = 0.2
SYNERGY_ROMANCE_WEIGHT = 0.3
SYNERGY_RIVALRY_WEIGHT = -0.1
SYNERGY_MIN = 0.5
SYNERGY_MAX = 1.5

RETIREMENT_AGE_YEARS = 8
RETIREMENT_FORCED_AGE_YEARS = 10
RETIREMENT_ACHIEVEMENT_LEVEL = 10
RETIREMENT_ACHIEVEMENT_QUESTS = 50
RETIREMENT_VETERAN_LEVEL = 6
RETIREMENT_VETERAN_QUESTS = 25
RETIREMENT_WEALTH_GREED = 80
RETIREMENT_ROMANCE_STRENGTH = 90

# Personality jitter spreads used whenever traits pass to a descendant.
PERSONALITY_INHERITANCE_SPREAD = {
    "courage": 30,
    "loyalty": 20,
    "ambition": 40,
    "teamwork": 25,
    "greed": 35,
}
DESCENDANT_CLASS_INHERIT_CHANCE = 0.8
DESCENDANT_LEVEL_FACTOR = 0.3
DESCENDANT_SKILL_SEED_FACTOR = 0.2
DESCENDANT_SKILL_SEED_JITTER = 5
DESCENDANT_RECRUIT_BASE_COST = 300
DESCENDANT_RECRUIT_COST_PER_LEVEL = 50
DESCENDANT_RECRUIT_DISCOUNT = 0.8

HEIR_STAT_FACTOR = 0.6
HEIR_SKILL_FACTOR = 0.3
HEIR_LEVEL_FACTOR = 0.4
HEIR_LIMIT = 3
HEIR_RANK = "Heir"
HEIR_LINEAGE_NAME_CHANCE = 0.6
LEGENDARY_ANCESTOR_LEVEL = 8
LEGENDARY_ANCESTOR_QUESTS = 25
LEGENDARY_RECORD_LEVEL = 8
LEGENDARY_RECORD_QUESTS = 30

HEIRLOOM_STAT_FACTOR = 1.2
HEIRLOOM_LIMIT = 20
NPC_CARRYOVER_LIMIT = 10
LEGACY_KNOWLEDGE_LIMIT = 15
CHRONICLE_EVENT_LIMIT = 10
INHERITED_REPUTATION_FACTOR = 0.3
INHERITED_GOLD_FACTOR = 0.2
TERRITORY_CARRYOVER_MIN_INFLUENCE = 50
TERRITORY_CARRYOVER_FACTOR = 0.4

MAX_ADVENTURERS = 10
RECRUIT_REFRESH_COST = 50
RECRUIT_BATCH_SIZE = 3
RECRUIT_BASE_COST = 100
RECRUIT_COST_MULTIPLIER = 1.2
RECRUIT_MAX_LEVEL = 5
RECRUIT_COST_REDUCTION_CAP = 90
HIRED_STAT_PER_LEVEL = 10

GOLD_PER_QUEST_LEVEL = 25
EXPERIENCE_PER_QUEST_LEVEL = 50
XP_PER_LEVEL = 100
DIFFICULTY_REWARD_MULTIPLIER = {
    "Easy": 1.0,
    "Medium": 1.5,
    "Hard": 2.0,
}

ADVENTURER_RANKS = (
    (8, "Master"),
    (5, "Expert"),
    (3, "Journeyman"),
    (2, "Apprentice"),
    (1, "Novice"),
)

MORALE_MIN = 0
MORALE_MAX = 100

RETIREMENT_PARTY_BASE_COST = 200
RETIREMENT_PARTY_COST_PER_LEVEL = 50


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def rank_for_level(level: int) -> str:
    safe_level = max(1, int(level))
    for threshold, rank in ADVENTURER_RANKS:
        if safe_level >= threshold:
            return rank
    return "Novice"


def recruit_cost(level: int, reduction_percent: int = 0) -> int:
    base = RECRUIT_BASE_COST * math.pow(RECRUIT_COST_MULTIPLIER, max(1, int(level)) - 1)
    reduction = clamp(int(reduction_percent), 0, RECRUIT_COST_REDUCTION_CAP)
    return int(math.floor(base * (100 - reduction) / 100))


def descendant_recruit_cost(level: int) -> int:
    base = DESCENDANT_RECRUIT_BASE_COST + int(level) * DESCENDANT_RECRUIT_COST_PER_LEVEL
    return int(math.floor(base * DESCENDANT_RECRUIT_DISCOUNT))


def quest_base_reward(min_level: int, difficulty: str) -> float:
    multiplier = DIFFICULTY_REWARD_MULTIPLIER.get(str(difficulty), 1.0)
    return max(1, int(min_level)) * GOLD_PER_QUEST_LEVEL * multiplier


def quest_xp_reward(min_level: int) -> int:
    return max(1, int(min_level)) * EXPERIENCE_PER_QUEST_LEVEL


def ordinal_suffix(number: int) -> str:
    value = abs(int(number)) % 100
    if 11 <= value <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(value % 10, "th")
