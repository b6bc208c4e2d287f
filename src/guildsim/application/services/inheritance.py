from __future__ import annotations

from typing import Mapping

from guildsim.application.services.balance_tables import PERSONALITY_INHERITANCE_SPREAD, clamp
from guildsim.application.services.random_source import RandomSource, jitter
from guildsim.domain.models.adventurer import PERSONALITY_TRAITS, Personality


def inherit_personality(
    rng: RandomSource,
    parent: Personality,
    spreads: Mapping[str, float] = PERSONALITY_INHERITANCE_SPREAD,
) -> Personality:
    """Copy each trait with a uniform jitter of +/- spread/2, clamped to [0, 100].

    Traits are drawn in the fixed order courage, loyalty, ambition, teamwork, greed.
    """

    values = {}
    for trait in PERSONALITY_TRAITS:
        spread = float(spreads.get(trait, 0))
        values[trait] = clamp(parent.trait(trait) + jitter(rng, spread), 0.0, 100.0)
    return Personality(**values)
