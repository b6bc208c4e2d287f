from __future__ import annotations

from guildsim.application.services.random_source import RandomSource, pick

DESCENDANT_GIVEN_NAMES = (
    "Alex", "Jordan", "Casey", "Morgan", "Riley", "Avery", "Quinn", "Sage",
    "Rowan", "River", "Phoenix", "Skylar", "Ember", "Aspen", "Wren", "Kai",
    "Nova", "Orion", "Luna", "Aria", "Zara", "Felix", "Iris", "Leo",
)

HEIR_GIVEN_NAMES = ("Alex", "Morgan", "Casey", "Riley", "Jordan", "Sage", "Phoenix", "River")

GENERATION_ORDINALS = (
    "the Second",
    "the Third",
    "the Fourth",
    "the Fifth",
    "the Sixth",
    "the Seventh",
    "the Eighth",
    "the Ninth",
    "the Tenth",
)

RECRUIT_NAMES = {
    "Warrior": ("Thrain Ironfist", "Grom Bloodaxe", "Valeria Stormblade", "Bjorn Bearkiller"),
    "Mage": ("Elara Stormweaver", "Mordecai Shadowcaster", "Sylvana Moonwhisper", "Zephyr Windcaller"),
    "Rogue": ("Shadow Nightstalker", "Raven Quickblade", "Silk Shadowstep", "Ghost Whisperwind"),
    "Archer": ("Falcon Swiftarrow", "Willow Longshot", "Hawkeye Stormbow", "Ranger Greenleaf"),
}


def split_name(full_name: str) -> tuple[str, str]:
    parts = str(full_name or "").split(" ")
    return parts[0], " ".join(parts[1:])


def generation_ordinal(generation: int) -> str:
    index = max(0, min(int(generation) - 2, len(GENERATION_ORDINALS) - 1))
    return GENERATION_ORDINALS[index]


def descendant_recruit_name(rng: RandomSource, parent_name: str) -> str:
    first, _ = split_name(parent_name)
    last = str(parent_name or "").split(" ")[-1]
    template = pick(rng, ("junior", "family", "younger"))
    if template == "junior":
        return f"{parent_name} Jr."
    if template == "family":
        return f"{pick(rng, DESCENDANT_GIVEN_NAMES)} {last}"
    return f"{first} the Younger"


def heir_name(rng: RandomSource, ancestor_name: str, generation: int, *, lineage_chance: float) -> str:
    first, surname = split_name(ancestor_name)
    if rng.next() < float(lineage_chance):
        return f"{first} {generation_ordinal(generation)}"
    given = pick(rng, HEIR_GIVEN_NAMES)
    if surname:
        return f"{given} {surname}"
    return f"{given} {first}son"
