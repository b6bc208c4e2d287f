from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from guildsim.domain.models.adventurer import AdventurerClass, Personality


@dataclass(frozen=True)
class Recruit:
    """Hiring candidate. Hired (converted to an Adventurer) or discarded, never edited."""

    id: str
    name: str
    level: int
    adventurer_class: AdventurerClass
    cost: int
    personality: Personality = field(default_factory=Personality)
    potential_skills: Dict[str, int] = field(default_factory=dict)
    descendant_of: Optional[str] = None
