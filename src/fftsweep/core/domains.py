"""
Recording Domains
=================

Each soundscape domain compares exactly two habitats. One of them is the
"reference" (natural) habitat: it is listed first in reports and its
cohort is written as Habitat1 in the descriptor table. The reference only
affects ordering; no statistic depends on which habitat it is.

Domains also define how recordings are grouped in time:
- underwater: by night, only records tagged with the night period
- terrestrial: by dawn or dusk chorus
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Domain:
    """
    Habitat and grouping conventions for one soundscape domain.

    Attributes:
        name: Domain identifier ("underwater" or "terrestrial")
        group_column: Name of the grouping-key column in outputs
        reference_habitat: Natural habitat, reported first
        contrast_habitat: The habitat compared against the reference
        night_period_only: Keep only records tagged as the night period
    """

    name: str
    group_column: str
    reference_habitat: str
    contrast_habitat: str
    night_period_only: bool = False

    @property
    def habitats(self) -> Tuple[str, str]:
        """Habitats in reporting order, reference first."""
        return (self.reference_habitat, self.contrast_habitat)

    def is_habitat(self, value: str) -> bool:
        return value in self.habitats


UNDERWATER = Domain(
    name="underwater",
    group_column="Night",
    reference_habitat="Pocillopora",
    contrast_habitat="Non-Pocillopora",
    night_period_only=True,
)

TERRESTRIAL = Domain(
    name="terrestrial",
    group_column="Chorus",
    reference_habitat="Bushland",
    contrast_habitat="Urban",
)

DOMAINS: Dict[str, Domain] = {d.name: d for d in (UNDERWATER, TERRESTRIAL)}


def get_domain(name: str) -> Domain:
    """
    Look up a domain by name.

    Raises:
        ValueError: If the name is not a known domain
    """
    try:
        return DOMAINS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown domain: {name}. Must be one of {sorted(DOMAINS)}"
        ) from None
