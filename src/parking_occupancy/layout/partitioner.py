"""Basement filtering and fixed-size sectioning of parking spots."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..state.models import Spot

logger = logging.getLogger(__name__)

SECTION_SIZE = 24
BASEMENTS = (1, 2)


@dataclass
class Section:
    """A named, contiguous run of spots within one basement."""

    label: str
    spots: list[Spot]

    @property
    def available(self) -> int:
        return sum(1 for s in self.spots if not s.is_reserved)


@dataclass
class BasementLayout:
    """Sections and counts for one basement, rebuilt from the current spots."""

    basement: int
    spots: list[Spot]
    sections: list[Section]

    @property
    def is_empty(self) -> bool:
        """True when no spots belong to the basement; callers show an empty state."""
        return not self.spots

    @property
    def total(self) -> int:
        return len(self.spots)

    @property
    def available(self) -> int:
        """Free spots in this basement, counted from reservation flags."""
        return sum(1 for s in self.spots if not s.is_reserved)

    @property
    def occupied(self) -> int:
        return self.total - self.available


def zone_token(basement: int) -> str:
    """Name fragment that marks a spot as belonging to a basement, e.g. 'Zone B1'."""
    return f"Zone B{basement}"


def basement_spots(spots: Sequence[Spot], basement: int) -> list[Spot]:
    """Filter spots whose name contains the basement's zone token (case-sensitive)."""
    token = zone_token(basement)
    return [spot for spot in spots if token in spot.name]


def section_label(index: int, name_table: Sequence[str]) -> str:
    """Label for the section at index, falling back to a generated name past the table."""
    if 0 <= index < len(name_table):
        return name_table[index]
    return f"Section {index + 1}"


def partition_sections(
    spots: Sequence[Spot],
    name_table: Sequence[str],
    section_size: int = SECTION_SIZE,
) -> list[Section]:
    """
    Split spots into contiguous fixed-size sections in their original order.

    Args:
        spots: Spots already filtered to one basement
        name_table: Ordered section names; may be shorter than the number of sections
        section_size: Maximum spots per section

    Returns:
        One Section per window; empty input gives no sections
    """
    if section_size < 1:
        raise ValueError("section_size must be at least 1")

    return [
        Section(
            label=section_label(i // section_size, name_table),
            spots=list(spots[i:i + section_size]),
        )
        for i in range(0, len(spots), section_size)
    ]


def build_basement_layout(
    spots: Sequence[Spot],
    basement: int,
    section_names: dict[int, list[str]],
    section_size: int = SECTION_SIZE,
) -> BasementLayout:
    """Filter spots to a basement and partition them using that basement's name table."""
    filtered = basement_spots(spots, basement)
    sections = partition_sections(filtered, section_names.get(basement, []), section_size)

    logger.debug(
        f"Basement {basement}: {len(filtered)} spot(s) in {len(sections)} section(s)"
    )

    return BasementLayout(basement=basement, spots=filtered, sections=sections)


class ExpandedSectionSet:
    """Section indices currently expanded for display; all collapsed by default."""

    def __init__(self) -> None:
        self._indices: set[int] = set()

    def toggle(self, index: int) -> bool:
        """Flip a section's expanded state and return the new state."""
        if index in self._indices:
            self._indices.discard(index)
            return False
        self._indices.add(index)
        return True

    def is_expanded(self, index: int) -> bool:
        return index in self._indices

    @property
    def expanded(self) -> list[int]:
        return sorted(self._indices)

    def clear(self) -> None:
        self._indices.clear()


def find_section(layout: BasementLayout, index: int) -> Optional[Section]:
    """Get a section by index, or None when out of range."""
    if 0 <= index < len(layout.sections):
        return layout.sections[index]
    return None
