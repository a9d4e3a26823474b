"""Spot layout module: basement sections and display grouping."""

from .grouping import group_by_leading_character
from .partitioner import (
    BasementLayout,
    ExpandedSectionSet,
    Section,
    basement_spots,
    build_basement_layout,
    partition_sections,
    zone_token,
)

__all__ = [
    "BasementLayout",
    "ExpandedSectionSet",
    "Section",
    "basement_spots",
    "build_basement_layout",
    "group_by_leading_character",
    "partition_sections",
    "zone_token",
]
