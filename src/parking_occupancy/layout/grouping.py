"""Grouping of spots by the first character of their name, for grid display."""

from typing import Iterable

from ..state.models import Spot


def group_by_leading_character(spots: Iterable[Spot]) -> dict[str, list[Spot]]:
    """
    Group spots by the first character of their display name.

    Keys appear in the order they are first seen and each group keeps the
    input order. This is independent of basement sectioning.
    """
    groups: dict[str, list[Spot]] = {}
    for spot in spots:
        groups.setdefault(spot.name[0], []).append(spot)
    return groups
