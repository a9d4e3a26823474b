from parking_occupancy.layout.grouping import group_by_leading_character
from parking_occupancy.state.models import Spot


def spot(spot_id: int, name: str) -> Spot:
    return Spot(spot_id=spot_id, name=name, is_reserved=False)


def test_groups_follow_first_seen_order():
    spots = [spot(1, "B1"), spot(2, "A1"), spot(3, "B2"), spot(4, "C1"), spot(5, "A2")]

    groups = group_by_leading_character(spots)

    assert list(groups) == ["B", "A", "C"]
    assert [s.spot_id for s in groups["B"]] == [1, 3]
    assert [s.spot_id for s in groups["A"]] == [2, 5]


def test_every_spot_lands_in_exactly_one_group():
    spots = [spot(i, f"{'XYZ'[i % 3]}{i} Zone B1") for i in range(12)]

    groups = group_by_leading_character(spots)

    ids = sorted(s.spot_id for members in groups.values() for s in members)
    assert ids == list(range(12))


def test_empty_input():
    assert group_by_leading_character([]) == {}
