import pytest

from conftest import make_spots, to_spots
from parking_occupancy.layout.partitioner import (
    ExpandedSectionSet,
    basement_spots,
    build_basement_layout,
    find_section,
    partition_sections,
    section_label,
    zone_token,
)

NAMES = ["IJARAH AVENUE(VIP)", "FIRST STREET(VIP)", "LORATO NTAKHWANA AVENUE"]


def test_zone_token():
    assert zone_token(1) == "Zone B1"
    assert zone_token(2) == "Zone B2"


def test_basement_filter_is_case_sensitive_substring():
    spots = to_spots(
        make_spots(3, "Zone B1")
        + make_spots(2, "Zone B2", start_id=50)
        + [{"parkingSpotId": 99, "parkingSpotName": "A1 zone b1", "isReserved": False}]
    )

    assert [s.spot_id for s in basement_spots(spots, 1)] == [1, 2, 3]
    assert [s.spot_id for s in basement_spots(spots, 2)] == [50, 51]


def test_fifty_spots_make_three_sections():
    spots = to_spots(make_spots(50))

    sections = partition_sections(spots, NAMES)

    assert [len(s.spots) for s in sections] == [24, 24, 2]
    assert [s.label for s in sections] == NAMES


def test_short_name_table_falls_back_per_section():
    spots = to_spots(make_spots(50))

    sections = partition_sections(spots, NAMES[:2])

    assert [s.label for s in sections] == [NAMES[0], NAMES[1], "Section 3"]


def test_sections_keep_original_order():
    spots = to_spots(make_spots(30))

    sections = partition_sections(spots, [])

    flattened = [s.spot_id for section in sections for s in section.spots]
    assert flattened == [s.spot_id for s in spots]
    assert [s.label for s in sections] == ["Section 1", "Section 2"]


def test_empty_input_gives_no_sections():
    assert partition_sections([], NAMES) == []


def test_invalid_section_size():
    with pytest.raises(ValueError):
        partition_sections(to_spots(make_spots(3)), NAMES, section_size=0)


def test_section_label_bounds():
    assert section_label(0, NAMES) == NAMES[0]
    assert section_label(3, NAMES) == "Section 4"
    assert section_label(0, []) == "Section 1"


def test_basement_layout_counts_and_empty_state():
    payload = make_spots(26, "Zone B1", reserved_every=2) + make_spots(4, "Zone B2", start_id=200)
    spots = to_spots(payload)

    layout = build_basement_layout(spots, 1, {1: NAMES})
    assert not layout.is_empty
    assert layout.total == 26
    assert layout.available == 13
    assert layout.occupied == 13
    assert [s.label for s in layout.sections] == NAMES[:2]
    assert layout.sections[1].available == 1

    empty = build_basement_layout(to_spots(make_spots(4, "Zone B2")), 1, {1: NAMES})
    assert empty.is_empty
    assert empty.sections == []


def test_basement_without_name_table_uses_generated_labels():
    layout = build_basement_layout(to_spots(make_spots(25, "Zone B2")), 2, {})

    assert [s.label for s in layout.sections] == ["Section 1", "Section 2"]


def test_find_section():
    layout = build_basement_layout(to_spots(make_spots(25)), 1, {1: NAMES})

    assert find_section(layout, 1).label == NAMES[1]
    assert find_section(layout, 2) is None
    assert find_section(layout, -1) is None


def test_expanded_sections_toggle():
    expanded = ExpandedSectionSet()
    assert expanded.expanded == []

    assert expanded.toggle(2) is True
    assert expanded.toggle(0) is True
    assert expanded.is_expanded(2)
    assert expanded.expanded == [0, 2]

    assert expanded.toggle(2) is False
    assert not expanded.is_expanded(2)

    expanded.clear()
    assert expanded.expanded == []
