from cardkit.constants import (
    CARD_BOX,
    CARD_HEIGHT,
    CARD_WIDTH,
    GUIDE_PERCENTAGES,
    SAFE_BOX,
    TRIM_ASPECT,
    TRIM_BOX,
    Box,
    to_guide_percent,
)


def test_trim_and_safe_boxes():
    assert TRIM_BOX == Box(37.5, 37.5, 825 - 75, 1125 - 75)
    assert SAFE_BOX == Box(75, 75, 825 - 150, 1125 - 150)


def test_boxes_nest_on_every_edge():
    assert CARD_BOX.contains(TRIM_BOX)
    assert TRIM_BOX.contains(SAFE_BOX)
    assert not SAFE_BOX.contains(TRIM_BOX)


def test_trim_pixel_bounds_round_half_up():
    assert TRIM_BOX.pixel_bounds() == (38, 38, 788, 1088)
    assert CARD_BOX.pixel_bounds() == (0, 0, CARD_WIDTH, CARD_HEIGHT)


def test_trim_aspect():
    assert abs(TRIM_ASPECT - 750 / 1050) < 1e-12


def test_guide_percent_rounds_to_three_places():
    assert to_guide_percent(37.5, 825) == 4.545
    assert to_guide_percent(37.5, 1125) == 3.333


def test_guide_percentages():
    trim = GUIDE_PERCENTAGES["trim"]
    assert (trim.left, trim.top, trim.right, trim.bottom) == (4.545, 3.333, 4.545, 3.333)

    safe = GUIDE_PERCENTAGES["safe"]
    assert (safe.left, safe.top) == (9.091, 6.667)

    within = GUIDE_PERCENTAGES["safe_within_trim"]
    assert within.left == 5.0
    assert within.top == round(37.5 / 1050 * 100, 3)
