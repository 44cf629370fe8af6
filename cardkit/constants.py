"""Card canvas geometry: canvas size, print trim and safe zones.

Everything is derived from ``CARD_WIDTH``/``CARD_HEIGHT`` and the two inset
constants so the boxes never drift from each other. Values are in card
pixels at 300 DPI (1/8" = 37.5px).
"""

import math
from dataclasses import dataclass

CARD_WIDTH = 825
CARD_HEIGHT = 1125
CARD_ASPECT = CARD_WIDTH / CARD_HEIGHT  # ~0.7333

TRIM_INSET_PX = 37.5
SAFE_INSET_PX = 75


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle in card pixels."""

    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def contains(self, other: "Box") -> bool:
        """True if ``other`` lies inside this box on all four edges."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def pixel_bounds(self) -> tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) box, rounding half up."""
        return (
            _round_half_up(self.x),
            _round_half_up(self.y),
            _round_half_up(self.right),
            _round_half_up(self.bottom),
        )


@dataclass(frozen=True)
class GuideInsets:
    """Box insets as percentages of a container, for UI overlays."""

    left: float
    top: float
    right: float
    bottom: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _inset_box(inset: float) -> Box:
    return Box(
        x=inset,
        y=inset,
        w=CARD_WIDTH - 2 * inset,
        h=CARD_HEIGHT - 2 * inset,
    )


TRIM_BOX = _inset_box(TRIM_INSET_PX)
SAFE_BOX = _inset_box(SAFE_INSET_PX)
CARD_BOX = Box(0, 0, CARD_WIDTH, CARD_HEIGHT)

TRIM_WIDTH = TRIM_BOX.w
TRIM_HEIGHT = TRIM_BOX.h
TRIM_ASPECT = TRIM_WIDTH / TRIM_HEIGHT  # ~0.7143


def to_guide_percent(value: float, total: float) -> float:
    """Percentage of ``total`` rounded to 3 decimal places."""
    return round(value / total * 100, 3)


def box_to_inset_percents(box: Box, container_w: float, container_h: float) -> GuideInsets:
    return GuideInsets(
        left=to_guide_percent(box.x, container_w),
        top=to_guide_percent(box.y, container_h),
        right=to_guide_percent(container_w - box.right, container_w),
        bottom=to_guide_percent(container_h - box.bottom, container_h),
    )


GUIDE_PERCENTAGES = {
    # Trim box as percentage of full bleed card
    "trim": box_to_inset_percents(TRIM_BOX, CARD_WIDTH, CARD_HEIGHT),
    # Safe box as percentage of full bleed card
    "safe": box_to_inset_percents(SAFE_BOX, CARD_WIDTH, CARD_HEIGHT),
    # Safe box as percentage of the trim box (trim-basis containers)
    "safe_within_trim": box_to_inset_percents(
        Box(
            x=SAFE_BOX.x - TRIM_BOX.x,
            y=SAFE_BOX.y - TRIM_BOX.y,
            w=SAFE_BOX.w,
            h=SAFE_BOX.h,
        ),
        TRIM_BOX.w,
        TRIM_BOX.h,
    ),
}
