"""Versioned card layout schema and the override resolver.

A layout is a data-only description of every geometric and typographic
parameter the renderer needs for one card look. Tournaments reskin cards by
supplying a partial override that is deep-merged onto a base layout of the
same ``kind``. Numbers are card pixels (see ``constants``).
"""

import copy
from typing import Any, Literal, Mapping, Optional, Union

from pydantic import ValidationError

from .constants import CARD_WIDTH
from .models import WireModel
from .utils import get_logger

logger = get_logger(__name__)

LAYOUT_KIND = "usqc26-v1"


class Palette(WireModel):
    primary: str
    secondary: str
    white: str
    number_overlay: str


class Typography(WireModel):
    font_family: str


class FrameLayout(WireModel):
    outer_radius: float
    inner_x: float
    inner_y: float
    inner_width: float
    inner_height: float
    inner_radius: float


class NameBox(WireModel):
    width: float
    height: float
    border_width: float
    stroke_width: float


class NamePair(WireModel):
    first_name: float
    last_name: float


class NameLayout(WireModel):
    rotation: float
    max_width: float
    first_name_box: NameBox
    last_name_box: NameBox
    anchor_x: float
    anchor_y: float
    first_name_size: float
    last_name_size: float
    letter_spacing: NamePair
    left_padding: float
    right_padding: float
    box_extension: float
    text_y_offset: float
    box_offsets: NamePair
    text_offsets: NamePair


class EventBadgeLayout(WireModel):
    x: float
    y: float
    width: float
    height: float
    border_radius: float
    border_width: float
    font_size: float
    text_y_offset: float


class PositionNumberLayout(WireModel):
    center_x: float
    top_y: float
    position_font_size: float
    number_font_size: float
    position_letter_spacing: float
    number_letter_spacing: float
    position_stroke_width: float
    number_stroke_width: float
    number_x_offset: float


class TeamLogoLayout(WireModel):
    x: float
    y: float
    max_width: float
    max_height: float
    stroke_width: float
    stroke_color: str


class IconBox(WireModel):
    x: float
    y: float
    width: float
    height: float


class BottomBarSpacing(WireModel):
    photographer: float
    team_name: float


class BottomBarLayout(WireModel):
    y: float
    height: float
    text_y_offset: float
    camera_icon: IconBox
    photographer_x: float
    rarity_x: float
    rarity_size: float
    rarity_gap: float
    team_name_x: float
    font_size: float
    letter_spacing: BottomBarSpacing


class RareCardLayout(WireModel):
    """Rare-card positioning; box sizes and padding come from ``name``."""

    rotation: float
    anchor_x: float
    anchor_y: float
    max_width: float
    title_text_offset_x: float
    caption_text_offset_x: float
    title_letter_spacing: float
    caption_letter_spacing: float


class SuperRareLayout(WireModel):
    center_x: float
    first_name_y: float
    last_name_y: float
    first_name_size: float
    last_name_size: float


class LogoBox(WireModel):
    x: float
    y: float
    max_width: float
    max_height: float


class NationalTeamLayout(WireModel):
    rotation: float
    anchor_x: float
    anchor_y: float
    box_width: float
    box_height: float
    box_border_width: float
    text_padding_x: float
    name_font_size: float
    logo: LogoBox


class LayoutV1(WireModel):
    kind: Literal["usqc26-v1"]
    palette: Palette
    typography: Typography
    frame: FrameLayout
    name: NameLayout
    event_badge: EventBadgeLayout
    position_number: PositionNumberLayout
    team_logo: TeamLogoLayout
    bottom_bar: BottomBarLayout
    rare_card: RareCardLayout
    super_rare: SuperRareLayout
    national_team: NationalTeamLayout


_BASE_NAME = {
    "rotation": -6,
    "maxWidth": 550,
    "firstNameBox": {"width": 1000, "height": 46, "borderWidth": 3, "strokeWidth": 8},
    "lastNameBox": {"width": 1000, "height": 80, "borderWidth": 3, "strokeWidth": 8},
    "anchorX": 754,
    "anchorY": 844,
    "firstNameSize": 43,
    "lastNameSize": 60,
    "letterSpacing": {"firstName": 4.3, "lastName": 6},
    "leftPadding": 8,
    "rightPadding": 8,
    "boxExtension": 100,
    "textYOffset": 2,
    "boxOffsets": {"firstName": 8, "lastName": 3},
    "textOffsets": {"firstName": 12, "lastName": 10},
}

_BASE_SECTIONS = {
    "eventBadge": {
        "x": 679,
        "y": 64,
        "width": 76,
        "height": 20,
        "borderRadius": 6,
        "borderWidth": 2,
        "fontSize": 17,
        "textYOffset": 1,
    },
    "positionNumber": {
        "centerX": 698,
        "topY": 111,
        "positionFontSize": 24,
        "numberFontSize": 85,
        "positionLetterSpacing": 1.92,
        "numberLetterSpacing": -1.68,
        "positionStrokeWidth": 5,
        "numberStrokeWidth": 8,
        "numberXOffset": -2,
    },
    "teamLogo": {
        "x": 75,
        "y": 64,
        "maxWidth": 101,
        "maxHeight": 100,
        "strokeWidth": 1,
        "strokeColor": "#ffffff",
    },
    "bottomBar": {
        "y": 1036,
        "height": 26,
        "textYOffset": 14,
        "cameraIcon": {"x": 74, "y": 1040, "width": 22, "height": 15},
        "photographerX": 107,
        "rarityX": 403,
        "raritySize": 20,
        "rarityGap": 4,
        "teamNameX": 750,
        "fontSize": 20,
        "letterSpacing": {"photographer": 0.8, "teamName": 0.6},
    },
    "rareCard": {
        "rotation": -6,
        "anchorX": 754,
        "anchorY": 794,
        "maxWidth": 678,
        "titleTextOffsetX": 10,
        "captionTextOffsetX": 12,
        "titleLetterSpacing": 0,
        "captionLetterSpacing": 0,
    },
    "superRare": {
        "centerX": CARD_WIDTH / 2,
        "firstNameY": 853,
        "lastNameY": 914,
        "firstNameSize": 56,
        "lastNameSize": 81,
    },
    "nationalTeam": {
        "rotation": -6,
        "anchorX": 180,
        "anchorY": 78,
        "boxWidth": 500,
        "boxHeight": 50,
        "boxBorderWidth": 3,
        "textPaddingX": 16,
        "nameFontSize": 49,
        "logo": {"x": 75, "y": 64, "maxWidth": 101, "maxHeight": 100},
    },
}

FONT_FAMILY = '"Amifer", "Avenir Next", "Helvetica Neue", sans-serif'

# US Quadball Cup 2026 look (Figma measurements)
USQC26_LAYOUT_V1 = LayoutV1.model_validate({
    "kind": LAYOUT_KIND,
    "palette": {
        "primary": "#1b4278",
        "secondary": "#c8d7e9",
        "white": "#ffffff",
        "numberOverlay": "rgba(255, 255, 255, 0.67)",
    },
    "typography": {"fontFamily": FONT_FAMILY},
    "frame": {
        "outerRadius": 0,
        "innerX": 56,
        "innerY": 91,
        "innerWidth": 713,
        "innerHeight": 937,
        "innerRadius": 29,
    },
    "name": _BASE_NAME,
    **_BASE_SECTIONS,
})

# QC National Championships 2026 look: dark palette, square picture window
QCN26_LAYOUT_V1 = LayoutV1.model_validate({
    "kind": LAYOUT_KIND,
    "palette": {
        "primary": "#1f1f1f",
        "secondary": "#8a1f2f",
        "white": "#ffffff",
        "numberOverlay": "rgba(255, 255, 255, 0.67)",
    },
    "typography": {"fontFamily": FONT_FAMILY},
    "frame": {
        "outerRadius": 0,
        "innerX": 56,
        "innerY": 91,
        "innerWidth": 713,
        "innerHeight": 937,
        "innerRadius": 0,
    },
    "name": _BASE_NAME,
    **_BASE_SECTIONS,
})

LayoutInput = Union[LayoutV1, Mapping[str, Any]]


def _as_wire(value: LayoutInput) -> dict[str, Any]:
    if isinstance(value, LayoutV1):
        return value.model_dump(mode="json", by_alias=True)
    return copy.deepcopy(dict(value))


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto a copy of ``base``.

    Plain mappings on both sides recurse; anything else (lists, scalars)
    replaces the base value wholesale. ``None`` in the override means "not
    present". Keys the base doesn't know are copied through as given; schema
    validation in ``resolve_layout`` ignores them.
    """
    result = copy.deepcopy(dict(base))
    for key, value in override.items():
        if value is None:
            continue
        base_value = result.get(key)
        if isinstance(base_value, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def resolve_layout(base: LayoutInput, override: Optional[LayoutInput] = None) -> LayoutV1:
    """Merge a partial layout override onto a complete base layout.

    An override whose ``kind`` disagrees with ``usqc26-v1`` is ignored
    wholesale; an override without ``kind`` is treated as the same kind.
    Never raises: a merge that no longer matches the schema falls back to a
    copy of the base.
    """
    base_wire = _as_wire(base)
    if not override:
        return LayoutV1.model_validate(base_wire)

    override_wire = _as_wire(override)
    kind = override_wire.get("kind")
    if kind and kind != LAYOUT_KIND:
        logger.warning(f"Ignoring layout override of unknown kind {kind!r}")
        return LayoutV1.model_validate(base_wire)

    merged = deep_merge(base_wire, override_wire)
    merged["kind"] = LAYOUT_KIND
    try:
        return LayoutV1.model_validate(merged)
    except ValidationError as e:
        logger.warning(
            f"Layout override does not match the {LAYOUT_KIND} schema, using base layout: "
            f"{e.error_count()} error(s)"
        )
        return LayoutV1.model_validate(base_wire)


def parse_layout(value: Optional[LayoutInput]) -> Optional[LayoutV1]:
    """Return the layout if it is a complete ``usqc26-v1`` layout, else None."""
    if value is None:
        return None
    if isinstance(value, LayoutV1):
        return value
    if not isinstance(value, Mapping) or value.get("kind") != LAYOUT_KIND:
        return None
    try:
        return LayoutV1.model_validate(value)
    except ValidationError as e:
        logger.error(f"Invalid {LAYOUT_KIND} layout: {e.error_count()} error(s)")
        return None


def validate_layout(value: Any) -> list[str]:
    """List schema problems in a layout mapping; empty when it is valid."""
    try:
        LayoutV1.model_validate(value)
    except ValidationError as e:
        return [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
    return []
