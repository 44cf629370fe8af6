"""Wire-format data models consumed by the renderer.

Cards and tournament configs arrive as camelCase JSON from the card API;
the models accept either the camelCase aliases or the snake_case field
names. The renderer only ever reads them.
"""

import math
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel

CardTypeName = Literal[
    "player",
    "team-staff",
    "media",
    "official",
    "tournament-staff",
    "rare",
    "super-rare",
    "national-team",
]
CardRarity = Literal["common", "uncommon", "rare", "super-rare"]
CardStatus = Literal["draft", "submitted", "rendered"]
OverlayPlacement = Literal["belowText", "aboveText"]
RotateDeg = Literal[0, 90, 180, 270]

CARD_TYPES: tuple[str, ...] = (
    "player",
    "team-staff",
    "media",
    "official",
    "tournament-staff",
    "rare",
    "super-rare",
    "national-team",
)
VALID_ROTATIONS = (0, 90, 180, 270)

# Card types whose bottom bar shows the position instead of a team name
POSITION_IN_BOTTOM_BAR = frozenset({"media", "official", "tournament-staff"})


class WireModel(BaseModel):
    """Base for camelCase wire models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump to the camelCase JSON shape, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Crop
# =============================================================================


# Float slack allowed when checking x+w and y+h against the image edge
CROP_TOLERANCE = 1e-9


class CropRect(WireModel):
    """Fractional crop of the source photo plus a right-angle rotation."""

    x: float = Field(default=0.0, ge=0.0, le=1.0)
    y: float = Field(default=0.0, ge=0.0, le=1.0)
    w: float = Field(default=1.0, gt=0.0, le=1.0)
    h: float = Field(default=1.0, gt=0.0, le=1.0)
    rotate_deg: RotateDeg = 0

    @model_validator(mode="after")
    def _inside_image(self) -> "CropRect":
        if self.x + self.w > 1 + CROP_TOLERANCE or self.y + self.h > 1 + CROP_TOLERANCE:
            raise ValueError(
                f"crop extends past the image: x+w={self.x + self.w:g}, y+h={self.y + self.h:g}"
            )
        return self


DEFAULT_CROP = CropRect(x=0, y=0, w=1, h=1, rotate_deg=0)

MIN_CROP_SIZE = 0.001


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _to_rotate_deg(value: Any) -> Optional[int]:
    numeric = _to_number(value)
    if numeric is not None and numeric in VALID_ROTATIONS:
        return int(numeric)
    return None


def _clamp(n: float, low: float, high: float) -> float:
    return min(max(n, low), high)


def clamp_crop(value: Any) -> Optional[CropRect]:
    """Normalize a raw crop mapping into a CropRect inside the unit square.

    - Clamps x, y to [0, 1]
    - Clamps w, h to [0.001, 1]
    - Shrinks w, h so the crop doesn't extend beyond the image
    - Rotation outside 0/90/180/270 becomes 0

    Returns None when the value isn't a mapping or any of x, y, w, h is
    missing or non-numeric. Accepts a CropRect too, which makes clamping
    an already valid crop a no-op.
    """
    if isinstance(value, CropRect):
        value = value.model_dump(by_alias=True)
    if not isinstance(value, Mapping):
        return None

    raw = [_to_number(value.get(key)) for key in ("x", "y", "w", "h")]
    if any(part is None for part in raw):
        return None
    raw_x, raw_y, raw_w, raw_h = raw

    x = _clamp(raw_x, 0.0, 1.0)
    y = _clamp(raw_y, 0.0, 1.0)
    w = _clamp(raw_w, MIN_CROP_SIZE, 1.0)
    h = _clamp(raw_h, MIN_CROP_SIZE, 1.0)

    clamped_w = min(w, 1.0 - x)
    clamped_h = min(h, 1.0 - y)
    # Offsets at the far edge leave nothing to crop; pull back to a minimum sliver
    if clamped_w < MIN_CROP_SIZE:
        clamped_w, x = MIN_CROP_SIZE, 1.0 - MIN_CROP_SIZE
    if clamped_h < MIN_CROP_SIZE:
        clamped_h, y = MIN_CROP_SIZE, 1.0 - MIN_CROP_SIZE

    rotate_deg = _to_rotate_deg(value.get("rotateDeg", value.get("rotate_deg")))
    return CropRect(x=x, y=y, w=clamped_w, h=clamped_h, rotate_deg=rotate_deg or 0)


def is_valid_crop_rect(crop: Any, tolerance: float = CROP_TOLERANCE) -> bool:
    """True if ``crop`` is fully contained in the unit square of the image."""
    if crop is None:
        return False
    if isinstance(crop, CropRect):
        crop = crop.model_dump(by_alias=True)
    if not isinstance(crop, Mapping):
        return False

    values = [crop.get(key) for key in ("x", "y", "w", "h")]
    if not all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in values
    ):
        return False
    x, y, w, h = values
    if not (0 <= x <= 1 and 0 <= y <= 1):
        return False
    if not (0 < w <= 1 and 0 < h <= 1):
        return False
    if x + w > 1 + tolerance or y + h > 1 + tolerance:
        return False
    return crop.get("rotateDeg", crop.get("rotate_deg", 0)) in VALID_ROTATIONS


# =============================================================================
# Templates
# =============================================================================


class TemplateTheme(WireModel):
    gradient_start: str
    gradient_end: str
    border: str
    accent: str
    label: str
    name_color: str
    meta: str
    watermark: str


class TemplateThemeOverride(WireModel):
    gradient_start: Optional[str] = None
    gradient_end: Optional[str] = None
    border: Optional[str] = None
    accent: Optional[str] = None
    label: Optional[str] = None
    name_color: Optional[str] = None
    meta: Optional[str] = None
    watermark: Optional[str] = None


class TemplateFlags(WireModel):
    show_gradient: bool = False
    show_borders: bool = False
    show_watermark_jersey: bool = False


class TemplateFlagsOverride(WireModel):
    show_gradient: Optional[bool] = None
    show_borders: Optional[bool] = None
    show_watermark_jersey: Optional[bool] = None


class TemplateDefinition(WireModel):
    """A named binding of layout, theme, overlay and flags."""

    id: str
    label: str
    overlay_key: Optional[str] = None
    theme: Optional[TemplateThemeOverride] = None
    flags: Optional[TemplateFlagsOverride] = None
    overlay_placement: Optional[OverlayPlacement] = None
    # Partial layout override, merged onto the base layout at resolve time
    layout: Optional[dict[str, Any]] = None


class TemplateDefaults(WireModel):
    fallback: str
    by_card_type: dict[str, str] = Field(default_factory=dict)


class TemplateSnapshot(WireModel):
    """Frozen copy of a resolved template, persisted beside a rendered PNG."""

    overlay_key: Optional[str] = None
    theme: TemplateTheme
    flags: TemplateFlags
    overlay_placement: OverlayPlacement = "belowText"
    layout: dict[str, Any]


class RenderMeta(WireModel):
    key: str
    template_id: str
    rendered_at: str
    template_snapshot: TemplateSnapshot


# =============================================================================
# Tournament
# =============================================================================


class Branding(WireModel):
    tournament_logo_key: str
    org_logo_key: Optional[str] = None
    primary_color: Optional[str] = None
    event_indicator: Optional[str] = None
    default_team_name: Optional[str] = None


class Team(WireModel):
    id: str
    name: str
    logo_key: str = ""


class CardTypeConfig(WireModel):
    type: CardTypeName
    enabled: bool = True
    label: str
    show_team_field: bool = False
    show_jersey_number: bool = False
    positions: list[str] = Field(default_factory=list)
    position_multi_select: bool = False
    max_positions: Optional[int] = None
    logo_override_key: Optional[str] = None


class TournamentConfig(WireModel):
    id: str
    name: str
    year: int
    branding: Branding
    teams: list[Team] = Field(default_factory=list)
    card_types: list[CardTypeConfig] = Field(default_factory=list)
    templates: Optional[list[TemplateDefinition]] = None
    default_templates: Optional[TemplateDefaults] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def find_team(self, team_id: Optional[str]) -> Optional[Team]:
        if not team_id:
            return None
        return next((team for team in self.teams if team.id == team_id), None)

    def card_type_config(self, card_type: str) -> Optional[CardTypeConfig]:
        return next((entry for entry in self.card_types if entry.type == card_type), None)


# =============================================================================
# Cards
# =============================================================================


class CardPhoto(WireModel):
    original_key: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    crop: Optional[CropRect] = None
    crop_key: Optional[str] = None


class CardBase(WireModel):
    id: str = ""
    tournament_id: str = ""
    rarity: Optional[CardRarity] = None
    template_id: Optional[str] = None
    status: CardStatus = "draft"
    photographer: Optional[str] = None
    photo: Optional[CardPhoto] = None
    render_key: Optional[str] = None
    render_meta: Optional[RenderMeta] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def crop(self) -> CropRect:
        if self.photo and self.photo.crop:
            return self.photo.crop
        return DEFAULT_CROP


class PlayerFields(WireModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    team_id: Optional[str] = None
    team_name: Optional[str] = None
    position: Optional[str] = None
    jersey_number: Optional[str] = None


class StandardCard(CardBase, PlayerFields):
    """Player, staff, media, official and tournament-staff cards."""

    card_type: Literal["player", "team-staff", "media", "official", "tournament-staff"]


class NationalTeamCard(CardBase, PlayerFields):
    card_type: Literal["national-team"]


class RareCard(CardBase):
    card_type: Literal["rare"]
    title: Optional[str] = None
    caption: Optional[str] = None


class SuperRareCard(CardBase, PlayerFields):
    card_type: Literal["super-rare"]
    title: Optional[str] = None
    caption: Optional[str] = None


Card = Annotated[
    Union[StandardCard, NationalTeamCard, RareCard, SuperRareCard],
    Field(discriminator="card_type"),
]

_card_adapter: TypeAdapter = TypeAdapter(Card)


def parse_card(data: Mapping[str, Any]) -> Union[StandardCard, NationalTeamCard, RareCard, SuperRareCard]:
    """Validate a raw card mapping into the matching card model."""
    return _card_adapter.validate_python(data)


def parse_tournament_config(data: Mapping[str, Any]) -> TournamentConfig:
    return TournamentConfig.model_validate(data)
