"""Sample cards and a synthetic photo for previewing templates without uploads."""

import base64
from datetime import datetime, timezone
from typing import Union

import numpy as np
from PIL import Image

from .canvas import Painter, parse_color
from .card_renderer import encode_png
from .constants import CARD_HEIGHT, CARD_WIDTH
from .models import CardTypeName, NationalTeamCard, RareCard, StandardCard, SuperRareCard, TournamentConfig, parse_card

SAMPLE_PHOTOGRAPHER = "Sample Photographer"

# Diagonal background stops: (offset, colour)
_BACKGROUND_STOPS = [(0.0, "#0f172a"), (0.55, "#1e293b"), (1.0, "#020617")]
_GLOW_COLOR = "#22c55e"
_GLOW_CENTER = (0.2, 0.2)
_GLOW_RADIUS = 0.9
_GLOW_OPACITY = 0.35


def _diagonal_gradient(width: int, height: int) -> np.ndarray:
    u = (np.arange(width, dtype=np.float64) + 0.5) / width
    v = (np.arange(height, dtype=np.float64) + 0.5) / height
    t = (u[None, :] + v[:, None]) / 2

    offsets = [offset for offset, _ in _BACKGROUND_STOPS]
    colors = np.array([parse_color(color)[:3] for _, color in _BACKGROUND_STOPS], dtype=np.float64)
    rgb = np.stack([np.interp(t, offsets, colors[:, c]) for c in range(3)], axis=-1)

    # Radial glow composited over the base
    d = np.hypot(u[None, :] - _GLOW_CENTER[0], v[:, None] - _GLOW_CENTER[1]) / _GLOW_RADIUS
    alpha = (_GLOW_OPACITY * np.clip(1.0 - d, 0.0, 1.0))[..., None]
    glow = np.array(parse_color(_GLOW_COLOR)[:3], dtype=np.float64)
    return rgb * (1.0 - alpha) + glow * alpha


def sample_background(width: int = CARD_WIDTH, height: int = CARD_HEIGHT) -> Image.Image:
    """Dark gradient stand-in photo with a few soft accent circles."""
    pixels = np.clip(np.rint(_diagonal_gradient(width, height)), 0, 255).astype(np.uint8)
    image = Image.fromarray(pixels).convert("RGBA")

    painter = Painter(image)
    sx, sy = width / CARD_WIDTH, height / CARD_HEIGHT
    scale = min(sx, sy)
    sky = parse_color("rgba(56, 189, 248, 0.25)")
    orange = parse_color("rgba(249, 115, 22, 0.2)")
    painter.fill_circle(690 * sx, 180 * sy, 90 * scale, sky)
    painter.fill_circle(520 * sx, 320 * sy, 30 * scale, sky)
    painter.fill_circle(130 * sx, 860 * sy, 140 * scale, orange)
    return image


def sample_background_url() -> str:
    """``sample_background`` as a PNG data URL, loadable like any photo URL."""
    encoded = base64.b64encode(encode_png(sample_background())).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def build_sample_card(
    config: TournamentConfig,
    card_type: CardTypeName,
    template_id: str,
) -> Union[StandardCard, NationalTeamCard, RareCard, SuperRareCard]:
    """Placeholder card of the given type, used for template previews."""
    now = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    common = {
        "id": "preview",
        "tournamentId": config.id,
        "cardType": card_type,
        "status": "draft",
        "createdAt": now,
        "updatedAt": now,
        "templateId": template_id,
        "photographer": SAMPLE_PHOTOGRAPHER,
        "photo": {"crop": {"x": 0, "y": 0, "w": 1, "h": 1, "rotateDeg": 0}},
    }

    if card_type == "rare":
        return parse_card({
            **common,
            "title": "Championship MVP",
            "caption": "Limited edition showcase",
        })

    type_config = config.card_type_config(card_type)
    position = type_config.positions[0] if type_config and type_config.positions else "Position"
    team = config.teams[0] if config.teams else None
    with_team = card_type in ("player", "team-staff") and team is not None

    return parse_card({
        **common,
        "firstName": "Jordan",
        "lastName": "Lopez",
        "position": position,
        "jerseyNumber": "12",
        "teamId": team.id if with_team else None,
        "teamName": team.name if with_team else None,
    })
