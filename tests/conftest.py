"""Shared fixtures: a photo on disk, a small tournament and a deterministic renderer."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from cardkit.assets import AssetLoader, FontBook, make_asset_resolver
from cardkit.card_renderer import CardRenderer, RenderRequest
from cardkit.layout import USQC26_LAYOUT_V1
from cardkit.models import TournamentConfig, parse_card


class CharWidthMeasurer:
    """Every character is ``width`` pixels wide."""

    def __init__(self, width: float = 10.0):
        self.width = width

    def measure(self, text: str) -> float:
        return len(text) * self.width


@pytest.fixture
def measurer() -> CharWidthMeasurer:
    return CharWidthMeasurer()


@pytest.fixture
def photo_path(tmp_path: Path) -> Path:
    """400x300 opaque photo with a horizontal and vertical ramp."""
    x = np.linspace(0, 255, 400, dtype=np.float64)
    y = np.linspace(0, 255, 300, dtype=np.float64)
    pixels = np.zeros((300, 400, 3), dtype=np.uint8)
    pixels[..., 0] = x[None, :].astype(np.uint8)
    pixels[..., 1] = y[:, None].astype(np.uint8)
    pixels[..., 2] = 128
    path = tmp_path / "photo.png"
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    root = tmp_path / "assets"
    (root / "logos").mkdir(parents=True)
    logo = Image.new("RGBA", (80, 80), (0, 0, 0, 0))
    logo.paste((220, 30, 30, 255), (10, 10, 70, 70))
    logo.save(root / "logos" / "team.png")
    return root


@pytest.fixture
def resolver(assets_dir: Path):
    return make_asset_resolver(assets_dir)


@pytest.fixture
def renderer(tmp_path: Path) -> CardRenderer:
    """Renderer with Pillow's bundled font only and no camera icon."""
    fonts = FontBook(fonts_dir=tmp_path / "no-fonts", system_fonts=False)
    return CardRenderer(loader=AssetLoader(), fonts=fonts, camera_icon_url="")


@pytest.fixture
def config_data() -> dict:
    return {
        "id": "test-2026",
        "name": "Test Cup 2026",
        "year": 2026,
        "branding": {
            "tournamentLogoKey": "logos/missing-tournament.png",
            "primaryColor": "#1b4278",
            "eventIndicator": "TEST26",
        },
        "teams": [
            {"id": "logo-team", "name": "Logo Team", "logoKey": "logos/team.png"},
            {"id": "plain-team", "name": "Plain Team", "logoKey": ""},
            {"id": "twin-team", "name": "Plain Team", "logoKey": "logos/team.png"},
        ],
        "cardTypes": [
            {"type": "player", "label": "Player", "positions": ["Chaser", "Keeper"]},
            {"type": "media", "label": "Media", "positions": ["Photographer"]},
            {"type": "rare", "label": "Rare Card", "positions": []},
            {"type": "super-rare", "label": "Super Rare", "positions": ["Seeker"]},
            {"type": "national-team", "label": "National Team", "positions": ["Beater"]},
        ],
        "templates": [
            {"id": "usqc26", "label": "USQC26", "layout": USQC26_LAYOUT_V1.to_wire()},
        ],
        "defaultTemplates": {"fallback": "usqc26"},
    }


@pytest.fixture
def config(config_data: dict) -> TournamentConfig:
    return TournamentConfig.model_validate(config_data)


@pytest.fixture
def player_card():
    return parse_card({
        "id": "card-1",
        "tournamentId": "test-2026",
        "cardType": "player",
        "firstName": "Jordan",
        "lastName": "Lopez",
        "position": "Chaser",
        "jerseyNumber": "12",
        "teamId": "plain-team",
        "photographer": "Sam Shutter",
        "photo": {"crop": {"x": 0, "y": 0, "w": 1, "h": 1, "rotateDeg": 0}},
    })


@pytest.fixture
def make_request(config, photo_path, resolver):
    def build(card, **overrides) -> RenderRequest:
        fields = {
            "card": card,
            "config": config,
            "image_url": str(photo_path),
            "resolve_asset_url": resolver,
        }
        fields.update(overrides)
        return RenderRequest(**fields)

    return build
