"""cardkit - Template-driven trading card compositor."""

from .card_renderer import CardRenderer, RenderRequest
from .errors import AssetLoadError, CardkitError, ConfigurationError
from .layout import LayoutV1, resolve_layout
from .models import CropRect, TournamentConfig, clamp_crop, parse_card
from .templates import resolve_template_snapshot

__version__ = "0.1.0"

__all__ = [
    "CardRenderer",
    "RenderRequest",
    "AssetLoadError",
    "CardkitError",
    "ConfigurationError",
    "LayoutV1",
    "resolve_layout",
    "CropRect",
    "TournamentConfig",
    "clamp_crop",
    "parse_card",
    "resolve_template_snapshot",
]
