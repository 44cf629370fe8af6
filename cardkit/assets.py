"""Asset loading: images by URL or path, and font faces by CSS family list.

The renderer treats asset keys as opaque; ``make_asset_resolver`` turns a
key into something ``AssetLoader`` can fetch. Required images raise
``AssetLoadError``; optional ones come back as ``None``.
"""

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union
from urllib.parse import quote, unquote_to_bytes, urlparse
from urllib.request import url2pathname

import requests
from PIL import Image, ImageFont

from .config import settings
from .errors import AssetLoadError
from .utils import RetryableHTTPError, asset_retry, get_logger
from .utils.retry import RETRYABLE_STATUS_CODES

logger = get_logger(__name__)

AssetResolver = Callable[[str], str]


# =============================================================================
# Images
# =============================================================================


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url[len("data:"):].partition(",")
    if not sep:
        raise ValueError("malformed data URL")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


class AssetLoader:
    """Fetches and decodes images from http(s), file and data URLs or paths."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": settings.user_agent})
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds

    @asset_retry
    def _http_get(self, url: str) -> bytes:
        response = self._session.get(url, timeout=self.timeout)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableHTTPError(f"HTTP {response.status_code} for {url}", response=response)
        response.raise_for_status()
        return response.content

    def fetch_bytes(self, url: str) -> bytes:
        """Return the raw bytes behind a URL or filesystem path."""
        if url.startswith("data:"):
            return _decode_data_url(url)
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            return self._http_get(url)
        if parsed.scheme == "file":
            return Path(url2pathname(parsed.path)).read_bytes()
        return Path(url).read_bytes()

    def load(self, url: str) -> Image.Image:
        """Load a required image as RGBA.

        Raises:
            AssetLoadError: If the image can't be fetched or decoded
        """
        if not url:
            raise AssetLoadError(url, "empty URL")
        try:
            data = self.fetch_bytes(url)
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return image.convert("RGBA")
        except (requests.RequestException, OSError, ValueError, Image.DecompressionBombError) as e:
            raise AssetLoadError(url, str(e)) from e

    def load_optional(self, url: Optional[str]) -> Optional[Image.Image]:
        """Load an optional image, returning None on any failure."""
        if not url:
            return None
        try:
            return self.load(url)
        except AssetLoadError as e:
            logger.warning(f"Optional asset unavailable, skipping: {e}")
            return None


def make_asset_resolver(base: Optional[Union[str, Path]] = None) -> AssetResolver:
    """Build a key -> URL function rooted at a base URL or directory.

    Defaults to ``ASSET_BASE_URL`` when set, else ``ASSETS_DIR``.
    """
    root = base if base is not None else (settings.asset_base_url or settings.assets_dir)

    if isinstance(root, str) and "://" in root:
        prefix = root.rstrip("/")

        def resolve_url(key: str) -> str:
            return f"{prefix}/{quote(key.lstrip('/'))}"

        return resolve_url

    directory = Path(root)

    def resolve_path(key: str) -> str:
        return str(directory / key.lstrip("/"))

    return resolve_path


# =============================================================================
# Fonts
# =============================================================================


@dataclass(frozen=True)
class FontSpec:
    """One face at one size, e.g. ``500 italic 60px``."""

    size: float
    weight: int = 500
    italic: bool = False


# File-name style suffixes tried for each (weight, italic), most specific first
_STYLE_SUFFIXES = {
    (400, False): ("Regular", "Book", "Medium"),
    (400, True): ("Italic", "RegularItalic", "MediumItalic"),
    (500, False): ("Medium", "Regular", "Book"),
    (500, True): ("MediumItalic", "Italic", "RegularItalic"),
    (700, False): ("Bold", "SemiBold", "DemiBold", "Medium"),
    (700, True): ("BoldItalic", "SemiBoldItalic", "Italic"),
}

# Generic CSS families mapped to common system fonts
_SYSTEM_FONTS = {
    "sans-serif": {
        False: (
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/Library/Fonts/Arial.ttf",
            "C:/Windows/Fonts/arial.ttf",
        ),
        True: (
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
            "/Library/Fonts/Arial Bold.ttf",
            "C:/Windows/Fonts/arialbd.ttf",
        ),
    },
}

_FONT_EXTENSIONS = (".ttf", ".otf")


def parse_font_family(family: str) -> list[str]:
    """Split a CSS font-family list into bare family names."""
    names = []
    for part in family.split(","):
        name = part.strip().strip("\"'").strip()
        if name:
            names.append(name)
    return names


class FontBook:
    """Resolves and caches font faces for a CSS family list.

    Faces are looked up as ``<Family>-<Style>.ttf|otf`` in the fonts
    directory (spaces in the family name removed or kept), then the system
    fonts for generic families, then Pillow's bundled scalable face. A
    missing face degrades the look but never fails the render.
    """

    def __init__(self, fonts_dir: Optional[Path] = None, system_fonts: bool = True):
        self.fonts_dir = fonts_dir if fonts_dir is not None else settings.fonts_dir
        self.system_fonts = system_fonts
        self._faces: dict[tuple[str, int, int, bool], ImageFont.FreeTypeFont] = {}
        self._paths: dict[tuple[str, int, bool], Optional[str]] = {}

    def _find_path(self, family: str, weight: int, italic: bool) -> Optional[str]:
        key = (family, weight, italic)
        if key in self._paths:
            return self._paths[key]

        suffixes = _STYLE_SUFFIXES.get((weight, italic), ("Regular",))
        found: Optional[str] = None
        for name in parse_font_family(family):
            system = _SYSTEM_FONTS.get(name.lower())
            if system is not None:
                if self.system_fonts:
                    found = next((p for p in system[weight >= 600] if Path(p).exists()), None)
            elif self.fonts_dir and self.fonts_dir.is_dir():
                stems = {name.replace(" ", ""), name}
                candidates = [
                    self.fonts_dir / f"{stem}-{suffix}{ext}"
                    for suffix in suffixes
                    for stem in sorted(stems)
                    for ext in _FONT_EXTENSIONS
                ]
                found = next((str(p) for p in candidates if p.exists()), None)
            if found:
                break

        if found is None:
            logger.debug(f"No font file for {family} {weight}{' italic' if italic else ''}")
        self._paths[key] = found
        return found

    def font(self, family: str, spec: FontSpec) -> ImageFont.FreeTypeFont:
        size = max(1, int(round(spec.size)))
        key = (family, size, spec.weight, spec.italic)
        face = self._faces.get(key)
        if face is not None:
            return face

        path = self._find_path(family, spec.weight, spec.italic)
        if path:
            try:
                face = ImageFont.truetype(path, size)
            except OSError as e:
                logger.warning(f"Failed to load font {path}: {e}")
        if face is None:
            face = ImageFont.load_default(size=size)
        self._faces[key] = face
        return face

    def preload(self, family: str, specs: Iterable[FontSpec]) -> None:
        """Load every face in ``specs`` up front, before any measuring."""
        for spec in set(specs):
            self.font(family, spec)
