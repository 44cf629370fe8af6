"""Pillow drawing surface with 2D-canvas compositing semantics.

Every primitive rasterises its coverage into an ``L`` mask and composes a
solid colour through it with source-over (``Image.alpha_composite``), so
translucent colours and antialiased text blend the way a browser canvas
does. ``silhouette`` gives the source-in operator used for logo strokes
and icon tinting.
"""

import math
import re
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Literal, Optional, Sequence

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from .models import CropRect
from .text_layout import FontMeasurer

Color = tuple[int, int, int, int]
Align = Literal["left", "center", "right"]
Baseline = Literal["top", "middle"]

_RGBA_PATTERN = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+%?)\s*)?\)",
    re.IGNORECASE,
)


@lru_cache(maxsize=256)
def parse_color(value: str) -> Color:
    """Parse a CSS colour (hex, name, ``rgb()``/``rgba()`` with 0-1 alpha)."""
    match = _RGBA_PATTERN.fullmatch(value.strip())
    if match:
        r, g, b, a = match.groups()
        if a is None:
            alpha = 255
        elif a.endswith("%"):
            alpha = round(float(a[:-1]) / 100 * 255)
        else:
            alpha = round(float(a) * 255)
        return (
            min(255, round(float(r))),
            min(255, round(float(g))),
            min(255, round(float(b))),
            max(0, min(255, alpha)),
        )
    return ImageColor.getcolor(value, "RGBA")


def round_px(value: float) -> int:
    """Round half up to a whole pixel."""
    return int(math.floor(value + 0.5))


def star_points(
    cx: float,
    cy: float,
    radius: float,
    points: int = 5,
    inner_ratio: float = 0.4,
) -> list[tuple[float, float]]:
    """Vertices of an upright star polygon."""
    vertices = []
    for i in range(points * 2):
        r = radius if i % 2 == 0 else radius * inner_ratio
        angle = math.pi / points * i - math.pi / 2
        vertices.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return vertices


def silhouette(image: Image.Image, color: Color) -> Image.Image:
    """Solid ``color`` wherever ``image`` has alpha (source-in fill)."""
    alpha = np.asarray(image.getchannel("A"), dtype=np.uint16)
    scaled = (alpha * color[3] + 127) // 255
    out = Image.new("RGBA", image.size, color[:3] + (0,))
    out.putalpha(Image.fromarray(scaled.astype(np.uint8)))
    return out


def fit_within(width: float, height: float, max_width: float, max_height: float) -> tuple[float, float]:
    """Scale (width, height) down to fit a box, never up."""
    ratio = min(max_width / width, max_height / height, 1.0)
    return width * ratio, height * ratio


class Painter:
    """Draws onto an RGBA image in a translated coordinate space.

    ``origin`` is where (0, 0) of the caller's coordinates lands in the
    image, so a painter over an offscreen layer can draw in coordinates
    local to an anchor point.
    """

    def __init__(self, image: Image.Image, origin: tuple[float, float] = (0.0, 0.0)):
        if image.mode != "RGBA":
            raise ValueError(f"Painter needs an RGBA image, got {image.mode}")
        self.image = image
        self.origin = origin

    @classmethod
    def blank(cls, width: int, height: int, background: Optional[Color] = None) -> "Painter":
        return cls(Image.new("RGBA", (width, height), background or (0, 0, 0, 0)))

    # ------------------------------------------------------------------
    # Compositing
    # ------------------------------------------------------------------

    def _pt(self, x: float, y: float) -> tuple[float, float]:
        return x + self.origin[0], y + self.origin[1]

    def _new_mask(self) -> Image.Image:
        return Image.new("L", self.image.size, 0)

    def _fill_mask(self, mask: Image.Image, color: Color) -> None:
        bbox = mask.getbbox()
        if not bbox or color[3] == 0:
            return
        coverage = mask.crop(bbox)
        if color[3] < 255:
            scaled = (np.asarray(coverage, dtype=np.uint16) * color[3] + 127) // 255
            coverage = Image.fromarray(scaled.astype(np.uint8))
        layer = Image.new("RGBA", coverage.size, color[:3] + (0,))
        layer.putalpha(coverage)
        self.image.alpha_composite(layer, dest=bbox[:2])

    def composite(self, layer: Image.Image, x: float, y: float) -> None:
        """Source-over ``layer`` with its top-left at (x, y), clipped to the image."""
        px, py = self._pt(x, y)
        dx, dy = round_px(px), round_px(py)
        sx, sy = max(0, -dx), max(0, -dy)
        dx, dy = max(0, dx), max(0, dy)
        w = min(layer.width - sx, self.image.width - dx)
        h = min(layer.height - sy, self.image.height - dy)
        if w <= 0 or h <= 0:
            return
        if layer.mode != "RGBA":
            layer = layer.convert("RGBA")
        self.image.alpha_composite(layer, dest=(dx, dy), source=(sx, sy, sx + w, sy + h))

    def blit(
        self,
        image: Image.Image,
        x: float,
        y: float,
        width: Optional[float] = None,
        height: Optional[float] = None,
    ) -> None:
        """Draw ``image`` scaled to (width, height) at (x, y)."""
        w = max(1, round_px(width)) if width is not None else image.width
        h = max(1, round_px(height)) if height is not None else image.height
        if (w, h) != image.size:
            image = image.resize((w, h), Image.Resampling.LANCZOS)
        self.composite(image, x, y)

    @contextmanager
    def rotated(self, anchor_x: float, anchor_y: float, degrees: float, radius: float) -> Iterator["Painter"]:
        """Yield a painter whose origin is the anchor, rotated by ``degrees``.

        Positive degrees turn clockwise on screen. ``radius`` must cover
        everything drawn in the local space.
        """
        half = int(math.ceil(radius))
        layer = Image.new("RGBA", (half * 2, half * 2), (0, 0, 0, 0))
        yield Painter(layer, origin=(half, half))
        if degrees:
            layer = layer.rotate(-degrees, resample=Image.Resampling.BICUBIC)
        self.composite(layer, anchor_x - half, anchor_y - half)

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def fill(self, color: Color) -> None:
        mask = Image.new("L", self.image.size, 255)
        self._fill_mask(mask, color)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Color) -> None:
        mask = self._new_mask()
        x0, y0 = self._pt(x, y)
        ImageDraw.Draw(mask).rectangle([x0, y0, x0 + w - 1, y0 + h - 1], fill=255)
        self._fill_mask(mask, color)

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: Color, line_width: float = 1.0) -> None:
        """Stroke centred on the rectangle edge, like ``strokeRect``."""
        half = line_width / 2
        x0, y0 = self._pt(x, y)
        mask = self._new_mask()
        draw = ImageDraw.Draw(mask)
        draw.rectangle([x0 - half, y0 - half, x0 + w + half - 1, y0 + h + half - 1], fill=255)
        if w > line_width and h > line_width:
            draw.rectangle([x0 + half, y0 + half, x0 + w - half - 1, y0 + h - half - 1], fill=0)
        self._fill_mask(mask, color)

    def fill_rounded_rect(self, x: float, y: float, w: float, h: float, radius: float, color: Color) -> None:
        x0, y0 = self._pt(x, y)
        mask = self._new_mask()
        ImageDraw.Draw(mask).rounded_rectangle(
            [x0, y0, x0 + w - 1, y0 + h - 1], radius=max(0, round_px(radius)), fill=255
        )
        self._fill_mask(mask, color)

    def stroke_rounded_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: float,
        color: Color,
        line_width: float = 1.0,
    ) -> None:
        half = line_width / 2
        x0, y0 = self._pt(x, y)
        mask = self._new_mask()
        draw = ImageDraw.Draw(mask)
        draw.rounded_rectangle(
            [x0 - half, y0 - half, x0 + w + half - 1, y0 + h + half - 1],
            radius=max(0, round_px(radius + half)),
            fill=255,
        )
        draw.rounded_rectangle(
            [x0 + half, y0 + half, x0 + w - half - 1, y0 + h - half - 1],
            radius=max(0, round_px(radius - half)),
            fill=0,
        )
        self._fill_mask(mask, color)

    def fill_with_cutout(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: float,
        color: Color,
    ) -> None:
        """Fill everything except a rounded rectangle (even-odd frame)."""
        mask = Image.new("L", self.image.size, 255)
        x0, y0 = self._pt(x, y)
        ImageDraw.Draw(mask).rounded_rectangle(
            [x0, y0, x0 + w - 1, y0 + h - 1], radius=max(0, round_px(radius)), fill=0
        )
        self._fill_mask(mask, color)

    def fill_circle(self, cx: float, cy: float, radius: float, color: Color) -> None:
        x0, y0 = self._pt(cx, cy)
        mask = self._new_mask()
        ImageDraw.Draw(mask).ellipse([x0 - radius, y0 - radius, x0 + radius, y0 + radius], fill=255)
        self._fill_mask(mask, color)

    def fill_polygon(self, points: Sequence[tuple[float, float]], color: Color) -> None:
        mask = self._new_mask()
        ImageDraw.Draw(mask).polygon([self._pt(px, py) for px, py in points], fill=255)
        self._fill_mask(mask, color)

    def fill_vertical_gradient(self, x: float, y: float, w: float, h: float, start: Color, end: Color) -> None:
        """Linear gradient from ``start`` at the top edge to ``end`` at the bottom."""
        width, height = round_px(w), round_px(h)
        if width <= 0 or height <= 0:
            return
        t = (np.arange(height, dtype=np.float64) + 0.5) / height
        colors = np.outer(1.0 - t, np.asarray(start, dtype=np.float64)) + np.outer(
            t, np.asarray(end, dtype=np.float64)
        )
        rows = np.clip(np.rint(colors), 0, 255).astype(np.uint8)
        pixels = np.ascontiguousarray(np.broadcast_to(rows[:, None, :], (height, width, 4)))
        self.composite(Image.fromarray(pixels), x, y)

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _text_mask(
        self,
        text: str,
        x: float,
        y: float,
        font: ImageFont.FreeTypeFont,
        anchor: str,
        letter_spacing: float,
        stroke_width: int,
    ) -> Image.Image:
        mask = self._new_mask()
        draw = ImageDraw.Draw(mask)
        if not letter_spacing:
            draw.text((x, y), text, fill=255, font=font, anchor=anchor,
                      stroke_width=stroke_width, stroke_fill=255)
            return mask
        # Per-character pen advance keeps kerning from the prefix width
        for i, ch in enumerate(text):
            if ch.isspace():
                continue
            cx = x + font.getlength(text[:i]) + letter_spacing * i
            draw.text((cx, y), ch, fill=255, font=font, anchor=anchor,
                      stroke_width=stroke_width, stroke_fill=255)
        return mask

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        font: ImageFont.FreeTypeFont,
        fill: Color,
        *,
        align: Align = "left",
        baseline: Baseline = "middle",
        letter_spacing: float = 0.0,
        stroke: Optional[Color] = None,
        stroke_width: float = 0.0,
    ) -> None:
        """Draw one line of text, stroke pass underneath the fill pass.

        ``stroke_width`` is the full canvas line width; half of it falls
        outside the glyph outline.
        """
        if not text:
            return
        width = FontMeasurer(font, letter_spacing).measure(text)
        if align == "right":
            x -= width
        elif align == "center":
            x -= width / 2
        px, py = self._pt(x, y)
        anchor = "lm" if baseline == "middle" else "la"

        if stroke is not None and stroke_width > 0:
            outline = max(1, round_px(stroke_width / 2))
            self._fill_mask(self._text_mask(text, px, py, font, anchor, letter_spacing, outline), stroke)
        self._fill_mask(self._text_mask(text, px, py, font, anchor, letter_spacing, 0), fill)


def draw_cropped_image(
    painter: Painter,
    image: Image.Image,
    crop: CropRect,
    dest_x: float,
    dest_y: float,
    dest_w: float,
    dest_h: float,
) -> None:
    """Scale the crop region into the destination, rotated about its centre."""
    src_w, src_h = image.size
    box = (
        crop.x * src_w,
        crop.y * src_h,
        min((crop.x + crop.w) * src_w, src_w),
        min((crop.y + crop.h) * src_h, src_h),
    )
    size = (max(1, round_px(dest_w)), max(1, round_px(dest_h)))
    scaled = image.resize(size, Image.Resampling.LANCZOS, box=box)
    if crop.rotate_deg:
        scaled = scaled.rotate(-crop.rotate_deg, resample=Image.Resampling.BICUBIC)
    painter.composite(scaled, dest_x, dest_y)
