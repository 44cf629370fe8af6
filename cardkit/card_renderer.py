"""Trading card renderer: a template-driven Pillow compositor.

Composites a player photo, crop, card data and a resolved layout into a
825x1125 print-ready PNG. Three output modes share one pipeline: full
bleed, trim-box preview and crop-only.
"""

import io
import math
from dataclasses import dataclass
from typing import Optional, Union

from PIL import Image

from .assets import AssetLoader, AssetResolver, FontBook, FontSpec
from .canvas import (
    Color,
    Painter,
    draw_cropped_image,
    fit_within,
    parse_color,
    silhouette,
    star_points,
)
from .config import settings
from .constants import CARD_HEIGHT, CARD_WIDTH, TRIM_BOX
from .layout import LayoutV1, LogoBox, NameBox, TeamLogoLayout, parse_layout
from .models import (
    POSITION_IN_BOTTOM_BAR,
    CardRarity,
    CropRect,
    NationalTeamCard,
    RareCard,
    StandardCard,
    SuperRareCard,
    Team,
    TemplateSnapshot,
    TemplateTheme,
    TournamentConfig,
)
from .templates import resolve_template_snapshot
from .text_layout import FontMeasurer, wrap_text, widest_line
from .utils import get_logger

logger = get_logger(__name__)

AnyCard = Union[StandardCard, NationalTeamCard, RareCard, SuperRareCard]

NAME_MAX_LINES = 2
RARE_MAX_LINES = 10
LINE_HEIGHT_RATIO = 1.1
WATERMARK_FONT_SIZE = 240
ERROR_BACKGROUND = "#f87171"
ERROR_FONT_FAMILY = "sans-serif"


@dataclass
class RenderRequest:
    """Everything one render needs.

    ``snapshot`` re-renders from a persisted template snapshot instead of
    resolving the live template definition.
    """

    card: AnyCard
    config: TournamentConfig
    image_url: str
    resolve_asset_url: AssetResolver
    template_id: Optional[str] = None
    snapshot: Optional[TemplateSnapshot] = None


@dataclass
class TextBlock:
    """Wrapped lines plus the box that fits them."""

    lines: list[str]
    measurer: FontMeasurer
    line_height: float
    box_width: float
    box_height: float


def encode_png(image: Image.Image) -> bytes:
    """Lossless PNG bytes for an image."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def team_info(card: AnyCard, config: TournamentConfig) -> Optional[Team]:
    """Configured team for the card, or an ad-hoc team from its free-text name."""
    if isinstance(card, RareCard):
        return None
    team = config.find_team(card.team_id)
    if team:
        return team
    if card.team_name:
        return Team(id="custom", name=card.team_name, logo_key="")
    return None


def _font_specs(layout: LayoutV1) -> set[FontSpec]:
    """Every face this layout draws with."""
    return {
        FontSpec(layout.bottom_bar.font_size),
        FontSpec(layout.position_number.position_font_size),
        FontSpec(layout.position_number.number_font_size),
        FontSpec(layout.name.first_name_size, italic=True),
        FontSpec(layout.name.last_name_size, italic=True),
        FontSpec(layout.super_rare.first_name_size),
        FontSpec(layout.super_rare.last_name_size, italic=True),
        FontSpec(layout.national_team.name_font_size),
        FontSpec(layout.event_badge.font_size, weight=700),
        FontSpec(WATERMARK_FONT_SIZE, weight=700),
    }


class CardRenderer:
    """Renders trading cards as PNG images."""

    def __init__(
        self,
        loader: Optional[AssetLoader] = None,
        fonts: Optional[FontBook] = None,
        camera_icon_url: Optional[str] = None,
    ):
        self.loader = loader or AssetLoader()
        self.fonts = fonts or FontBook()
        if camera_icon_url is None and settings.default_camera_icon:
            camera_icon_url = str(settings.default_camera_icon)
        self.camera_icon_url = camera_icon_url

    # ==================================================================
    # Entry points
    # ==================================================================

    def render_card_image(self, request: RenderRequest) -> Image.Image:
        """Full-bleed CARD_WIDTH x CARD_HEIGHT card."""
        painter = Painter.blank(CARD_WIDTH, CARD_HEIGHT)
        self._render_frame(request, painter, request.card.crop)
        return painter.image

    def render_card(self, request: RenderRequest) -> bytes:
        image = self.render_card_image(request)
        logger.info(f"Rendered {request.card.card_type} card {request.card.id or '<unsaved>'}")
        return encode_png(image)

    def render_preview_trim_image(self, request: RenderRequest) -> Image.Image:
        """Trim-box view of the full-bleed card.

        Cut from the full render so preview and print never disagree.
        """
        return self.render_card_image(request).crop(TRIM_BOX.pixel_bounds())

    def render_preview_trim(self, request: RenderRequest) -> bytes:
        return encode_png(self.render_preview_trim_image(request))

    def render_crop_image(self, image_url: str, crop: CropRect) -> Image.Image:
        """Just the cropped, rotated photo at its native pixel size."""
        photo = self.loader.load(image_url)
        width = max(1, round(crop.w * photo.width))
        height = max(1, round(crop.h * photo.height))
        painter = Painter.blank(width, height)
        draw_cropped_image(painter, photo, crop, 0, 0, width, height)
        return painter.image

    def render_crop(self, image_url: str, crop: CropRect) -> bytes:
        return encode_png(self.render_crop_image(image_url, crop))

    # ==================================================================
    # Pipeline
    # ==================================================================

    def _render_frame(self, request: RenderRequest, painter: Painter, crop: CropRect) -> None:
        card, config = request.card, request.config
        snapshot = request.snapshot
        if snapshot is None:
            _, snapshot = resolve_template_snapshot(card, config, request.template_id)

        layout = parse_layout(snapshot.layout)
        if layout is None:
            logger.error(f"No usable layout for tournament {config.id!r}, rendering error card")
            self._draw_not_configured(painter)
            return

        theme, flags = snapshot.theme, snapshot.flags
        family = layout.typography.font_family
        self.fonts.preload(family, _font_specs(layout))

        # Required: failure propagates to the caller
        photo = self.loader.load(request.image_url)
        draw_cropped_image(painter, photo, crop, 0, 0, CARD_WIDTH, CARD_HEIGHT)

        if flags.show_gradient:
            painter.fill_vertical_gradient(
                0, 0, CARD_WIDTH, CARD_HEIGHT,
                parse_color(theme.gradient_start), parse_color(theme.gradient_end),
            )
        if flags.show_borders:
            painter.stroke_rect(TRIM_BOX.x, TRIM_BOX.y, TRIM_BOX.w, TRIM_BOX.h, parse_color(theme.border), 1)
        if flags.show_watermark_jersey and not isinstance(card, RareCard) and card.jersey_number:
            self._draw_watermark_jersey(painter, card.jersey_number, theme, layout)

        # Content boxes go under the frame so its cutout trims their edges
        if isinstance(card, StandardCard):
            first_name, last_name = card.first_name or "", card.last_name or ""
            if first_name or last_name:
                self._draw_angled_name_boxes(painter, first_name, last_name, layout)
        elif isinstance(card, RareCard):
            title = card.title if card.title is not None else "Rare Card"
            self._draw_rare_card_content(painter, title, card.caption or "", layout)

        self._draw_frame(painter, layout)

        overlay = None
        if snapshot.overlay_key:
            overlay = self.loader.load_optional(request.resolve_asset_url(snapshot.overlay_key))
        if overlay and snapshot.overlay_placement == "belowText":
            painter.blit(overlay, 0, 0, CARD_WIDTH, CARD_HEIGHT)

        team = team_info(card, config)
        self._draw_card_logo(painter, card, config, team, request.resolve_asset_url, layout)

        if config.branding.event_indicator:
            self._draw_event_badge(painter, config.branding.event_indicator, layout)

        camera = self.loader.load_optional(self.camera_icon_url)
        photographer = card.photographer or ""

        if isinstance(card, RareCard):
            # Title and caption were drawn before the frame
            self._draw_bottom_bar(painter, photographer, "RARE CARD", layout, "rare", camera)

        elif isinstance(card, SuperRareCard):
            self._draw_super_rare_name(painter, card.first_name or "", card.last_name or "", layout)
            if card.position and card.jersey_number:
                self._draw_position_number(painter, card.position, card.jersey_number, layout)
            team_name = team.name if team else ""
            self._draw_bottom_bar(painter, photographer, team_name, layout, "super-rare", camera)

        elif isinstance(card, NationalTeamCard):
            full_name = f"{card.first_name or ''} {card.last_name or ''}".strip()
            self._draw_national_team_name(painter, full_name, layout)
            if team:
                team_name = team.name
            else:
                team_name = config.branding.default_team_name or "NATIONAL TEAM"
            bottom_text = f"{team_name} #{card.jersey_number}" if card.jersey_number else team_name
            self._draw_bottom_bar(painter, photographer, bottom_text, layout, "uncommon", camera)

        elif isinstance(card, StandardCard):
            position = card.position or ""
            rarity = card.rarity or "common"
            if card.card_type in POSITION_IN_BOTTOM_BAR:
                self._draw_bottom_bar(painter, photographer, position, layout, rarity, camera)
            else:
                if position:
                    self._draw_position_number(painter, position, card.jersey_number, layout)
                team_name = team.name if team else ""
                self._draw_bottom_bar(painter, photographer, team_name, layout, rarity, camera)

        else:
            raise TypeError(f"Unhandled card model: {type(card).__name__}")

        if overlay and snapshot.overlay_placement == "aboveText":
            painter.blit(overlay, 0, 0, CARD_WIDTH, CARD_HEIGHT)

    # ==================================================================
    # Elements
    # ==================================================================

    def _font(self, layout: LayoutV1, size: float, italic: bool = False, weight: int = 500):
        return self.fonts.font(layout.typography.font_family, FontSpec(size, weight, italic))

    def _draw_not_configured(self, painter: Painter) -> None:
        white = parse_color("#ffffff")
        painter.fill(parse_color(ERROR_BACKGROUND))
        painter.draw_text(
            "Tournament not configured", CARD_WIDTH / 2, CARD_HEIGHT / 2 - 20,
            self.fonts.font(ERROR_FONT_FAMILY, FontSpec(24, weight=400)), white, align="center",
        )
        painter.draw_text(
            "Please contact support", CARD_WIDTH / 2, CARD_HEIGHT / 2 + 20,
            self.fonts.font(ERROR_FONT_FAMILY, FontSpec(16, weight=400)), white, align="center",
        )

    def _draw_watermark_jersey(
        self, painter: Painter, jersey_number: str, theme: TemplateTheme, layout: LayoutV1
    ) -> None:
        painter.draw_text(
            jersey_number, CARD_WIDTH / 2, CARD_HEIGHT / 2,
            self._font(layout, WATERMARK_FONT_SIZE, weight=700),
            parse_color(theme.watermark), align="center",
        )

    def _draw_frame(self, painter: Painter, layout: LayoutV1) -> None:
        frame = layout.frame
        painter.fill_with_cutout(
            frame.inner_x, frame.inner_y, frame.inner_width, frame.inner_height,
            frame.inner_radius, parse_color(layout.palette.white),
        )

    def _text_block(
        self,
        layout: LayoutV1,
        text: str,
        size: float,
        letter_spacing: float,
        max_width: float,
        max_lines: int,
        box: NameBox,
    ) -> TextBlock:
        """Wrap text and size the box around it (grows by one line height per extra line)."""
        measurer = FontMeasurer(self._font(layout, size, italic=True), letter_spacing)
        lines = wrap_text(measurer, text, max_width, max_lines)
        name = layout.name
        line_height = size * LINE_HEIGHT_RATIO
        return TextBlock(
            lines=lines,
            measurer=measurer,
            line_height=line_height,
            box_width=widest_line(measurer, lines) + name.left_padding + name.right_padding + name.box_extension,
            box_height=box.height + (len(lines) - 1) * line_height,
        )

    @staticmethod
    def _group_radius(left: float, top: float, right: float, bottom: float, pad: float) -> float:
        """Radius of a local layer that holds [left, right] x [top, bottom] plus padding."""
        return math.hypot(max(abs(left), abs(right)) + pad, max(abs(top), abs(bottom)) + pad)

    def _draw_lines(
        self,
        painter: Painter,
        block: TextBlock,
        x: float,
        ys: list[float],
        fill: Color,
        stroke: Color,
        stroke_width: float,
    ) -> None:
        for line, y in zip(block.lines, ys):
            painter.draw_text(
                line, x, y, block.measurer.font, fill,
                align="right", letter_spacing=block.measurer.letter_spacing,
                stroke=stroke, stroke_width=stroke_width,
            )

    def _draw_angled_name_boxes(self, painter: Painter, first_name: str, last_name: str, layout: LayoutV1) -> None:
        """First-name box (bottom-justified) under an overlapping last-name box (top-justified).

        Both boxes are right-anchored at the layout anchor, grow leftward
        with their text and upward/downward with extra lines.
        """
        name, palette = layout.name, layout.palette
        primary, secondary, white = (parse_color(c) for c in (palette.primary, palette.secondary, palette.white))

        last = self._text_block(
            layout, last_name.upper(), name.last_name_size, name.letter_spacing.last_name,
            name.max_width, NAME_MAX_LINES, name.last_name_box,
        )
        first = self._text_block(
            layout, first_name.upper(), name.first_name_size, name.letter_spacing.first_name,
            name.max_width, NAME_MAX_LINES, name.first_name_box,
        )

        # Last name box top edge is fixed; first name box sits on top of it
        ln_box_y = -name.last_name_box.height / 2
        fn_box_y = ln_box_y - first.box_height
        fn_box_x = -first.box_width + name.box_extension + name.box_offsets.first_name
        ln_box_x = -last.box_width + name.box_extension + name.box_offsets.last_name

        radius = self._group_radius(
            min(fn_box_x, ln_box_x), fn_box_y,
            name.box_extension + max(name.box_offsets.first_name, name.box_offsets.last_name),
            ln_box_y + last.box_height,
            pad=max(name.first_name_box.stroke_width, name.last_name_box.stroke_width) + 8,
        )

        with painter.rotated(name.anchor_x, name.anchor_y, name.rotation, radius) as local:
            local.fill_rect(fn_box_x, fn_box_y, first.box_width, first.box_height, secondary)
            local.stroke_rect(
                fn_box_x, fn_box_y, first.box_width, first.box_height, white, name.first_name_box.border_width
            )
            fn_bottom = fn_box_y + first.box_height
            count = len(first.lines)
            fn_ys = [
                fn_bottom - name.first_name_box.height / 2 - (count - 1 - i) * first.line_height + name.text_y_offset
                for i in range(count)
            ]
            self._draw_lines(
                local, first, -name.right_padding + name.text_offsets.first_name, fn_ys,
                primary, white, name.first_name_box.stroke_width,
            )

            local.fill_rect(ln_box_x, ln_box_y, last.box_width, last.box_height, white)
            local.stroke_rect(
                ln_box_x, ln_box_y, last.box_width, last.box_height, secondary, name.last_name_box.border_width
            )
            ln_ys = [
                ln_box_y + name.last_name_box.height / 2 + i * last.line_height + name.text_y_offset
                for i in range(len(last.lines))
            ]
            self._draw_lines(
                local, last, -name.right_padding + name.text_offsets.last_name, ln_ys,
                white, primary, name.last_name_box.stroke_width,
            )

    def _draw_rare_card_content(self, painter: Painter, title: str, caption: str, layout: LayoutV1) -> None:
        """Title box (last-name styling) above an optional caption box (first-name styling).

        Rare cards reuse the ``name`` box sizes, padding and offsets; the
        ``rareCard`` section only positions them and adjusts text.
        """
        rare, name, palette = layout.rare_card, layout.name, layout.palette
        primary, secondary, white = (parse_color(c) for c in (palette.primary, palette.secondary, palette.white))

        title_block = self._text_block(
            layout, title, name.last_name_size, rare.title_letter_spacing,
            rare.max_width, RARE_MAX_LINES, name.last_name_box,
        )
        caption_block = None
        if caption:
            caption_block = self._text_block(
                layout, caption, name.first_name_size, rare.caption_letter_spacing,
                rare.max_width, RARE_MAX_LINES, name.first_name_box,
            )

        # Anchor is where the title's bottom edge meets the caption's top edge
        title_x = -title_block.box_width + name.box_extension
        widest = title_block.box_width
        bottom = 0.0
        if caption_block:
            widest = max(widest, caption_block.box_width)
            bottom = caption_block.box_height
        radius = self._group_radius(
            name.box_extension - widest, -title_block.box_height, name.box_extension, bottom,
            pad=max(name.first_name_box.stroke_width, name.last_name_box.stroke_width) + 8,
        )

        with painter.rotated(rare.anchor_x, rare.anchor_y, rare.rotation, radius) as local:
            local.fill_rect(title_x, -title_block.box_height, title_block.box_width, title_block.box_height, white)
            local.stroke_rect(
                title_x, -title_block.box_height, title_block.box_width, title_block.box_height,
                secondary, name.last_name_box.border_width,
            )
            count = len(title_block.lines)
            title_ys = [
                -name.last_name_box.height / 2 - (count - 1 - i) * title_block.line_height + name.text_y_offset
                for i in range(count)
            ]
            self._draw_lines(
                local, title_block, -name.right_padding + rare.title_text_offset_x, title_ys,
                white, primary, name.last_name_box.stroke_width,
            )

            if caption_block:
                caption_x = -caption_block.box_width + name.box_extension
                local.fill_rect(caption_x, 0, caption_block.box_width, caption_block.box_height, secondary)
                local.stroke_rect(
                    caption_x, 0, caption_block.box_width, caption_block.box_height,
                    white, name.first_name_box.border_width,
                )
                caption_ys = [
                    name.first_name_box.height / 2 + i * caption_block.line_height + name.text_y_offset
                    for i in range(len(caption_block.lines))
                ]
                self._draw_lines(
                    local, caption_block, -name.right_padding + rare.caption_text_offset_x, caption_ys,
                    primary, white, name.first_name_box.stroke_width,
                )

    def _draw_card_logo(
        self,
        painter: Painter,
        card: AnyCard,
        config: TournamentConfig,
        team: Optional[Team],
        resolve_asset_url: AssetResolver,
        layout: LayoutV1,
    ) -> None:
        type_config = config.card_type_config(card.card_type)
        logo_key = (
            (type_config.logo_override_key if type_config else None)
            or (team.logo_key if team else None)
            or config.branding.tournament_logo_key
        )
        if not logo_key:
            return
        logo = self.loader.load_optional(resolve_asset_url(logo_key))
        if logo is None:
            return
        box = layout.national_team.logo if isinstance(card, NationalTeamCard) else layout.team_logo
        self._draw_logo(painter, logo, box, layout.team_logo.stroke_width, parse_color(layout.team_logo.stroke_color))

    def _draw_logo(
        self,
        painter: Painter,
        logo: Image.Image,
        box: Union[LogoBox, TeamLogoLayout],
        stroke_width: float,
        stroke_color: Color,
    ) -> None:
        """Logo fitted into its box with an outline stamped from its silhouette."""
        width, height = fit_within(logo.width, logo.height, box.max_width, box.max_height)
        kernel = int(round(stroke_width))
        if kernel > 0:
            offscreen = Painter.blank(math.ceil(width + kernel * 2), math.ceil(height + kernel * 2))
            offscreen.blit(logo, kernel, kernel, width, height)
            stamp = silhouette(offscreen.image, stroke_color)
            for dx in range(-kernel, kernel + 1):
                for dy in range(-kernel, kernel + 1):
                    if dx or dy:
                        painter.composite(stamp, box.x - kernel + dx, box.y - kernel + dy)
        painter.blit(logo, box.x, box.y, width, height)

    def _draw_event_badge(self, painter: Painter, text: str, layout: LayoutV1) -> None:
        badge, palette = layout.event_badge, layout.palette
        primary = parse_color(palette.primary)
        painter.fill_rounded_rect(
            badge.x, badge.y, badge.width, badge.height, badge.border_radius, parse_color(palette.secondary)
        )
        painter.stroke_rounded_rect(
            badge.x, badge.y, badge.width, badge.height, badge.border_radius, primary, badge.border_width
        )
        painter.draw_text(
            text, badge.x + badge.width / 2, badge.y + badge.height / 2 + badge.text_y_offset,
            self._font(layout, badge.font_size, weight=700), primary, align="center",
        )

    def _draw_position_number(
        self, painter: Painter, position: str, number: Optional[str], layout: LayoutV1
    ) -> None:
        pn, palette = layout.position_number, layout.palette
        primary, white = parse_color(palette.primary), parse_color(palette.white)

        painter.draw_text(
            position.upper(), pn.center_x, pn.top_y,
            self._font(layout, pn.position_font_size), primary,
            align="center", baseline="top", letter_spacing=pn.position_letter_spacing,
            stroke=white, stroke_width=pn.position_stroke_width,
        )
        if number:
            painter.draw_text(
                number, pn.center_x + pn.number_x_offset, pn.top_y + pn.position_font_size,
                self._font(layout, pn.number_font_size), parse_color(palette.number_overlay),
                align="center", baseline="top", letter_spacing=pn.number_letter_spacing,
                stroke=primary, stroke_width=pn.number_stroke_width,
            )

    def _draw_super_rare_name(self, painter: Painter, first_name: str, last_name: str, layout: LayoutV1) -> None:
        sr = layout.super_rare
        white = parse_color(layout.palette.white)
        painter.draw_text(
            first_name.upper(), sr.center_x, sr.first_name_y,
            self._font(layout, sr.first_name_size), white, align="center",
        )
        painter.draw_text(
            last_name, sr.center_x, sr.last_name_y,
            self._font(layout, sr.last_name_size, italic=True), white, align="center",
        )

    def _draw_national_team_name(self, painter: Painter, full_name: str, layout: LayoutV1) -> None:
        nt, palette = layout.national_team, layout.palette
        radius = self._group_radius(0, -nt.box_height / 2, nt.box_width, nt.box_height / 2, nt.box_border_width + 4)
        with painter.rotated(nt.anchor_x, nt.anchor_y, nt.rotation, radius) as local:
            local.fill_rect(0, -nt.box_height / 2, nt.box_width, nt.box_height, parse_color(palette.white))
            local.stroke_rect(
                0, -nt.box_height / 2, nt.box_width, nt.box_height,
                parse_color(palette.secondary), nt.box_border_width,
            )
            local.draw_text(
                full_name.upper(), nt.text_padding_x, 0,
                self._font(layout, nt.name_font_size), parse_color(palette.primary),
            )

    def _draw_bottom_bar(
        self,
        painter: Painter,
        photographer: str,
        team_name: str,
        layout: LayoutV1,
        rarity: CardRarity = "common",
        camera: Optional[Image.Image] = None,
    ) -> None:
        """Camera icon, photographer credit, rarity glyph and right-aligned team text."""
        bar = layout.bottom_bar
        primary = parse_color(layout.palette.primary)
        font = self._font(layout, bar.font_size)
        text_y = bar.y + bar.text_y_offset
        icon = bar.camera_icon

        if camera is not None:
            # Icon ships white; tint it to the primary colour
            offscreen = Painter.blank(max(1, round(icon.width)), max(1, round(icon.height)))
            offscreen.blit(camera, 0, 0, icon.width, icon.height)
            painter.composite(silhouette(offscreen.image, primary), icon.x, icon.y)
        else:
            painter.fill_rounded_rect(icon.x, icon.y, icon.width, icon.height, 2, primary)

        painter.draw_text(
            photographer.upper(), bar.photographer_x, text_y, font, primary,
            letter_spacing=bar.letter_spacing.photographer,
        )

        half = bar.rarity_size / 2
        cx, cy = bar.rarity_x + half, bar.y + bar.height / 2
        if rarity in ("common", "uncommon"):
            painter.fill_circle(cx, cy, half, primary)
        else:
            painter.fill_polygon(star_points(cx, cy, half), primary)
            if rarity == "super-rare":
                painter.fill_polygon(star_points(cx + bar.rarity_size + bar.rarity_gap, cy, half), primary)

        painter.draw_text(
            team_name.upper(), bar.team_name_x, text_y, font, primary,
            align="right", letter_spacing=bar.letter_spacing.team_name,
        )
