import io

import pytest
from PIL import Image, ImageChops

from cardkit.card_renderer import team_info
from cardkit.constants import CARD_HEIGHT, CARD_WIDTH, TRIM_BOX
from cardkit.errors import AssetLoadError
from cardkit.layout import USQC26_LAYOUT_V1
from cardkit.models import CropRect, TournamentConfig, parse_card
from cardkit.templates import resolve_template_snapshot

PRIMARY = (0x1B, 0x42, 0x78, 255)
# Centre of the bottom-bar camera icon slot
ICON_POINT = (85, 1047)


def _decode(png: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(png))
    image.load()
    return image


def _diff_bbox(a: Image.Image, b: Image.Image):
    """Bounding box of every pixel whose colour differs; None when identical."""
    return ImageChops.difference(a.convert("RGB"), b.convert("RGB")).getbbox()


def _config_with(config_data, **changes) -> TournamentConfig:
    return TournamentConfig.model_validate({**config_data, **changes})


def _rare_card(caption: str):
    return parse_card({
        "cardType": "rare",
        "title": "Championship MVP",
        "caption": caption,
        "photographer": "Sam Shutter",
    })


class TestRenderCard:
    def test_player_card(self, renderer, make_request, player_card):
        image = _decode(renderer.render_card(make_request(player_card)))
        assert image.format == "PNG"
        assert image.size == (CARD_WIDTH, CARD_HEIGHT)
        assert image.getpixel(ICON_POINT) == PRIMARY

    @pytest.mark.parametrize(
        "data",
        [
            {"cardType": "media", "firstName": "Ana", "lastName": "Li", "position": "Photographer"},
            {"cardType": "super-rare", "firstName": "Ana", "lastName": "Li", "position": "Seeker",
             "jerseyNumber": "7", "teamId": "plain-team"},
            {"cardType": "national-team", "firstName": "Ana", "lastName": "Li", "jerseyNumber": "7"},
            {"cardType": "rare"},
            {"cardType": "player"},
        ],
    )
    def test_every_card_type_renders(self, renderer, make_request, data):
        image = renderer.render_card_image(make_request(parse_card(data)))
        assert image.size == (CARD_WIDTH, CARD_HEIGHT)
        assert image.getpixel(ICON_POINT) == PRIMARY

    def test_empty_caption_draws_no_caption_box(self, renderer, make_request):
        without = renderer.render_card_image(make_request(_rare_card("")))
        with_caption = renderer.render_card_image(make_request(_rare_card("Limited edition showcase")))

        bbox = _diff_bbox(without, with_caption)
        assert bbox is not None
        # Everything above the title/caption seam is untouched
        assert bbox[1] >= USQC26_LAYOUT_V1.rare_card.anchor_y - 20

    def test_unreachable_logo_degrades_silently(self, renderer, make_request, config_data, player_card):
        card_types = [dict(entry) for entry in config_data["cardTypes"]]
        card_types[0]["logoOverrideKey"] = "logos/unreachable.png"
        broken = _config_with(config_data, cardTypes=card_types)

        with_override = renderer.render_card_image(make_request(player_card, config=broken))
        without_override = renderer.render_card_image(make_request(player_card))
        assert _diff_bbox(with_override, without_override) is None

    def test_team_logo_is_drawn_in_its_box(self, renderer, make_request, player_card):
        plain = renderer.render_card_image(make_request(player_card))
        logo_card = player_card.model_copy(update={"team_id": "twin-team"})
        with_logo = renderer.render_card_image(make_request(logo_card))

        bbox = _diff_bbox(plain, with_logo)
        assert bbox is not None
        box = USQC26_LAYOUT_V1.team_logo
        assert bbox[0] >= box.x - 3 and bbox[1] >= box.y - 3
        assert bbox[2] <= box.x + box.max_width + 3 and bbox[3] <= box.y + box.max_height + 3

    def test_layout_override_without_kind_is_merged(self, renderer, make_request, config_data, player_card):
        config = _config_with(
            config_data,
            templates=[{"id": "usqc26", "label": "USQC26", "layout": {"palette": {"primary": "#ff0000"}}}],
        )
        image = renderer.render_card_image(make_request(player_card, config=config))
        assert image.getpixel(ICON_POINT) == (255, 0, 0, 255)

    def test_overlay_placement(self, renderer, make_request, config_data, assets_dir, player_card):
        Image.new("RGBA", (CARD_WIDTH, CARD_HEIGHT), (0, 255, 0, 255)).save(assets_dir / "overlay.png")

        def render(placement):
            config = _config_with(
                config_data,
                templates=[{
                    "id": "usqc26",
                    "label": "USQC26",
                    "overlayKey": "overlay.png",
                    "overlayPlacement": placement,
                }],
            )
            return renderer.render_card_image(make_request(player_card, config=config))

        assert render("aboveText").getpixel(ICON_POINT) == (0, 255, 0, 255)
        below = render("belowText")
        assert below.getpixel(ICON_POINT) == PRIMARY
        assert below.getpixel((CARD_WIDTH // 2, CARD_HEIGHT // 2)) == (0, 255, 0, 255)

    def test_template_flags_change_output(self, renderer, make_request, config_data, player_card):
        plain = renderer.render_card_image(make_request(player_card))
        config = _config_with(
            config_data,
            templates=[{
                "id": "usqc26",
                "label": "USQC26",
                "flags": {"showGradient": True, "showBorders": True, "showWatermarkJersey": True},
            }],
        )
        decorated = renderer.render_card_image(make_request(player_card, config=config))
        assert _diff_bbox(plain, decorated) is not None

    def test_snapshot_rerenders_identically(self, renderer, make_request, config, player_card):
        template_id, snapshot = resolve_template_snapshot(player_card, config)
        live = renderer.render_card_image(make_request(player_card))
        frozen = renderer.render_card_image(
            make_request(player_card, template_id=template_id, snapshot=snapshot)
        )
        assert _diff_bbox(live, frozen) is None

    def test_bad_layout_renders_error_card(self, renderer, make_request, config, player_card, tmp_path):
        _, snapshot = resolve_template_snapshot(player_card, config)
        broken = snapshot.model_copy(update={"layout": {"kind": "usqc99-v9"}})
        # Photo is never fetched for the error card
        request = make_request(player_card, snapshot=broken, image_url=str(tmp_path / "missing.png"))
        image = _decode(renderer.render_card(request))
        assert image.size == (CARD_WIDTH, CARD_HEIGHT)
        assert image.getpixel((10, 10)) == (0xF8, 0x71, 0x71, 255)

    def test_missing_photo_raises(self, renderer, make_request, player_card, tmp_path):
        with pytest.raises(AssetLoadError):
            renderer.render_card(make_request(player_card, image_url=str(tmp_path / "missing.png")))

    def test_crop_is_applied(self, renderer, make_request, player_card):
        full = renderer.render_card_image(make_request(player_card))
        cropped_card = player_card.model_copy(update={
            "photo": player_card.photo.model_copy(update={"crop": CropRect(x=0.5, y=0, w=0.5, h=1)}),
        })
        cropped = renderer.render_card_image(make_request(cropped_card))
        assert _diff_bbox(full, cropped) is not None

    def test_rarity_glyph_is_drawn_in_its_slot(self, renderer, make_request, player_card):
        bar = USQC26_LAYOUT_V1.bottom_bar
        common = renderer.render_card_image(make_request(player_card))
        rare = renderer.render_card_image(make_request(player_card.model_copy(update={"rarity": "rare"})))
        super_rare = renderer.render_card_image(
            make_request(player_card.model_copy(update={"rarity": "super-rare"}))
        )

        # Circle to star: only the first slot changes
        star = _diff_bbox(common, rare)
        assert star is not None
        assert star[0] >= bar.rarity_x - 2 and star[2] <= bar.rarity_x + bar.rarity_size + 2
        assert star[1] >= bar.y and star[3] <= bar.y + bar.height

        # Super-rare adds a second star beside the first
        second = _diff_bbox(rare, super_rare)
        assert second is not None
        assert second[0] >= bar.rarity_x + bar.rarity_size - 2
        assert second[2] <= bar.rarity_x + 2 * bar.rarity_size + bar.rarity_gap + 2
        assert second[1] >= bar.y and second[3] <= bar.y + bar.height

    def test_super_rare_names_are_centred(self, renderer, make_request):
        sr = USQC26_LAYOUT_V1.super_rare
        base = {"cardType": "super-rare", "teamId": "plain-team", "photographer": "Sam Shutter"}
        unnamed = renderer.render_card_image(make_request(parse_card(base)))
        named = renderer.render_card_image(
            make_request(parse_card({**base, "firstName": "Alexandra", "lastName": "Montgomery"}))
        )

        bbox = _diff_bbox(unnamed, named)
        assert bbox is not None
        assert abs((bbox[0] + bbox[2]) / 2 - sr.center_x) <= 12
        assert bbox[1] >= sr.first_name_y - sr.first_name_size
        assert bbox[3] <= sr.last_name_y + sr.last_name_size

    def test_national_team_bottom_text_carries_the_number(self, renderer, make_request):
        bar = USQC26_LAYOUT_V1.bottom_bar
        base = {"cardType": "national-team", "firstName": "Ana", "lastName": "Li", "photographer": "Sam Shutter"}
        plain = renderer.render_card_image(make_request(parse_card(base)))
        numbered = renderer.render_card_image(make_request(parse_card({**base, "jerseyNumber": "7"})))

        bbox = _diff_bbox(plain, numbered)
        assert bbox is not None
        # Only the right-aligned team text in the bottom bar changes
        assert bbox[0] > bar.rarity_x + 2 * bar.rarity_size + bar.rarity_gap
        assert bar.team_name_x - 20 <= bbox[2] <= bar.team_name_x + 2
        assert bbox[1] >= bar.y - 4 and bbox[3] <= bar.y + bar.height + 4

    def test_national_team_name_sits_in_its_box(self, renderer, make_request):
        nt = USQC26_LAYOUT_V1.national_team
        base = {"cardType": "national-team", "jerseyNumber": "7"}
        unnamed = renderer.render_card_image(make_request(parse_card(base)))
        named = renderer.render_card_image(
            make_request(parse_card({**base, "firstName": "Ana", "lastName": "Li"}))
        )

        bbox = _diff_bbox(unnamed, named)
        assert bbox is not None
        assert bbox[0] >= nt.anchor_x
        assert bbox[1] >= nt.anchor_y - nt.box_height and bbox[3] <= nt.anchor_y + nt.box_height


class TestRenderPreviewTrim:
    def test_matches_full_bleed_crop(self, renderer, make_request, player_card):
        request = make_request(player_card)
        trim = renderer.render_preview_trim_image(request)
        full = renderer.render_card_image(request)

        assert trim.size == (750, 1050)
        assert _diff_bbox(trim, full.crop(TRIM_BOX.pixel_bounds())) is None

    def test_encodes_png(self, renderer, make_request):
        image = _decode(renderer.render_preview_trim(make_request(_rare_card("Caption"))))
        assert image.size == (750, 1050)


class TestRenderCrop:
    def test_output_is_crop_sized(self, renderer, photo_path):
        image = _decode(renderer.render_crop(str(photo_path), CropRect(x=0.25, y=0.5, w=0.5, h=0.5)))
        assert image.size == (200, 150)

    def test_pixels_come_from_the_crop(self, renderer, photo_path):
        crop = CropRect(x=0, y=0, w=0.5, h=1)
        image = renderer.render_crop_image(str(photo_path), crop)
        source = Image.open(photo_path).convert("RGBA")
        # Left edge of the crop is the left edge of the photo
        left = image.getpixel((0, 150))
        assert abs(left[0] - source.getpixel((0, 150))[0]) <= 2
        assert image.getpixel((199, 150))[0] < 140

    def test_half_turn_rotates_the_photo(self, renderer, photo_path):
        image = renderer.render_crop_image(str(photo_path), CropRect(rotate_deg=180))
        source = Image.open(photo_path).convert("RGBA")
        assert image.size == source.size
        for x, y in [(0, 0), (10, 150), (200, 20), (399, 299)]:
            got = image.getpixel((x, y))
            want = source.getpixel((399 - x, 299 - y))
            assert all(abs(g - w) <= 2 for g, w in zip(got, want))
        # The red ramp now falls from left to right
        assert image.getpixel((0, 150))[0] > 240 > image.getpixel((399, 150))[0]

    def test_quarter_turn_keeps_size_and_centre(self, renderer, photo_path):
        image = renderer.render_crop_image(str(photo_path), CropRect(rotate_deg=90))
        source = Image.open(photo_path).convert("RGBA")
        assert image.size == source.size
        centre = image.getpixel((200, 150))
        assert all(abs(g - w) <= 3 for g, w in zip(centre, source.getpixel((200, 150))))
        # A landscape photo turned on its side leaves the corners empty
        assert image.getpixel((0, 0))[3] == 0

    def test_tiny_crop_is_at_least_one_pixel(self, renderer, photo_path):
        image = renderer.render_crop_image(str(photo_path), CropRect(x=0, y=0, w=0.001, h=0.001))
        assert image.size == (1, 1)

    def test_missing_photo_raises(self, renderer, tmp_path):
        with pytest.raises(AssetLoadError):
            renderer.render_crop(str(tmp_path / "missing.png"), CropRect())


class TestTeamInfo:
    def test_configured_team(self, config, player_card):
        assert team_info(player_card, config).name == "Plain Team"

    def test_free_text_team(self, config):
        card = parse_card({"cardType": "player", "teamName": "Pickup Squad"})
        team = team_info(card, config)
        assert team.id == "custom"
        assert team.name == "Pickup Squad"

    def test_no_team(self, config):
        assert team_info(parse_card({"cardType": "player"}), config) is None
        assert team_info(_rare_card(""), config) is None
