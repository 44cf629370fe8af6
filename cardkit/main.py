"""cardkit - Command line entry point for rendering trading cards."""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .assets import make_asset_resolver
from .card_renderer import CardRenderer, RenderRequest
from .config import settings
from .constants import GUIDE_PERCENTAGES
from .errors import CardkitError, ConfigurationError
from .models import CARD_TYPES, TournamentConfig, clamp_crop, parse_card, parse_tournament_config
from .samples import build_sample_card, sample_background_url
from .templates import build_render_meta, resolve_template_snapshot
from .tournaments import TOURNAMENTS, get_tournament
from .utils import get_logger, setup_logging

logger = get_logger(__name__)

RENDER_MODES = ("full", "trim", "crop")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="cardkit",
        description="cardkit - Print-ready tournament trading card renderer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cardkit.main render card.json --tournament usqc-2026 --photo me.jpg
  python -m cardkit.main render card.json --config qcn.json --photo me.jpg --mode trim
  python -m cardkit.main render card.json --photo me.jpg --mode crop
  python -m cardkit.main preview --tournament qcn-2026 --card-type rare
  python -m cardkit.main snapshot --tournament usqc-2026 --card-type player
  python -m cardkit.main guides
        """,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_tournament_args(p: argparse.ArgumentParser) -> None:
        group = p.add_mutually_exclusive_group()
        group.add_argument(
            "--tournament",
            choices=sorted(TOURNAMENTS),
            help="Built-in tournament id",
        )
        group.add_argument(
            "--config",
            type=Path,
            help="Tournament config JSON file",
        )
        p.add_argument(
            "--template",
            help="Template id (defaults to the tournament's default for the card type)",
        )
        p.add_argument(
            "--assets",
            help="Base URL or directory that asset keys resolve under",
        )

    render = sub.add_parser("render", help="Render a card JSON file to PNG")
    render.add_argument("card", type=Path, help="Card JSON file")
    render.add_argument("--photo", required=True, help="Photo URL or path")
    render.add_argument("--mode", choices=RENDER_MODES, default="full", help="Output mode")
    render.add_argument("--out", type=Path, help="Output PNG path")
    render.add_argument(
        "--meta",
        action="store_true",
        help="Also write the render metadata (template snapshot) as JSON beside the PNG",
    )
    add_tournament_args(render)

    preview = sub.add_parser("preview", help="Render a sample card to preview a template")
    preview.add_argument("--card-type", choices=CARD_TYPES, default="player")
    preview.add_argument("--mode", choices=("full", "trim"), default="trim", help="Output mode")
    preview.add_argument("--out", type=Path, help="Output PNG path")
    add_tournament_args(preview)

    snapshot = sub.add_parser("snapshot", help="Print the resolved template snapshot as JSON")
    snapshot.add_argument("--card-type", choices=CARD_TYPES, default="player")
    add_tournament_args(snapshot)

    sub.add_parser("guides", help="Print trim/safe guide insets as percentages")

    return parser.parse_args(argv)


def _read_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read {path}: {e}") from e


def _load_config(args: argparse.Namespace, tournament_id: Optional[str] = None) -> TournamentConfig:
    """Tournament from --config, --tournament, or the card's own tournament id."""
    if args.config:
        return parse_tournament_config(_read_json(args.config))
    if args.tournament:
        return get_tournament(args.tournament)
    if tournament_id:
        return get_tournament(tournament_id)
    raise ConfigurationError("No tournament given; pass --tournament or --config")


def _output_path(args: argparse.Namespace, default_name: str) -> Path:
    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        return args.out
    settings.ensure_directories()
    return settings.output_dir / default_name


def run_render(args: argparse.Namespace) -> int:
    """Render one card in the requested mode."""
    card = parse_card(_read_json(args.card))
    renderer = CardRenderer()
    stem = card.id or args.card.stem

    if args.mode == "crop":
        crop = clamp_crop(card.crop)
        out = _output_path(args, f"{stem}-crop.png")
        out.write_bytes(renderer.render_crop(args.photo, crop))
        logger.info(f"Crop written to: {out}")
        return 0

    config = _load_config(args, card.tournament_id)
    template_id, snapshot = resolve_template_snapshot(card, config, args.template)
    request = RenderRequest(
        card=card,
        config=config,
        image_url=args.photo,
        resolve_asset_url=make_asset_resolver(args.assets),
        template_id=template_id,
        snapshot=snapshot,
    )
    if args.mode == "trim":
        png = renderer.render_preview_trim(request)
        out = _output_path(args, f"{stem}-trim.png")
    else:
        png = renderer.render_card(request)
        out = _output_path(args, f"{stem}.png")
    out.write_bytes(png)
    logger.info(f"Card written to: {out} (template {template_id})")

    if args.meta:
        meta = build_render_meta(out.name, template_id, snapshot)
        meta_path = out.with_suffix(".json")
        meta_path.write_text(json.dumps(meta.to_wire(), indent=2))
        logger.info(f"Render metadata written to: {meta_path}")
    return 0


def run_preview(args: argparse.Namespace) -> int:
    """Render a sample card over a synthetic background."""
    config = _load_config(args, "usqc-2026")
    template_id, _ = resolve_template_snapshot(
        build_sample_card(config, args.card_type, ""), config, args.template
    )
    card = build_sample_card(config, args.card_type, template_id)
    request = RenderRequest(
        card=card,
        config=config,
        image_url=sample_background_url(),
        resolve_asset_url=make_asset_resolver(args.assets),
        template_id=template_id,
    )
    renderer = CardRenderer()
    if args.mode == "full":
        png = renderer.render_card(request)
    else:
        png = renderer.render_preview_trim(request)
    out = _output_path(args, f"preview-{config.id}-{template_id}-{args.card_type}-{args.mode}.png")
    out.write_bytes(png)
    logger.info(f"Preview written to: {out}")
    return 0


def run_snapshot(args: argparse.Namespace) -> int:
    config = _load_config(args, "usqc-2026")
    card = build_sample_card(config, args.card_type, "")
    template_id, snapshot = resolve_template_snapshot(card, config, args.template)
    print(json.dumps({"templateId": template_id, "templateSnapshot": snapshot.to_wire()}, indent=2))
    return 0


def run_guides(args: argparse.Namespace) -> int:
    print(json.dumps({name: asdict(insets) for name, insets in GUIDE_PERCENTAGES.items()}, indent=2))
    return 0


COMMANDS = {
    "render": run_render,
    "preview": run_preview,
    "snapshot": run_snapshot,
    "guides": run_guides,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = "DEBUG" if args.debug else settings.log_level
    setup_logging(level=log_level)

    logger.debug(f"Arguments: {args}")

    try:
        return COMMANDS[args.command](args)
    except ValidationError as e:
        logger.error(f"Invalid input: {e}")
        return 1
    except CardkitError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
