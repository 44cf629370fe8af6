"""Template selection and the frozen snapshot the renderer draws from."""

from datetime import datetime, timezone
from typing import Optional

from .layout import USQC26_LAYOUT_V1, LayoutV1, resolve_layout
from .models import (
    CardBase,
    RenderMeta,
    TemplateDefinition,
    TemplateFlags,
    TemplateSnapshot,
    TemplateTheme,
    TournamentConfig,
)
from .utils import get_logger

logger = get_logger(__name__)

DEFAULT_TEMPLATE_ID = "classic"
DEFAULT_TEMPLATE_LAYOUT = USQC26_LAYOUT_V1

BASE_THEME = TemplateTheme(
    gradient_start="rgba(15, 23, 42, 0)",
    gradient_end="rgba(15, 23, 42, 0.85)",
    border="rgba(255, 255, 255, 0.1)",
    accent="rgba(255, 255, 255, 0.5)",
    label="#ffffff",
    name_color="#ffffff",
    meta="#ffffff",
    watermark="rgba(255, 255, 255, 0.12)",
)

DEFAULT_TEMPLATE_FLAGS = TemplateFlags(
    show_gradient=False,
    show_borders=False,
    show_watermark_jersey=False,
)

# Used when a tournament doesn't define the resolved template id
FALLBACK_TEMPLATES: dict[str, TemplateDefinition] = {
    "usqc26": TemplateDefinition(id="usqc26", label="USQC26"),
    "classic": TemplateDefinition(id="classic", label="Classic"),
}


def resolve_template_id(
    template_id: Optional[str] = None,
    card_type: Optional[str] = None,
    config: Optional[TournamentConfig] = None,
) -> str:
    """Pick the template id for a card.

    Precedence: explicit (trimmed, non-empty) id, then the tournament's
    per-card-type default, then the tournament fallback, then
    ``DEFAULT_TEMPLATE_ID``.
    """
    direct = template_id.strip() if isinstance(template_id, str) else ""
    if direct:
        return direct

    defaults = config.default_templates if config else None
    if defaults and card_type:
        by_type = defaults.by_card_type.get(card_type)
        if by_type:
            return by_type

    if defaults and defaults.fallback:
        return defaults.fallback

    return DEFAULT_TEMPLATE_ID


def find_template(
    config: Optional[TournamentConfig],
    template_id: Optional[str],
) -> Optional[TemplateDefinition]:
    """Look up a template by id; None if anything is missing or unmatched."""
    if not config or not config.templates or not template_id:
        return None
    return next((t for t in config.templates if t.id == template_id), None)


def resolve_template_layout(
    template: Optional[TemplateDefinition],
    base: LayoutV1 = DEFAULT_TEMPLATE_LAYOUT,
) -> LayoutV1:
    if not template or not template.layout:
        return resolve_layout(base)
    return resolve_layout(base, template.layout)


def resolve_template_snapshot(
    card: CardBase,
    config: TournamentConfig,
    template_id: Optional[str] = None,
) -> tuple[str, TemplateSnapshot]:
    """Resolve the effective template for a card and freeze it.

    Args:
        card: Card being rendered (its own ``templateId`` is used when no
            explicit id is given)
        config: Tournament configuration
        template_id: Optional explicit template id

    Returns:
        Tuple of (effective template id, snapshot)
    """
    effective_id = resolve_template_id(
        template_id if template_id is not None else card.template_id,
        card.card_type,
        config,
    )
    template = (
        find_template(config, effective_id)
        or FALLBACK_TEMPLATES.get(effective_id)
        or FALLBACK_TEMPLATES["usqc26"]
    )
    if template.id != effective_id:
        logger.debug(f"Template {effective_id!r} not defined, using {template.id!r}")

    theme = BASE_THEME.model_copy(
        update=template.theme.model_dump(exclude_none=True) if template.theme else {}
    )
    flags = DEFAULT_TEMPLATE_FLAGS.model_copy(
        update=template.flags.model_dump(exclude_none=True) if template.flags else {}
    )
    layout = resolve_template_layout(template)

    snapshot = TemplateSnapshot(
        overlay_key=template.overlay_key,
        theme=theme,
        flags=flags,
        overlay_placement=template.overlay_placement or "belowText",
        layout=layout.model_dump(mode="json", by_alias=True),
    )
    return effective_id, snapshot


def build_render_meta(
    key: str,
    template_id: str,
    snapshot: TemplateSnapshot,
    rendered_at: Optional[datetime] = None,
) -> RenderMeta:
    """Bundle a snapshot with the render's storage key for persistence."""
    when = rendered_at or datetime.now(timezone.utc)
    return RenderMeta(
        key=key,
        template_id=template_id,
        rendered_at=when.isoformat().replace("+00:00", "Z"),
        template_snapshot=snapshot,
    )
