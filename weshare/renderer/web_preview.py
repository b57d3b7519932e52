from __future__ import annotations

from typing import Optional

from ..schemas.card import CardData
from ..services.i18n import Localizer
from .blocks import (
    contact_form_block,
    esc,
    hours_block,
    links_block,
    profile_block,
    services_block,
    video_block,
)
from .theme import css_variables, public_site_url

_BASE_STYLE = """
body { margin: 0; background: var(--ws-bg); color: var(--ws-text); font-family: var(--ws-font); }
.ws-page { max-width: 960px; margin: 0 auto; padding: 48px 24px; display: grid; gap: 32px; }
.ws-columns { display: grid; grid-template-columns: 1fr 1fr; gap: 32px; }
.ws-link { display: block; padding: 14px 18px; border-radius: 14px; background: var(--ws-surface);
  color: var(--ws-text); text-decoration: none; margin-bottom: 12px; }
.ws-bio, .ws-title, .ws-company { color: var(--ws-muted); }
.ws-qr { font-size: 12px; color: var(--ws-muted); }
@media (max-width: 720px) { .ws-columns { grid-template-columns: 1fr; } }
""".strip()


def _qr_block(card: CardData, base_url: str) -> str:
    qr = card.qr
    return (
        f'<div class="ws-qr" data-url="{esc(public_site_url(card, base_url))}" '
        f'data-rounded="{str(qr.rounded).lower()}" data-logo="{str(qr.show_logo).lower()}" '
        f'data-dark="{esc(qr.dark_color)}" data-light="{esc(qr.light_color)}">'
        f"{esc(public_site_url(card, base_url))}</div>"
    )


def render_web_preview(
    card: CardData,
    localizer: Optional[Localizer] = None,
    *,
    base_url: str = "weshare.site",
) -> str:
    """Render the desktop web version of a card as a full HTML document."""
    resolved_localizer = localizer or Localizer()
    left = "".join(
        section
        for section in (profile_block(card), links_block(card), video_block(card))
        if section
    )
    right = "".join(
        section
        for section in (
            services_block(card, resolved_localizer),
            hours_block(card, resolved_localizer),
            contact_form_block(card, resolved_localizer),
        )
        if section
    )
    title = esc(card.profile.name or card.internal_name)
    return (
        "<!DOCTYPE html>"
        f'<html lang="{esc(resolved_localizer.language)}"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{title}</title><style>{_BASE_STYLE}</style></head>"
        f'<body style="{esc(css_variables(card))}" data-theme="{esc(card.theme.value)}">'
        '<main class="ws-page">'
        f'<div class="ws-columns"><div class="ws-main">{left}</div>'
        f'<aside class="ws-side">{right}</aside></div>'
        f"<footer>{_qr_block(card, base_url)}</footer>"
        "</main></body></html>"
    )


__all__ = ["render_web_preview"]
