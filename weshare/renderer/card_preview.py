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
from .theme import css_variables


def render_card_preview(card: CardData, localizer: Optional[Localizer] = None) -> str:
    """Render the phone-sized card as an HTML fragment.

    Pure: the output depends only on ``card`` and the language, so callers
    re-render on every state-store notification instead of caching.
    """
    resolved_localizer = localizer or Localizer()
    sections = [
        profile_block(card),
        links_block(card),
        video_block(card),
        services_block(card, resolved_localizer),
        hours_block(card, resolved_localizer),
        contact_form_block(card, resolved_localizer),
    ]
    body = "".join(section for section in sections if section)
    return (
        f'<article class="ws-card ws-card--mobile" data-theme="{esc(card.theme.value)}" '
        f'style="{esc(css_variables(card))}">{body}</article>'
    )


__all__ = ["render_card_preview"]
