"""Pure HTML projections of a card for the editor's live preview."""

from .card_preview import render_card_preview
from .theme import css_variables, public_site_url
from .web_preview import render_web_preview

__all__ = [
    "css_variables",
    "public_site_url",
    "render_card_preview",
    "render_web_preview",
]
