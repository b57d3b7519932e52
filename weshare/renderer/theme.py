from __future__ import annotations

import re
from dataclasses import dataclass

from ..schemas.card import CardData, Theme

_WHITESPACE_RE = re.compile(r"\s+")

FONT_STACKS: dict[str, str] = {
    "inter": "'Inter', system-ui, sans-serif",
    "serif": "'Playfair Display', Georgia, serif",
    "mono": "'JetBrains Mono', ui-monospace, monospace",
    "rounded": "'Nunito', system-ui, sans-serif",
}
DEFAULT_FONT = "inter"


@dataclass(frozen=True)
class Palette:
    background: str
    surface: str
    text: str
    muted: str
    accent: str


PALETTES: dict[Theme, Palette] = {
    Theme.LIGHT: Palette("#f8fafc", "#ffffff", "#0f172a", "#64748b", "#0f172a"),
    Theme.DARK: Palette("#020617", "#0f172a", "#f8fafc", "#94a3b8", "#38bdf8"),
    Theme.GRADIENT: Palette(
        "linear-gradient(135deg, #6366f1 0%, #ec4899 100%)",
        "rgba(255, 255, 255, 0.15)",
        "#ffffff",
        "#e2e8f0",
        "#ffffff",
    ),
    Theme.MINIMAL: Palette("#ffffff", "#ffffff", "#111827", "#6b7280", "#111827"),
    Theme.CUSTOM: Palette("#f8fafc", "#ffffff", "#0f172a", "#64748b", "#0f172a"),
}


def resolve_palette(card: CardData) -> Palette:
    palette = PALETTES.get(card.theme, PALETTES[Theme.LIGHT])
    if card.custom_color:
        if card.theme == Theme.CUSTOM:
            return Palette(card.custom_color, "#ffffff", "#0f172a", "#64748b", card.custom_color)
        return Palette(palette.background, palette.surface, palette.text, palette.muted, card.custom_color)
    return palette


def font_stack(font: str | None) -> str:
    return FONT_STACKS.get((font or DEFAULT_FONT).lower(), FONT_STACKS[DEFAULT_FONT])


def css_variables(card: CardData) -> str:
    palette = resolve_palette(card)
    return (
        f"--ws-bg: {palette.background}; "
        f"--ws-surface: {palette.surface}; "
        f"--ws-text: {palette.text}; "
        f"--ws-muted: {palette.muted}; "
        f"--ws-accent: {palette.accent}; "
        f"--ws-font: {font_stack(card.font)};"
    )


def profile_slug(card: CardData) -> str:
    return _WHITESPACE_RE.sub("", card.profile.name or "").lower()


def public_site_url(card: CardData, base_url: str = "weshare.site") -> str:
    """The public address shown for a card, e.g. ``weshare.site/u/alexrivera``."""
    return f"{base_url.rstrip('/')}/u/{profile_slug(card)}"


__all__ = [
    "FONT_STACKS",
    "PALETTES",
    "Palette",
    "css_variables",
    "font_stack",
    "profile_slug",
    "public_site_url",
    "resolve_palette",
]
