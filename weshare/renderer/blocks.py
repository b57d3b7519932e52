from __future__ import annotations

import html
import re
from typing import Optional

from ..schemas.card import CardData
from ..services.i18n import Localizer

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_SAFE_SCHEMES = {"http", "https", "mailto", "tel"}


def esc(value: Optional[str]) -> str:
    return html.escape(value or "", quote=True)


def safe_url(url: Optional[str]) -> str:
    """Escape a link target; unknown schemes (``javascript:`` etc.) become ``#``."""
    value = (url or "").strip()
    if not value:
        return "#"
    match = _SCHEME_RE.match(value)
    if match and match.group(0)[:-1].lower() not in _SAFE_SCHEMES:
        return "#"
    return esc(value)


def avatar_block(card: CardData) -> str:
    profile = card.profile
    if profile.avatar_url:
        return f'<img class="ws-avatar" src="{safe_url(profile.avatar_url)}" alt="{esc(profile.name)}">'
    initial = (profile.name or "?").strip()[:1].upper() or "?"
    return f'<div class="ws-avatar ws-avatar--initial">{esc(initial)}</div>'


def profile_block(card: CardData) -> str:
    profile = card.profile
    parts = [avatar_block(card), f'<h1 class="ws-name">{esc(profile.name)}</h1>']
    if profile.job_title:
        parts.append(f'<p class="ws-title">{esc(profile.job_title)}</p>')
    company = card.company
    if company.name:
        role = f"{esc(company.role)} @ " if company.role else ""
        parts.append(f'<p class="ws-company">{role}{esc(company.name)}</p>')
    if profile.bio:
        parts.append(f'<p class="ws-bio">{esc(profile.bio)}</p>')
    return '<header class="ws-profile">' + "".join(parts) + "</header>"


def links_block(card: CardData) -> str:
    items = [
        f'<li><a class="ws-link" href="{safe_url(link.url)}" target="_blank" rel="noopener" '
        f'data-link-id="{esc(link.id)}">{esc(link.title or link.url)}</a></li>'
        for link in card.links
        if link.enabled and link.url
    ]
    if not items:
        return ""
    return '<ul class="ws-links">' + "".join(items) + "</ul>"


def video_block(card: CardData) -> str:
    if card.video is None or not card.video.url:
        return ""
    title = esc(card.video.title or "Video")
    return (
        '<section class="ws-video">'
        f'<a href="{safe_url(card.video.url)}" target="_blank" rel="noopener">{title}</a>'
        "</section>"
    )


def services_block(card: CardData, localizer: Localizer) -> str:
    if not card.services:
        return ""
    items = []
    for service in card.services:
        title = esc(service.title)
        if service.url:
            title = f'<a href="{safe_url(service.url)}" target="_blank" rel="noopener">{title}</a>'
        description = f"<p>{esc(service.description)}</p>" if service.description else ""
        items.append(f'<li class="ws-service"><h3>{title}</h3>{description}</li>')
    return (
        '<section class="ws-services">'
        f"<h2>{esc(localizer.t('preview.services'))}</h2>"
        '<ul>' + "".join(items) + "</ul></section>"
    )


def hours_block(card: CardData, localizer: Localizer) -> str:
    hours = card.business_hours
    if not hours.enabled or not hours.days:
        return ""
    closed = esc(localizer.t("preview.closed"))
    rows = []
    for day in hours.days:
        span = closed if day.closed else f"{esc(day.open)}&ndash;{esc(day.close)}"
        rows.append(f"<tr><th>{esc(day.day.capitalize())}</th><td>{span}</td></tr>")
    zone = f' <small>({esc(hours.timezone)})</small>' if hours.timezone else ""
    return (
        '<section class="ws-hours">'
        f"<h2>{esc(localizer.t('preview.business_hours'))}{zone}</h2>"
        "<table>" + "".join(rows) + "</table></section>"
    )


def contact_form_block(card: CardData, localizer: Localizer) -> str:
    form = card.contact_form
    if not form.enabled:
        return ""
    fields = [
        '<input name="name" type="text" required>',
        '<input name="email" type="email" required>',
    ]
    if form.collect_phone:
        fields.append('<input name="phone" type="tel">')
    if form.collect_message:
        fields.append('<textarea name="message"></textarea>')
    label = esc(form.button_label or localizer.t("preview.contact_submit"))
    return (
        '<section class="ws-contact">'
        f"<h2>{esc(form.title)}</h2>"
        '<form class="ws-contact-form" data-disabled="true">'
        + "".join(fields)
        + f'<button type="submit" disabled>{label}</button></form></section>'
    )


__all__ = [
    "avatar_block",
    "contact_form_block",
    "esc",
    "hours_block",
    "links_block",
    "profile_block",
    "safe_url",
    "services_block",
    "video_block",
]
