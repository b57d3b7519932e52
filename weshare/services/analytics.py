from __future__ import annotations

import csv
import io
from datetime import timezone
from typing import Iterable, List, Sequence

from ..schemas.analytics import AnalyticsSummary
from ..schemas.card import AnalyticsSnapshot, CardData, ContactSubmission, compute_ctr
from ..schemas.wire import AnalyticsDay
from ..utils.datetime import isoformat_z

CSV_COLUMNS = ("name", "email", "phone", "message", "source", "submitted_at")


def aggregate(sites: Sequence[CardData]) -> AnalyticsSummary:
    """Fold the per-site snapshots into dashboard totals."""
    total_views = 0
    total_clicks = 0
    ctr_values: list[float] = []
    for site in sites:
        snapshot = site.analytics
        if snapshot is None:
            continue
        total_views += snapshot.views or 0
        total_clicks += snapshot.clicks or 0
        ctr_values.append(snapshot.ctr or 0.0)

    avg_ctr = round(sum(ctr_values) / len(ctr_values), 1) if ctr_values else 0.0
    return AnalyticsSummary(
        total_views=total_views,
        total_clicks=total_clicks,
        avg_ctr=avg_ctr,
        site_count=len(sites),
    )


def rollup_days(days: Iterable[AnalyticsDay]) -> AnalyticsSnapshot:
    views = clicks = saves = 0
    for day in days:
        views += day.views
        clicks += day.clicks
        saves += day.saves
    return AnalyticsSnapshot(
        views=views,
        clicks=clicks,
        saves=saves,
        ctr=compute_ctr(views, clicks),
    )


def _sort_key(contact: ContactSubmission):
    submitted = contact.submitted_at
    if submitted.tzinfo is None:
        submitted = submitted.replace(tzinfo=timezone.utc)
    return submitted


def collect_contacts(sites: Sequence[CardData]) -> List[ContactSubmission]:
    """All collected contacts, newest first, tagged with their site's name."""
    contacts = [
        contact.model_copy(update={"source": site.internal_name})
        for site in sites
        for contact in site.collected_contacts
    ]
    contacts.sort(key=_sort_key, reverse=True)
    return contacts


def contacts_to_csv(contacts: Iterable[ContactSubmission]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for contact in contacts:
        writer.writerow(
            [
                contact.name,
                contact.email,
                contact.phone,
                contact.message,
                contact.source or "",
                isoformat_z(contact.submitted_at),
            ]
        )
    return buffer.getvalue()


__all__ = [
    "CSV_COLUMNS",
    "aggregate",
    "collect_contacts",
    "contacts_to_csv",
    "rollup_days",
]
