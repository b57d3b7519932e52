from __future__ import annotations

from pydantic import BaseModel


class AnalyticsSummary(BaseModel):
    total_views: int = 0
    total_clicks: int = 0
    avg_ctr: float = 0.0
    site_count: int = 0


__all__ = ["AnalyticsSummary"]
