"""
Data models for the market data layer.
Bars use the core Bar type from models.py; this module holds the
request vocabulary and news items.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional

import pandas as pd

Timespan = Literal["minute", "day"]
TIMESPANS = ("minute", "day")


def _to_utc(value) -> datetime:
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return stamp.tz_convert("UTC").to_pydatetime()


@dataclass(frozen=True)
class NewsArticle:
    """Headline for the news sidebar."""
    id: str
    title: str
    published_utc: datetime
    article_url: str
    description: str = ""
    publisher: str = ""
    image_url: Optional[str] = None
    tickers: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)

    @classmethod
    def from_polygon(cls, item: dict) -> "NewsArticle":
        return cls(
            id=str(item.get("id", "")),
            title=item.get("title", ""),
            published_utc=_to_utc(item["published_utc"]),
            article_url=item.get("article_url", ""),
            description=item.get("description") or "",
            publisher=(item.get("publisher") or {}).get("name", ""),
            image_url=item.get("image_url"),
            tickers=list(item.get("tickers") or []),
            keywords=list(item.get("keywords") or []),
        )

    def time_ago(self, now: Optional[datetime] = None) -> str:
        """Relative age such as "12m ago", "3h ago" or "2d ago"."""
        now = now or datetime.now(timezone.utc)
        minutes = int((now - self.published_utc).total_seconds() // 60)
        if minutes < 60:
            return f"{minutes}m ago"
        hours = minutes // 60
        if hours < 24:
            return f"{hours}h ago"
        return f"{hours // 24}d ago"
