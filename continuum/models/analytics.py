"""Analytics schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from continuum.models.common import ApiModel


class WebVitalName(StrEnum):
    CLS = "CLS"
    FCP = "FCP"
    FID = "FID"
    LCP = "LCP"
    TTFB = "TTFB"
    INP = "INP"


class ConversionKind(StrEnum):
    CONTACT = "contacts"
    APPOINTMENT = "appointments"


class PageCount(ApiModel):
    path: str
    views: int


class BotCount(ApiModel):
    bot: str
    visits: int


class SourceCount(ApiModel):
    source: str
    visits: int


class DailyCount(ApiModel):
    date: str
    page_views: int = 0
    bot_visits: int = 0


class AnalyticsSummary(ApiModel):
    start_date: str
    end_date: str
    total_page_views: int = 0
    total_bot_visits: int = 0
    top_pages: list[PageCount] = Field(default_factory=list)
    bot_breakdown: list[BotCount] = Field(default_factory=list)
    traffic_sources: list[SourceCount] = Field(default_factory=list)
    contact_submissions: int = 0
    appointment_requests: int = 0
    daily: list[DailyCount] = Field(default_factory=list)


class TrackRequest(ApiModel):
    """Body of POST /api/analytics/track."""

    path: str = Field(..., min_length=1)
    date: str | None = None
    ai_bot: str | None = None
    source: str | None = None
    session_id: str | None = None
    user_agent: str | None = None


class WebVitalReport(ApiModel):
    name: WebVitalName
    value: float


class WebVitalRating(ApiModel):
    name: WebVitalName
    value: float
    is_good: bool
    threshold: float


class VisitorSession(ApiModel):
    start_time: datetime
    last_activity: datetime
    pages: list[str] = Field(default_factory=list)
    user_agent: str | None = None
