"""Analytics service: traffic tracking and dashboard summaries."""

import logging
import re
from datetime import date, timedelta

from redis import Redis, RedisError

from continuum.core.config import Settings, get_settings
from continuum.models.analytics import (
    AnalyticsSummary,
    BotCount,
    ConversionKind,
    DailyCount,
    PageCount,
    SourceCount,
    TrackRequest,
    VisitorSession,
    WebVitalName,
    WebVitalRating,
)
from continuum.models.common import utcnow
from continuum.repositories.analytics_repo import AnalyticsRepository, DayCounters

logger = logging.getLogger(__name__)

AI_BOTS: dict[str, re.Pattern[str]] = {
    "ChatGPT": re.compile(r"ChatGPT-User|GPTBot", re.IGNORECASE),
    "Claude": re.compile(r"Claude-Web|ClaudeBot", re.IGNORECASE),
    "Perplexity": re.compile(r"PerplexityBot", re.IGNORECASE),
    "Gemini": re.compile(r"Google-Extended|Gemini-Bot", re.IGNORECASE),
    "GoogleBot": re.compile(r"Googlebot", re.IGNORECASE),
    "BingBot": re.compile(r"bingbot", re.IGNORECASE),
}

# (referer fragment, source) checked in order
REFERER_SOURCES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("google.com",), "organic_google"),
    (("bing.com",), "organic_bing"),
    (("facebook.com", "instagram.com"), "social_meta"),
    (("twitter.com", "x.com"), "social_x"),
    (("linkedin.com",), "social_linkedin"),
)

# "Good" upper bounds per Core Web Vitals metric
WEB_VITAL_THRESHOLDS: dict[WebVitalName, float] = {
    WebVitalName.CLS: 0.1,
    WebVitalName.FCP: 1800,
    WebVitalName.FID: 100,
    WebVitalName.LCP: 2500,
    WebVitalName.TTFB: 800,
    WebVitalName.INP: 200,
}


def detect_ai_bot(user_agent: str | None) -> str | None:
    """Name of the crawler or AI assistant behind a user agent, if any."""
    if not user_agent:
        return None
    for name, pattern in AI_BOTS.items():
        if pattern.search(user_agent):
            return name
    return None


def detect_traffic_source(referer: str | None, user_agent: str | None) -> str:
    """Classify where a visit came from."""
    if not referer:
        return "direct"
    referer = referer.lower()
    for fragments, source in REFERER_SOURCES:
        if any(fragment in referer for fragment in fragments):
            return source
    bot = detect_ai_bot(user_agent)
    if bot:
        return f"ai_bot_{bot.lower()}"
    return "referral"


def analyze_web_vitals(name: WebVitalName | str, value: float) -> WebVitalRating:
    metric = WebVitalName(name)
    threshold = WEB_VITAL_THRESHOLDS[metric]
    return WebVitalRating(name=metric, value=value, is_good=value <= threshold, threshold=threshold)


def date_range(start: date, end: date) -> list[date]:
    """Every date from ``start`` to ``end`` inclusive (empty when reversed)."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def today() -> date:
    return utcnow().date()


def _ranked(counts: dict[str, int], limit: int | None = None) -> list[tuple[str, int]]:
    # sorted() is stable: equal counts keep their enumeration order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit] if limit is not None else ranked


class AnalyticsService:
    """Per-day counters for page views, bot visits, sources and conversions."""

    def __init__(
        self,
        redis: Redis,  # type: ignore[type-arg]
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.repo = AnalyticsRepository(redis, self.settings.analytics_session_seconds)

    async def track_page_view(self, path: str, day: date | None = None) -> int:
        return await self.repo.increment_page_view(path, (day or today()).isoformat())

    async def track_bot_visit(self, bot: str, day: date | None = None) -> int:
        return await self.repo.increment_bot_visit(bot, (day or today()).isoformat())

    async def track_traffic_source(self, source: str, day: date | None = None) -> int:
        return await self.repo.increment_traffic_source(source, (day or today()).isoformat())

    async def track_conversion(self, kind: ConversionKind, day: date | None = None) -> int:
        return await self.repo.increment_conversion(kind, (day or today()).isoformat())

    async def track_session(
        self,
        session_id: str,
        path: str,
        user_agent: str | None = None,
    ) -> VisitorSession:
        """Start or extend a visitor session; each write renews its TTL."""
        now = utcnow()
        session = await self.repo.get_session(session_id)
        if session is None:
            session = VisitorSession(
                start_time=now,
                last_activity=now,
                pages=[path],
                user_agent=user_agent,
            )
        else:
            session.pages.append(path)
            session.last_activity = now
        await self.repo.save_session(session_id, session)
        return session

    async def track(self, event: TrackRequest) -> None:
        """Record a pre-classified hit (body of the public track endpoint)."""
        day = date.fromisoformat(event.date) if event.date else today()
        await self.track_page_view(event.path, day)
        if event.ai_bot:
            await self.track_bot_visit(event.ai_bot, day)
        if event.source:
            await self.track_traffic_source(event.source, day)
        if event.session_id:
            await self.track_session(event.session_id, event.path, event.user_agent)

    async def track_request(
        self,
        path: str,
        user_agent: str | None,
        referer: str | None,
        session_id: str | None,
    ) -> None:
        """Classify and record one page request. Failures are logged, never raised."""
        try:
            await self.track(
                TrackRequest(
                    path=path,
                    ai_bot=detect_ai_bot(user_agent),
                    source=detect_traffic_source(referer, user_agent),
                    session_id=session_id,
                    user_agent=user_agent,
                )
            )
        except RedisError:
            logger.warning("Analytics tracking failed", extra={"path": path}, exc_info=True)

    async def get_range(self, start: date, end: date) -> list[DayCounters]:
        return [await self.repo.read_day(day) for day in date_range(start, end)]

    def summarize(self, start: date, end: date, days: list[DayCounters]) -> AnalyticsSummary:
        """Fold per-day counters into dashboard totals and rankings."""
        pages: dict[str, int] = {}
        bots: dict[str, int] = {}
        sources: dict[str, int] = {}
        daily: list[DailyCount] = []
        contacts = appointments = 0

        for counters in days:
            for path, count in counters.views.items():
                pages[path] = pages.get(path, 0) + count
            for bot, count in counters.bots.items():
                bots[bot] = bots.get(bot, 0) + count
            for source, count in counters.sources.items():
                sources[source] = sources.get(source, 0) + count
            contacts += counters.contacts
            appointments += counters.appointments
            daily.append(
                DailyCount(
                    date=counters.day,
                    page_views=sum(counters.views.values()),
                    bot_visits=sum(counters.bots.values()),
                )
            )

        top_n = self.settings.analytics_top_n
        return AnalyticsSummary(
            start_date=start.isoformat(),
            end_date=end.isoformat(),
            total_page_views=sum(pages.values()),
            total_bot_visits=sum(bots.values()),
            top_pages=[PageCount(path=p, views=v) for p, v in _ranked(pages, top_n)],
            bot_breakdown=[BotCount(bot=b, visits=v) for b, v in _ranked(bots)],
            traffic_sources=[SourceCount(source=s, visits=v) for s, v in _ranked(sources)],
            contact_submissions=contacts,
            appointment_requests=appointments,
            daily=daily,
        )

    async def get_range_summary(self, start: date, end: date) -> AnalyticsSummary:
        return self.summarize(start, end, await self.get_range(start, end))

    async def get_summary(self, days: int | None = None) -> AnalyticsSummary:
        """Summary of the last ``days`` days, today included."""
        days = days or self.settings.analytics_default_days
        end = today()
        start = end - timedelta(days=max(days, 1) - 1)
        return await self.get_range_summary(start, end)
