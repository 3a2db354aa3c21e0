"""Tests for analytics service."""

from datetime import date

import fakeredis
import pytest

from continuum.models.analytics import ConversionKind, PageCount, TrackRequest, WebVitalName
from continuum.services.analytics_service import (
    AnalyticsService,
    analyze_web_vitals,
    date_range,
    detect_ai_bot,
    detect_traffic_source,
)


@pytest.fixture
def service(redis_client: fakeredis.FakeRedis) -> AnalyticsService:
    return AnalyticsService(redis_client)


class TestDetection:
    """Tests for user agent and referer classification."""

    @pytest.mark.parametrize(
        ("user_agent", "expected"),
        [
            ("Mozilla/5.0 (compatible; GPTBot/1.0)", "ChatGPT"),
            ("ClaudeBot/1.0", "Claude"),
            ("PerplexityBot/1.0", "Perplexity"),
            ("Mozilla/5.0 (compatible; Googlebot/2.1)", "GoogleBot"),
            ("Mozilla/5.0 (compatible; bingbot/2.0)", "BingBot"),
            ("Mozilla/5.0 (Macintosh) Safari/605.1.15", None),
            (None, None),
        ],
    )
    def test_detect_ai_bot(self, user_agent: str | None, expected: str | None) -> None:
        assert detect_ai_bot(user_agent) == expected

    @pytest.mark.parametrize(
        ("referer", "expected"),
        [
            (None, "direct"),
            ("https://www.google.com/search?q=dog+longevity", "organic_google"),
            ("https://www.bing.com/", "organic_bing"),
            ("https://instagram.com/p/abc", "social_meta"),
            ("https://x.com/someone", "social_x"),
            ("https://www.linkedin.com/feed", "social_linkedin"),
            ("https://petblog.example/", "referral"),
        ],
    )
    def test_detect_traffic_source(self, referer: str | None, expected: str) -> None:
        assert detect_traffic_source(referer, "Mozilla/5.0") == expected

    def test_bot_source_for_unknown_referer(self) -> None:
        assert detect_traffic_source("https://chat.example/", "ClaudeBot/1.0") == "ai_bot_claude"

    def test_search_referer_beats_bot(self) -> None:
        assert detect_traffic_source("https://google.com/", "GPTBot") == "organic_google"


class TestWebVitals:
    def test_good_at_threshold(self) -> None:
        rating = analyze_web_vitals(WebVitalName.LCP, 2500)

        assert rating.is_good is True
        assert rating.threshold == 2500

    def test_poor_value(self) -> None:
        assert analyze_web_vitals("CLS", 0.25).is_good is False

    def test_unknown_metric(self) -> None:
        with pytest.raises(ValueError):
            analyze_web_vitals("XYZ", 1)


class TestDateRange:
    def test_inclusive(self) -> None:
        days = date_range(date(2025, 1, 30), date(2025, 2, 2))

        assert days == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]

    def test_reversed_is_empty(self) -> None:
        assert date_range(date(2025, 2, 2), date(2025, 2, 1)) == []


class TestRangeSummary:
    """Tests for multi-day aggregation."""

    async def test_page_views_sum_across_days(self, service: AnalyticsService) -> None:
        for day in (date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3)):
            await service.track_page_view("/blog", day)

        summary = await service.get_range_summary(date(2025, 1, 1), date(2025, 1, 3))

        assert summary.total_page_views == 3
        assert PageCount(path="/blog", views=3) in summary.top_pages
        assert [d.page_views for d in summary.daily] == [1, 1, 1]

    async def test_days_outside_range_are_ignored(self, service: AnalyticsService) -> None:
        await service.track_page_view("/", date(2024, 12, 31))
        await service.track_page_view("/", date(2025, 1, 1))

        summary = await service.get_range_summary(date(2025, 1, 1), date(2025, 1, 1))

        assert summary.total_page_views == 1

    async def test_top_pages_ranked(self, service: AnalyticsService) -> None:
        day = date(2025, 3, 1)
        for _ in range(3):
            await service.track_page_view("/en/blog", day)
        await service.track_page_view("/en/contact", day)

        summary = await service.get_range_summary(day, day)

        assert summary.top_pages[0] == PageCount(path="/en/blog", views=3)
        assert summary.top_pages[1] == PageCount(path="/en/contact", views=1)

    async def test_bots_sources_and_conversions(self, service: AnalyticsService) -> None:
        day = date(2025, 3, 1)
        await service.track_bot_visit("Claude", day)
        await service.track_bot_visit("Claude", day)
        await service.track_traffic_source("direct", day)
        await service.track_conversion(ConversionKind.CONTACT, day)
        await service.track_conversion(ConversionKind.APPOINTMENT, day)

        summary = await service.get_range_summary(day, day)

        assert summary.total_bot_visits == 2
        assert summary.bot_breakdown[0].bot == "Claude"
        assert summary.traffic_sources[0].source == "direct"
        assert summary.contact_submissions == 1
        assert summary.appointment_requests == 1

    async def test_empty_range(self, service: AnalyticsService) -> None:
        summary = await service.get_range_summary(date(2025, 1, 1), date(2025, 1, 7))

        assert summary.total_page_views == 0
        assert summary.top_pages == []
        assert len(summary.daily) == 7


class TestTracking:
    async def test_track_event(self, service: AnalyticsService) -> None:
        await service.track(
            TrackRequest(path="/en/", date="2025-05-05", ai_bot="Perplexity", source="referral")
        )

        summary = await service.get_range_summary(date(2025, 5, 5), date(2025, 5, 5))

        assert summary.total_page_views == 1
        assert summary.bot_breakdown[0].bot == "Perplexity"
        assert summary.traffic_sources[0].source == "referral"

    async def test_session_extends(
        self, service: AnalyticsService, redis_client: fakeredis.FakeRedis
    ) -> None:
        await service.track_session("sess-1", "/en/", "pytest")
        session = await service.track_session("sess-1", "/en/blog", "pytest")

        assert session.pages == ["/en/", "/en/blog"]
        assert redis_client.ttl("analytics:session:sess-1") > 0

    async def test_track_request_classifies(self, service: AnalyticsService) -> None:
        await service.track_request(
            "/en/", "GPTBot/1.0", "https://www.google.com/", session_id=None
        )

        summary = await service.get_summary(1)

        assert summary.total_page_views == 1
        assert summary.bot_breakdown[0].bot == "ChatGPT"
        assert summary.traffic_sources[0].source == "organic_google"
