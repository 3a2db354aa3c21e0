"""Analytics API endpoints for tracking and the admin dashboard."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query

from continuum.api.dependencies import AdminAuth, AnalyticsSvc
from continuum.core.exceptions import ValidationError
from continuum.models.analytics import (
    AnalyticsSummary,
    TrackRequest,
    WebVitalRating,
    WebVitalReport,
)
from continuum.models.common import SuccessResponse
from continuum.services.analytics_service import analyze_web_vitals

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_STATS_DAYS = 365


@router.post("/track", response_model=SuccessResponse)
async def track(event: TrackRequest, service: AnalyticsSvc) -> SuccessResponse:
    """Record one page hit already classified by the caller."""
    if event.date:
        try:
            date.fromisoformat(event.date)
        except ValueError as e:
            raise ValidationError("date must be YYYY-MM-DD") from e
    await service.track(event)
    return SuccessResponse()


@router.get("/stats", response_model=AnalyticsSummary)
async def get_stats(
    auth: AdminAuth,  # noqa: ARG001
    service: AnalyticsSvc,
    days: Annotated[int | None, Query(ge=1, le=MAX_STATS_DAYS)] = None,
    start: Annotated[date | None, Query()] = None,
    end: Annotated[date | None, Query()] = None,
) -> AnalyticsSummary:
    """Dashboard summary for the last ``days`` days or an explicit range."""
    if start is not None or end is not None:
        if start is None or end is None:
            raise ValidationError("start and end must be given together")
        if start > end:
            raise ValidationError("start must not be after end")
        if (end - start).days + 1 > MAX_STATS_DAYS:
            raise ValidationError(f"range must not exceed {MAX_STATS_DAYS} days")
        return await service.get_range_summary(start, end)
    return await service.get_summary(days)


@router.post("/web-vitals", response_model=WebVitalRating)
async def report_web_vital(report: WebVitalReport) -> WebVitalRating:
    rating = analyze_web_vitals(report.name, report.value)
    logger.info(
        "Web vital reported",
        extra={"metric": rating.name.value, "value": rating.value, "is_good": rating.is_good},
    )
    return rating
