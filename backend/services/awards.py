"""Request orchestration for the award search, recipient, competition and trend endpoints."""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import Field, field_validator

from backend.analysis.aggregate import (
    DEFAULT_TOP_RECIPIENTS,
    classify_trend,
    market_size,
    rollup_recipients,
    summarize_awards,
)
from backend.connectors.fields import (
    AWARD_FIELDS,
    COMPETITION_FIELDS,
    transform_award_result,
    transform_competition_recipient,
)
from backend.connectors.filters import SearchCriteria, build_award_filters
from backend.connectors.usaspending import (
    MAX_LIMIT,
    AwardSearchParams,
    SpendingOverTimeParams,
    USAspendingClient,
)
from backend.errors import ValidationError

LOGGER = logging.getLogger(__name__)

COMPETITION_SAMPLE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
MAX_RECIPIENT_AWARDS = 50
DEFAULT_SORT = "Award Amount"
DEFAULT_GROUP = "fiscal_year"


class CompetitionRequest(SearchCriteria):
    limit: Optional[int] = None


class AwardSearchRequest(SearchCriteria):
    limit: Optional[int] = Field(default=None, ge=1)
    page: Optional[int] = Field(default=None, ge=1)
    sort: Optional[str] = None
    order: Optional[Literal["asc", "desc"]] = None

    @field_validator("order", mode="before")
    @classmethod
    def _lower_order(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class RecipientSearchRequest(SearchCriteria):
    name: Optional[str] = None
    limit: Optional[int] = None


class SpendingOverTimeRequest(SearchCriteria):
    group: Optional[str] = None


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def years_ago(today: date, years: int) -> date:
    """Same calendar day ``years`` earlier; Feb 29 rolls forward to Mar 1."""
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, month=3, day=1)


def _date_range(request: SearchCriteria, years: int, today: Optional[date]) -> Dict[str, str]:
    today = today or utc_today()
    return {
        "start": (request.activity_start_date or "").strip() or years_ago(today, years).isoformat(),
        "end": (request.activity_end_date or "").strip() or today.isoformat(),
    }


def analyze_competition(
    client: USAspendingClient,
    request: CompetitionRequest,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Rank the top recipients for the criteria over a default one-year window.

    ``total_market_size`` sums only the returned top recipients, not every
    matching award.
    """
    window = _date_range(request, 1, today)
    criteria = SearchCriteria(
        keywords=request.keywords,
        agency_name=request.agency_name,
        naics_codes=request.naics_codes,
        psc_codes=request.psc_codes,
        activity_start_date=window["start"],
        activity_end_date=window["end"],
        min_amount=request.min_amount,
    )
    params = AwardSearchParams(
        filters=build_award_filters(criteria),
        fields=COMPETITION_FIELDS,
        limit=COMPETITION_SAMPLE_SIZE,
        page=1,
        sort=DEFAULT_SORT,
        order="desc",
    )
    result = client.search_awards(params)

    limit = request.limit if request.limit and request.limit > 0 else DEFAULT_TOP_RECIPIENTS
    top = rollup_recipients(result.get("results") or [], limit=limit)
    total_market = market_size(top)
    LOGGER.info("Competition analysis ranked %d recipients (market=%.2f)", len(top), total_market)

    return {
        "summary": f"Competitive analysis showing top {len(top)} recipients",
        "total_awards_analyzed": (result.get("page_metadata") or {}).get("total") or 0,
        "total_market_size": total_market,
        "date_range": window,
        "top_recipients": [transform_competition_recipient(r, total_market) for r in top],
    }


def search_awards(client: USAspendingClient, request: AwardSearchRequest) -> Dict[str, Any]:
    """Search awards with every criteria field and return one transformed page."""
    params = AwardSearchParams(
        filters=build_award_filters(request),
        fields=AWARD_FIELDS,
        limit=min(request.limit or DEFAULT_PAGE_SIZE, MAX_LIMIT),
        page=request.page or 1,
        sort=request.sort or DEFAULT_SORT,
        order=request.order or "desc",
    )
    result = client.search_awards(params)
    results = result.get("results") or []
    meta = result.get("page_metadata") or {}
    total = meta.get("total") or 0

    return {
        "summary": f"Found {total} awards (showing {len(results)})",
        "total": total,
        "page": meta.get("page") or 1,
        "hasNext": bool(meta.get("hasNext")),
        "awards": [transform_award_result(r) for r in results],
    }


def recipient_name(request: RecipientSearchRequest) -> str:
    return (request.name or request.recipient_name or "").strip()


def search_recipients(
    client: USAspendingClient,
    request: RecipientSearchRequest,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Summarize a recipient's awards over a default three-year window."""
    name = recipient_name(request)
    if not name:
        raise ValidationError("name field is required")

    window = _date_range(request, 3, today)
    criteria = SearchCriteria(
        recipient_name=name,
        naics_codes=request.naics_codes,
        agency_name=request.agency_name,
        activity_start_date=window["start"],
        activity_end_date=window["end"],
    )
    limit = min(max(request.limit or DEFAULT_PAGE_SIZE, 1), MAX_RECIPIENT_AWARDS)
    params = AwardSearchParams(
        filters=build_award_filters(criteria),
        fields=AWARD_FIELDS,
        limit=limit,
        page=1,
        sort=DEFAULT_SORT,
        order="desc",
    )
    result = client.search_awards(params)
    awards = result.get("results") or []

    return {
        "search_term": name,
        "total_awards_found": (result.get("page_metadata") or {}).get("total") or 0,
        "showing": len(awards),
        "statistics": summarize_awards(awards),
        "recent_awards": [transform_award_result(a) for a in awards],
    }


def spending_over_time(client: USAspendingClient, request: SpendingOverTimeRequest) -> Dict[str, Any]:
    """Fetch grouped spending and label the direction of the trend."""
    group = (request.group or "").strip() or DEFAULT_GROUP
    criteria = SearchCriteria(
        keywords=request.keywords,
        recipient_name=request.recipient_name,
        agency_name=request.agency_name,
        naics_codes=request.naics_codes,
        psc_codes=request.psc_codes,
        activity_start_date=request.activity_start_date,
        activity_end_date=request.activity_end_date,
    )
    result = client.get_spending_over_time(
        SpendingOverTimeParams(filters=build_award_filters(criteria), group=group)
    )
    points = [p for p in result.get("results") or [] if isinstance(p, dict)]

    return {
        "summary": f"Spending trends grouped by {group}",
        "group_by": group,
        "trend_direction": classify_trend(points),
        "results": [
            {"time_period": p.get("time_period"), "aggregated_amount": p.get("aggregated_amount")}
            for p in points
        ],
    }


__all__ = [
    "AwardSearchRequest",
    "CompetitionRequest",
    "RecipientSearchRequest",
    "SpendingOverTimeRequest",
    "analyze_competition",
    "recipient_name",
    "search_awards",
    "search_recipients",
    "spending_over_time",
    "years_ago",
]
