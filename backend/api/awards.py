"""Award search, recipient, competition and spending trend endpoints."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from backend.api.deps import get_spending_client
from backend.connectors.usaspending import USAspendingClient
from backend.errors import ValidationError
from backend.services import awards as award_service
from backend.services.awards import (
    AwardSearchRequest,
    CompetitionRequest,
    RecipientSearchRequest,
    SpendingOverTimeRequest,
)

router = APIRouter(tags=["awards"])


@router.post("/analyze-competition")
def analyze_competition(
    body: CompetitionRequest,
    client: USAspendingClient = Depends(get_spending_client),
) -> Dict[str, Any]:
    return award_service.analyze_competition(client, body)


@router.post("/search-awards")
def search_awards(
    body: AwardSearchRequest,
    client: USAspendingClient = Depends(get_spending_client),
) -> Dict[str, Any]:
    return award_service.search_awards(client, body)


@router.get("/search-recipients")
def search_recipients_get(
    name: Optional[str] = Query(None, description="Recipient name to search for"),
    limit: int = Query(10, description="Awards to return (capped at 50)"),
    client: USAspendingClient = Depends(get_spending_client),
) -> Dict[str, Any]:
    if not name or not name.strip():
        raise ValidationError("name query parameter is required")
    return award_service.search_recipients(client, RecipientSearchRequest(name=name, limit=limit))


@router.post("/search-recipients")
def search_recipients_post(
    body: RecipientSearchRequest,
    client: USAspendingClient = Depends(get_spending_client),
) -> Dict[str, Any]:
    return award_service.search_recipients(client, body)


@router.post("/spending-over-time")
def spending_over_time(
    body: SpendingOverTimeRequest,
    client: USAspendingClient = Depends(get_spending_client),
) -> Dict[str, Any]:
    return award_service.spending_over_time(client, body)


__all__ = ["router"]
