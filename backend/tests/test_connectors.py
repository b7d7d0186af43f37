"""Tests for the USAspending connector."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
import requests

from backend.config import Settings
from backend.connectors.usaspending import (
    AwardSearchParams,
    SpendingOverTimeParams,
    USAspendingClient,
    build_session,
)
from backend.errors import UpstreamError


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "", bad_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self._bad_json = bad_json

    def json(self) -> Any:
        if self._bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None):
        self.response = response
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    def post(self, url: str, json: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self) -> None:
        pass


def _client(session: FakeSession) -> USAspendingClient:
    return USAspendingClient("https://example.test/api/v2/", timeout=5, session=session)


def test_search_awards_posts_payload_and_parses_page():
    session = FakeSession(
        FakeResponse(
            payload={
                "results": [{"Award ID": "A1"}, {"Award ID": "A2"}],
                "page_metadata": {"total": 42, "page": 2, "hasNext": True},
            }
        )
    )
    params = AwardSearchParams(
        filters={"keywords": ["radar"]},
        fields=["Award ID"],
        limit=2,
        page=2,
        sort="Award Amount",
        order="asc",
    )
    result = _client(session).search_awards(params)

    assert result == {
        "results": [{"Award ID": "A1"}, {"Award ID": "A2"}],
        "page_metadata": {"total": 42, "page": 2, "hasNext": True},
    }
    call = session.calls[0]
    assert call["url"] == "https://example.test/api/v2/search/spending_by_award/"
    assert call["timeout"] == 5
    assert call["json"] == {
        "filters": {"keywords": ["radar"], "award_type_codes": ["A", "B", "C", "D"]},
        "fields": ["Award ID"],
        "limit": 2,
        "page": 2,
        "sort": "Award Amount",
        "order": "asc",
    }


def test_search_awards_keeps_caller_award_types():
    session = FakeSession(FakeResponse(payload={"results": []}))
    params = AwardSearchParams(filters={"award_type_codes": ["IDV_A"]})
    _client(session).search_awards(params)
    assert session.calls[0]["json"]["filters"] == {"award_type_codes": ["IDV_A"]}
    assert params.filters == {"award_type_codes": ["IDV_A"]}


def test_search_awards_defaults_missing_metadata():
    session = FakeSession(FakeResponse(payload={"results": None}))
    result = _client(session).search_awards(AwardSearchParams(page=3))
    assert result == {"results": [], "page_metadata": {"total": 0, "page": 3, "hasNext": False}}


def test_spending_over_time_payload_and_order():
    rows = [
        {"time_period": {"fiscal_year": "2022"}, "aggregated_amount": 100},
        {"time_period": {"fiscal_year": "2023"}, "aggregated_amount": 150},
    ]
    session = FakeSession(FakeResponse(payload={"group": "fiscal_year", "results": rows}))
    result = _client(session).get_spending_over_time(
        SpendingOverTimeParams(filters={"keywords": ["x"]}, group="quarter")
    )
    assert result == {"results": rows}
    assert session.calls[0]["url"].endswith("/search/spending_over_time/")
    assert session.calls[0]["json"] == {"group": "quarter", "filters": {"keywords": ["x"]}}


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status_code=500, text="Internal Server Error"),
        FakeResponse(status_code=422, text='{"detail": "Missing award_type_codes"}'),
        FakeResponse(status_code=200, bad_json=True),
        FakeResponse(status_code=200, payload=["not", "an", "object"]),
    ],
)
def test_unusable_responses_raise_upstream_error(response):
    with pytest.raises(UpstreamError) as info:
        _client(FakeSession(response)).search_awards(AwardSearchParams())
    assert info.value.endpoint == "search/spending_by_award/"
    assert info.value.status_code == response.status_code


@pytest.mark.parametrize(
    "exc",
    [requests.Timeout("read timed out"), requests.ConnectionError("connection refused")],
)
def test_transport_failures_raise_upstream_error(exc):
    with pytest.raises(UpstreamError) as info:
        _client(FakeSession(exc=exc)).get_spending_over_time(SpendingOverTimeParams())
    assert info.value.status_code is None
    assert isinstance(info.value.__cause__, requests.RequestException)


def test_from_settings_uses_configured_values():
    settings = Settings(upstream_url="https://mirror.test/api/v2", upstream_timeout=12, upstream_retries=2)
    client = USAspendingClient.from_settings(settings)
    try:
        assert client.base_url == "https://mirror.test/api/v2"
        assert client.timeout == 12
        adapter = client.session.get_adapter("https://mirror.test")
        assert adapter.max_retries.total == 2
    finally:
        client.close()


def test_build_session_defaults_to_single_attempt():
    session = build_session()
    try:
        assert session.get_adapter("https://api.usaspending.gov").max_retries.total == 0
        assert session.headers["User-Agent"].startswith("AwardScope/")
    finally:
        session.close()
