"""USAspending API connector for AwardScope."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

import requests
from pydantic import BaseModel, Field
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from backend.config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_UPSTREAM_URL, Settings
from backend.errors import UpstreamError

logger = logging.getLogger(__name__)

AWARD_SEARCH_PATH = "search/spending_by_award/"
SPENDING_OVER_TIME_PATH = "search/spending_over_time/"
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
CONTRACT_AWARD_TYPES = ["A", "B", "C", "D"]
USER_AGENT = "AwardScope/0.1"


class AwardSearchParams(BaseModel):
    """Input parameters for the award search endpoint."""

    filters: Dict[str, Any] = Field(default_factory=dict)
    fields: List[str] = Field(default_factory=list)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    page: int = Field(default=1, ge=1)
    sort: str = "Award Amount"
    order: Literal["asc", "desc"] = "desc"


class SpendingOverTimeParams(BaseModel):
    filters: Dict[str, Any] = Field(default_factory=dict)
    group: str = "fiscal_year"


def build_session(retries: int = 0) -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=max(int(retries), 0),
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=("GET", "POST"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def _build_award_payload(params: AwardSearchParams) -> Dict[str, Any]:
    filters = dict(params.filters)
    # The award search endpoint refuses requests without an award type group.
    filters.setdefault("award_type_codes", list(CONTRACT_AWARD_TYPES))
    return {
        "filters": filters,
        "fields": list(params.fields),
        "limit": params.limit,
        "page": params.page,
        "sort": params.sort,
        "order": params.order,
    }


def _page_metadata(data: Dict[str, Any], requested_page: int) -> Dict[str, Any]:
    meta = data.get("page_metadata")
    if not isinstance(meta, dict):
        meta = {}
    total = meta.get("total")
    if not isinstance(total, int) or isinstance(total, bool):
        total = 0
    page = meta.get("page")
    if not isinstance(page, int) or isinstance(page, bool):
        page = requested_page
    return {"total": total, "page": page, "hasNext": bool(meta.get("hasNext"))}


class USAspendingClient:
    """Thin request/response wrapper around the USAspending search API.

    One attempt per call unless the session was built with retries. Every
    failure surfaces as :class:`~backend.errors.UpstreamError`.

    Usage:
        client = USAspendingClient.from_settings(Settings.from_env())
        page = client.search_awards(AwardSearchParams(filters=..., fields=...))
    """

    def __init__(
        self,
        base_url: str = DEFAULT_UPSTREAM_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or build_session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "USAspendingClient":
        return cls(
            settings.upstream_url,
            timeout=settings.upstream_timeout,
            session=build_session(settings.upstream_retries),
        )

    def close(self) -> None:
        self.session.close()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"
        logger.debug("USAspending request %s payload: %s", path, payload)
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            raise UpstreamError(f"USAspending request timed out: {exc}", endpoint=path) from exc
        except requests.RequestException as exc:
            raise UpstreamError(f"USAspending request failed: {exc}", endpoint=path) from exc

        if not 200 <= response.status_code < 300:
            detail = (response.text or "")[:200]
            raise UpstreamError(
                f"USAspending returned HTTP {response.status_code}: {detail}",
                endpoint=path,
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "USAspending returned a body that is not JSON",
                endpoint=path,
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamError(
                "USAspending returned an unexpected JSON payload",
                endpoint=path,
                status_code=response.status_code,
            )
        return data

    def search_awards(self, params: AwardSearchParams) -> Dict[str, Any]:
        """Run one page of an award search.

        Returns ``{"results": [...], "page_metadata": {"total", "page", "hasNext"}}``.
        """
        data = self._post(AWARD_SEARCH_PATH, _build_award_payload(params))
        results = data.get("results")
        if not isinstance(results, list):
            results = []
        meta = _page_metadata(data, params.page)
        logger.info("Fetched %d awards from USAspending (page %d)", len(results), meta["page"])
        return {"results": results, "page_metadata": meta}

    def get_spending_over_time(self, params: SpendingOverTimeParams) -> Dict[str, Any]:
        """Fetch aggregated spending grouped by ``params.group``."""
        payload = {"group": params.group, "filters": dict(params.filters)}
        data = self._post(SPENDING_OVER_TIME_PATH, payload)
        results = data.get("results")
        if not isinstance(results, list):
            results = []
        logger.info("Fetched %d spending periods from USAspending (group=%s)", len(results), params.group)
        return {"results": results}


__all__ = [
    "AwardSearchParams",
    "SpendingOverTimeParams",
    "USAspendingClient",
    "build_session",
    "CONTRACT_AWARD_TYPES",
    "MAX_LIMIT",
]
