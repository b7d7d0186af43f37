"""Translate caller search criteria into USAspending filter objects."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Earliest action date the award search endpoint accepts.
EARLIEST_START_DATE = "2007-10-01"


class SearchCriteria(BaseModel):
    """Optional search criteria supplied by a caller.

    Every field may be absent. ``None``, empty strings, whitespace and empty
    lists all mean "no clause" to :func:`build_award_filters`. Keys are
    accepted in camelCase (``naicsCodes``) or snake_case (``naics_codes``).
    List fields also take a single string.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    keywords: Optional[List[str]] = None
    recipient_name: Optional[str] = Field(default=None, alias="recipientName")
    agency_name: Optional[str] = Field(default=None, alias="agencyName")
    naics_codes: Optional[List[str]] = Field(default=None, alias="naicsCodes")
    psc_codes: Optional[List[str]] = Field(default=None, alias="pscCodes")
    activity_start_date: Optional[str] = Field(default=None, alias="activityStartDate")
    activity_end_date: Optional[str] = Field(default=None, alias="activityEndDate")
    min_amount: Optional[float] = Field(default=None, alias="minAmount")
    max_amount: Optional[float] = Field(default=None, alias="maxAmount")
    state: Optional[str] = None
    award_type_codes: Optional[List[str]] = Field(default=None, alias="awardTypeCodes")
    set_aside_types: Optional[List[str]] = Field(default=None, alias="setAsideTypes")
    extent_competed: Optional[List[str]] = Field(default=None, alias="extentCompeted")
    contract_pricing_types: Optional[List[str]] = Field(default=None, alias="contractPricingTypes")

    @field_validator(
        "keywords",
        "naics_codes",
        "psc_codes",
        "award_type_codes",
        "set_aside_types",
        "extent_competed",
        "contract_pricing_types",
        mode="before",
    )
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (str, int)) and not isinstance(value, bool):
            return [str(value)]
        if isinstance(value, (list, tuple, set, frozenset)):
            return [str(v) for v in value if v is not None]
        return value

    @field_validator(
        "recipient_name",
        "agency_name",
        "state",
        "activity_start_date",
        "activity_end_date",
        "min_amount",
        "max_amount",
        mode="before",
    )
    @classmethod
    def _scalar(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, (list, tuple, set, frozenset, dict)) and not value:
            return None
        if isinstance(value, (date, datetime)):
            return value.isoformat()[:10]
        return value


CriteriaInput = Union[SearchCriteria, Mapping[str, Any], None]


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_list(values: Optional[List[str]]) -> List[str]:
    cleaned: List[str] = []
    for value in values or []:
        text = _clean_text(value)
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def _today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def coerce_criteria(criteria: CriteriaInput) -> SearchCriteria:
    if criteria is None:
        return SearchCriteria()
    if isinstance(criteria, SearchCriteria):
        return criteria
    return SearchCriteria.model_validate(dict(criteria))


def build_award_filters(criteria: CriteriaInput, today: Optional[str] = None) -> Dict[str, Any]:
    """Build the ``filters`` object for the USAspending search endpoints.

    Each non-empty criteria field maps to exactly one clause; absent and
    empty fields are left out entirely. Values are not validated beyond
    emptiness, so the upstream stays the judge of malformed dates or codes.
    ``today`` overrides the end date used when only a start date is given.
    """
    c = coerce_criteria(criteria)
    filters: Dict[str, Any] = {}

    keywords = _clean_list(c.keywords)
    if keywords:
        filters["keywords"] = keywords

    recipient = _clean_text(c.recipient_name)
    if recipient:
        filters["recipient_search_text"] = [recipient]

    agency = _clean_text(c.agency_name)
    if agency:
        filters["agencies"] = [{"type": "awarding", "tier": "toptier", "name": agency}]

    naics = _clean_list(c.naics_codes)
    if naics:
        filters["naics_codes"] = {"require": naics}

    psc = _clean_list(c.psc_codes)
    if psc:
        filters["psc_codes"] = {"require": psc}

    start = _clean_text(c.activity_start_date)
    end = _clean_text(c.activity_end_date)
    if start or end:
        # The upstream rejects a time_period object missing either side.
        filters["time_period"] = [
            {
                "start_date": start or EARLIEST_START_DATE,
                "end_date": end or today or _today_iso(),
            }
        ]

    if c.min_amount is not None or c.max_amount is not None:
        bounds: Dict[str, float] = {}
        if c.min_amount is not None:
            bounds["lower_bound"] = c.min_amount
        if c.max_amount is not None:
            bounds["upper_bound"] = c.max_amount
        filters["award_amounts"] = [bounds]

    state = _clean_text(c.state)
    if state:
        filters["place_of_performance_locations"] = [{"country": "USA", "state": state}]

    for key, values in (
        ("award_type_codes", c.award_type_codes),
        ("set_aside_type_codes", c.set_aside_types),
        ("extent_competed_type_codes", c.extent_competed),
        ("contract_pricing_type_codes", c.contract_pricing_types),
    ):
        cleaned = _clean_list(values)
        if cleaned:
            filters[key] = cleaned

    return filters


__all__ = [
    "EARLIEST_START_DATE",
    "SearchCriteria",
    "build_award_filters",
    "coerce_criteria",
]
