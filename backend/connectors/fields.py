"""Field selections and record transforms for USAspending award rows."""
from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field

AWARD_URL_TEMPLATE = "https://www.usaspending.gov/award/{}"

AWARD_FIELDS: List[str] = [
    "Award ID",
    "Recipient Name",
    "Recipient UEI",
    "Award Amount",
    "Description",
    "Start Date",
    "End Date",
    "Awarding Agency",
    "Awarding Sub Agency",
    "NAICS Code",
    "NAICS Description",
    "PSC Code",
    "Place of Performance State Code",
    "generated_internal_id",
]

COMPETITION_FIELDS: List[str] = [
    "Award ID",
    "Recipient Name",
    "Recipient UEI",
    "Award Amount",
    "Awarding Agency",
    "NAICS Code",
]


def to_number(value: Any) -> float:
    """Coerce an upstream value to a float, falling back to 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _first_text(record: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = record.get(key)
        if value:
            return to_text(value)
    return ""


class TransformedAward(BaseModel):
    award_id: str = ""
    recipient_name: str = ""
    recipient_uei: str = ""
    amount: float = 0.0
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    awarding_agency: str = ""
    awarding_sub_agency: str = ""
    naics_code: str = ""
    naics_description: str = ""
    psc_code: str = ""
    place_of_performance_state: str = ""
    internal_id: str = ""
    url: str = ""


class RecipientRollup(BaseModel):
    """Running totals for one recipient within a result set."""

    name: str
    uei: str = ""
    total_amount: float = 0.0
    award_count: int = 0
    awards: List[str] = Field(default_factory=list)


def transform_award_result(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a raw award row onto the stable caller-facing field names."""
    if not isinstance(record, Mapping):
        return TransformedAward().model_dump()
    internal_id = _first_text(record, "generated_internal_id")
    award = TransformedAward(
        award_id=_first_text(record, "Award ID"),
        recipient_name=_first_text(record, "Recipient Name"),
        recipient_uei=_first_text(record, "Recipient UEI"),
        amount=to_number(record.get("Award Amount")),
        description=_first_text(record, "Description"),
        start_date=_first_text(record, "Start Date"),
        end_date=_first_text(record, "End Date"),
        awarding_agency=_first_text(record, "Awarding Agency", "awarding_toptier_agency_name"),
        awarding_sub_agency=_first_text(record, "Awarding Sub Agency"),
        naics_code=_first_text(record, "NAICS Code"),
        naics_description=_first_text(record, "NAICS Description"),
        psc_code=_first_text(record, "PSC Code"),
        place_of_performance_state=_first_text(record, "Place of Performance State Code"),
        internal_id=internal_id,
        url=AWARD_URL_TEMPLATE.format(internal_id) if internal_id else "",
    )
    return award.model_dump()


def transform_competition_recipient(rollup: RecipientRollup, total_market_size: float) -> Dict[str, Any]:
    """Shape a recipient rollup and its percentage share of the market."""
    share = 0.0
    if total_market_size:
        share = round(rollup.total_amount / total_market_size * 100, 2)
    return {
        "recipient_name": rollup.name,
        "uei": rollup.uei,
        "total_amount": rollup.total_amount,
        "award_count": rollup.award_count,
        "market_share": share,
        "award_ids": list(rollup.awards),
    }


__all__ = [
    "AWARD_FIELDS",
    "COMPETITION_FIELDS",
    "RecipientRollup",
    "TransformedAward",
    "to_number",
    "to_text",
    "transform_award_result",
    "transform_competition_recipient",
]
