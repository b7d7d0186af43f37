"""Recipient rollups, award statistics and spending trend classification."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from backend.connectors.fields import RecipientRollup, to_number, to_text

DEFAULT_TOP_RECIPIENTS = 20
MAX_TOP_AGENCIES = 5
MAX_NAICS_CODES = 10
INCREASE_RATIO = 1.1
DECREASE_RATIO = 0.9


def _records(records: Any) -> List[Mapping[str, Any]]:
    # Anything that is not a mapping is skipped rather than failing the batch.
    return [r for r in (records or []) if isinstance(r, Mapping)]


def distinct_values(values: Iterable[Any], limit: Optional[int] = None) -> List[Any]:
    """Drop falsy values and duplicates, keeping first-seen order."""
    seen: List[Any] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.append(value)
        if limit is not None and len(seen) >= limit:
            break
    return seen


def rollup_recipients(records: Iterable[Mapping[str, Any]], limit: Optional[int] = DEFAULT_TOP_RECIPIENTS) -> List[RecipientRollup]:
    """Group award rows by recipient name and rank by total amount.

    The UEI of the first row seen for a recipient is kept. Ties keep
    insertion order; totals never depend on it.
    """
    by_name: Dict[str, RecipientRollup] = {}
    for record in _records(records):
        name = to_text(record.get("Recipient Name") or "Unknown")
        rollup = by_name.get(name)
        if rollup is None:
            rollup = RecipientRollup(name=name, uei=to_text(record.get("Recipient UEI") or ""))
            by_name[name] = rollup
        elif not rollup.uei and record.get("Recipient UEI"):
            rollup.uei = to_text(record.get("Recipient UEI"))
        rollup.total_amount += to_number(record.get("Award Amount"))
        rollup.award_count += 1
        rollup.awards.append(to_text(record.get("Award ID") or ""))

    ranked = sorted(by_name.values(), key=lambda r: r.total_amount, reverse=True)
    if limit is not None:
        ranked = ranked[: max(int(limit), 0)]
    return ranked


def market_size(rollups: Iterable[RecipientRollup]) -> float:
    # Scoped to the recipients passed in, i.e. the truncated top-N.
    return sum(r.total_amount for r in rollups)


def _agency(record: Mapping[str, Any]) -> Any:
    return record.get("awarding_toptier_agency_name") or record.get("Awarding Agency")


def summarize_awards(records: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    rows = _records(records)
    total = sum(to_number(r.get("Award Amount")) for r in rows)
    count = len(rows)
    return {
        "total_award_amount": total,
        "award_count": count,
        "average_award": total / count if count > 0 else 0,
        "top_agencies": distinct_values((_agency(r) for r in rows), MAX_TOP_AGENCIES),
        "naics_codes": distinct_values((r.get("NAICS Code") for r in rows), MAX_NAICS_CODES),
    }


def classify_trend(points: Iterable[Mapping[str, Any]]) -> str:
    """Compare the first and last aggregated amounts of a time series.

    Returns ``"increasing"`` when the last point exceeds the first by more
    than 10%, ``"decreasing"`` when it is more than 10% below, otherwise
    ``"stable"``. Intermediate points are ignored.
    """
    rows = list(points or [])
    if len(rows) < 2:
        return "stable"
    first = to_number(rows[0].get("aggregated_amount")) if isinstance(rows[0], Mapping) else 0.0
    last = to_number(rows[-1].get("aggregated_amount")) if isinstance(rows[-1], Mapping) else 0.0
    if last > first * INCREASE_RATIO:
        return "increasing"
    if last < first * DECREASE_RATIO:
        return "decreasing"
    return "stable"


__all__ = [
    "DEFAULT_TOP_RECIPIENTS",
    "classify_trend",
    "distinct_values",
    "market_size",
    "rollup_recipients",
    "summarize_awards",
]
