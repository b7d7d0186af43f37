"""Service layer helpers for AwardScope."""

from .awards import analyze_competition, search_awards, search_recipients, spending_over_time  # noqa: F401

__all__ = ["analyze_competition", "search_awards", "search_recipients", "spending_over_time"]
