"""Paginated, sorted read access to stored facts."""

from __future__ import annotations

from .models import ContactFact, FactStore, PageResult
from .validation import validate_page_request

SORT_FIELDS = ("email", "phone", "address")


def get_results(store: FactStore, page: int, size: int, sort_by: str | None = None) -> PageResult:
    """Return one page of facts and the total count.

    ``sort_by`` is matched case-insensitively against ``SORT_FIELDS``; any other
    value keeps store order. Facts without the sort field sort first.
    """
    validate_page_request(page, size)
    facts: list[ContactFact] = store.find_all()
    field = (sort_by or "").strip().lower()
    ordered = facts
    if field in SORT_FIELDS:
        ordered = sorted(facts, key=lambda fact: getattr(fact, field) or "")
    skip = page * size
    return PageResult(items=ordered[skip : skip + size], total=len(facts))
