import pytest

from contact_crawler.models import ContactFact, FactKind
from contact_crawler.results import get_results
from contact_crawler.store import InMemoryFactStore


def _store_with_mixed_facts() -> InMemoryFactStore:
    store = InMemoryFactStore()
    for index in range(10):
        store.save(
            ContactFact(f"https://example.com/{index}", FactKind.EMAIL, f"user{9 - index}@example.com")
        )
    for index in range(5):
        store.save(ContactFact(f"https://example.com/p{index}", FactKind.PHONE, f"+7912345678{index}"))
    return store


def test_sort_by_email_puts_missing_emails_first() -> None:
    result = get_results(_store_with_mixed_facts(), page=0, size=10, sort_by="email")
    assert result.total == 15
    assert len(result.items) == 10
    assert [fact.email for fact in result.items[:5]] == [None] * 5
    emails = [fact.email for fact in result.items[5:]]
    assert emails == sorted(emails)
    assert emails[0] == "user0@example.com"


def test_unrecognized_sort_keeps_store_order_and_paginates() -> None:
    store = _store_with_mixed_facts()
    result = get_results(store, page=1, size=10, sort_by="source")
    assert result.total == 15
    assert result.items == store.find_all()[10:]


def test_sort_field_is_case_insensitive() -> None:
    result = get_results(_store_with_mixed_facts(), page=0, size=3, sort_by="PHONE")
    assert [fact.kind for fact in result.items] == [FactKind.EMAIL] * 3


def test_page_past_end_is_empty_but_reports_total() -> None:
    result = get_results(_store_with_mixed_facts(), page=5, size=10)
    assert result.items == []
    assert result.total == 15


def test_invalid_page_request_raises() -> None:
    with pytest.raises(ValueError):
        get_results(InMemoryFactStore(), page=-1, size=10)
    with pytest.raises(ValueError):
        get_results(InMemoryFactStore(), page=0, size=0)
