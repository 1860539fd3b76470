import logging
from typing import Any

import pytest
import requests

from contact_crawler.config import DEFAULT_ACCEPT, DEFAULT_USER_AGENT
from contact_crawler.errors import FetchError
from contact_crawler.fetchers import RequestsFetcher, make_browser_session


class FakeResponse:
    def __init__(self, *, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError("bad status")


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.calls: list[tuple[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs.get("timeout")))
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def _fetcher(session: FakeSession, timeout: float | None = None) -> RequestsFetcher:
    return RequestsFetcher(
        session=session,  # type: ignore[arg-type]
        timeout=timeout,
        logger=logging.getLogger("test"),
    )


def test_fetcher_returns_html_and_passes_timeout() -> None:
    session = FakeSession(FakeResponse(text="<p>Hello</p>"))
    assert _fetcher(session, timeout=4.0).fetch("https://example.com") == "<p>Hello</p>"
    assert session.calls == [("https://example.com", 4.0)]


def test_fetcher_defaults_to_no_timeout() -> None:
    session = FakeSession(FakeResponse(text="ok"))
    _fetcher(session).fetch("https://example.com")
    assert session.calls == [("https://example.com", None)]


def test_fetcher_empty_body_is_not_an_error() -> None:
    session = FakeSession(FakeResponse(text=""))
    assert _fetcher(session).fetch("https://example.com") == ""


def test_fetcher_raises_fetch_error_on_http_error() -> None:
    session = FakeSession(FakeResponse(status_code=503))
    with pytest.raises(FetchError):
        _fetcher(session).fetch("https://example.com")


def test_fetcher_raises_fetch_error_on_network_error() -> None:
    session = FakeSession(error=requests.ConnectionError("refused"))
    with pytest.raises(FetchError, match="ConnectionError"):
        _fetcher(session).fetch("https://example.com")


def test_fetcher_rejects_unsupported_urls_without_request() -> None:
    session = FakeSession(FakeResponse(text="<html/>"))
    with pytest.raises(FetchError):
        _fetcher(session).fetch("file:///tmp/test")
    assert session.calls == []


def test_make_browser_session_sets_browser_headers() -> None:
    session = make_browser_session(DEFAULT_USER_AGENT)
    assert session.headers["User-Agent"] == DEFAULT_USER_AGENT
    assert session.headers["Accept"] == DEFAULT_ACCEPT
    assert session.headers["Accept-Language"] == "en-US,en;q=0.5"
