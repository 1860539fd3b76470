"""HTTP page fetcher."""

from __future__ import annotations

import logging

from requests import Session
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from .config import DEFAULT_ACCEPT, DEFAULT_ACCEPT_LANGUAGE
from .errors import FetchError
from .validation import is_supported_url


def make_browser_session(
    user_agent: str,
    *,
    accept: str = DEFAULT_ACCEPT,
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE,
    pool_size: int = 10,
) -> Session:
    """Create a requests session with browser-like headers and retry/backoff defaults."""
    session = Session()
    session.headers.update(
        {
            "User-Agent": user_agent,
            "Accept": accept,
            "Accept-Language": accept_language,
        }
    )
    retry = Retry(
        total=3,
        backoff_factor=0.6,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset({"GET"}),
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class RequestsFetcher:
    """Requests-based fetcher; failures surface as FetchError, empty bodies as ''."""

    def __init__(
        self,
        *,
        session: Session,
        timeout: float | None,
        logger: logging.Logger,
    ) -> None:
        self._session = session
        self._timeout = timeout
        self._logger = logger

    def fetch(self, url: str) -> str:
        if not is_supported_url(url):
            raise FetchError(f"Unsupported URL: {url}")
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except RequestException as exc:
            raise FetchError(f"{type(exc).__name__}: {exc}") from exc
        text = str(response.text or "")
        self._logger.debug("Fetched %s (%d chars)", url, len(text))
        return text

    def close(self) -> None:
        self._session.close()
