"""Validation and runtime guardrails."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from .errors import ConfigError


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a hostname."""
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def normalize_seeds(urls: list[str]) -> list[str]:
    """Strip, filter and dedupe seed URLs while keeping first-seen order."""
    output: list[str] = []
    seen: set[str] = set()
    for raw in urls:
        value = raw.strip()
        if not is_supported_url(value) or value in seen:
            continue
        seen.add(value)
        output.append(value)
    return output


def load_lines_from_file(path: str) -> list[str]:
    """Load non-empty lines from a UTF-8 text file."""
    content = Path(path).read_text(encoding="utf-8")
    return [line.strip() for line in content.splitlines() if line.strip()]


def validate_runtime_constraints(
    *,
    workers: int,
    max_pages: int,
    max_depth: int,
    idle_wait: float,
    request_timeout: float | None,
) -> None:
    """Validate CLI/runtime configuration and raise ConfigError on invalid values."""
    if workers < 1:
        raise ConfigError("--workers must be >= 1.")
    if max_pages < 1:
        raise ConfigError("--max-pages must be >= 1.")
    if max_depth < 0:
        raise ConfigError("--max-depth must be >= 0.")
    if idle_wait <= 0:
        raise ConfigError("idle wait must be > 0 seconds.")
    if request_timeout is not None and request_timeout <= 0:
        raise ConfigError("--timeout must be > 0 when provided.")


def validate_page_request(page: int, size: int) -> None:
    """Reject pagination values that cannot address a result page."""
    if page < 0:
        raise ValueError("page must be >= 0")
    if size < 1:
        raise ValueError("size must be >= 1")
