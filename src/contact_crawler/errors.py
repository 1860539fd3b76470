"""Custom exceptions for the crawler domain."""


class CrawlerError(Exception):
    """Base exception for this project."""


class ConfigError(CrawlerError):
    """Raised when runtime configuration is invalid."""


class FetchError(CrawlerError):
    """Raised when fetching a URL fails (network or HTTP error)."""


class StoreConflictError(CrawlerError):
    """Raised by a fact store when a fact with the same identity already exists."""
