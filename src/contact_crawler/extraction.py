"""Pure extraction, phone normalization and link discovery utilities."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .models import FactKind

EMAIL_REGEX = re.compile(r"[a-zA-Z0-9_.+\-]+@[a-zA-Z0-9\-]+\.[a-zA-Z0-9\-.]+")
PHONE_REGEX = re.compile(r"\+?\d[\d\s().\-]{7,}\d", re.ASCII)
CANONICAL_PHONE_REGEX = re.compile(r"\+7\d{10}", re.ASCII)
STREET_TYPES = (
    r"ул\.|улица|проспект|пр\.|пер\.|переулок|наб\.|набережная"
    r"|шоссе|ш\.|бульвар|бул\.|пл\.|площадь"
)
ADDRESS_REGEX = re.compile(
    r"\b(?:\d{6},?\s*)?(?:г\.?\s*)?[А-Яа-яёЁ\-\s]+,?\s*"
    rf"(?:{STREET_TYPES})"
    r"\s+[А-Яа-яёЁ\-\s]+,?\s*(?:д\.|дом)?\s*\d+[А-Яа-я]?(?:\s*корп\.?\s*\d+)?"
)
INVISIBLE_TAGS = ["script", "style", "noscript", "template"]
BLOCK_TAGS = (
    "address article aside blockquote br dd div dl dt fieldset figcaption figure footer form "
    "h1 h2 h3 h4 h5 h6 header hr li main nav ol p pre section table td th tr ul"
).split()


def visible_text(html: str) -> str:
    """Return the human-readable text of a page with whitespace collapsed.

    Only block-level elements break words; inline markup such as
    ``info<span>@</span>example.com`` keeps its text joined.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(INVISIBLE_TAGS):
        tag.decompose()
    for tag in soup(BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")
    return " ".join(soup.get_text().split())


def _unique(values: list[str]) -> list[str]:
    output: list[str] = []
    seen: set[str] = set()
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        output.append(value)
    return output


def extract_emails(text: str) -> list[str]:
    """Return lower-cased emails in first-seen order, one per distinct value."""
    return _unique(
        [match.group(0).lower().strip().rstrip(".") for match in EMAIL_REGEX.finditer(text or "")]
    )


def normalize_phone(raw: str) -> str | None:
    """Map a phone candidate to the canonical +7XXXXXXXXXX form, or None to reject it."""
    digits = re.sub(r"[^0-9]", "", raw)
    with_plus = re.sub(r"[^+0-9]", "", raw)
    if len(digits) == 11 and digits[0] in "78":
        formatted = "+7" + digits[1:]
    elif len(digits) == 10:
        formatted = "+7" + digits
    elif with_plus.startswith("+7"):
        formatted = with_plus
    else:
        return None
    if not CANONICAL_PHONE_REGEX.fullmatch(formatted):
        return None
    return formatted


def extract_phones(text: str) -> list[str]:
    """Return canonical phone numbers in first-seen order; malformed candidates are dropped."""
    candidates = (normalize_phone(match.group(0)) for match in PHONE_REGEX.finditer(text or ""))
    return _unique([phone for phone in candidates if phone])


def extract_addresses(text: str) -> list[str]:
    return _unique([match.group(0).strip() for match in ADDRESS_REGEX.finditer(text or "")])


def extract_facts(text: str) -> dict[FactKind, list[str]]:
    """Run every extractor over plain text, each with its own within-page dedup."""
    return {
        FactKind.EMAIL: extract_emails(text),
        FactKind.PHONE: extract_phones(text),
        FactKind.ADDRESS: extract_addresses(text),
    }


def discover_links(html: str, base_url: str) -> list[str]:
    """Return absolute http(s) link targets without fragments, deduped in page order."""
    links: list[str] = []
    soup = BeautifulSoup(html or "", "html.parser")
    for anchor in soup.find_all("a", href=True):
        href = str(anchor["href"]).strip()
        try:
            absolute = urljoin(base_url, href)
            parsed = urlparse(absolute)
        except ValueError:
            continue
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            continue
        if "#" in absolute:
            continue
        links.append(absolute)
    return _unique(links)
