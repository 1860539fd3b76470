"""CSV serialization helpers."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import TextIO

from .models import ContactFact

CSV_FIELDS = ["source_url", "email", "phone", "address"]


def write_facts_to(file_obj: TextIO, facts: list[ContactFact]) -> None:
    """Write facts to an open text stream using the persisted column layout."""
    writer = csv.DictWriter(file_obj, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for fact in facts:
        writer.writerow(fact.as_row())


def write_facts(path: str, facts: list[ContactFact]) -> None:
    """Write facts to a CSV file with stable schema."""
    output_path = Path(path)
    with output_path.open("w", newline="", encoding="utf-8") as file_obj:
        write_facts_to(file_obj, facts)
