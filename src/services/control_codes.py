"""
ACRIS document control code lookups.

The control code table maps a document type ("DEED", "MTGE", "UCC1", ...) to
its class code description and to the slash-delimited role strings for party
1 and party 2 ("MORTGAGER/BORROWER"). Only the text after the last slash is
shown as a role label.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

from loguru import logger

from config.acris import (
    CONTROL_CODES_FILE,
    DEFAULT_ROLE_LABEL,
    UNMAPPED_PARTY1_LABEL,
    UNMAPPED_PARTY2_LABEL,
)
from src.models.acris import ControlCodeEntry


def role_label(role: str | None) -> str:
    """Return the last slash segment of a role string ("GRANTOR/SELLER" -> "SELLER")."""
    if not role:
        return DEFAULT_ROLE_LABEL
    label = role.rsplit("/", 1)[-1].strip()
    return label or DEFAULT_ROLE_LABEL


class ControlCodeTable:
    """Read-only lookup keyed by document type code."""

    def __init__(self, entries: Iterable[ControlCodeEntry] = ()) -> None:
        self._entries: dict[str, ControlCodeEntry] = {}
        for entry in entries:
            key = entry.doc_type.strip().upper()
            if key in self._entries:
                logger.debug("Duplicate control code {} ignored", key)
                continue
            self._entries[key] = entry

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> ControlCodeTable:
        """Build from raw dicts using either ACRIS column names or snake_case keys."""
        return cls(ControlCodeEntry.model_validate(dict(r)) for r in records)

    @classmethod
    def load(cls, path: str | Path = CONTROL_CODES_FILE) -> ControlCodeTable:
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
        table = cls.from_records(records)
        logger.debug("Loaded {} ACRIS control codes from {}", len(table), path)
        return table

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, doc_type: object) -> bool:
        return isinstance(doc_type, str) and doc_type.strip().upper() in self._entries

    def get(self, doc_type: str | None) -> ControlCodeEntry | None:
        if not doc_type:
            return None
        return self._entries.get(doc_type.strip().upper())

    def role_labels(self, doc_type: str | None) -> tuple[str, str]:
        """Return (party1_label, party2_label) for a document type."""
        entry = self.get(doc_type)
        if entry is None:
            return UNMAPPED_PARTY1_LABEL, UNMAPPED_PARTY2_LABEL
        return role_label(entry.party1_type), role_label(entry.party2_type)

    def class_code_description(self, doc_type: str | None) -> str | None:
        entry = self.get(doc_type)
        return entry.class_code_description if entry else None
