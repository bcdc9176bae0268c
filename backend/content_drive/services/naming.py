"""Utility helpers for normalising Google Drive file names."""
from __future__ import annotations

import re
import unicodedata
from typing import Iterable

__all__ = [
    "normalize_drive_text",
    "squash_drive_text",
    "drive_name_contains",
]


def normalize_drive_text(value: str) -> str:
    normalized = unicodedata.normalize("NFKC", value or "")
    normalized = normalized.replace("\xa0", " ")
    normalized = normalized.strip().lower()
    return re.sub(r"\s+", " ", normalized)


def squash_drive_text(value: str) -> str:
    if not value:
        return ""
    return re.sub(r"[\s._\-()]+", "", value)


def drive_name_contains(name: str, keywords: Iterable[str]) -> bool:
    """Return True when any keyword occurs in the name, ignoring case and separators."""

    normalized = normalize_drive_text(name)
    if not normalized:
        return False
    squashed = squash_drive_text(normalized)
    for keyword in keywords:
        needle = normalize_drive_text(keyword)
        if not needle:
            continue
        if needle in normalized:
            return True
        squashed_needle = squash_drive_text(needle)
        if squashed_needle and squashed_needle in squashed:
            return True
    return False
