"""Reduce folder and file references to canonical Drive identifiers."""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..errors import InvalidReference

DRIVE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_FOLDER_SEGMENT_PATTERN = re.compile(r"/folders/([A-Za-z0-9_-]+)")
_FILE_SEGMENT_PATTERN = re.compile(r"/d/([A-Za-z0-9_-]+)")

__all__ = [
    "DRIVE_ID_PATTERN",
    "is_canonical_id",
    "resolve_folder_reference",
    "resolve_file_reference",
]


def is_canonical_id(value: str) -> bool:
    return bool(DRIVE_ID_PATTERN.match(value))


def _query_id(query: str) -> Optional[str]:
    values = parse_qs(query).get("id")
    if not values:
        return None
    candidate = values[0].strip()
    return candidate if is_canonical_id(candidate) else None


def _extract(reference: str, segment_pattern: "re.Pattern[str]") -> Optional[str]:
    parsed = urlparse(reference)
    match = segment_pattern.search(parsed.path)
    if match:
        return match.group(1)
    return _query_id(parsed.query)


def resolve_folder_reference(reference: Optional[str]) -> str:
    """Return the folder identifier for a raw id or a shareable folder URL.

    Supported URL shapes:

    - ``https://drive.google.com/drive/folders/<ID>``
    - ``https://drive.google.com/drive/u/0/folders/<ID>?usp=sharing``
    - ``https://drive.google.com/open?id=<ID>``
    """

    value = (reference or "").strip()
    if not value:
        raise InvalidReference("フォルダIDまたはフォルダURLを指定してください。")

    if is_canonical_id(value):
        return value

    folder_id = _extract(value, _FOLDER_SEGMENT_PATTERN)
    if folder_id is None:
        raise InvalidReference(
            "フォルダURLからフォルダIDを取得できませんでした。",
            hint="https://drive.google.com/drive/folders/<ID> 形式のURLを指定してください。",
            details={"reference": value},
        )
    return folder_id


def resolve_file_reference(reference: Optional[str]) -> str:
    """Return the file identifier for a raw id or a document/file URL."""

    value = (reference or "").strip()
    if not value:
        raise InvalidReference("ファイルIDまたはファイルURLを指定してください。")

    if is_canonical_id(value):
        return value

    file_id = _extract(value, _FILE_SEGMENT_PATTERN)
    if file_id is None:
        raise InvalidReference(
            "ファイルURLからファイルIDを取得できませんでした。",
            details={"reference": value},
        )
    return file_id
