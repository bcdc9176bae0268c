"""Classify Drive files into the categories the dashboard groups by.

The rules are evaluated in order and the first match wins, so a Google Docs
file counts as minutes even when its name mentions a transcript.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .naming import drive_name_contains

GOOGLE_DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"

MINUTES_KEYWORDS = ("議事録", "会議録", "会議", "ミーティング", "minutes", "meeting")
TRANSCRIPT_KEYWORDS = ("transcript", "文字起こし", "書き起こし", "トランスクリプト")
PHOTO_KEYWORDS = ("photo", "写真", "画像")


class FileCategory(str, Enum):
    MINUTES = "minutes"
    TRANSCRIPT = "transcript"
    PHOTO = "photo"
    OTHER = "other"


class FileSource(str, Enum):
    GOOGLE_DRIVE = "google_drive"
    SIMULATION = "simulation"
    LOCAL = "local"
    ERROR = "error"


_Rule = Tuple[FileCategory, Callable[[str, str], bool]]

CATEGORY_RULES: Tuple[_Rule, ...] = (
    (
        FileCategory.MINUTES,
        lambda name, mime: mime == GOOGLE_DOCUMENT_MIME_TYPE
        or drive_name_contains(name, MINUTES_KEYWORDS),
    ),
    (
        FileCategory.TRANSCRIPT,
        lambda name, mime: drive_name_contains(name, TRANSCRIPT_KEYWORDS),
    ),
    (
        FileCategory.PHOTO,
        lambda name, mime: mime.startswith("image/") or drive_name_contains(name, PHOTO_KEYWORDS),
    ),
)


def categorize_file(name: Optional[str], mime_type: Optional[str]) -> FileCategory:
    normalized_name = name or ""
    normalized_mime = (mime_type or "").strip().lower()
    for category, matches in CATEGORY_RULES:
        if matches(normalized_name, normalized_mime):
            return category
    return FileCategory.OTHER


@dataclass(frozen=True)
class CategorizedFile:
    id: str
    name: str
    mime_type: str
    category: FileCategory
    web_view_link: Optional[str] = None
    thumbnail_link: Optional[str] = None
    created_time: Optional[str] = None
    size: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CategorizedFile":
        name = str(record.get("name") or "")
        mime_type = str(record.get("mimeType") or "application/octet-stream")
        size = record.get("size")
        return cls(
            id=str(record.get("id") or ""),
            name=name,
            mime_type=mime_type,
            category=categorize_file(name, mime_type),
            web_view_link=record.get("webViewLink") or None,
            thumbnail_link=record.get("thumbnailLink") or None,
            created_time=record.get("createdTime") or None,
            size=str(size) if size is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "category": self.category.value,
        }
        optional = {
            "webViewLink": self.web_view_link,
            "thumbnailLink": self.thumbnail_link,
            "createdTime": self.created_time,
            "size": self.size,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


@dataclass
class CategorizedFileSet:
    files: List[CategorizedFile]
    source: FileSource
    categorized: Dict[FileCategory, List[CategorizedFile]] = field(init=False)

    def __post_init__(self) -> None:
        self.categorized = {category: [] for category in FileCategory}
        for item in self.files:
            self.categorized[item.category].append(item)

    @property
    def total(self) -> int:
        return len(self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [item.to_dict() for item in self.files],
            "categorized": {
                category.value: [item.to_dict() for item in items]
                for category, items in self.categorized.items()
            },
            "total": self.total,
            "source": self.source.value,
        }


def newest_first(files: Sequence[CategorizedFile]) -> List[CategorizedFile]:
    """Order by creation time descending; ties keep their input order."""

    stamped = [item for item in files if item.created_time]
    unstamped = [item for item in files if not item.created_time]
    # sorted() is stable, and reverse=True keeps equal keys in input order.
    ordered = sorted(stamped, key=lambda item: item.created_time or "", reverse=True)
    return ordered + unstamped


def build_file_set(records: Iterable[Mapping[str, Any]], source: FileSource) -> CategorizedFileSet:
    files = [CategorizedFile.from_record(record) for record in records if isinstance(record, Mapping)]
    return CategorizedFileSet(files=newest_first(files), source=source)
