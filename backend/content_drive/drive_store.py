from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from .errors import InvalidReference
from .services.categorize import FileCategory, categorize_file
from .services.folder_reference import resolve_folder_reference

DRIVE_FOLDER_URL = "https://drive.google.com/drive/folders/{}"
_DRIVE_FILE_URL = "https://drive.google.com/file/d/{}"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@dataclass(frozen=True)
class DriveFolder:
    """Folder registered in the local simulation store."""

    id: str
    name: str
    url: str
    created_at: str
    updated_at: str

    @property
    def drive_folder_id(self) -> Optional[str]:
        try:
            return resolve_folder_reference(self.url)
        except InvalidReference:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class DriveFile:
    id: str
    folder_id: str
    name: str
    mime_type: str
    category: FileCategory
    url: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "folderId": self.folder_id,
            "name": self.name,
            "mimeType": self.mime_type,
            "category": self.category.value,
            "url": self.url,
            "createdAt": self.created_at,
        }


_SEED_FOLDERS = (
    ("folder_001", "spring_academy_2026", "abc001", "2026-02-01T10:00:00Z", "2026-02-02T09:00:00Z"),
    ("folder_002", "carb_loading_campaign", "abc002", "2026-01-28T14:00:00Z", "2026-02-01T16:30:00Z"),
    ("folder_003", "event_nutrition_seminar", "abc003", "2026-01-20T09:00:00Z", "2026-01-31T11:00:00Z"),
)

_DOC = "application/vnd.google-apps.document"

_SEED_FILES = (
    ("file_001", "folder_001", "MTG議事録_20260201.docx", _DOC, FileCategory.MINUTES, "f001", "2026-02-01T10:30:00Z"),
    ("file_002", "folder_001", "企画書_スプリングアカデミー.pdf", "application/pdf", FileCategory.OTHER, "f002", "2026-02-01T11:00:00Z"),
    ("file_003", "folder_001", "transcript_mtg_0201.txt", "text/plain", FileCategory.TRANSCRIPT, "f003", "2026-02-01T11:30:00Z"),
    ("file_004", "folder_001", "photo_academy_01.jpg", "image/jpeg", FileCategory.PHOTO, "f004", "2026-02-01T12:00:00Z"),
    ("file_005", "folder_001", "photo_academy_02.jpg", "image/jpeg", FileCategory.PHOTO, "f005", "2026-02-01T12:05:00Z"),
    ("file_006", "folder_001", "photo_food_sample.png", "image/png", FileCategory.PHOTO, "f006", "2026-02-02T09:00:00Z"),
    ("file_007", "folder_002", "議事録_カーボローディング企画.docx", _DOC, FileCategory.MINUTES, "f007", "2026-01-28T14:30:00Z"),
    ("file_008", "folder_002", "transcript_meeting_0128.txt", "text/plain", FileCategory.TRANSCRIPT, "f008", "2026-01-28T15:00:00Z"),
    ("file_009", "folder_002", "evidence_hawley_1997.pdf", "application/pdf", FileCategory.OTHER, "f009", "2026-01-29T10:00:00Z"),
    ("file_010", "folder_002", "photo_carb_meal.jpg", "image/jpeg", FileCategory.PHOTO, "f010", "2026-02-01T16:30:00Z"),
    ("file_011", "folder_003", "セミナー企画概要.docx", _DOC, FileCategory.MINUTES, "f011", "2026-01-20T09:30:00Z"),
    ("file_012", "folder_003", "photo_seminar_venue.jpg", "image/jpeg", FileCategory.PHOTO, "f012", "2026-01-31T11:00:00Z"),
)

_MINUTES_FIXTURE_IDS = ("001", "007", "011")
_TRANSCRIPT_FIXTURE_IDS = ("003", "008")

MOCK_MINUTES_CONTENT = """【会議議事録】

日時: 2026年2月1日 10:00-11:30
参加者: 田中、佐藤、鈴木、高橋

■ 議題1: 春のキャンペーン企画について
- 3月開催予定のスプリングアカデミーの概要を共有
- ターゲット: 新年度を迎える若手アスリート
- 目標参加者数: 50名
- 特典: 早期申込割引、ペア割引

■ 議題2: SNS発信方針
- Instagram中心に展開
- Reels/Stories/Feedの3形式で発信
- 参加者の声を積極的に活用

■ アクションアイテム
- 田中: 会場手配を来週中に確定
- 佐藤: 告知用ビジュアル作成
- 鈴木: LINEキャンペーン設計

次回MTG: 2月8日 14:00"""

MOCK_TRANSCRIPT_CONTENT = """[00:00:15] 田中: それでは本日のミーティングを始めましょう。まず春のキャンペーン企画についてです。

[00:00:32] 佐藤: はい、企画書の方準備しました。今回のターゲットは新年度を迎える若手アスリートを想定しています。

[00:01:05] 鈴木: 目標参加者数はどのくらいを想定していますか？

[00:01:12] 佐藤: 50名を目標にしたいと考えています。早期申込割引やペア割引を設けて、なるべく早めに集客したいですね。

[00:01:45] 高橋: SNSの発信方針についても議論しておきたいのですが。

[00:01:52] 田中: そうですね。Instagramを中心に展開しましょう。Reels、Stories、Feedの3形式で。

[00:02:10] 鈴木: 参加者の声を使った投稿も効果的だと思います。"""

MOCK_GENERIC_CONTENT = """サンプルファイルコンテンツ (fileId: {file_id})

このファイルはモックデータです。
実際のGoogle Drive連携を有効にするには、環境変数を設定してください。"""


class DriveStore:
    """In-memory folder and file records backing the simulation mode.

    The store lives as long as the process and is never persisted. Creates only
    append new records; the sole cross-record write is bumping a folder's
    ``updated_at`` when a file is added to it.
    """

    def __init__(self, *, seed: bool = True) -> None:
        self._folders: List[DriveFolder] = []
        self._files: List[DriveFile] = []
        self._counter: Iterator[int] = itertools.count(101)
        if seed:
            self._seed()

    def _seed(self) -> None:
        for folder_id, name, drive_id, created_at, updated_at in _SEED_FOLDERS:
            self._folders.append(
                DriveFolder(
                    id=folder_id,
                    name=name,
                    url=DRIVE_FOLDER_URL.format(drive_id),
                    created_at=created_at,
                    updated_at=updated_at,
                )
            )
        for file_id, folder_id, name, mime_type, category, drive_id, created_at in _SEED_FILES:
            self._files.append(
                DriveFile(
                    id=file_id,
                    folder_id=folder_id,
                    name=name,
                    mime_type=mime_type,
                    category=category,
                    url=_DRIVE_FILE_URL.format(drive_id),
                    created_at=created_at,
                )
            )

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter):03d}"

    # Folders -----------------------------------------------------------
    def list_folders(self) -> List[DriveFolder]:
        return sorted(self._folders, key=lambda folder: folder.updated_at, reverse=True)

    def get_folder(self, folder_id: str) -> Optional[DriveFolder]:
        for folder in self._folders:
            if folder.id == folder_id:
                return folder
        return None

    def find_folder(self, reference: str) -> Optional[DriveFolder]:
        """Look a folder up by its local id or by the Drive id in its URL."""

        folder = self.get_folder(reference)
        if folder is not None:
            return folder
        for candidate in self._folders:
            if candidate.drive_folder_id == reference:
                return candidate
        return None

    def create_folder(self, name: str, url: Optional[str] = None) -> DriveFolder:
        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("name must be a non-empty string")

        now = _utcnow_iso()
        folder = DriveFolder(
            id=self._next_id("folder"),
            name=normalized_name,
            url=url or DRIVE_FOLDER_URL.format(self._next_id("gd")),
            created_at=now,
            updated_at=now,
        )
        self._folders.append(folder)
        return folder

    # Files -------------------------------------------------------------
    def list_files(self, folder_id: str) -> List[DriveFile]:
        files = [item for item in self._files if item.folder_id == folder_id]
        return sorted(files, key=lambda item: item.created_at, reverse=True)

    def get_file(self, file_id: str) -> Optional[DriveFile]:
        for item in self._files:
            if item.id == file_id:
                return item
        return None

    def create_file(
        self,
        *,
        folder_id: str,
        name: str,
        mime_type: Optional[str] = None,
        category: Optional[FileCategory] = None,
        url: Optional[str] = None,
    ) -> DriveFile:
        normalized_mime = mime_type or "application/octet-stream"
        created = DriveFile(
            id=self._next_id("file"),
            folder_id=folder_id,
            name=name,
            mime_type=normalized_mime,
            category=category or categorize_file(name, normalized_mime),
            url=url or "",
            created_at=_utcnow_iso(),
        )
        self._files.append(created)

        for index, folder in enumerate(self._folders):
            if folder.id == folder_id:
                self._folders[index] = replace(folder, updated_at=created.created_at)
                break
        return created

    # Content -----------------------------------------------------------
    def mock_content(self, file_id: str, mime_type: Optional[str] = None) -> str:
        mime = mime_type or ""
        if "document" in mime or any(suffix in file_id for suffix in _MINUTES_FIXTURE_IDS):
            return MOCK_MINUTES_CONTENT
        if "text" in mime or any(suffix in file_id for suffix in _TRANSCRIPT_FIXTURE_IDS):
            return MOCK_TRANSCRIPT_CONTENT
        return MOCK_GENERIC_CONTENT.format(file_id=file_id)
