from __future__ import annotations

import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from content_drive.drive_store import (
    MOCK_MINUTES_CONTENT,
    MOCK_TRANSCRIPT_CONTENT,
    DriveStore,
)
from content_drive.services.categorize import FileCategory


def test_seeded_folders_are_listed_by_last_update() -> None:
    store = DriveStore()

    assert [folder.id for folder in store.list_folders()] == [
        "folder_001",
        "folder_002",
        "folder_003",
    ]


def test_seeded_files_are_listed_newest_first() -> None:
    store = DriveStore()

    files = store.list_files("folder_001")

    assert len(files) == 6
    assert files[0].id == "file_006"
    assert files[-1].id == "file_001"


def test_find_folder_accepts_local_or_drive_id() -> None:
    store = DriveStore()

    assert store.find_folder("folder_002").name == "carb_loading_campaign"
    assert store.find_folder("abc002").id == "folder_002"
    assert store.find_folder("unknown") is None


def test_create_folder_assigns_sequential_ids() -> None:
    store = DriveStore(seed=False)

    first = store.create_folder(" campaign ", "https://drive.google.com/drive/folders/xyz")
    second = store.create_folder("another")

    assert first.id == "folder_101"
    assert first.name == "campaign"
    assert first.drive_folder_id == "xyz"
    assert second.id == "folder_102"
    assert second.url.startswith("https://drive.google.com/drive/folders/gd_")


def test_create_folder_rejects_blank_name() -> None:
    with pytest.raises(ValueError):
        DriveStore(seed=False).create_folder("   ")


def test_create_file_categorizes_and_touches_folder() -> None:
    store = DriveStore()
    before = store.get_folder("folder_003").updated_at

    created = store.create_file(folder_id="folder_003", name="transcript_0301.txt", mime_type="text/plain")

    assert created.category is FileCategory.TRANSCRIPT
    assert store.get_file(created.id) == created
    assert created in store.list_files("folder_003")
    assert store.get_folder("folder_003").updated_at == created.created_at != before


def test_create_file_keeps_explicit_category() -> None:
    store = DriveStore()

    created = store.create_file(folder_id="folder_001", name="misc.bin", category=FileCategory.PHOTO)

    assert created.category is FileCategory.PHOTO
    assert created.mime_type == "application/octet-stream"


def test_mock_content_picks_fixture_text() -> None:
    store = DriveStore()

    assert store.mock_content("file_007") == MOCK_MINUTES_CONTENT
    assert store.mock_content("file_008") == MOCK_TRANSCRIPT_CONTENT
    assert store.mock_content("x", "application/vnd.google-apps.document") == MOCK_MINUTES_CONTENT
    assert store.mock_content("x", "text/plain") == MOCK_TRANSCRIPT_CONTENT
    assert "fileId: zz" in store.mock_content("zz", "image/png")
