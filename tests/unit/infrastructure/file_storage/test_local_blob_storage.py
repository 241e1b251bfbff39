"""
Tests for LocalBlobStorage.

Covers:
- Upload writes bytes under the base directory and returns a URL
- Progress reporting (chunked, ends at 100)
- Path validation
- Filesystem failures -> StoreUnavailableError, no partial file left
"""

from pathlib import Path

import pytest

from src.domain.shared.exceptions import StoreUnavailableError
from src.infrastructure.file_storage import LocalBlobStorage


@pytest.fixture
def blob_storage(tmp_path):
    return LocalBlobStorage(base_dir=str(tmp_path), base_url="https://files.example.com/", chunk_size=4)


# ============================================================================
# UPLOAD TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_upload_writes_file_and_returns_url(blob_storage, tmp_path):
    url = await blob_storage.upload("applications/1-cv.pdf", b"%PDF-1.7")

    assert (tmp_path / "applications" / "1-cv.pdf").read_bytes() == b"%PDF-1.7"
    assert url == "https://files.example.com/applications/1-cv.pdf"
    assert not (tmp_path / "applications" / "1-cv.pdf.part").exists()


@pytest.mark.asyncio
async def test_progress_is_chunked_and_ends_at_100(blob_storage):
    progress = []

    await blob_storage.upload("applications/2-plan.txt", b"0123456789", progress.append)

    assert progress == [40.0, 80.0, 100.0]


@pytest.mark.asyncio
async def test_empty_upload_reports_100(blob_storage, tmp_path):
    progress = []

    await blob_storage.upload("applications/3-empty.txt", b"", progress.append)

    assert progress == [100.0]
    assert (tmp_path / "applications" / "3-empty.txt").read_bytes() == b""


@pytest.mark.asyncio
async def test_default_url_is_file_uri(tmp_path, monkeypatch):
    monkeypatch.delenv("BLOB_BASE_URL", raising=False)
    storage = LocalBlobStorage(base_dir=str(tmp_path))

    url = await storage.upload("applications/4-a.txt", b"a")

    assert url == f"{tmp_path.resolve().as_uri()}/applications/4-a.txt"


def test_base_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("BLOB_STORAGE_DIR", str(tmp_path / "blobs"))

    storage = LocalBlobStorage()

    assert storage.base_dir == (tmp_path / "blobs").resolve()
    assert storage.base_dir.is_dir()


# ============================================================================
# ERROR HANDLING TESTS
# ============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    ["/etc/passwd", "../outside.txt", "applications/../../x", "", "applications/1-cv\x00.pdf"],
)
async def test_invalid_paths_are_rejected(blob_storage, path):
    with pytest.raises(ValueError, match="Invalid blob path"):
        await blob_storage.upload(path, b"x")


@pytest.mark.asyncio
async def test_filesystem_failure_leaves_no_partial_file(blob_storage, tmp_path, monkeypatch):
    def failing_replace(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", failing_replace)

    with pytest.raises(StoreUnavailableError) as exc_info:
        await blob_storage.upload("applications/5-big.bin", b"0123456789")

    assert isinstance(exc_info.value.original_error, OSError)
    assert list((tmp_path / "applications").iterdir()) == []
