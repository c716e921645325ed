"""Unit tests for the local storage backend."""

import tempfile
from pathlib import Path

import pytest

from quickdesk.core.storage import LocalStorage, generate_unique_filename


class TestLocalStorage:
    @pytest.fixture
    def temp_storage(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            yield LocalStorage(tmpdir), tmpdir

    def test_upload_writes_file_and_returns_key(self, temp_storage):
        storage, tmpdir = temp_storage

        key = storage.upload(b"hello", "tickets/123", "log.txt")

        assert key == "tickets/123/log.txt"
        assert (Path(tmpdir) / "tickets" / "123" / "log.txt").read_bytes() == b"hello"
        assert storage.exists(key)

    def test_delete_removes_file(self, temp_storage):
        storage, _ = temp_storage
        key = storage.upload(b"hello", "tickets/123", "log.txt")

        storage.delete(key)

        assert not storage.exists(key)

    def test_delete_missing_file_is_harmless(self, temp_storage):
        storage, _ = temp_storage

        storage.delete("tickets/none.txt")

    def test_public_url_points_at_uploads_mount(self, temp_storage):
        storage, _ = temp_storage

        assert storage.public_url("tickets/1/a.png") == "http://test/uploads/tickets/1/a.png"

    def test_rejects_path_traversal(self, temp_storage):
        storage, _ = temp_storage

        with pytest.raises(ValueError):
            storage.upload(b"x", "../outside", "evil.txt")
        with pytest.raises(ValueError):
            storage.exists("../../etc/passwd")


class TestGenerateUniqueFilename:
    def test_appends_given_extension(self):
        name = generate_unique_filename(".pdf")

        assert name.endswith(".pdf")
        assert len(name) == 32 + len(".pdf")

    def test_without_extension_is_bare_hex(self):
        assert len(generate_unique_filename()) == 32

    def test_names_are_unique(self):
        assert generate_unique_filename(".png") != generate_unique_filename(".png")
