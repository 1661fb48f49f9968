"""Tests for signature upload validation."""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from placement_portal.core.config import Settings
from placement_portal.core.errors import InvalidSignature, SignatureTooLarge
from placement_portal.utils.file_upload import (
    discard_signature,
    get_file_extension,
    save_signature,
)


def upload(filename, content, content_type="image/png"):
    return UploadFile(file=io.BytesIO(content), filename=filename,
                      headers=Headers({"content-type": content_type}))


@pytest.fixture
def upload_settings(tmp_path):
    return Settings(_env_file=None, signature_upload_dir=str(tmp_path), signature_max_size_mb=1)


class TestSaveSignature:
    def test_extension(self):
        assert get_file_extension("Sign.PNG") == ".png"
        assert get_file_extension("noext") == ""

    def test_stores_file(self, upload_settings, tmp_path):
        name = save_signature(upload("sign.png", b"\x89PNG data"), "s1", upload_settings)
        assert name.startswith("signature_s1_")
        assert name.endswith(".png")
        assert (tmp_path / name).read_bytes() == b"\x89PNG data"

    def test_missing_file(self, upload_settings):
        with pytest.raises(InvalidSignature):
            save_signature(None, "s1", upload_settings)

    def test_wrong_type(self, upload_settings):
        with pytest.raises(InvalidSignature):
            save_signature(upload("sign.exe", b"MZ", "application/octet-stream"), "s1", upload_settings)

    def test_empty_file(self, upload_settings):
        with pytest.raises(InvalidSignature):
            save_signature(upload("sign.png", b""), "s1", upload_settings)

    def test_too_large(self, upload_settings):
        content = b"0" * (1024 * 1024 + 1)
        with pytest.raises(SignatureTooLarge):
            save_signature(upload("sign.png", content), "s1", upload_settings)

    def test_discard_removes_stored_file(self, upload_settings, tmp_path):
        name = save_signature(upload("sign.png", b"\x89PNG data"), "s1", upload_settings)
        discard_signature(name, upload_settings)
        assert list(tmp_path.iterdir()) == []

    def test_discard_missing_file_is_quiet(self, upload_settings):
        discard_signature("signature_s1_0.png", upload_settings)
