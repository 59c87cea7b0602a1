"""Tests for upload batch validation."""

import pytest

from drive_api.exceptions import InvalidFileError, TooManyFilesError, ValidationError
from drive_api.services.upload_validator import (
    REASON_TOO_LARGE,
    REASON_UNSUPPORTED_TYPE,
    UploadCandidate,
    UploadValidator,
)
from drive_common.constants import MIB


def candidate(name="a.txt", mime_type="text/plain", size=10):
    return UploadCandidate(name=name, mime_type=mime_type, size=size)


@pytest.fixture
def validator():
    return UploadValidator(
        max_files=3,
        max_file_size=MIB,
        allowed_mime_types=("text/plain", "application/pdf", "image/*"),
    )


class TestUploadValidator:
    def test_valid_batch_passes_unchanged(self, validator):
        batch = [candidate(), candidate("b.pdf", "application/pdf")]
        assert validator.validate(batch) == batch

    def test_empty_batch_rejected(self, validator):
        with pytest.raises(ValidationError, match="No files uploaded"):
            validator.validate([])

    def test_too_many_files_rejected_before_per_file_checks(self, validator):
        batch = [candidate(f"{i}.exe", "application/x-msdownload") for i in range(4)]
        with pytest.raises(TooManyFilesError) as exc_info:
            validator.validate(batch)
        assert exc_info.value.received == 4
        assert exc_info.value.max_files == 3

    def test_batch_at_limit_accepted(self, validator):
        validator.validate([candidate(f"{i}.txt") for i in range(3)])

    def test_file_exactly_at_size_limit_accepted(self, validator):
        validator.validate([candidate(size=MIB)])

    def test_invalid_files_reported_together(self, validator):
        batch = [
            candidate("big.txt", size=MIB + 1),
            candidate("ok.txt"),
            candidate("tool.exe", "application/x-msdownload"),
            candidate("huge.exe", "application/x-msdownload", size=MIB + 1),
        ]
        with pytest.raises(InvalidFileError) as exc_info:
            validator.validate(batch)

        assert exc_info.value.invalid_files == [
            {"name": "big.txt", "reasons": [REASON_TOO_LARGE]},
            {"name": "tool.exe", "reasons": [REASON_UNSUPPORTED_TYPE]},
            {"name": "huge.exe", "reasons": [REASON_TOO_LARGE, REASON_UNSUPPORTED_TYPE]},
        ]

    def test_folder_id_below_one_rejected(self, validator):
        with pytest.raises(ValidationError, match="Invalid folder id"):
            validator.validate([candidate()], folder_id=0)

    def test_wildcard_and_parameters_in_mime_type(self, validator):
        assert validator.is_allowed_type("image/png")
        assert validator.is_allowed_type("IMAGE/WEBP")
        assert validator.is_allowed_type("text/plain; charset=utf-8")
        assert not validator.is_allowed_type("text/html")
        assert not validator.is_allowed_type("")
        assert not validator.is_allowed_type(None)

    def test_from_bytes_measures_size(self):
        c = UploadCandidate.from_bytes("x.txt", "text/plain", b"hello")
        assert c.size == 5
        assert c.data == b"hello"
