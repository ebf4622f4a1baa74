"""Tests for uploaded file type checks."""

import pytest

from app.models.document.models import UploadedFile


@pytest.mark.parametrize("content_type, is_image, is_document", [
    ("image/png", True, True),
    ("image/jpeg", True, True),
    ("application/pdf", False, True),
    ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", False, True),
    ("application/vnd.ms-excel", False, True),
    ("text/plain", False, False),
])
def test_file_type_checks(content_type, is_image, is_document):
    file = UploadedFile(name="file", content_type=content_type, content=b"abc")

    assert file.is_image() is is_image
    assert file.is_document() is is_document
    assert file.size == 3
