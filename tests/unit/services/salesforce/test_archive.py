"""Unit tests for retrieve archive extraction."""

import base64
import io
import zipfile
from datetime import datetime

import pytest

from application.services.salesforce.archive import (
    detect_test_classes,
    extract_archive,
    save_archive_backup,
)
from application.services.salesforce.models.types import ExtractedFile
from application.services.salesforce.salesforce_service import SalesforceService
from common.exception.exceptions import MalformedArchiveError


def build_zip(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class TestExtractArchive:
    """Test extract_archive."""

    def test_extracts_text_and_binary(self):
        zip_b64 = build_zip({
            "unpackaged/classes/Foo.cls": "public class Foo {}",
            "unpackaged/staticresources/logo.resource": b"\x89PNG\x00\x01",
            "unpackaged/package.xml": "<Package/>",
        })

        archive = extract_archive(zip_b64)
        files = {f.path: f for f in archive.files}

        assert set(files) == {
            "unpackaged/classes/Foo.cls",
            "unpackaged/staticresources/logo.resource",
            "unpackaged/package.xml",
        }
        assert files["unpackaged/classes/Foo.cls"].text_content == "public class Foo {}"
        logo = files["unpackaged/staticresources/logo.resource"]
        assert base64.b64decode(logo.binary_content) == b"\x89PNG\x00\x01"

    def test_directory_entries_are_skipped(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("unpackaged/classes/", "")
            archive.writestr("unpackaged/classes/Foo.cls", "x")
        zip_b64 = base64.b64encode(buffer.getvalue()).decode("ascii")

        assert [f.path for f in extract_archive(zip_b64).files] == ["unpackaged/classes/Foo.cls"]

    def test_detects_test_classes(self):
        zip_b64 = build_zip({
            "unpackaged/classes/FooTest.cls": "@IsTest\nprivate class FooTest {}",
            "unpackaged/classes/LegacyTest.cls": "class LegacyTest { static testMethod void t() {} }",
            "unpackaged/classes/Foo.cls": "public class Foo {}",
            "unpackaged/triggers/FooTrigger.trigger": "@isTest trigger",
        })

        assert sorted(extract_archive(zip_b64).test_classes) == ["FooTest", "LegacyTest"]

    def test_not_a_zip(self):
        with pytest.raises(MalformedArchiveError):
            extract_archive(base64.b64encode(b"not a zip").decode("ascii"))

    def test_service_extract_delegates(self):
        archive = SalesforceService.extract(build_zip({"classes/A.cls": "@isTest class A {}"}))
        assert archive.test_classes == ["A"]


def test_detect_test_classes_ignores_non_apex_files():
    files = [ExtractedFile("pages/P.page", "@isTest", "")]
    assert detect_test_classes(files) == []


def test_save_archive_backup(tmp_path):
    zip_b64 = build_zip({"classes/A.cls": "x"})

    target = save_archive_backup(zip_b64, tmp_path, "acme", datetime(2024, 5, 1, 12, 30, 5))

    assert target == tmp_path / "acme" / "salesforce_backup_2024-05-01T12-30-05.zip"
    assert target.read_bytes() == base64.b64decode(zip_b64)
