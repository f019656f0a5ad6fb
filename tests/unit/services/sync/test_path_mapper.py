"""Unit tests for archive path mapping."""

import pytest

from application.models.type_mapping import TypeFolderMapping
from application.services.salesforce.models.types import ExtractedFile
from application.services.sync.path_mapper import (
    clean_archive_path,
    is_manifest_path,
    map_archive_path,
    map_extracted_file,
)


@pytest.fixture
def mapping():
    return TypeFolderMapping()


class TestMapArchivePath:
    """Test map_archive_path."""

    def test_default_mapping_without_prefix(self, mapping):
        assert map_archive_path("classes/Foo.cls", mapping) == "/classes/Foo.cls"

    def test_unpackaged_root_is_stripped(self, mapping):
        assert map_archive_path("unpackaged/classes/Foo.cls-meta.xml", mapping) == "/classes/Foo.cls-meta.xml"

    def test_known_type_ignores_prefix(self, mapping):
        assert map_archive_path("unpackaged/triggers/T.trigger", mapping, "force-app") == "/triggers/T.trigger"

    def test_override_folder(self):
        mapping = TypeFolderMapping(overrides={"ApexClass": "force-app/main/default/classes"})

        assert map_archive_path("classes/Foo.cls", mapping) == "/force-app/main/default/classes/Foo.cls"

    def test_unknown_folder_uses_prefix(self, mapping):
        assert map_archive_path("reports/Sales/Big.report", mapping, "/src/") == "/src/reports/Sales/Big.report"

    def test_unknown_folder_without_prefix(self, mapping):
        assert map_archive_path("reports/Big.report", mapping, "") == "/reports/Big.report"

    def test_nested_bundle_paths_are_kept(self, mapping):
        assert (
            map_archive_path("unpackaged/lwc/myCmp/myCmp.js", mapping, "x")
            == "/lwc/myCmp/myCmp.js"
        )

    def test_custom_type(self):
        mapping = TypeFolderMapping(custom_types={"CustomLabels": "labels"}, overrides={"CustomLabels": "i18n"})

        assert map_archive_path("labels/CustomLabels.labels", mapping) == "/i18n/CustomLabels.labels"

    def test_single_segment_with_prefix(self, mapping):
        assert map_archive_path("unpackaged/README.md", mapping, "src") == "/src/README.md"

    def test_single_segment_without_prefix(self, mapping):
        assert map_archive_path("README.md", mapping, "") == "/README.md"

    def test_repeated_separators_collapse(self, mapping):
        assert map_archive_path("reports//a.report", mapping, "//src//") == "/src/reports/a.report"

    @pytest.mark.parametrize("path", ["package.xml", "unpackaged/package.xml", "unpackaged/sub/package.xml"])
    def test_manifest_is_skipped(self, mapping, path):
        assert map_archive_path(path, mapping) is None

    def test_deterministic(self, mapping):
        inverse = mapping.folder_to_type()
        results = {map_archive_path("objects/Account.object", mapping, "p", inverse) for _ in range(5)}
        assert results == {"/objects/Account.object"}


def test_map_extracted_file_uses_file_path():
    file = ExtractedFile("unpackaged/classes/Foo.cls", "x", "eA==")
    assert map_extracted_file(file, TypeFolderMapping(), "") == "/classes/Foo.cls"


def test_clean_archive_path():
    assert clean_archive_path("/unpackaged/classes/A.cls") == "classes/A.cls"
    assert clean_archive_path("classes\\A.cls") == "classes/A.cls"


def test_is_manifest_path():
    assert is_manifest_path("unpackaged/package.xml")
    assert not is_manifest_path("unpackaged/classes/package.xml.cls")
