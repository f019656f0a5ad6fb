"""Unit tests for RepositoryPathIndex and path normalization."""

from application.services.ado.models.types import RepositoryPathIndex, normalize_repo_path


class TestRepositoryPathIndex:
    """Test case-insensitive lookups."""

    def test_lookup_ignores_case(self):
        index = RepositoryPathIndex(["/classes/Foo.cls"])

        assert "/CLASSES/foo.CLS" in index
        assert index.resolve("/CLASSES/foo.CLS") == "/classes/Foo.cls"

    def test_lookup_normalizes_separators(self):
        index = RepositoryPathIndex(["classes//Foo.cls"])

        assert index.resolve("/classes/Foo.cls") == "/classes/Foo.cls"

    def test_absent(self):
        index = RepositoryPathIndex()

        assert index.resolve("/classes/Foo.cls") is None
        assert "/classes/Foo.cls" not in index
        assert len(index) == 0

    def test_non_string_membership(self):
        assert 42 not in RepositoryPathIndex(["/a"])


def test_normalize_repo_path():
    assert normalize_repo_path("classes\\Foo.cls") == "/classes/Foo.cls"
    assert normalize_repo_path("//a///b") == "/a/b"
    assert normalize_repo_path("/a") == "/a"
