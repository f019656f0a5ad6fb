"""Unit tests for SyncConfig."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from application.models.sync_config import AuthorIdentity, SyncConfig, split_class_names

PACKAGE_XML = "<Package><types><members>*</members><name>ApexClass</name></types></Package>"


def make_config(**overrides):
    data = {
        "org": "acme",
        "project": "crm",
        "repo": "metadata",
        "pat": "secret-pat",
        "target_branch": "feature/sync",
        "package_descriptor": PACKAGE_XML,
    }
    data.update(overrides)
    return SyncConfig(**data)


class TestSyncConfig:
    """Test SyncConfig model."""

    def test_defaults(self):
        config = make_config()

        assert config.source_branch == "main"
        assert config.package_xml_destination_path == "manifest/package.xml"
        assert config.commit_message == "Salesforce Synced Changes"
        assert config.test_file_path is None
        assert config.manual_test_class_names == []
        assert config.max_push_retries == 2
        assert config.poll_interval_seconds == 2

    def test_camel_case_aliases(self):
        config = SyncConfig.model_validate({
            "org": "acme",
            "project": "crm",
            "repo": "metadata",
            "pat": "p",
            "targetBranch": "dev",
            "sourceBranch": "release",
            "packageDescriptor": PACKAGE_XML,
            "testFilePath": "tests/list.txt",
            "authorIdentity": {"name": "Jo", "email": "jo@example.com"},
        })

        assert config.target_branch == "dev"
        assert config.source_branch == "release"
        assert config.test_file_path == "tests/list.txt"
        assert config.author_identity == AuthorIdentity(name="Jo", email="jo@example.com")

    def test_manual_test_classes_from_string(self):
        config = make_config(manual_test_class_names="FooTest, BarTest\nBazTest,,")
        assert config.manual_test_class_names == ["FooTest", "BarTest", "BazTest"]

    def test_blank_values_fall_back(self):
        config = make_config(source_branch="  ", commit_message="", test_file_path=" ")

        assert config.source_branch == "main"
        assert config.commit_message == "Salesforce Synced Changes"
        assert config.test_file_path is None

    def test_blank_manifest_path_uses_default(self):
        config = make_config(packageXmlDestinationPath="  ")

        assert config.package_xml_destination_path == "manifest/package.xml"

    def test_is_frozen(self):
        config = make_config()
        with pytest.raises(PydanticValidationError):
            config.target_branch = "other"

    def test_pat_not_in_repr(self):
        assert "secret-pat" not in repr(make_config())

    def test_folder_mapping_applies_overrides(self):
        config = make_config(
            type_folder_mapping={"ApexClass": "force-app/main/default/classes"},
            custom_types={"CustomLabels": "labels"},
        )
        mapping = config.folder_mapping()

        assert mapping.destination_folder("ApexClass") == "force-app/main/default/classes"
        assert mapping.destination_folder("CustomLabels") == "labels"


class TestSyncConfigFromEnv:
    """Test SyncConfig.from_env."""

    BASE_ENV = {
        "SF_ADO_ORG": "acme",
        "SF_ADO_PROJECT": "crm",
        "SF_ADO_REPO": "metadata",
        "SF_ADO_PAT": "pat",
        "SF_ADO_TARGET_BRANCH": "dev",
        "SF_ADO_PACKAGE_XML": PACKAGE_XML,
    }

    def test_reads_required_and_optional_values(self):
        env = dict(self.BASE_ENV)
        env.update({
            "SF_ADO_TEST_FILE_PATH": "config/tests.txt",
            "SF_ADO_TYPE_FOLDER_MAPPING": '{"ApexClass": "src/classes"}',
            "SF_ADO_GIT_USER": "Sync Bot",
            "SF_ADO_GIT_EMAIL": "bot@example.com",
        })
        with patch.dict(os.environ, env, clear=True):
            config = SyncConfig.from_env()

        assert config.org == "acme"
        assert config.target_branch == "dev"
        assert config.test_file_path == "config/tests.txt"
        assert config.type_folder_mapping == {"ApexClass": "src/classes"}
        assert config.author_identity.name == "Sync Bot"

    def test_overrides_replace_required_values(self):
        env = {key: value for key, value in self.BASE_ENV.items() if key != "SF_ADO_ORG"}
        with patch.dict(os.environ, env, clear=True):
            config = SyncConfig.from_env(org="other-org")

        assert config.org == "other-org"

    def test_missing_required_value_raises(self):
        env = {key: value for key, value in self.BASE_ENV.items() if key != "SF_ADO_PAT"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(Exception, match="SF_ADO_PAT not found"):
                SyncConfig.from_env()

    def test_reads_package_xml_file(self, tmp_path):
        package_file = tmp_path / "package.xml"
        package_file.write_text(PACKAGE_XML, encoding="utf-8")
        env = {key: value for key, value in self.BASE_ENV.items() if key != "SF_ADO_PACKAGE_XML"}
        env["SF_ADO_PACKAGE_XML_FILE"] = str(package_file)

        with patch.dict(os.environ, env, clear=True):
            config = SyncConfig.from_env()

        assert config.package_descriptor == PACKAGE_XML


def test_split_class_names():
    assert split_class_names("A,B\n C ,\n") == ["A", "B", "C"]
