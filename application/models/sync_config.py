"""
Sync configuration models.

The settings collaborator supplies one immutable SyncConfig per sync; it is
threaded through every client and pipeline call instead of shared state.
Aliases follow the camelCase keys of the stored settings.
"""

import json
import os
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from application.models.type_mapping import TypeFolderMapping
from common.config.config import (
    ADO_DEFAULT_SOURCE_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_PACKAGE_XML_PATH,
    MAX_PUSH_RETRIES,
    RETRIEVE_POLL_INTERVAL,
    get_env,
)


def split_class_names(value: str) -> List[str]:
    """Split a comma or newline separated list of class names."""
    return [name.strip() for name in re.split(r"[\n,]+", value) if name.strip()]


class AuthorIdentity(BaseModel):
    """Commit author recorded on the ADO push."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Author display name")
    email: str = Field(..., description="Author email address")


class SyncConfig(BaseModel):
    """Settings for one Salesforce → Azure DevOps sync."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    org: str = Field(..., description="Azure DevOps organization")
    project: str = Field(..., description="Azure DevOps project")
    repo: str = Field(..., description="Azure DevOps repository name or id")
    pat: str = Field(..., repr=False, description="Azure DevOps personal access token")

    source_branch: str = Field(
        default=ADO_DEFAULT_SOURCE_BRANCH,
        alias="sourceBranch",
        description="Branch the target branch is created from when missing",
    )
    target_branch: str = Field(..., alias="targetBranch", description="Branch receiving the commit")
    target_path_prefix: str = Field(
        default="",
        alias="targetPathPrefix",
        description="Folder prefix for files whose metadata type is not mapped",
    )
    test_file_path: Optional[str] = Field(
        default=None,
        alias="testFilePath",
        description="Repository path of the comma-joined test class list",
    )
    package_descriptor: str = Field(
        ..., alias="packageDescriptor", description="package.xml content to retrieve"
    )
    package_xml_destination_path: Optional[str] = Field(
        default=DEFAULT_PACKAGE_XML_PATH,
        alias="packageXmlDestinationPath",
        description="Repository path the package.xml is committed to (None skips it)",
    )
    manual_test_class_names: List[str] = Field(
        default_factory=list,
        alias="manualTestClassNames",
        description="Test classes added to the detected ones",
    )
    type_folder_mapping: Dict[str, str] = Field(
        default_factory=dict,
        alias="typeFolderMapping",
        description="Per-type destination folder overrides",
    )
    custom_types: Dict[str, str] = Field(
        default_factory=dict,
        alias="customTypes",
        description="Additional metadata types and their folder",
    )
    author_identity: Optional[AuthorIdentity] = Field(
        default=None, alias="authorIdentity", description="Commit author"
    )
    commit_message: str = Field(
        default=DEFAULT_COMMIT_MESSAGE, alias="commitMessage", description="Commit comment"
    )

    salesforce_domain: Optional[str] = Field(
        default=None,
        alias="salesforceDomain",
        description="Hostname of the Salesforce org used to pick the session cookie",
    )
    backup_dir: Optional[str] = Field(
        default=None,
        alias="backupDir",
        description="Directory receiving a copy of each retrieved archive",
    )
    poll_interval_seconds: float = Field(
        default=RETRIEVE_POLL_INTERVAL, alias="pollIntervalSeconds", ge=0
    )
    poll_timeout_seconds: Optional[float] = Field(
        default=None, alias="pollTimeoutSeconds", gt=0
    )
    max_push_retries: int = Field(default=MAX_PUSH_RETRIES, alias="maxPushRetries", ge=0)

    @field_validator("manual_test_class_names", mode="before")
    @classmethod
    def _parse_manual_test_class_names(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return split_class_names(value)
        return value

    @field_validator("source_branch", "commit_message", "package_xml_destination_path", mode="before")
    @classmethod
    def _blank_to_default(cls, value: Any, info) -> Any:
        if isinstance(value, str) and not value.strip():
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("test_file_path", "backup_dir", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    def folder_mapping(self) -> TypeFolderMapping:
        """Type → folder table with this sync's overrides applied."""
        return TypeFolderMapping(self.type_folder_mapping, self.custom_types)

    @classmethod
    def from_env(cls, **overrides: Any) -> "SyncConfig":
        """Build a config from ``SF_ADO_*`` environment variables.

        Required: SF_ADO_ORG, SF_ADO_PROJECT, SF_ADO_REPO, SF_ADO_PAT,
        SF_ADO_TARGET_BRANCH, unless given in ``overrides``. The package descriptor comes from
        SF_ADO_PACKAGE_XML or the file named by SF_ADO_PACKAGE_XML_FILE unless
        passed in ``overrides``.
        """
        data: Dict[str, Any] = {}
        required_keys = {
            "SF_ADO_ORG": "org",
            "SF_ADO_PROJECT": "project",
            "SF_ADO_REPO": "repo",
            "SF_ADO_PAT": "pat",
            "SF_ADO_TARGET_BRANCH": "target_branch",
        }
        for env_key, field_name in required_keys.items():
            if field_name not in overrides:
                data[field_name] = get_env(env_key)

        optional_keys = {
            "SF_ADO_SOURCE_BRANCH": "source_branch",
            "SF_ADO_TARGET_PATH_PREFIX": "target_path_prefix",
            "SF_ADO_TEST_FILE_PATH": "test_file_path",
            "SF_ADO_PACKAGE_XML_PATH": "package_xml_destination_path",
            "SF_ADO_MANUAL_TEST_CLASSES": "manual_test_class_names",
            "SF_ADO_COMMIT_MESSAGE": "commit_message",
            "SF_ADO_SALESFORCE_DOMAIN": "salesforce_domain",
            "SF_ADO_BACKUP_DIR": "backup_dir",
            "SF_ADO_POLL_TIMEOUT": "poll_timeout_seconds",
        }
        for env_key, field_name in optional_keys.items():
            value = os.getenv(env_key)
            if value is not None:
                data[field_name] = value

        mapping_json = os.getenv("SF_ADO_TYPE_FOLDER_MAPPING")
        if mapping_json:
            data["type_folder_mapping"] = json.loads(mapping_json)
        custom_json = os.getenv("SF_ADO_CUSTOM_TYPES")
        if custom_json:
            data["custom_types"] = json.loads(custom_json)

        git_user = os.getenv("SF_ADO_GIT_USER")
        git_email = os.getenv("SF_ADO_GIT_EMAIL")
        if git_user and git_email:
            data["author_identity"] = {"name": git_user, "email": git_email}

        package_xml = os.getenv("SF_ADO_PACKAGE_XML")
        package_xml_file = os.getenv("SF_ADO_PACKAGE_XML_FILE")
        if package_xml is None and package_xml_file:
            with open(package_xml_file, encoding="utf-8") as handle:
                package_xml = handle.read()
        if package_xml is not None:
            data["package_descriptor"] = package_xml

        data.update(overrides)
        return cls.model_validate(data)
