"""
Application models package.

Contains the immutable per-sync configuration supplied by the settings store.
"""

from application.models.sync_config import AuthorIdentity, SyncConfig
from application.models.type_mapping import DEFAULT_TYPE_FOLDERS, TypeFolderMapping

__all__ = [
    "AuthorIdentity",
    "SyncConfig",
    "DEFAULT_TYPE_FOLDERS",
    "TypeFolderMapping",
]
