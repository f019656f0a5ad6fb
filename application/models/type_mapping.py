"""Salesforce metadata type to repository folder mapping."""

from types import MappingProxyType
from typing import Dict, Mapping, Optional

# Folder each metadata type occupies inside a retrieve archive. Doubles as the
# default destination folder in the repository.
DEFAULT_TYPE_FOLDERS: Mapping[str, str] = MappingProxyType({
    "ApexClass": "classes",
    "ApexTrigger": "triggers",
    "ApexComponent": "components",
    "ApexPage": "pages",
    "AuraDefinitionBundle": "aura",
    "LightningComponentBundle": "lwc",
    "StaticResource": "staticresources",
    "CustomObject": "objects",
    "CustomTab": "tabs",
    "PermissionSet": "permissionsets",
    "Profile": "profiles",
    "Layout": "layouts",
    "Workflow": "workflows",
    "FlexiPage": "flexipages",
    "Flow": "flows",
})


class TypeFolderMapping:
    """Resolves archive folders to metadata types and types to destination folders.

    Built-in types map to their standard archive folder. ``overrides`` change
    where a type lands in the repository without changing how it is recognised
    in the archive. ``custom_types`` add new types whose folder is used both to
    recognise them in the archive and as their destination.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        custom_types: Optional[Mapping[str, str]] = None,
    ):
        self._archive_folders: Dict[str, str] = dict(DEFAULT_TYPE_FOLDERS)
        for type_name, folder in (custom_types or {}).items():
            if type_name not in self._archive_folders:
                self._archive_folders[type_name] = folder.strip("/")
        self._overrides: Dict[str, str] = {
            type_name: folder.strip("/")
            for type_name, folder in (overrides or {}).items()
            if folder and folder.strip("/")
        }

    def archive_folder(self, type_name: str) -> Optional[str]:
        return self._archive_folders.get(type_name)

    def destination_folder(self, type_name: str) -> Optional[str]:
        """Repository folder for ``type_name``, or None for an unknown type."""
        if type_name in self._overrides:
            return self._overrides[type_name]
        return self._archive_folders.get(type_name)

    def folder_to_type(self) -> Dict[str, str]:
        """Inverse lookup from archive folder to type name.

        Build once per sync and pass to the path mapper.
        """
        return {folder: type_name for type_name, folder in self._archive_folders.items()}

    def as_dict(self) -> Dict[str, str]:
        """Effective type → destination folder table."""
        return {
            type_name: self.destination_folder(type_name)
            for type_name in sorted(self._archive_folders)
        }

    def __repr__(self) -> str:
        return f"TypeFolderMapping(overrides={self._overrides!r})"
