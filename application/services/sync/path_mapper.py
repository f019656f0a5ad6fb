"""
Archive path to repository path mapping.

Pure functions: the same archive path, mapping and prefix always give the
same destination.
"""

import re
from typing import Dict, Optional

from application.models.type_mapping import TypeFolderMapping
from application.services.salesforce.models.types import ExtractedFile

ARCHIVE_ROOT = "unpackaged/"
MANIFEST_FILE_NAME = "package.xml"


def clean_archive_path(path: str) -> str:
    """Drop the ``unpackaged/`` wrapper and any leading separators."""
    cleaned = path.replace("\\", "/").lstrip("/")
    if cleaned.startswith(ARCHIVE_ROOT):
        cleaned = cleaned[len(ARCHIVE_ROOT):]
    return cleaned


def is_manifest_path(path: str) -> bool:
    """True for the archive's own package.xml, at the root or nested."""
    return clean_archive_path(path).rsplit("/", 1)[-1] == MANIFEST_FILE_NAME


def join_repo_path(*parts: str) -> str:
    """Join path parts, collapsing repeated ``/`` and forcing one leading ``/``."""
    joined = "/".join(part for part in parts if part)
    return "/" + re.sub(r"/+", "/", joined).lstrip("/")


def map_archive_path(
    path: str,
    mapping: TypeFolderMapping,
    user_prefix: str = "",
    folder_to_type: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    """Map an archive-relative path to its repository destination.

    Args:
        path: Path inside the retrieve archive
        mapping: Type → folder table for this sync
        user_prefix: Folder for files whose type is not mapped
        folder_to_type: Inverse of ``mapping`` (built from it when omitted)

    Returns:
        Absolute repository path, or None for the archive manifest
    """
    cleaned = clean_archive_path(path)
    if is_manifest_path(cleaned):
        return None

    prefix = user_prefix.strip("/")
    segments = [segment for segment in cleaned.split("/") if segment]
    if not segments:
        return None

    if len(segments) == 1:
        return join_repo_path(prefix, segments[0])

    if folder_to_type is None:
        folder_to_type = mapping.folder_to_type()

    top_folder, remainder = segments[0], "/".join(segments[1:])
    type_name = folder_to_type.get(top_folder)
    destination_folder = mapping.destination_folder(type_name) if type_name else None
    if destination_folder is None:
        destination_folder = join_repo_path(prefix, top_folder)

    return join_repo_path(destination_folder, remainder)


def map_extracted_file(
    file: ExtractedFile,
    mapping: TypeFolderMapping,
    user_prefix: str = "",
    folder_to_type: Optional[Dict[str, str]] = None,
) -> Optional[str]:
    return map_archive_path(file.path, mapping, user_prefix, folder_to_type)
