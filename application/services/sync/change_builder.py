"""
Commit planning: turns extracted files into repository writes and then into
add/edit changes against the existing path index.
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from application.models.type_mapping import TypeFolderMapping
from application.services.ado.models.types import (
    ChangeType,
    PendingChange,
    RepositoryPathIndex,
)
from application.services.salesforce.models.types import ExtractedFile
from application.services.sync.path_mapper import join_repo_path, map_extracted_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappedFile:
    """A file with its repository destination, before add/edit is known."""

    destination_path: str
    content_base64: str = field(repr=False)
    source_path: Optional[str] = None


def encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def map_archive_files(
    files: Iterable[ExtractedFile],
    mapping: TypeFolderMapping,
    user_prefix: str = "",
) -> List[MappedFile]:
    """Map every content file of an archive; the archive manifest is skipped."""
    folder_to_type = mapping.folder_to_type()
    mapped: List[MappedFile] = []
    for file in files:
        destination = map_extracted_file(file, mapping, user_prefix, folder_to_type)
        if destination is None:
            logger.debug(f"Skipping archive manifest {file.path}")
            continue
        mapped.append(MappedFile(destination, file.binary_content, source_path=file.path))
    return mapped


def merge_test_class_names(detected: Iterable[str], manual: Iterable[str]) -> List[str]:
    """Sorted, de-duplicated union of detected and manually listed class names."""
    names = {name.strip() for name in detected if name and name.strip()}
    names.update(name.strip() for name in manual if name and name.strip())
    return sorted(names)


def build_test_class_file(path: Optional[str], class_names: List[str]) -> Optional[MappedFile]:
    """Comma-joined test class list, or None when no path is set or no names exist."""
    if not path or not class_names:
        return None
    return MappedFile(join_repo_path(path), encode_text(",".join(class_names)))


def build_manifest_file(path: Optional[str], package_xml: str) -> Optional[MappedFile]:
    if not path:
        return None
    return MappedFile(join_repo_path(path), encode_text(package_xml))


def build_pending_changes(
    mapped_files: Iterable[MappedFile],
    existing_paths: RepositoryPathIndex,
) -> List[PendingChange]:
    """Resolve add vs. edit for each file.

    A file is an edit iff its path is in ``existing_paths`` ignoring case; the
    edit then uses the repository's own spelling of the path. Two files landing
    on the same path (ignoring case) collapse into the later one.
    """
    changes: Dict[str, PendingChange] = {}
    for mapped in mapped_files:
        existing = existing_paths.resolve(mapped.destination_path)
        if existing is not None:
            change = PendingChange(ChangeType.EDIT, existing, mapped.content_base64)
        else:
            change = PendingChange(ChangeType.ADD, mapped.destination_path, mapped.content_base64)

        key = change.path.lower()
        if key in changes:
            logger.warning(f"Duplicate destination {change.path}, keeping the last file")
            del changes[key]
        changes[key] = change

    return list(changes.values())
