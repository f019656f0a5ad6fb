"""
Retrieve archive handling.

Unpacks the base64 zip returned by a retrieve into in-memory files, finds Apex
test classes among them, and optionally keeps a copy of the raw archive on
disk.
"""

import base64
import binascii
import io
import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from application.services.salesforce.models.types import ExtractedArchive, ExtractedFile
from common.exception.exceptions import MalformedArchiveError

logger = logging.getLogger(__name__)

TEST_CLASS_MARKERS = re.compile(r"@istest|\btestmethod\b", re.IGNORECASE)
APEX_CLASS_SUFFIX = ".cls"


def decode_archive(zip_base64: str) -> bytes:
    try:
        return base64.b64decode(zip_base64, validate=False)
    except (binascii.Error, ValueError) as e:
        raise MalformedArchiveError(f"Archive is not valid base64: {e}", detail=str(e)) from e


def extract_files(zip_base64: str) -> List[ExtractedFile]:
    """Unpack every non-directory entry of a base64 zip archive.

    Raises:
        MalformedArchiveError: If the payload is not base64 or not a zip
    """
    data = decode_archive(zip_base64)
    files: List[ExtractedFile] = []

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                raw = archive.read(info)
                files.append(
                    ExtractedFile(
                        path=info.filename,
                        text_content=raw.decode("utf-8", errors="replace"),
                        binary_content=base64.b64encode(raw).decode("ascii"),
                    )
                )
    except zipfile.BadZipFile as e:
        raise MalformedArchiveError(f"Archive is not a valid zip file: {e}", detail=str(e)) from e

    logger.info(f"Extracted {len(files)} files from retrieve archive")
    return files


def is_test_class(file: ExtractedFile) -> bool:
    return file.path.endswith(APEX_CLASS_SUFFIX) and bool(TEST_CLASS_MARKERS.search(file.text_content))


def detect_test_classes(files: Iterable[ExtractedFile]) -> List[str]:
    """Names of Apex classes annotated as tests, in archive order."""
    return [
        file.path.rsplit("/", 1)[-1][: -len(APEX_CLASS_SUFFIX)]
        for file in files
        if is_test_class(file)
    ]


def extract_archive(zip_base64: str) -> ExtractedArchive:
    files = extract_files(zip_base64)
    return ExtractedArchive(files=files, test_classes=detect_test_classes(files))


def save_archive_backup(
    zip_base64: str,
    backup_dir: Union[str, Path],
    instance_name: str,
    timestamp: datetime,
) -> Path:
    """Write the raw archive to ``backup_dir/instance_name/salesforce_backup_<ts>.zip``.

    Returns:
        Path of the written file
    """
    folder = Path(backup_dir) / instance_name
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / f"salesforce_backup_{timestamp.strftime('%Y-%m-%dT%H-%M-%S')}.zip"
    target.write_bytes(decode_archive(zip_base64))
    logger.info(f"Backup saved to: {target}")
    return target
