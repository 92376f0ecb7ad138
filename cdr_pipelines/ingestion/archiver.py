"""Move ingested extract files into a year/month partitioned archive."""

import logging
import os
import shutil
from datetime import datetime
from typing import Optional

from .errors import ArchiveError

log = logging.getLogger(__name__)

ARCHIVE_DIR_NAME = "archive"


def archive_dir_for(scan_path: str, now: datetime) -> str:
    """Return ``<scan_path>/archive/<YYYY>/<MM>`` for the given moment."""
    return os.path.join(scan_path, ARCHIVE_DIR_NAME, f"{now.year:04d}", f"{now.month:02d}")


def archive_file(file_path: str, scan_path: str, now: Optional[datetime] = None) -> str:
    """Move a processed file into the archive, creating directories as needed.

    The partition is taken from the wall clock at archive time, not from
    anything inside the file.

    Args:
        file_path: Path of the committed extract file.
        scan_path: Root of the scanned directory.
        now: Moment used to pick the partition; defaults to the current time.

    Returns:
        The archived file's new path.

    Raises:
        ArchiveError: If the directory cannot be created or the move fails.
    """
    target_dir = archive_dir_for(scan_path, now or datetime.now())
    destination = os.path.join(target_dir, os.path.basename(file_path))

    try:
        os.makedirs(target_dir, exist_ok=True)
        shutil.move(file_path, destination)
    except OSError as exc:
        raise ArchiveError(f"Failed to archive '{file_path}' to '{target_dir}': {exc}") from exc

    log.info("Archived %s -> %s", file_path, destination)
    return destination
