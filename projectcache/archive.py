"""Unpacking of model-view bundle archives (zip, default encoding only)"""

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath

from projectcache.errors import ArchiveFormatError

logger = logging.getLogger("projectcache.archive")


def extract_all(archive_path: Path, dest_dir: Path, overwrite: bool = True):
    """
    Extract a zip archive into dest_dir.

    The archive is extracted into a hidden staging directory next to dest_dir, which is then
    moved into place. If anything fails, dest_dir is left as it was.
    If dest_dir exists it is replaced when overwrite is True, otherwise FileExistsError is raised.
    """
    archive_path, dest_dir = Path(archive_path), Path(dest_dir)
    if dest_dir.exists() and not overwrite:
        raise FileExistsError(f"{dest_dir} already exists")
    dest_dir.parent.mkdir(parents=True, exist_ok=True)

    staging = Path(tempfile.mkdtemp(dir=dest_dir.parent, prefix=f".{dest_dir.name}-"))
    try:
        try:
            with zipfile.ZipFile(archive_path) as zf:
                _check_members(zf)
                zf.extractall(staging)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError) as e:
            raise ArchiveFormatError(f"Cannot extract {archive_path.name}: {e}") from e
        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        staging.rename(dest_dir)
    finally:
        if staging.exists():
            shutil.rmtree(staging, ignore_errors=True)
    logger.debug(f"Extracted {archive_path.name} to {dest_dir}")


def _check_members(zf: zipfile.ZipFile):
    for name in zf.namelist():
        member = PurePosixPath(name.replace("\\", "/"))
        if member.is_absolute() or ".." in member.parts:
            raise ArchiveFormatError(f"Archive member {name!r} would be extracted outside the destination")
