"""Default installer icon and redistributable runtime lookup."""

from __future__ import annotations

import base64
import gzip
import logging
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional

from innoBundler.constants import DEFAULT_INSTALLER_ICON_FILE_NAME, REDISTRIBUTABLE_DLLS

# 32x32 32-bit ICO, gzip-compressed and base64-encoded.
_DEFAULT_INSTALLER_ICON_GZ_B64 = (
    "H4sIAAAAAAACA+3WsQ2AMAxE0c8GqShRSsZgLiZiIFZxDQFqmigCgf5Fl8LNK23oysuZ42dJ"
    "0ANjaRkxcc3PJMxN1nnYnqy+/lf8iKiqvr6+vr5+y/1X4+n/x/f+02/tm3eyA0hGmf++EAAA"
)


@lru_cache(maxsize=1)
def default_installer_icon_bytes() -> bytes:
    """Return the decoded default installer icon.

    Returns:
        ICO file content.
    """

    return gzip.decompress(base64.b64decode(_DEFAULT_INSTALLER_ICON_GZ_B64))


def persist_default_installer_icon(directory: Path, logger: Optional[logging.Logger] = None) -> Path:
    """Write the default installer icon into a directory.

    Parameters:
        directory: Target directory, created when missing.
        logger: Optional logger instance.

    Returns:
        Absolute path of the written icon file.
    """

    logger = logger or logging.getLogger(__name__)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    icon_path = (directory / DEFAULT_INSTALLER_ICON_FILE_NAME).absolute()
    icon_path.write_bytes(default_installer_icon_bytes())
    logger.debug("Persisted default installer icon to %s", icon_path)
    return icon_path


def find_redistributables(
    system_dirs: Iterable[Path], file_names: Iterable[str] = REDISTRIBUTABLE_DLLS
) -> List[Path]:
    """Locate redistributable runtime libraries in system directories.

    The first directory containing a given file wins; missing files are skipped.

    Parameters:
        system_dirs: Directories to search, in priority order.
        file_names: Library file names to look for.

    Returns:
        Paths of the libraries found, in ``file_names`` order.
    """

    system_dirs = [Path(directory) for directory in system_dirs]
    found: List[Path] = []
    for file_name in file_names:
        for directory in system_dirs:
            candidate = directory / file_name
            if candidate.is_file():
                found.append(candidate)
                break
    return found


def stage_redistributables(
    system_dirs: Iterable[Path],
    target_dir: Path,
    logger: Optional[logging.Logger] = None,
) -> List[Path]:
    """Copy available redistributable libraries into a staging directory.

    Parameters:
        system_dirs: Directories to search.
        target_dir: Staging directory, created when missing.
        logger: Optional logger instance.

    Returns:
        Paths of the staged copies.
    """

    logger = logger or logging.getLogger(__name__)
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    staged: List[Path] = []
    for source in find_redistributables(system_dirs):
        destination = (target_dir / source.name).absolute()
        shutil.copyfile(source, destination)
        logger.info("Staged %s", destination)
        staged.append(destination)
    return staged
