"""
Filesystem helpers for placing downloaded binaries.

Provides:
- Idempotent directory creation
- Best-effort file deletion used by cache cleanup
- Guarded directory removal
- Copying a raw executable into place and marking it executable
- Locating the installed executable with or without an '.exe' suffix
"""

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Optional, Union

from binfetch.core.exceptions import FilesystemError

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check whether ``path`` lies inside ``parent``.

    Example:
        >>> is_relative_to(Path('/tmp/a/b'), Path('/tmp'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_unlink(path: Union[str, Path]) -> bool:
    """
    Delete a file if it exists, never raising.

    Args:
        path: File to delete

    Returns:
        True if a file was removed
    """
    path = Path(path)
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.debug(f"Could not delete {path}: {e}")
        return False


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Remove a directory tree with a prefix safeguard.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def copy_executable(source: Path, destination: Path) -> Path:
    """
    Copy a downloaded executable to its final location.

    The release asset is the raw executable, so installing it is a plain copy.

    Args:
        source: Cached asset
        destination: Final binary path

    Returns:
        Destination path
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    return destination


def find_binary(directory: Path, binary_name: str) -> Optional[Path]:
    """
    Locate an installed executable by bare name, then with '.exe'.

    Args:
        directory: Directory holding the binary
        binary_name: Name without extension

    Returns:
        Path to the executable, or None if neither variant exists
    """
    expected = Path(directory) / binary_name
    if expected.exists():
        return expected

    with_extension = Path(directory) / f"{binary_name}.exe"
    if with_extension.exists():
        return with_extension

    return None


def make_executable(path: Path) -> None:
    """Set mode 755 on ``path``."""
    os.chmod(path, EXECUTABLE_MODE)


def is_executable(path: Path) -> bool:
    """Check the owner-execute bit of ``path``."""
    try:
        return bool(Path(path).stat().st_mode & stat.S_IXUSR)
    except OSError:
        return False


__all__ = [
    "EXECUTABLE_MODE",
    "FilesystemError",
    "is_relative_to",
    "ensure_directory",
    "safe_unlink",
    "safe_rmtree",
    "copy_executable",
    "find_binary",
    "make_executable",
    "is_executable",
]
