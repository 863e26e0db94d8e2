"""
Directory layout for binfetch.

Cache (one directory per installer version, under the system temp dir):
    <tmp>/<tool>-cache-<package-version>/
        <tool>-<release>-<target>[.exe]   : raw downloaded assets

Binary directory (default ``bin/`` next to the installed package):
    <bin-dir>/<tool>[.exe]               : the installed executable
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

from binfetch.core.filesystem import safe_rmtree

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent.parent


def get_cache_dir(
    tool_name: str, package_version: str, base: Optional[Path] = None
) -> Path:
    """
    Get the version-scoped cache directory path.

    Args:
        tool_name: Name of the tool being installed
        package_version: Installer version the cache belongs to
        base: Parent directory (defaults to the system temp directory)

    Returns:
        Cache directory path (not created)

    Example:
        >>> get_cache_dir("aidbox-cli", "0.4.3", Path("/tmp"))
        PosixPath('/tmp/aidbox-cli-cache-0.4.3')
    """
    if base is None:
        base = Path(tempfile.gettempdir())
    return Path(base) / f"{tool_name}-cache-{package_version}"


def get_default_bin_dir() -> Path:
    """Default directory the binary is installed into."""
    return PACKAGE_ROOT / "bin"


def clean_cache_dir(cache_dir: Path) -> bool:
    """
    Delete a cache directory and every asset in it.

    Args:
        cache_dir: Directory returned by get_cache_dir()

    Returns:
        True if something was removed
    """
    cache_dir = Path(cache_dir)
    if not cache_dir.exists():
        logger.debug(f"Cache directory does not exist: {cache_dir}")
        return False

    safe_rmtree(cache_dir, require_prefix=cache_dir.parent)
    logger.info(f"Removed cache directory {cache_dir}")
    return True


__all__ = ["get_cache_dir", "get_default_bin_dir", "clean_cache_dir"]
