"""
Binary installer.

Drives the cache manager to obtain the release asset, places it into the
destination directory and marks it executable.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import requests

from binfetch.config.settings import InstallerConfig, load_config
from binfetch.core.download import Transport
from binfetch.core.environment import Environment
from binfetch.core.exceptions import BinaryNotFoundError, MissingFieldError
from binfetch.core.filesystem import (
    copy_executable,
    ensure_directory,
    find_binary,
    make_executable,
)
from binfetch.core.platform import WINDOWS_EXTENSION
from binfetch.install.cache import CacheManager

logger = logging.getLogger(__name__)


@dataclass
class InstallRequest:
    """
    One (version, target) pair to install.

    Attributes:
        version: Release tag (e.g. 'v0.4.3')
        target: Release target (e.g. 'linux-x86_64')
        dest_dir: Directory the executable is installed into
        force: Ignore the download cache
        token: API credential for private repositories
    """

    version: str
    target: str
    dest_dir: Path
    force: bool = False
    token: Optional[str] = field(default=None, repr=False)

    def validate(self) -> None:
        """
        Reject requests missing a version or target.

        Raises:
            MissingFieldError: If a required field is empty
        """
        if not self.version:
            raise MissingFieldError("version")
        if not self.target:
            raise MissingFieldError("target")


class Installer:
    """
    Install a prebuilt binary from a GitHub release.

    Example:
        >>> installer = Installer(load_config())
        >>> installer.install(InstallRequest("v0.4.3", "linux-x86_64", Path("bin")))
        PosixPath('bin/aidbox-cli')
    """

    def __init__(
        self,
        config: InstallerConfig,
        env: Optional[Environment] = None,
        transport: Optional[Transport] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.env = env or Environment.from_process()
        self.cache = CacheManager(
            config, env=self.env, transport=transport, session=session
        )

    def install(self, request: InstallRequest) -> Path:
        """
        Install the binary described by ``request``.

        Args:
            request: Version, target and destination

        Returns:
            Path to the installed executable

        Raises:
            MissingFieldError: If version or target is empty
            BinfetchError: On any lookup, download or install failure
        """
        request.validate()

        dest_dir = ensure_directory(request.dest_dir)

        asset_path = self.cache.resolve_cached_or_download(request)

        logger.info(f"Extracting to {dest_dir}")
        try:
            binary_path = self._extract(asset_path, dest_dir)
            if not self.env.is_windows:
                make_executable(binary_path)
        except Exception:
            logger.info("Deleting invalid download")
            self.cache.invalidate(request.version, request.target)
            raise

        logger.info(f"Installed {self.config.tool_name} to {binary_path}")
        return binary_path

    def _extract(self, asset_path: Path, dest_dir: Path) -> Path:
        name = self.config.tool_name
        if self.env.is_windows:
            copy_executable(asset_path, dest_dir / f"{name}{WINDOWS_EXTENSION}")
        else:
            copy_executable(asset_path, dest_dir / name)

        binary_path = find_binary(dest_dir, name)
        if binary_path is None:
            raise BinaryNotFoundError(dest_dir, name)
        return binary_path


def install(
    request: InstallRequest,
    config: Optional[InstallerConfig] = None,
    env: Optional[Environment] = None,
) -> Path:
    """Install with a default Installer; see Installer.install()."""
    if config is None:
        config = load_config(env=env)
    return Installer(config, env=env).install(request)


__all__ = ["InstallRequest", "Installer", "install"]
