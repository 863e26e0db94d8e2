"""
Download cache for release assets.

Assets are kept in a version-scoped directory so repeated installs of the
same (version, target) pair skip the network. A failed download or
extraction always removes the cached file, so the cache never holds a
partial artifact.
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from binfetch.config.settings import InstallerConfig
from binfetch.core.download import (
    DownloadOptions,
    Transport,
    download_file,
    select_transport,
)
from binfetch.core.environment import Environment
from binfetch.core.filesystem import ensure_directory, safe_unlink
from binfetch.core.platform import platform_extension
from binfetch.core.releases import locate_asset

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Resolve a cached asset or download it.

    Example:
        >>> cache = CacheManager(config)
        >>> path = cache.resolve_cached_or_download(request)
    """

    def __init__(
        self,
        config: InstallerConfig,
        env: Optional[Environment] = None,
        transport: Optional[Transport] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the cache manager.

        Args:
            config: Installer configuration
            env: Host environment (auto-detected if None)
            transport: Download strategy (selected for the host if None)
            session: requests session for release API calls
        """
        self.config = config
        self.env = env or Environment.from_process()
        self.transport = transport
        self.session = session
        self.cache_dir = Path(config.resolved_cache_dir())

    def asset_name(self, version: str, target: str) -> str:
        """Release asset file name: ``<tool>-<version>-<target>[.exe]``."""
        return (
            "-".join([self.config.tool_name, version, target])
            + platform_extension(self.env)
        )

    def asset_path(self, version: str, target: str) -> Path:
        return self.cache_dir / self.asset_name(version, target)

    def is_cached(self, version: str, target: str) -> bool:
        return self.asset_path(version, target).exists()

    def invalidate(self, version: str, target: str) -> bool:
        """Delete the cached asset, if any. Never raises."""
        return safe_unlink(self.asset_path(version, target))

    def resolve_cached_or_download(self, request) -> Path:
        """
        Return the cached asset for a request, downloading it when needed.

        Args:
            request: InstallRequest (version, target, force, token)

        Returns:
            Path to the asset in the cache directory

        Raises:
            Any error from the release lookup or download, unchanged. The
            cached file is removed before the error propagates.
        """
        asset_name = self.asset_name(request.version, request.target)
        ensure_directory(self.cache_dir)
        asset_path = self.cache_dir / asset_name

        if not request.force and asset_path.exists():
            logger.info(f"Using cached download: {asset_path}")
            return asset_path

        try:
            self._download(request, asset_name, asset_path)
        except BaseException:
            logger.info("Deleting invalid download cache")
            safe_unlink(asset_path)
            raise

        return asset_path

    def _download(self, request, asset_name: str, asset_path: Path) -> None:
        asset = locate_asset(
            self.config.repo,
            request.version,
            asset_name,
            token=request.token,
            user_agent=self.config.user_agent,
            api_host=self.config.api_host,
            timeout=self.config.timeout,
            env=self.env,
            session=self.session,
        )

        options = DownloadOptions(
            headers={
                "user-agent": self.config.user_agent,
                "accept": "application/octet-stream",
            },
            trusted_host=self.config.api_host,
            timeout=self.config.timeout,
        )
        if request.token:
            options = options.with_header("authorization", f"token {request.token}")

        download_file(
            asset.url,
            asset_path,
            options,
            env=self.env,
            transport=self._get_transport(),
        )

    def _get_transport(self) -> Transport:
        if self.transport is None:
            self.transport = select_transport(
                self.env,
                session=self.session,
                max_redirects=self.config.max_redirects,
            )
        return self.transport


__all__ = ["CacheManager"]
