"""
Release asset lookup against the GitHub releases API.

A release body is parsed into a tagged ReleaseResult before any field is
trusted, so the locator only ever branches on a known status.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

import requests

from binfetch.core.download import TRUSTED_API_HOST, DownloadOptions, get_text
from binfetch.core.environment import Environment
from binfetch.core.exceptions import (
    AssetNotFoundError,
    BadResponseError,
    MalformedResponseError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetDescriptor:
    """A downloadable file attached to a release."""

    name: str
    url: str


class ReleaseStatus(Enum):
    OK = "ok"
    MALFORMED = "malformed"
    MISSING_ASSETS = "missing_assets"


@dataclass
class ReleaseResult:
    """
    Outcome of parsing a release API body.

    Attributes:
        status: Parse outcome
        assets: Asset descriptors (only populated when status is OK)
        detail: Parser error or offending body for failed parses
    """

    status: ReleaseStatus
    assets: List[AssetDescriptor] = field(default_factory=list)
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ReleaseStatus.OK

    def find(self, asset_name: str) -> Optional[AssetDescriptor]:
        """Exact, case-sensitive lookup by asset name."""
        for asset in self.assets:
            if asset.name == asset_name:
                return asset
        return None


def _parse_asset(entry: Any) -> Optional[AssetDescriptor]:
    if not isinstance(entry, dict):
        return None
    name = entry.get("name")
    url = entry.get("url")
    if not isinstance(name, str) or not isinstance(url, str):
        return None
    return AssetDescriptor(name=name, url=url)


def parse_release(body: str) -> ReleaseResult:
    """
    Parse a releases-by-tag response body.

    Args:
        body: Raw response text

    Returns:
        ReleaseResult tagged with the parse outcome
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        return ReleaseResult(ReleaseStatus.MALFORMED, detail=str(e))

    assets = data.get("assets") if isinstance(data, dict) else None
    if not isinstance(assets, list):
        return ReleaseResult(ReleaseStatus.MISSING_ASSETS, detail=body)

    parsed = [a for a in (_parse_asset(entry) for entry in assets) if a is not None]
    if len(parsed) != len(assets):
        logger.debug(f"Ignored {len(assets) - len(parsed)} malformed asset entries")

    return ReleaseResult(ReleaseStatus.OK, assets=parsed)


def get_api_url(repo: str, tag: str, api_host: str = TRUSTED_API_HOST) -> str:
    """
    Build the releases-by-tag URL.

    Example:
        >>> get_api_url("octoshikari/aidbox-cli", "v0.4.3")
        'https://api.github.com/repos/octoshikari/aidbox-cli/releases/tags/v0.4.3'
    """
    return f"https://{api_host}/repos/{repo}/releases/tags/{tag}"


def locate_asset(
    repo: str,
    version: str,
    asset_name: str,
    token: Optional[str] = None,
    user_agent: str = "binfetch",
    api_host: str = TRUSTED_API_HOST,
    timeout: Optional[float] = None,
    env: Optional[Environment] = None,
    session: Optional[requests.Session] = None,
) -> AssetDescriptor:
    """
    Find the asset descriptor for ``asset_name`` in a tagged release.

    Args:
        repo: Repository as 'owner/name'
        version: Release tag
        asset_name: Exact asset file name
        token: API credential, sent only to ``api_host``
        user_agent: User-Agent header value
        api_host: Release API host
        timeout: Request timeout in seconds
        env: Host environment for proxy resolution
        session: requests session to use

    Returns:
        Matching AssetDescriptor

    Raises:
        HttpError: If the API answers with a status other than 200
        MalformedResponseError: If the body is not JSON
        BadResponseError: If the body has no assets list
        AssetNotFoundError: If no asset carries the expected name
    """
    options = DownloadOptions(
        headers={"user-agent": user_agent},
        trusted_host=api_host,
        timeout=timeout,
    )
    if token:
        options.headers["authorization"] = f"token {token}"

    logger.info(f"Finding release for {version}")
    body = get_text(get_api_url(repo, version, api_host), options, env=env, session=session)

    release = parse_release(body)
    if not release.ok:
        if release.status is ReleaseStatus.MALFORMED:
            raise MalformedResponseError(f"Malformed API response: {release.detail}")
        raise BadResponseError(f"Bad API response: {release.detail[:500]}")

    asset = release.find(asset_name)
    if asset is None:
        raise AssetNotFoundError(asset_name)

    logger.debug(f"Matched asset {asset.name} -> {asset.url}")
    return asset


__all__ = [
    "AssetDescriptor",
    "ReleaseStatus",
    "ReleaseResult",
    "parse_release",
    "get_api_url",
    "locate_asset",
]
