"""
Core functionality for binfetch.

This package contains the foundational modules the installer depends on:
host environment, target resolution, transport, release lookup and
filesystem helpers.
"""

from .environment import Environment, normalize_arch

from .platform import (
    resolve_target,
    platform_extension,
    get_supported_targets,
)

from .download import (
    DownloadOptions,
    Transport,
    StreamingTransport,
    PowerShellTransport,
    get_text,
    download_file,
    select_transport,
    proxy_for_url,
    scope_headers,
)

from .releases import (
    AssetDescriptor,
    ReleaseResult,
    ReleaseStatus,
    parse_release,
    get_api_url,
    locate_asset,
)

from .exceptions import (
    BinfetchError,
    ConfigError,
    MissingFieldError,
    UnsupportedPlatformError,
    ReleaseError,
    MalformedResponseError,
    BadResponseError,
    AssetNotFoundError,
    TransportError,
    HttpError,
    DownloadFailedError,
    TooManyRedirectsError,
    FallbackCommandError,
    InstallError,
    BinaryNotFoundError,
)

__all__ = [
    "Environment",
    "normalize_arch",
    "resolve_target",
    "platform_extension",
    "get_supported_targets",
    "DownloadOptions",
    "Transport",
    "StreamingTransport",
    "PowerShellTransport",
    "get_text",
    "download_file",
    "select_transport",
    "proxy_for_url",
    "scope_headers",
    "AssetDescriptor",
    "ReleaseResult",
    "ReleaseStatus",
    "parse_release",
    "get_api_url",
    "locate_asset",
    "BinfetchError",
    "ConfigError",
    "MissingFieldError",
    "UnsupportedPlatformError",
    "ReleaseError",
    "MalformedResponseError",
    "BadResponseError",
    "AssetNotFoundError",
    "TransportError",
    "HttpError",
    "DownloadFailedError",
    "TooManyRedirectsError",
    "FallbackCommandError",
    "InstallError",
    "BinaryNotFoundError",
]
