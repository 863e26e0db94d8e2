"""
Centralized exception hierarchy for binfetch.

Every failure raised while resolving, downloading or installing a binary
derives from BinfetchError so callers can catch a single type.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class BinfetchError(Exception):
    """Base exception for all binfetch errors."""

    pass


class ConfigError(BinfetchError):
    """Configuration file or override could not be parsed or validated."""

    pass


class MissingFieldError(BinfetchError):
    """Raised when an install request lacks a required field."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing {field}")


class UnsupportedPlatformError(BinfetchError):
    """Raised when the host OS has no prebuilt target."""

    def __init__(self, os_name: str):
        self.os_name = os_name
        super().__init__(f"Unknown platform: {os_name}")


# ============================================================================
# Release API Exceptions
# ============================================================================


class ReleaseError(BinfetchError):
    """Base exception for release API contract violations."""

    pass


class MalformedResponseError(ReleaseError):
    """Release API body could not be parsed as JSON."""

    pass


class BadResponseError(ReleaseError):
    """Release API body parsed but carries no assets list."""

    pass


class AssetNotFoundError(ReleaseError):
    """No release asset matches the expected asset name."""

    def __init__(self, asset_name: str):
        self.asset_name = asset_name
        super().__init__(f"Asset not found with name: {asset_name}")


# ============================================================================
# Transport Exceptions
# ============================================================================


class TransportError(BinfetchError):
    """Base exception for network transfer failures."""

    pass


class HttpError(TransportError):
    """Metadata request returned a status other than 200."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Request failed: {status_code}")


class DownloadFailedError(TransportError):
    """Asset download returned a status other than 200 or 302."""

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Download failed with {status_code}")


class TooManyRedirectsError(TransportError):
    """Redirect chain exceeded the configured hop limit."""

    def __init__(self, url: str, max_redirects: int):
        self.url = url
        self.max_redirects = max_redirects
        super().__init__(
            f"Exceeded {max_redirects} redirects while downloading {url}"
        )


class FallbackCommandError(TransportError):
    """The shell-delegated download command exited with an error."""

    def __init__(self, returncode: int, stderr: Optional[str] = None):
        self.returncode = returncode
        self.stderr = stderr or ""
        msg = f"Download command exited with status {returncode}"
        if self.stderr.strip():
            msg += f": {self.stderr.strip()}"
        super().__init__(msg)


# ============================================================================
# Installation Exceptions
# ============================================================================


class InstallError(BinfetchError):
    """Base exception for extraction and installation failures."""

    pass


class FilesystemError(InstallError):
    """Raised when a filesystem operation fails."""

    pass


class BinaryNotFoundError(InstallError):
    """Extraction produced no recognizable executable."""

    def __init__(self, dest_dir, binary_name: str = ""):
        self.dest_dir = dest_dir
        self.binary_name = binary_name
        super().__init__(
            f"Expecting {binary_name} or {binary_name}.exe unzipped into "
            f"{dest_dir}, didn't find one."
        )
