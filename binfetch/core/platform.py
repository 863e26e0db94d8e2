"""
Target resolution for binfetch.

Maps the host operating system and CPU architecture to the canonical target
string that release assets are named after (e.g. 'linux-x86_64',
'aarch64-unknown-linux-gnu').

Usage:
    from binfetch.core.platform import resolve_target, platform_extension

    target = resolve_target()
    asset = f"aidbox-cli-v0.4.3-{target}{platform_extension()}"
"""

from typing import List, Optional

from binfetch.core.environment import Environment
from binfetch.core.exceptions import UnsupportedPlatformError

WINDOWS_EXTENSION = ".exe"

# Linux targets keyed by normalized architecture.
LINUX_TARGETS = {
    "x64": "linux-x86_64",
    "arm": "arm-unknown-linux-gnueabihf",
    "arm64": "aarch64-unknown-linux-gnu",
    "ppc64": "powerpc64le-unknown-linux-gnu",
}
LINUX_FALLBACK_TARGET = "i686-unknown-linux-musl"


def resolve_target(env: Optional[Environment] = None) -> str:
    """
    Resolve the release target for a host.

    Args:
        env: Host description (defaults to the current process)

    Returns:
        Canonical target string used in asset names

    Raises:
        UnsupportedPlatformError: If the operating system has no target

    Example:
        >>> resolve_target(Environment("darwin", "arm64"))
        'darwin-m1'
        >>> resolve_target(Environment("linux", "x86_64"))
        'linux-x86_64'
    """
    if env is None:
        env = Environment.from_process()

    system = env.system
    arch = env.arch

    if system == "darwin":
        return "darwin-x86_64" if arch == "x64" else "darwin-m1"
    elif system == "win32":
        return "windows-x86_64"
    elif system == "linux":
        return LINUX_TARGETS.get(arch, LINUX_FALLBACK_TARGET)
    else:
        raise UnsupportedPlatformError(env.os_name)


def platform_extension(env: Optional[Environment] = None) -> str:
    """Executable suffix for the host: '.exe' on Windows, '' elsewhere."""
    if env is None:
        env = Environment.from_process()
    return WINDOWS_EXTENSION if env.is_windows else ""


def get_supported_targets() -> List[str]:
    """
    Get every target string a release may publish.

    Returns:
        List of target strings
    """
    return [
        "darwin-x86_64",
        "darwin-m1",
        "windows-x86_64",
        *LINUX_TARGETS.values(),
        LINUX_FALLBACK_TARGET,
    ]


__all__ = [
    "WINDOWS_EXTENSION",
    "resolve_target",
    "platform_extension",
    "get_supported_targets",
]
