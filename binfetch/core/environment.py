"""
Process environment provider.

Platform resolution, proxy selection and credential lookup all read the host
OS, CPU architecture and environment variables. They read them through an
Environment instance instead of touching ``sys``, ``platform`` and
``os.environ`` directly, so tests can describe any host without mutating the
real process.

Usage:
    from binfetch.core.environment import Environment

    env = Environment.from_process()
    print(env.os_name, env.arch)

    fake = Environment(os_name="darwin", machine="arm64", environ={})
"""

import os
import platform
import sys
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

# Checked in order; the first one set wins.
ARCH_OVERRIDE_VARS = ("BINFETCH_ARCH", "npm_config_arch")


def normalize_arch(machine: str) -> str:
    """
    Normalize a machine name to the architecture vocabulary used for targets.

    Args:
        machine: Raw machine string (e.g. 'x86_64', 'aarch64', 'armv7l')

    Returns:
        One of 'x64', 'arm64', 'arm', 'ppc64', 'ia32', or the lowercased input

    Example:
        >>> normalize_arch("AMD64")
        'x64'
        >>> normalize_arch("armv7l")
        'arm'
    """
    value = machine.strip().lower()

    if value in ("x86_64", "amd64", "x64"):
        return "x64"
    elif value in ("aarch64", "arm64", "aarch64_be"):
        return "arm64"
    elif value.startswith("arm"):
        return "arm"
    elif value in ("ppc64", "ppc64le", "powerpc64", "powerpc64le"):
        return "ppc64"
    elif value in ("i386", "i486", "i586", "i686", "x86", "ia32"):
        return "ia32"
    return value


def normalize_os(os_name: str) -> str:
    """Map sys.platform style values ('linux2', 'cygwin') to canonical names."""
    value = os_name.strip().lower()
    if value.startswith("linux"):
        return "linux"
    if value in ("win32", "windows", "cygwin", "msys"):
        return "win32"
    return value


@dataclass(frozen=True)
class Environment:
    """
    Snapshot of the host properties binfetch depends on.

    Attributes:
        os_name: Operating system as reported by sys.platform
        machine: CPU architecture as reported by platform.machine()
        environ: Environment variables
    """

    os_name: str
    machine: str
    environ: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_process(cls) -> "Environment":
        """Capture the current process's OS, architecture and environment."""
        return cls(
            os_name=sys.platform,
            machine=platform.machine(),
            environ=dict(os.environ),
        )

    @property
    def system(self) -> str:
        """Canonical OS name: 'darwin', 'win32', 'linux' or the raw value."""
        return normalize_os(self.os_name)

    @property
    def is_windows(self) -> bool:
        return self.system == "win32"

    @property
    def arch(self) -> str:
        """
        Effective CPU architecture.

        An override variable takes precedence over the OS-reported machine,
        which lets a package manager install binaries for another architecture.
        """
        for name in ARCH_OVERRIDE_VARS:
            override = self.environ.get(name)
            if override:
                return normalize_arch(override)
        return normalize_arch(self.machine)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up an environment variable."""
        return self.environ.get(name, default)

    def get_any(self, *names: str) -> Optional[str]:
        """Return the first non-empty value among several variable names."""
        for name in names:
            value = self.environ.get(name)
            if value:
                return value
        return None

    def with_overrides(self, **variables: str) -> "Environment":
        """Return a copy with extra environment variables set."""
        merged: Dict[str, str] = dict(self.environ)
        merged.update(variables)
        return Environment(os_name=self.os_name, machine=self.machine, environ=merged)


__all__ = [
    "ARCH_OVERRIDE_VARS",
    "Environment",
    "normalize_arch",
    "normalize_os",
]
