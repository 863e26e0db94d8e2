"""
binfetch - fetch a prebuilt CLI binary from GitHub releases.

Resolves the host's release target, downloads the matching asset (reusing a
cached copy when one exists), installs it into a bin directory and marks it
executable.
"""

from pathlib import Path
from typing import Optional

try:
    from importlib.metadata import version

    __version__ = version("binfetch")
except Exception:
    __version__ = "0.4.3"


def get_binary_path(config=None, env=None) -> Path:
    """
    Path the installed binary lives at (whether or not it exists yet).

    Args:
        config: InstallerConfig (loaded from defaults/env if None)
        env: Environment (current process if None)

    Returns:
        ``<bin_dir>/<tool_name>`` with '.exe' on Windows
    """
    from binfetch.config import load_config
    from binfetch.core.environment import Environment
    from binfetch.core.platform import platform_extension

    if env is None:
        env = Environment.from_process()
    if config is None:
        config = load_config(env=env)
    return Path(config.bin_dir) / f"{config.tool_name}{platform_extension(env)}"


__all__ = ["__version__", "get_binary_path"]
