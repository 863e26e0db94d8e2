"""
Asset caching and binary installation.
"""

from .cache import CacheManager
from .installer import InstallRequest, Installer, install

__all__ = ["CacheManager", "InstallRequest", "Installer", "install"]
