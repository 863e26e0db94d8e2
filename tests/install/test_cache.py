"""
Tests for the download cache manager.
"""

from unittest.mock import Mock

import pytest
import responses

from binfetch.core.download import DownloadOptions, Transport
from binfetch.core.exceptions import AssetNotFoundError, DownloadFailedError
from binfetch.install.cache import CacheManager
from binfetch.install.installer import InstallRequest

API_URL = "https://api.github.com/repos/owner/tool/releases/tags/v1.0.0"
ASSET_URL = "https://api.github.com/repos/owner/tool/releases/assets/42"
ASSET_NAME = "tool-v1.0.0-linux-x86_64"


class _RecordingTransport(Transport):
    """Writes fixed bytes and remembers what it was asked for."""

    name = "recording"

    def __init__(self, payload=b"binary"):
        self.payload = payload
        self.calls = []

    def download(self, url, destination, options: DownloadOptions):
        self.calls.append((url, destination, options))
        destination.write_bytes(self.payload)
        return destination


@pytest.fixture
def request_(tmp_path):
    return InstallRequest(
        version="v1.0.0", target="linux-x86_64", dest_dir=tmp_path / "out"
    )


class TestAssetNames:
    def test_asset_name_linux(self, installer_config, linux_env):
        cache = CacheManager(installer_config, env=linux_env)
        assert cache.asset_name("v1.0.0", "linux-x86_64") == ASSET_NAME

    def test_asset_name_windows(self, installer_config, windows_env):
        cache = CacheManager(installer_config, env=windows_env)
        assert cache.asset_name("v1.0.0", "windows-x86_64") == "tool-v1.0.0-windows-x86_64.exe"

    def test_asset_path_in_cache_dir(self, installer_config, linux_env, tmp_path):
        cache = CacheManager(installer_config, env=linux_env)
        assert cache.asset_path("v1.0.0", "linux-x86_64") == (
            tmp_path / "cache" / ASSET_NAME
        )


class TestResolveCachedOrDownload:
    """Test cache hits, misses and cleanup."""

    @responses.activate
    def test_downloads_on_miss(self, installer_config, linux_env, make_release, request_):
        responses.add(responses.GET, API_URL, body=make_release(ASSET_NAME), status=200)
        transport = _RecordingTransport()
        cache = CacheManager(installer_config, env=linux_env, transport=transport)

        path = cache.resolve_cached_or_download(request_)

        assert path.read_bytes() == b"binary"
        url, destination, options = transport.calls[0]
        assert url == ASSET_URL
        assert destination == path
        assert options.headers["accept"] == "application/octet-stream"
        assert options.headers["user-agent"] == "binfetch-tests"
        assert "authorization" not in options.headers

    @responses.activate
    def test_token_added_to_download_headers(
        self, installer_config, linux_env, make_release, request_
    ):
        responses.add(responses.GET, API_URL, body=make_release(ASSET_NAME), status=200)
        transport = _RecordingTransport()
        cache = CacheManager(installer_config, env=linux_env, transport=transport)
        request_.token = "secret"

        cache.resolve_cached_or_download(request_)

        assert transport.calls[0][2].headers["authorization"] == "token secret"
        assert responses.calls[0].request.headers["authorization"] == "token secret"

    @responses.activate
    def test_cache_hit_skips_network(self, installer_config, linux_env, request_):
        transport = _RecordingTransport()
        cache = CacheManager(installer_config, env=linux_env, transport=transport)
        cached = cache.asset_path("v1.0.0", "linux-x86_64")
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"cached")

        path = cache.resolve_cached_or_download(request_)

        assert path.read_bytes() == b"cached"
        assert len(responses.calls) == 0
        assert transport.calls == []

    @responses.activate
    def test_force_redownloads(self, installer_config, linux_env, make_release, request_):
        responses.add(responses.GET, API_URL, body=make_release(ASSET_NAME), status=200)
        transport = _RecordingTransport(payload=b"fresh")
        cache = CacheManager(installer_config, env=linux_env, transport=transport)
        cached = cache.asset_path("v1.0.0", "linux-x86_64")
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"stale")
        request_.force = True

        path = cache.resolve_cached_or_download(request_)

        assert path.read_bytes() == b"fresh"
        assert len(responses.calls) == 1

    @responses.activate
    def test_lookup_failure_leaves_no_file(
        self, installer_config, linux_env, make_release, request_
    ):
        responses.add(responses.GET, API_URL, body=make_release("other"), status=200)
        cache = CacheManager(
            installer_config, env=linux_env, transport=_RecordingTransport()
        )

        with pytest.raises(AssetNotFoundError):
            cache.resolve_cached_or_download(request_)

        assert not cache.is_cached("v1.0.0", "linux-x86_64")

    @responses.activate
    def test_download_failure_removes_partial_file(
        self, installer_config, linux_env, make_release, request_
    ):
        responses.add(responses.GET, API_URL, body=make_release(ASSET_NAME), status=200)

        def partial_then_fail(url, destination, options):
            destination.write_bytes(b"part")
            raise DownloadFailedError(500, url)

        transport = Mock(spec=Transport)
        transport.download.side_effect = partial_then_fail
        cache = CacheManager(installer_config, env=linux_env, transport=transport)

        with pytest.raises(DownloadFailedError):
            cache.resolve_cached_or_download(request_)

        assert not cache.is_cached("v1.0.0", "linux-x86_64")

    @responses.activate
    def test_interrupt_removes_partial_file(
        self, installer_config, linux_env, make_release, request_
    ):
        responses.add(responses.GET, API_URL, body=make_release(ASSET_NAME), status=200)

        def partial_then_interrupt(url, destination, options):
            destination.write_bytes(b"part")
            raise KeyboardInterrupt

        transport = Mock(spec=Transport)
        transport.download.side_effect = partial_then_interrupt
        cache = CacheManager(installer_config, env=linux_env, transport=transport)

        with pytest.raises(KeyboardInterrupt):
            cache.resolve_cached_or_download(request_)

        assert not cache.is_cached("v1.0.0", "linux-x86_64")

    def test_invalidate(self, installer_config, linux_env):
        cache = CacheManager(installer_config, env=linux_env)
        cached = cache.asset_path("v1.0.0", "linux-x86_64")
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"x")

        assert cache.invalidate("v1.0.0", "linux-x86_64") is True
        assert cache.invalidate("v1.0.0", "linux-x86_64") is False

    def test_transport_selected_lazily(self, installer_config, windows_env):
        cache = CacheManager(installer_config, env=windows_env)
        assert cache.transport is None
        assert cache._get_transport().name == "powershell"
