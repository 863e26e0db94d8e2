"""
Unit tests for release asset lookup.
"""

import json

import pytest
import responses

from binfetch.core.exceptions import (
    AssetNotFoundError,
    BadResponseError,
    HttpError,
    MalformedResponseError,
)
from binfetch.core.releases import (
    AssetDescriptor,
    ReleaseStatus,
    get_api_url,
    locate_asset,
    parse_release,
)

API_URL = "https://api.github.com/repos/owner/tool/releases/tags/v1.0.0"


class TestParseRelease:
    """Test parse_release tagged results."""

    def test_ok(self, make_release):
        result = parse_release(make_release("tool-v1.0.0-linux-x86_64"))

        assert result.ok
        assert result.status is ReleaseStatus.OK
        assert result.assets == [
            AssetDescriptor(
                name="tool-v1.0.0-linux-x86_64",
                url="https://api.github.com/repos/owner/tool/releases/assets/42",
            )
        ]

    def test_malformed(self):
        result = parse_release("<html>rate limited</html>")
        assert result.status is ReleaseStatus.MALFORMED
        assert not result.ok

    def test_missing_assets(self):
        result = parse_release(json.dumps({"message": "Not Found"}))
        assert result.status is ReleaseStatus.MISSING_ASSETS

    def test_assets_not_a_list(self):
        result = parse_release(json.dumps({"assets": "nope"}))
        assert result.status is ReleaseStatus.MISSING_ASSETS

    def test_top_level_list(self):
        result = parse_release(json.dumps([1, 2]))
        assert result.status is ReleaseStatus.MISSING_ASSETS

    def test_skips_malformed_entries(self):
        body = json.dumps(
            {"assets": [{"name": "a"}, "junk", {"name": "b", "url": "https://x/b"}]}
        )
        result = parse_release(body)
        assert result.ok
        assert [a.name for a in result.assets] == ["b"]

    def test_find_is_case_sensitive(self, make_release):
        result = parse_release(make_release("Tool-v1.0.0-linux-x86_64"))
        assert result.find("tool-v1.0.0-linux-x86_64") is None
        assert result.find("Tool-v1.0.0-linux-x86_64") is not None


class TestGetApiUrl:
    def test_default_host(self):
        assert get_api_url("owner/tool", "v1.0.0") == API_URL

    def test_custom_host(self):
        assert get_api_url("o/t", "v2", "ghe.example.com") == (
            "https://ghe.example.com/repos/o/t/releases/tags/v2"
        )


class TestLocateAsset:
    """Test locate_asset against a mocked releases API."""

    @responses.activate
    def test_finds_asset(self, linux_env, make_release):
        responses.add(
            responses.GET,
            API_URL,
            body=make_release("tool-v1.0.0-darwin-m1", "tool-v1.0.0-linux-x86_64"),
            status=200,
        )

        asset = locate_asset("owner/tool", "v1.0.0", "tool-v1.0.0-linux-x86_64", env=linux_env)

        assert asset.name == "tool-v1.0.0-linux-x86_64"
        assert asset.url.endswith("/assets/43")

    @responses.activate
    def test_sends_token_and_user_agent(self, linux_env, make_release):
        responses.add(responses.GET, API_URL, body=make_release("a"), status=200)

        locate_asset("owner/tool", "v1.0.0", "a", token="secret", user_agent="ua", env=linux_env)

        headers = responses.calls[0].request.headers
        assert headers["authorization"] == "token secret"
        assert headers["user-agent"] == "ua"

    @responses.activate
    def test_no_token_no_authorization(self, linux_env, make_release):
        responses.add(responses.GET, API_URL, body=make_release("a"), status=200)

        locate_asset("owner/tool", "v1.0.0", "a", env=linux_env)

        assert "authorization" not in responses.calls[0].request.headers

    @responses.activate
    def test_asset_not_found(self, linux_env, make_release):
        responses.add(responses.GET, API_URL, body=make_release("other"), status=200)

        with pytest.raises(AssetNotFoundError) as exc_info:
            locate_asset("owner/tool", "v1.0.0", "tool-v1.0.0-linux-x86_64", env=linux_env)

        assert exc_info.value.asset_name == "tool-v1.0.0-linux-x86_64"

    @responses.activate
    def test_malformed_body(self, linux_env):
        responses.add(responses.GET, API_URL, body="not json", status=200)

        with pytest.raises(MalformedResponseError, match="Malformed API response"):
            locate_asset("owner/tool", "v1.0.0", "a", env=linux_env)

    @responses.activate
    def test_body_without_assets(self, linux_env):
        responses.add(responses.GET, API_URL, json={"message": "oops"}, status=200)

        with pytest.raises(BadResponseError, match="Bad API response"):
            locate_asset("owner/tool", "v1.0.0", "a", env=linux_env)

    @responses.activate
    def test_http_404(self, linux_env):
        responses.add(responses.GET, API_URL, json={"message": "Not Found"}, status=404)

        with pytest.raises(HttpError) as exc_info:
            locate_asset("owner/tool", "v1.0.0", "a", env=linux_env)

        assert exc_info.value.status_code == 404
