"""
Network transport for release metadata and binary assets.

This module provides:
- A single authenticated GET returning the response body as text
- Streaming download to a file with bounded redirect following
- Proxy selection from http_proxy/https_proxy/all_proxy/no_proxy
- Authorization header scoping to the trusted API host
- A PowerShell-delegated download strategy for Windows hosts

The transport strategy is chosen once per run by ``select_transport()``.
"""

import logging
import os
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional
from urllib.parse import unquote, urljoin, urlparse

import requests
from requests.exceptions import RequestException
from requests.utils import select_proxy

from binfetch.core.environment import Environment
from binfetch.core.exceptions import (
    DownloadFailedError,
    FallbackCommandError,
    HttpError,
    TooManyRedirectsError,
    TransportError,
)
from binfetch.core.filesystem import safe_unlink

logger = logging.getLogger(__name__)

TRUSTED_API_HOST = "api.github.com"
CHUNK_SIZE = 8192
DEFAULT_MAX_REDIRECTS = 5
REDIRECT_STATUS = 302


@dataclass
class DownloadOptions:
    """
    Request options shared by metadata and asset requests.

    Attributes:
        headers: Request headers (user-agent, accept, authorization)
        proxy: Explicit proxy URL; resolved from the environment per URL if None
        trusted_host: Only host that may receive the authorization header
        timeout: Socket timeout in seconds, None to block indefinitely
    """

    headers: Dict[str, str] = field(default_factory=dict)
    proxy: Optional[str] = None
    trusted_host: str = TRUSTED_API_HOST
    timeout: Optional[float] = None

    def with_header(self, name: str, value: str) -> "DownloadOptions":
        """Return a copy with one extra header."""
        headers = dict(self.headers)
        headers[name] = value
        return replace(self, headers=headers)


def _hostname(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def scope_headers(
    url: str, headers: Dict[str, str], trusted_host: str = TRUSTED_API_HOST
) -> Dict[str, str]:
    """
    Drop the authorization header unless the request goes to the trusted host.

    Args:
        url: URL the headers will be sent to
        headers: Candidate headers
        trusted_host: Host allowed to receive credentials

    Returns:
        New header dictionary safe to send to ``url``

    Example:
        >>> scope_headers("https://objects.example.com/x", {"authorization": "token t"})
        {}
    """
    if _hostname(url) == trusted_host.lower():
        return dict(headers)
    return {k: v for k, v in headers.items() if k.lower() != "authorization"}


def redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """Copy of headers with credential values masked for logging."""
    return {
        k: ("***" if k.lower() == "authorization" else v) for k, v in headers.items()
    }


def _redact_proxy(proxy: Optional[str]) -> Optional[str]:
    if not proxy:
        return proxy
    parsed = urlparse(proxy)
    if parsed.password is None:
        return proxy
    netloc = f"{parsed.username}:***@{parsed.hostname}"
    if parsed.port:
        netloc += f":{parsed.port}"
    return parsed._replace(netloc=netloc).geturl()


# ============================================================================
# Proxy Resolution
# ============================================================================

DEFAULT_PORTS = {"http": 80, "https": 443}


def _env_var(env: Environment, name: str) -> Optional[str]:
    """Look a variable up in lowercase, then uppercase."""
    return env.get_any(name.lower(), name.upper())


def _bypasses_proxy(hostname: str, port: int, no_proxy: str) -> bool:
    """
    Check a host against a no_proxy list.

    Entries are comma or space separated and may carry a port. An entry
    starting with '.' or '*' matches as a suffix ('*github.com' matches
    'api.github.com'); any other entry must match the host exactly. A lone
    '*' disables proxying entirely.
    """
    for entry in no_proxy.replace(",", " ").split():
        entry = entry.lower()
        if entry == "*":
            return True

        entry_host, sep, entry_port = entry.rpartition(":")
        if not sep or not entry_port.isdigit():
            entry_host, entry_port = entry, ""
        if entry_port and int(entry_port) != port:
            continue

        if not entry_host.startswith((".", "*")):
            if hostname == entry_host:
                return True
            continue

        if entry_host.startswith("*"):
            entry_host = entry_host[1:]
        if hostname.endswith(entry_host):
            return True

    return False


def _environment_proxies(env: Environment) -> Dict[str, str]:
    """
    Collect proxy settings keyed the way requests expects them.

    npm's own settings (``npm_config_*``) win over the plain variables, so a
    proxy configured for npm also applies when running as a post-install hook.
    """
    proxies = {}
    for scheme in DEFAULT_PORTS:
        proxy = _env_var(env, f"npm_config_{scheme}_proxy") or _env_var(
            env, f"{scheme}_proxy"
        )
        if proxy:
            proxies[scheme] = proxy

    fallback = _env_var(env, "npm_config_proxy") or _env_var(env, "all_proxy")
    if fallback:
        proxies["all"] = fallback
    return proxies


def proxy_for_url(url: str, env: Optional[Environment] = None) -> Optional[str]:
    """
    Determine which proxy, if any, a request to ``url`` should go through.

    Args:
        url: Request URL
        env: Host environment (defaults to the current process)

    Returns:
        Proxy URL, or None when no proxy applies
    """
    if env is None:
        env = Environment.from_process()

    parsed = urlparse(url)
    scheme = (parsed.scheme or "").lower()
    hostname = (parsed.hostname or "").lower()
    if not scheme or not hostname:
        return None

    port = parsed.port or DEFAULT_PORTS.get(scheme, 0)

    no_proxy = _env_var(env, "npm_config_no_proxy") or _env_var(env, "no_proxy")
    if no_proxy and _bypasses_proxy(hostname, port, no_proxy):
        logger.debug(f"{hostname} bypasses proxy (no_proxy)")
        return None

    proxy = select_proxy(url, _environment_proxies(env))
    if not proxy:
        return None

    if "://" not in proxy:
        proxy = f"{scheme}://{proxy}"
    return proxy


def _proxies(proxy: Optional[str]) -> Optional[Dict[str, str]]:
    if not proxy:
        return None
    return {"http": proxy, "https": proxy}


def _new_session() -> requests.Session:
    session = requests.Session()
    # Proxies and credentials come from the injected Environment only.
    session.trust_env = False
    return session


# ============================================================================
# Metadata Requests
# ============================================================================


def get_text(
    url: str,
    options: DownloadOptions,
    env: Optional[Environment] = None,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Perform a single GET and return the full body as text.

    Args:
        url: URL to fetch
        options: Headers, proxy and timeout
        env: Host environment for proxy resolution
        session: requests session to use (a fresh one if None)

    Returns:
        Response body

    Raises:
        HttpError: If the status code is not 200
        TransportError: If the request cannot be completed
    """
    if env is None:
        env = Environment.from_process()
    if session is None:
        session = _new_session()

    logger.info(f"GET {url}")

    headers = scope_headers(url, options.headers, options.trusted_host)
    proxy = options.proxy or proxy_for_url(url, env)
    if proxy:
        logger.debug(f"Using proxy {_redact_proxy(proxy)}")

    try:
        response = session.get(
            url,
            headers=headers,
            proxies=_proxies(proxy),
            timeout=options.timeout,
            allow_redirects=False,
        )
    except RequestException as e:
        raise TransportError(f"Request to {url} failed: {e}") from e

    if response.status_code != 200:
        raise HttpError(response.status_code, url)

    return response.text


# ============================================================================
# Transport Strategies
# ============================================================================


class Transport(ABC):
    """Strategy for transferring an asset to a local file."""

    name = "transport"

    @abstractmethod
    def download(self, url: str, destination: Path, options: DownloadOptions) -> Path:
        """
        Download ``url`` to ``destination``.

        Implementations must not leave a partial file behind on failure.

        Returns:
            Path to the downloaded file
        """
        pass


class StreamingTransport(Transport):
    """
    Stream response bytes straight to disk with requests.

    Redirects (HTTP 302) are followed in a loop bounded by ``max_redirects``.
    Headers are re-scoped for every hop, so credentials meant for the API host
    are never forwarded to a storage host the API redirects to.
    """

    name = "stream"

    def __init__(
        self,
        env: Optional[Environment] = None,
        session: Optional[requests.Session] = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ):
        self.env = env or Environment.from_process()
        self.session = session or _new_session()
        self.max_redirects = max_redirects

    def download(self, url: str, destination: Path, options: DownloadOptions) -> Path:
        destination = Path(destination)
        current_url = url

        for _ in range(self.max_redirects + 1):
            headers = scope_headers(current_url, options.headers, options.trusted_host)
            proxy = options.proxy or proxy_for_url(current_url, self.env)
            logger.debug(
                f"Download options: headers={redact_headers(headers)} "
                f"proxy={_redact_proxy(proxy)}"
            )

            try:
                response = self.session.get(
                    current_url,
                    headers=headers,
                    proxies=_proxies(proxy),
                    timeout=options.timeout,
                    stream=True,
                    allow_redirects=False,
                )
            except RequestException as e:
                safe_unlink(destination)
                raise TransportError(f"Download of {current_url} failed: {e}") from e

            logger.debug(f"statusCode: {response.status_code}")

            if response.status_code == REDIRECT_STATUS:
                location = response.headers.get("location")
                response.close()
                if not location:
                    raise DownloadFailedError(response.status_code, current_url)
                current_url = urljoin(current_url, location)
                logger.info(f"Following redirect to: {current_url}")
                continue

            if response.status_code != 200:
                response.close()
                raise DownloadFailedError(response.status_code, current_url)

            self._write(response, destination)
            logger.info(f"Download complete: {destination}")
            return destination

        raise TooManyRedirectsError(url, self.max_redirects)

    def _write(self, response, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        # Bytes land in a sibling temp file; destination only ever holds a
        # complete download.
        partial = tempfile.NamedTemporaryFile(
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=".part",
            delete=False,
        )
        try:
            with partial as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
            os.replace(partial.name, destination)
        except RequestException as e:
            logger.error(f"Error during download: {e}")
            safe_unlink(destination)
            raise TransportError(f"Download interrupted: {e}") from e
        except Exception as e:
            logger.error(f"Error during download: {e}")
            safe_unlink(destination)
            raise
        finally:
            response.close()
            safe_unlink(partial.name)


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class PowerShellTransport(Transport):
    """
    Delegate the download to PowerShell's Invoke-WebRequest.

    Used on Windows hosts, where the streamed file handle is not always
    released in time for the following copy step.
    """

    name = "powershell"

    def __init__(
        self,
        env: Optional[Environment] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        executable: str = "powershell",
    ):
        self.env = env or Environment.from_process()
        self.runner = runner
        self.executable = executable

    def build_script(
        self, url: str, destination: Path, options: DownloadOptions
    ) -> str:
        """
        Build the Invoke-WebRequest script for a download.

        Args:
            url: Asset URL
            destination: Output file
            options: Headers and proxy

        Returns:
            PowerShell script text
        """
        headers = scope_headers(url, options.headers, options.trusted_host)

        user_agent = None
        for key in list(headers):
            if key.lower() == "user-agent":
                user_agent = headers.pop(key)

        header_values = "; ".join(
            f"{_ps_quote(k)}={_ps_quote(v)}" for k, v in headers.items()
        )
        dest = _ps_quote(str(destination))

        script = (
            "[Net.ServicePointManager]::SecurityProtocol = "
            "[Net.SecurityProtocolType]::Tls12; "
            f"Invoke-WebRequest -URI {_ps_quote(url)} -UseBasicParsing "
            f"-OutFile {dest} -Headers @{{{header_values}}}"
        )
        if user_agent:
            script += f" -UserAgent {_ps_quote(user_agent)}"

        proxy = options.proxy or proxy_for_url(url, self.env)
        if proxy:
            script += f" -Proxy {_ps_quote(proxy)}"
            parsed = urlparse(proxy)
            if parsed.username and parsed.password:
                password = unquote(parsed.password)
                script += (
                    " -ProxyCredential (New-Object PSCredential "
                    f"({_ps_quote(unquote(parsed.username))}, "
                    f"(ConvertTo-SecureString {_ps_quote(password)} "
                    "-AsPlainText -Force)))"
                )

        return script

    def build_command(
        self, url: str, destination: Path, options: DownloadOptions
    ) -> List[str]:
        return [
            self.executable,
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            self.build_script(url, destination, options),
        ]

    def download(self, url: str, destination: Path, options: DownloadOptions) -> Path:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading with Invoke-WebRequest")

        command = self.build_command(url, destination, options)
        try:
            result = self.runner(command, capture_output=True, text=True)
        except OSError as e:
            safe_unlink(destination)
            raise TransportError(f"Failed to run {self.executable}: {e}") from e

        if result.returncode != 0:
            safe_unlink(destination)
            raise FallbackCommandError(result.returncode, result.stderr)

        logger.info(f"Download complete: {destination}")
        return destination


def select_transport(
    env: Optional[Environment] = None,
    session: Optional[requests.Session] = None,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
) -> Transport:
    """
    Pick the transport strategy for a host.

    Windows hosts get the PowerShell strategy; everything else streams.
    """
    if env is None:
        env = Environment.from_process()
    if env.is_windows:
        return PowerShellTransport(env=env)
    return StreamingTransport(env=env, session=session, max_redirects=max_redirects)


def download_file(
    url: str,
    destination: Path,
    options: DownloadOptions,
    env: Optional[Environment] = None,
    transport: Optional[Transport] = None,
) -> Path:
    """
    Download an asset to a file using the host's transport strategy.

    Args:
        url: Asset URL
        destination: Local file to write
        options: Headers, proxy and timeout
        env: Host environment (used when selecting a transport)
        transport: Explicit strategy, overrides selection

    Returns:
        Path to the downloaded file

    Raises:
        DownloadFailedError: On a status other than 200 or 302
        TooManyRedirectsError: If the redirect chain is too long
        TransportError: On network or command failure
    """
    if transport is None:
        transport = select_transport(env)
    logger.info(f"Downloading from {url}")
    logger.info(f"Downloading to {destination}")
    return transport.download(url, Path(destination), options)


__all__ = [
    "TRUSTED_API_HOST",
    "DEFAULT_MAX_REDIRECTS",
    "DownloadOptions",
    "Transport",
    "StreamingTransport",
    "PowerShellTransport",
    "scope_headers",
    "redact_headers",
    "proxy_for_url",
    "get_text",
    "select_transport",
    "download_file",
]
