"""Remote release API adapter.

This module provides:
- ReleaseApi: Protocol used by the publisher (injectable for tests)
- GitHubReleaseApi: REST implementation using httpx, for github.com and
  self-hosted GitHub Enterprise instances
- build_release_api: construct the client for a remote repository

The client is built once during setup and passed to the publisher.
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx

from relkit import __version__
from relkit.core.result import Err, Ok, Result
from relkit.core.structured import as_str_dict, get_int, get_str
from relkit.git.remote import RepoIdentity
from relkit.release.timeouts import API_TIMEOUT_SECONDS, UPLOAD_TIMEOUT_SECONDS

__all__ = [
    "ApiError",
    "CreateReleaseParams",
    "CreatedRelease",
    "GitHubReleaseApi",
    "ReleaseApi",
    "UploadAssetParams",
    "UploadedAsset",
    "build_release_api",
    "get_token",
]

PUBLIC_API_URL = "https://api.github.com"
PUBLIC_UPLOAD_URL = "https://uploads.github.com"
ENTERPRISE_API_PREFIX = "/api/v3"
ENTERPRISE_UPLOAD_PREFIX = "/api/uploads"


@dataclass(frozen=True, slots=True)
class ApiError:
    """Release API error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        attempts: Number of attempts made (set by the retry decorator)
    """

    url: str
    status: int
    message: str
    attempts: int = 1

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class CreateReleaseParams:
    owner: str
    repo: str
    tag_name: str
    name: str
    body: str | None
    prerelease: bool = False
    draft: bool = False


@dataclass(frozen=True, slots=True)
class CreatedRelease:
    id: int
    tag_name: str
    name: str
    html_url: str


@dataclass(frozen=True, slots=True)
class UploadAssetParams:
    owner: str
    repo: str
    release_id: int
    file_path: Path
    name: str


@dataclass(frozen=True, slots=True)
class UploadedAsset:
    name: str
    browser_download_url: str


@runtime_checkable
class ReleaseApi(Protocol):
    """Protocol for the remote release operations."""

    def create_release(self, params: CreateReleaseParams) -> Result[CreatedRelease, ApiError]:
        """Create a release for an existing tag."""
        ...

    def upload_asset(self, params: UploadAssetParams) -> Result[UploadedAsset, ApiError]:
        """Upload one file to a release, addressed by release id."""
        ...

    def close(self) -> None: ...


def get_token(token_ref: str) -> str | None:
    """Read the API token from the environment variable named ``token_ref``."""
    token = os.environ.get(token_ref, "").strip()
    return token or None


class GitHubReleaseApi:
    """GitHub REST client for releases.

    Handles:
    - Public host vs. self-hosted (``/api/v3`` prefix) base URLs
    - Token authentication (unauthenticated when no token is given)
    - Fixed request timeout
    """

    def __init__(
        self,
        *,
        host: str = "",
        token: str | None = None,
        timeout: float = API_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            host: Self-hosted host name; empty for the public host
            token: OAuth/personal access token
            timeout: Request timeout in seconds
            transport: httpx transport override (tests use httpx.MockTransport)
        """
        if host:
            self.api_url = f"https://{host}{ENTERPRISE_API_PREFIX}"
            self.upload_url = f"https://{host}{ENTERPRISE_UPLOAD_PREFIX}"
        else:
            self.api_url = PUBLIC_API_URL
            self.upload_url = PUBLIC_UPLOAD_URL

        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"relkit/{__version__}",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self.is_authenticated = token is not None
        self._client = httpx.Client(
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GitHubReleaseApi:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> Result[dict[str, object], ApiError]:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            return Err(ApiError(url=url, status=0, message="Request timed out"))
        except httpx.HTTPError as e:
            return Err(ApiError(url=url, status=0, message=str(e) or type(e).__name__))

        try:
            payload: object = response.json()
        except ValueError:
            payload = None
        data = as_str_dict(payload)

        if response.is_error:
            message = get_str(data, "message") if data is not None else None
            message = message or response.reason_phrase or "request failed"
            return Err(ApiError(url=url, status=response.status_code, message=message))
        if data is None:
            return Err(ApiError(url=url, status=response.status_code, message="Expected JSON object"))
        return Ok(data)

    def create_release(self, params: CreateReleaseParams) -> Result[CreatedRelease, ApiError]:
        url = f"{self.api_url}/repos/{params.owner}/{params.repo}/releases"
        payload = {
            "tag_name": params.tag_name,
            "name": params.name,
            "body": params.body or "",
            "prerelease": params.prerelease,
            "draft": params.draft,
        }
        result = self._request("POST", url, json=payload)
        if isinstance(result, Err):
            return result

        data = result.value
        release_id = get_int(data, "id")
        if release_id is None:
            return Err(ApiError(url=url, status=0, message="Release payload has no id"))
        return Ok(
            CreatedRelease(
                id=release_id,
                tag_name=get_str(data, "tag_name") or params.tag_name,
                name=get_str(data, "name") or params.name,
                html_url=get_str(data, "html_url") or "",
            )
        )

    def upload_asset(self, params: UploadAssetParams) -> Result[UploadedAsset, ApiError]:
        url = (
            f"{self.upload_url}/repos/{params.owner}/{params.repo}"
            f"/releases/{params.release_id}/assets"
        )
        try:
            content = params.file_path.read_bytes()
        except OSError as e:
            return Err(ApiError(url=url, status=0, message=f"Cannot read {params.file_path}: {e}"))

        content_type = mimetypes.guess_type(params.name)[0] or "application/octet-stream"
        result = self._request(
            "POST",
            url,
            params={"name": params.name},
            content=content,
            headers={"Content-Type": content_type},
            timeout=UPLOAD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return result
        return Ok(
            UploadedAsset(
                name=get_str(result.value, "name") or params.name,
                browser_download_url=get_str(result.value, "browser_download_url") or "",
            )
        )


def build_release_api(
    repo: RepoIdentity,
    token: str | None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> GitHubReleaseApi:
    """Create the client for ``repo``'s host."""
    host = "" if repo.is_public_host else repo.host
    return GitHubReleaseApi(host=host, token=token, transport=transport)
