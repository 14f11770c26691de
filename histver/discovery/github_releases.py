# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""GitHub release listing for histver.

Lists every release of a repository through the GitHub REST API, following
pagination, and returns them as ReleaseCandidate objects ordered newest
first.

Filtering:

- Drafts are always dropped (they are only visible to authenticated
  maintainers and have no public assets).
- Prereleases are dropped unless include_prereleases is True. GitHub's
  prerelease flag is trusted; tag names are not inspected.

Rate Limits:

- Unauthenticated: 60 requests/hour per IP
- Authenticated: 5000 requests/hour per token
- A full listing of a project with ~300 releases costs 3 requests

Example:
    List stable releases:
        ```python
        from histver.discovery import list_releases

        for release in list_releases("syncthing/syncthing"):
            print(release.tag_name, [a.name for a in release.assets])
        ```

Note:
    Errors are raised as NetworkError and chained with 'from err'. A
    malformed payload (missing tag_name or created_at) is also a
    NetworkError since it means the API response is not what we expect.

"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import requests

from histver.exceptions import ConfigError, NetworkError
from histver.io.download import make_session
from histver.logging import get_global_logger

GITHUB_API = "https://api.github.com"
PER_PAGE = 100


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a release.

    Attributes:
        name: Asset file name (e.g., "syncthing-linux-amd64-v1.23.1.tar.gz").
        download_url: Browser download URL.

    """

    name: str
    download_url: str


@dataclass(frozen=True)
class ReleaseCandidate:
    """A published release as reported by GitHub.

    Attributes:
        tag_name: Release tag (e.g., "v1.23.1").
        created_at: When the release (tag commit) was created.
        published_at: When the release was published, if it was.
        prerelease: GitHub's prerelease flag.
        draft: GitHub's draft flag.
        assets: Attached files, in API order.

    """

    tag_name: str
    created_at: datetime
    published_at: datetime | None = None
    prerelease: bool = False
    draft: bool = False
    assets: tuple[ReleaseAsset, ...] = ()

    @property
    def sort_time(self) -> datetime:
        return self.published_at or self.created_at


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def release_from_api(data: dict[str, Any]) -> ReleaseCandidate:
    """Build a ReleaseCandidate from one GitHub API release object.

    Raises:
        NetworkError: If tag_name or created_at is missing or invalid.
    """
    tag_name = data.get("tag_name")
    if not tag_name:
        raise NetworkError("Release has no tag_name field")
    try:
        created_at = _parse_timestamp(data.get("created_at"))
        published_at = _parse_timestamp(data.get("published_at"))
    except ValueError as err:
        raise NetworkError(f"Release {tag_name} has an invalid timestamp") from err
    if created_at is None:
        raise NetworkError(f"Release {tag_name} has no created_at field")

    assets = tuple(
        ReleaseAsset(name=a["name"], download_url=a["browser_download_url"])
        for a in data.get("assets", [])
        if a.get("name") and a.get("browser_download_url")
    )
    return ReleaseCandidate(
        tag_name=tag_name,
        created_at=created_at,
        published_at=published_at,
        prerelease=bool(data.get("prerelease", False)),
        draft=bool(data.get("draft", False)),
        assets=assets,
    )


def list_releases(
    repo: str,
    *,
    token: str | None = None,
    include_prereleases: bool = False,
    timeout: float = 30,
) -> list[ReleaseCandidate]:
    """List all releases of a repository, newest first.

    Args:
        repo: Repository in "owner/name" format.
        token: Optional GitHub token for higher rate limits.
        include_prereleases: If True, keep releases flagged as prerelease.
            Default is False.
        timeout: Per-request timeout (seconds).

    Returns:
        Releases sorted by publish time (creation time if unpublished),
            newest first.

    Raises:
        ConfigError: If repo is not in "owner/name" format.
        NetworkError: If any API request fails or returns malformed data.

    """
    logger = get_global_logger()

    if repo.count("/") != 1 or not all(repo.split("/")):
        raise ConfigError(f"Invalid repo format: {repo!r}. Expected 'owner/repository'")

    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"token {token}"
        logger.verbose("DISCOVERY", "Using authenticated API request")

    url: str | None = f"{GITHUB_API}/repos/{repo}/releases?per_page={PER_PAGE}"
    releases: list[ReleaseCandidate] = []
    skipped = 0

    with make_session() as session:
        while url:
            logger.verbose("DISCOVERY", f"Fetching releases from: {url}")
            try:
                response = session.get(url, headers=headers, timeout=timeout)
                response.raise_for_status()
            except requests.exceptions.HTTPError as err:
                status = err.response.status_code if err.response is not None else 0
                if status == 404:
                    raise NetworkError(f"Repository {repo!r} not found") from err
                if status == 403:
                    raise NetworkError(
                        "GitHub API rate limit exceeded. Consider using a token. "
                        f"Status: {status}"
                    ) from err
                raise NetworkError(f"GitHub API request failed: {err}") from err
            except requests.exceptions.RequestException as err:
                raise NetworkError(f"Failed to list GitHub releases: {err}") from err

            try:
                page = response.json()
            except ValueError as err:
                raise NetworkError("GitHub API returned invalid JSON") from err
            if not isinstance(page, list):
                raise NetworkError("GitHub API returned an unexpected payload")

            for item in page:
                release = release_from_api(item)
                if release.draft or (release.prerelease and not include_prereleases):
                    logger.debug("DISCOVERY", f"Skipping {release.tag_name}")
                    skipped += 1
                    continue
                releases.append(release)

            url = response.links.get("next", {}).get("url")

    releases.sort(key=lambda r: r.sort_time, reverse=True)
    logger.verbose(
        "DISCOVERY",
        f"Found {len(releases)} release(s), skipped {skipped} draft/prerelease(s)",
    )
    return releases
