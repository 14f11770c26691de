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

"""Core orchestration for histver.

This module provides sync_versions(), the entry point behind the
``histver`` command. A run:

1. Loads the existing versions table (missing file = empty table)
2. Lists the repository's releases (newest first, no prereleases)
3. Resolves every release whose tag is not yet in the table
4. Rewrites the table

Error Policy:

- Fatal: unreadable/malformed table, failed release listing, unwritable
  destination. These propagate and nothing is written.
- Per release: anything else raised as HistverError (no asset, corrupt
  archive, probe failure, download failure). The release is logged and
  skipped; it is retried on the next run since it never entered the table.

Example:
    Programmatic sync:
        ```python
        from pathlib import Path
        from histver.config import load_config
        from histver.core import sync_versions

        result = sync_versions(Path("versions.csv"), load_config())
        print(f"Added {len(result.added)}, failed {len(result.failed)}")
        ```

"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from histver.config import Settings
from histver.discovery import ReleaseCandidate, list_releases
from histver.exceptions import HistverError
from histver.logging import get_global_logger
from histver.resolver import resolve_release
from histver.results import ReleaseFailure, SyncResult
from histver.table import VersionTable
from histver.versioning import VersionRecord

ReleaseLister = Callable[[Settings], list[ReleaseCandidate]]
ReleaseResolver = Callable[[ReleaseCandidate, Settings], VersionRecord]


def _list_releases(settings: Settings) -> list[ReleaseCandidate]:
    return list_releases(
        settings.repo,
        token=settings.token,
        include_prereleases=settings.include_prereleases,
        timeout=settings.api_timeout,
    )


def sync_versions(
    table_path: Path,
    settings: Settings,
    *,
    lister: ReleaseLister = _list_releases,
    resolver: ReleaseResolver = resolve_release,
) -> SyncResult:
    """Bring the versions table up to date with the repository's releases.

    Args:
        table_path: CSV table to load and rewrite.
        settings: Effective configuration.
        lister: Returns release candidates, newest first. Default queries
            the GitHub API.
        resolver: Turns a release into a record. Default downloads and
            probes the release asset.

    Returns:
        SyncResult describing what was added, skipped and failed.

    Raises:
        TableError: If the existing table cannot be read, or the new table
            cannot be written.
        ConfigError: If the configured repository is invalid.
        NetworkError: If the release listing fails.

    """
    logger = get_global_logger()

    logger.step(1, 3, "Loading versions table...")
    table = VersionTable(table_path)
    table.load()
    seen = table.versions()

    logger.step(2, 3, f"Listing releases for {settings.repo}...")
    releases = lister(settings)

    added: list[VersionRecord] = []
    skipped: list[str] = []
    failed: list[ReleaseFailure] = []

    for release in releases:
        tag = release.tag_name
        if tag in seen:
            skipped.append(tag)
            continue
        logger.verbose("SYNC", f"Checking {tag}")
        try:
            record = resolver(release, settings)
        except HistverError as err:
            logger.warning(tag, str(err))
            failed.append(ReleaseFailure(tag_name=tag, error=str(err)))
            continue
        table.add(record)
        seen.add(tag)
        added.append(record)
        logger.verbose("SYNC", f"Added {record.version} {record.runtime} {record.date}")

    logger.step(3, 3, f"Writing {table_path}...")
    table.save()

    return SyncResult(
        table_path=table_path,
        added=tuple(added),
        skipped=tuple(skipped),
        failed=tuple(failed),
        total_rows=len(table),
    )
