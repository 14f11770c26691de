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

"""Exception hierarchy for histver.

This module defines the exceptions raised across the version-extraction
pipeline. They fall into two groups:

Fatal (abort the whole run):

- ConfigError: Invalid or unreadable configuration
- TableError: Existing versions table is unreadable or malformed
- NetworkError: Release listing failed (a failed download of a single
  asset is also a NetworkError, but the driver treats it per release)

Per-release (logged, release skipped, run continues):

- AssetNotFoundError: No release asset for the host platform
- ArchiveError: Archive is corrupt or in an unsupported format
- ExecutableNotFoundError: Archive has no matching executable entry
- ProbeError: Neither probe strategy could recover version facts
- VersionParseError: Self-reported version text did not match

All exceptions inherit from HistverError.

Example:
    Distinguishing a corrupt archive from a missing entry:
        ```python
        from histver.archive import ArchiveFormat, open_executable
        from histver.exceptions import ArchiveError, ExecutableNotFoundError

        try:
            with open_executable(data, ArchiveFormat.ZIP, "syncthing") as fp:
                ...
        except ArchiveError as e:
            print(f"Corrupt archive: {e}")
        except ExecutableNotFoundError as e:
            print(f"Not in archive: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "HistverError",
    "ConfigError",
    "NetworkError",
    "TableError",
    "VersionParseError",
    "ExtractionError",
    "ArchiveError",
    "ExecutableNotFoundError",
    "AssetNotFoundError",
    "ProbeError",
]


class HistverError(Exception):
    """Base exception for all histver errors."""

    pass


class ConfigError(HistverError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing (syntax errors, non-mapping documents)
    - Unknown configuration keys
    - Invalid values (malformed repo, empty product name, bad timeouts)
    - An explicitly requested config file that does not exist
    """

    pass


class NetworkError(HistverError):
    """Raised for network/download-related errors.

    This exception is raised when there are problems with:

    - GitHub API calls (not found, rate limited, malformed payload)
    - Asset downloads (HTTP errors, connection failures, timeouts)
    """

    pass


class TableError(HistverError):
    """Raised when the versions table cannot be read or written.

    A malformed row (fewer than three fields) or a CSV syntax error in an
    existing table is fatal: the table would otherwise be rewritten with
    rows silently dropped.
    """

    pass


class VersionParseError(HistverError):
    """Raised when self-reported version text does not match the banner shape."""

    pass


class ExtractionError(HistverError):
    """Base class for archive extraction failures."""

    pass


class ArchiveError(ExtractionError):
    """Raised when an archive is corrupt or its format is not supported."""

    pass


class ExecutableNotFoundError(ExtractionError):
    """Raised when a readable archive contains no matching executable entry."""

    pass


class AssetNotFoundError(HistverError):
    """Raised when a release has no asset for the host platform."""

    pass


class ProbeError(HistverError):
    """Raised when an executable probe strategy fails.

    When every strategy fails, the prober raises a single ProbeError whose
    message lists each strategy's failure.
    """

    pass
