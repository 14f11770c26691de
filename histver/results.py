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

"""Public API return types for histver.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from histver.versioning import VersionRecord


@dataclass(frozen=True)
class ReleaseFailure:
    """A release that could not be resolved during a run.

    Attributes:
        tag_name: Release tag.
        error: Human-readable failure reason.
    """

    tag_name: str
    error: str


@dataclass(frozen=True)
class SyncResult:
    """Result from synchronizing the versions table.

    Attributes:
        table_path: Path of the rewritten table.
        added: Records appended during this run.
        skipped: Tags already present in the table.
        failed: Releases that failed and will be retried next run.
        total_rows: Rows in the table after the run.
    """

    table_path: Path
    added: tuple[VersionRecord, ...]
    skipped: tuple[str, ...]
    failed: tuple[ReleaseFailure, ...]
    total_rows: int
