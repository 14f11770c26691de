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

"""Version record DTO and minor-version helpers for histver.

This module is format-agnostic: it does NOT download, extract or execute
anything. It only holds the three facts recorded per release and the
string helpers used when formatting the versions table.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from histver.exceptions import TableError

# Marker wrapped around emphasized fields in the persisted table
EMPHASIS = "**"


@dataclass(frozen=True)
class VersionRecord:
    """One row of the versions table.

    Empty strings mean "unknown". Records produced by different sources
    (release metadata, self-report probe, build-info probe) are combined
    with merge().

    Attributes:
        version: Release tag (e.g., "v1.23.1").
        runtime: Runtime that built the binary (e.g., "go1.19.5").
        date: Release date as YYYY-MM-DD.

    """

    version: str = ""
    runtime: str = ""
    date: str = ""

    @property
    def is_complete(self) -> bool:
        """True when all three fields are populated."""
        return bool(self.version and self.runtime and self.date)

    def merge(self, other: VersionRecord) -> VersionRecord:
        """Fill empty fields of this record from other.

        Populated fields are never overwritten; there is no conflict
        detection.

        Args:
            other: Record supplying values for fields empty in self.

        Returns:
            A new merged record.

        Example:
            Fill the runtime from a build-info probe:
                ```python
                seed = VersionRecord(version="v1.2.0", date="2021-01-01")
                seed.merge(VersionRecord(runtime="go1.15.6"))
                # VersionRecord('v1.2.0', 'go1.15.6', '2021-01-01')
                ```

        """
        return VersionRecord(
            version=self.version or other.version,
            runtime=self.runtime or other.runtime,
            date=self.date or other.date,
        )

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> VersionRecord:
        """Build a record from a table row, stripping emphasis markers.

        Raises:
            TableError: If fewer than three fields are present.
        """
        if len(fields) < 3:
            raise TableError(f"not enough fields in row: {list(fields)!r}")
        version, runtime, date = (f.strip("*") for f in fields[:3])
        return cls(version=version, runtime=runtime, date=date)

    def as_row(self) -> list[str]:
        return [self.version, self.runtime, self.date]


def minor_identifier(value: str) -> str:
    """Strip the final dot-delimited component ("v1.23.1" -> "v1.23").

    Values without a dot are returned unchanged.
    """
    head, sep, _ = value.rpartition(".")
    return head if sep else value


def runtime_minor_identifier(runtime: str) -> str:
    """Minor identifier for a runtime version.

    Legacy two-component runtimes ("go1.2") already are minor identifiers;
    modern ones ("go1.25.0") have their point release stripped.
    """
    if runtime.count(".") == 1:
        return runtime
    return minor_identifier(runtime)


def emphasize(value: str) -> str:
    return f"{EMPHASIS}{value}{EMPHASIS}"
