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

"""Versions table persistence for histver.

The table is a small CSV file meant to be committed and rendered as
Markdown-ish documentation:

    Version,Runtime,Date
    v1.23.1,go1.19.5,2023-01-12
    **v1.23.0**,go1.19.4,2023-01-03
    v1.22.2,**go1.19.4**,2022-12-06

Key Features:

- Rows are sorted by date (newest first), then version on ties
- The first release of each minor series is wrapped in ``**`` markers, for
  the version and runtime columns independently
- Markers are stripped on load and recomputed on save, so the store never
  tracks emphasis state
- Saves are atomic: the table is written to ``<name>.part`` and renamed

The store does not de-duplicate rows; callers check versions() before
adding.

Example:
    High-level API with VersionTable:
        ```python
        from pathlib import Path
        from histver.table import VersionTable
        from histver.versioning import VersionRecord

        table = VersionTable(Path("versions.csv"))
        table.load()
        if "v1.23.1" not in table:
            table.add(VersionRecord("v1.23.1", "go1.19.5", "2023-01-12"))
        table.save()
        ```

    Low-level API with file objects:
        ```python
        import io
        from histver.table import read_table, write_table

        rows = read_table(io.StringIO(text))
        out = io.StringIO()
        write_table(out, rows)
        ```

"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
import csv
from pathlib import Path
from typing import IO

from histver.exceptions import TableError
from histver.logging import get_global_logger
from histver.versioning import (
    VersionRecord,
    minor_identifier,
    runtime_minor_identifier,
)
from histver.versioning.record import emphasize

TABLE_HEADER = ["Version", "Runtime", "Date"]


def read_table(fp: IO[str]) -> list[VersionRecord]:
    """Parse versions table rows from an open text file.

    Args:
        fp: Text stream opened with ``newline=""``.

    Returns:
        Records in file order, emphasis markers removed.

    Raises:
        TableError: On CSV syntax errors or rows with fewer than three fields.

    """
    records: list[VersionRecord] = []
    reader = csv.reader(fp)
    try:
        for fields in reader:
            if not fields:
                continue
            if fields[0] == TABLE_HEADER[0]:
                continue
            try:
                records.append(VersionRecord.from_fields(fields))
            except TableError as err:
                raise TableError(f"line {reader.line_num}: {err}") from err
    except csv.Error as err:
        raise TableError(f"line {reader.line_num}: {err}") from err
    return records


def _sort_key(record: VersionRecord) -> tuple[str, str]:
    return (record.date, record.version)


def _emphasize_series(
    fields: list[str], minor: Callable[[str], str]
) -> list[str]:
    """Emphasize the oldest field of each minor series.

    ``fields`` is ordered newest first; the scan runs oldest first.
    """
    out = list(fields)
    previous = ""
    for i in range(len(out) - 1, -1, -1):
        value = out[i]
        if not value:
            continue
        current = minor(value)
        if current != previous:
            previous = current
            out[i] = emphasize(value)
    return out


def format_rows(records: Iterable[VersionRecord]) -> list[list[str]]:
    """Sort records and apply minor-series emphasis.

    Args:
        records: Records in any order.

    Returns:
        Rows of three strings, newest first, ready for the CSV writer.

    Example:
        Emphasis marks the start of each minor series:
            ```python
            rows = format_rows([
                VersionRecord("v1.2.0", "go1.15.6", "2021-01-01"),
                VersionRecord("v1.2.1", "go1.15.7", "2021-02-01"),
                VersionRecord("v1.3.0", "go1.15.8", "2021-03-01"),
            ])
            # [["**v1.3.0**", "go1.15.8", "2021-03-01"],
            #  ["v1.2.1", "go1.15.7", "2021-02-01"],
            #  ["**v1.2.0**", "**go1.15.6**", "2021-01-01"]]
            ```

    """
    ordered = sorted(records, key=_sort_key, reverse=True)
    versions = _emphasize_series([r.version for r in ordered], minor_identifier)
    runtimes = _emphasize_series(
        [r.runtime for r in ordered], runtime_minor_identifier
    )
    return [
        [version, runtime, record.date]
        for version, runtime, record in zip(versions, runtimes, ordered)
    ]


def write_table(fp: IO[str], records: Iterable[VersionRecord]) -> None:
    """Write the header and formatted rows to an open text file."""
    writer = csv.writer(fp, lineterminator="\n")
    writer.writerow(TABLE_HEADER)
    writer.writerows(format_rows(records))


def load_table(table_file: Path) -> list[VersionRecord]:
    """Load records from a table file.

    Raises:
        FileNotFoundError: If the table file doesn't exist.
        TableError: If the file is malformed.
        OSError: If the file cannot be read.
    """
    with open(table_file, encoding="utf-8", newline="") as f:
        return read_table(f)


def save_table(records: Iterable[VersionRecord], table_file: Path) -> None:
    """Rewrite a table file atomically.

    Writes to ``<name>.part`` next to the target, then renames it over the
    target. Parent directories are created as needed.

    Raises:
        OSError: If the file cannot be written.
    """
    table_file.parent.mkdir(parents=True, exist_ok=True)
    tmp = table_file.with_name(table_file.name + ".part")
    try:
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            write_table(f, records)
        tmp.replace(table_file)
    finally:
        tmp.unlink(missing_ok=True)


class VersionTable:
    """In-memory versions table bound to a file.

    Attributes:
        table_file: Path to the CSV file.
        records: Records in load/insertion order.

    """

    def __init__(self, table_file: Path):
        self.table_file = table_file
        self.records: list[VersionRecord] = []

    def load(self) -> list[VersionRecord]:
        """Load records from the table file.

        A missing file yields an empty table (first run).

        Raises:
            TableError: If the existing file is malformed or unreadable.
        """
        logger = get_global_logger()
        try:
            self.records = load_table(self.table_file)
        except FileNotFoundError:
            logger.verbose("TABLE", f"No table at {self.table_file}, starting empty")
            self.records = []
        except TableError as err:
            raise TableError(f"Malformed table {self.table_file}: {err}") from err
        except (OSError, UnicodeDecodeError) as err:
            raise TableError(f"Cannot read table {self.table_file}: {err}") from err
        else:
            logger.verbose(
                "TABLE", f"Loaded {len(self.records)} row(s) from {self.table_file}"
            )
        return self.records

    def save(self) -> None:
        """Rewrite the table file with all records.

        Raises:
            TableError: If the file cannot be written.
        """
        try:
            save_table(self.records, self.table_file)
        except OSError as err:
            raise TableError(f"Cannot write table {self.table_file}: {err}") from err
        get_global_logger().verbose(
            "TABLE", f"Wrote {len(self.records)} row(s) to {self.table_file}"
        )

    def versions(self) -> set[str]:
        """Version keys already present in the table."""
        return {r.version for r in self.records}

    def add(self, record: VersionRecord) -> None:
        self.records.append(record)

    def __contains__(self, version: object) -> bool:
        return any(r.version == version for r in self.records)

    def __iter__(self) -> Iterator[VersionRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)
