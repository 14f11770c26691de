"""Versions table storage for histver.

The table is a CSV file with columns Version, Runtime and Date. It is
loaded once per run, appended to, and rewritten in full.

Public API:

- VersionTable: File-bound table used by the sync driver
- read_table / write_table: Parse and render from open text files
- load_table / save_table: Path-based helpers (save is atomic)
- format_rows: Sorting and minor-series emphasis pass

"""

from .store import (
    TABLE_HEADER,
    VersionTable,
    format_rows,
    load_table,
    read_table,
    save_table,
    write_table,
)

__all__ = [
    "TABLE_HEADER",
    "VersionTable",
    "format_rows",
    "load_table",
    "read_table",
    "save_table",
    "write_table",
]
