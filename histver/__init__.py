"""
histver - release history tables

Maintains a CSV table of a project's published releases: the release tag,
the language runtime that built it, and the release date. Each release's
platform archive is downloaded, the executable extracted, and its version
facts recovered by running it (``--version``) or, failing that, by reading
its embedded build info (``go version -m``).

Quick Start
-----------
Update ./versions.csv for syncthing/syncthing:

    $ histver

For full CLI documentation:

    $ histver --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Synchronization driver.
resolver : module
    Per-release asset selection, download and probing.
config : package
    Built-in defaults merged with an optional YAML file.
discovery : package
    GitHub release listing.
archive : package
    Executable extraction from zip and tar.gz archives.
probe : package
    Self-report and build-info probe strategies.
versioning : package
    VersionRecord and version banner parsing.
table : package
    CSV table persistence and formatting.
io : package
    HTTP download.

Public API
----------
    from histver.core import sync_versions
    from histver.config import load_config
    from histver.versioning import VersionRecord, parse_self_report
    from histver.table import VersionTable
"""

__version__ = "0.1.0"
__description__ = "Release history tables: version, build runtime and date"

# Re-export commonly used functions for convenience
from histver.config import load_config
from histver.core import sync_versions
from histver.table import VersionTable
from histver.versioning import VersionRecord, parse_self_report

__all__ = [
    "__version__",
    "__description__",
    "load_config",
    "sync_versions",
    "VersionTable",
    "VersionRecord",
    "parse_self_report",
]
