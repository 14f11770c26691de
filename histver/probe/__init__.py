"""Executable probing for histver.

Public API:

probe : function
    Recover version facts from an executable stream.
ProbeSettings : class
    Options shared by the probe strategies.
version_from_self_report : function
    Strategy: run ``<binary> --version`` and parse the banner.
version_from_build_info : function
    Strategy: read the runtime from ``go version -m`` output.
"""

from .prober import (
    DEFAULT_STRATEGIES,
    ProbeSettings,
    ProbeStrategy,
    materialized_executable,
    probe,
    version_from_build_info,
    version_from_self_report,
)

__all__ = [
    "DEFAULT_STRATEGIES",
    "ProbeSettings",
    "ProbeStrategy",
    "materialized_executable",
    "probe",
    "version_from_build_info",
    "version_from_self_report",
]
