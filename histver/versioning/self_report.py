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

"""Parsing of self-reported version banners.

Binaries built by the release pipeline print a one-line banner when run
with ``--version``:

    syncthing v1.23.1-rc.1 "Fermium Flea" (go1.19.5 darwin-arm64) teamcity@build.syncthing.net 2023-01-12 03:30:17 UTC [stnoupgrade]

Three facts are recovered from it, in left-to-right order: the semantic
version (any ``-rc.N`` style suffix is left out), the runtime identifier and
the build date. The search is not anchored, so leading or trailing noise
(log lines, warnings) is tolerated.

Example:
    Parse a banner:

        from histver.versioning import parse_self_report

        record = parse_self_report(banner)
        print(record.version, record.runtime, record.date)
        # v1.23.1 go1.19.5 2023-01-12

Note:
    This is a pure text-to-record function; no process is started here.
    See histver.probe for the code that runs the binary.
"""

from __future__ import annotations

from functools import lru_cache
import re

from histver.exceptions import VersionParseError

from .record import VersionRecord


@lru_cache(maxsize=8)
def _banner_pattern(runtime_prefix: str) -> re.Pattern[str]:
    return re.compile(
        r"\b(v\d+\.\d+\.\d+)"
        r".*?"
        rf"\b({re.escape(runtime_prefix)}\d+\.\d+(?:\.\d+)?)"
        r".*?"
        r"\b(\d{4}-\d{2}-\d{2})\b",
        re.DOTALL,
    )


def parse_self_report(text: str, *, runtime_prefix: str = "go") -> VersionRecord:
    """Extract version, runtime and date from a version banner.

    Args:
        text: Raw output of the binary's version command.
        runtime_prefix: Name part of the runtime identifier (e.g., "go"
            for "go1.19.5"). Default is "go".

    Returns:
        A complete VersionRecord.

    Raises:
        VersionParseError: If the version, runtime or date cannot be found
            in that order.

    """
    match = _banner_pattern(runtime_prefix).search(text)
    if not match:
        raise VersionParseError(
            f"no match for version banner in output: {text.strip()[:200]!r}"
        )
    version, runtime, date = match.groups()
    return VersionRecord(version=version, runtime=runtime, date=date)
