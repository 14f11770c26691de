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

"""Version records and version-text parsing for histver.

Modules:

record : module
    VersionRecord DTO, field-wise merge and minor-version helpers.
self_report : module
    Parser for the banner printed by ``<binary> --version``.

Public API:

VersionRecord : class
    One row of the versions table (version, runtime, date).
parse_self_report : function
    Turn a version banner into a VersionRecord.
minor_identifier : function
    Strip the final point component of a version string.
runtime_minor_identifier : function
    Minor identifier for runtime versions (legacy "go1.2" kept as-is).
"""

from .record import (
    VersionRecord,
    minor_identifier,
    runtime_minor_identifier,
)
from .self_report import parse_self_report

__all__ = [
    "VersionRecord",
    "parse_self_report",
    "minor_identifier",
    "runtime_minor_identifier",
]
