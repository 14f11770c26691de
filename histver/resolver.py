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

"""Per-release version resolution for histver.

Turns one ReleaseCandidate into one VersionRecord:

1. Seed a record from release metadata (tag and creation date)
2. Pick the asset built for this host (``<product>-<os>-<arch>-...``)
3. Download it, open the executable inside the archive, probe it
4. Fill the seed's empty fields from the probe result

Release metadata always wins over probe output: the probe can only fill in
what the seed left empty (in practice, the runtime).

Platform Naming:

Asset names use Go's GOOS/GOARCH vocabulary, with one marketing remap:
darwin assets are published as "macos". Host values from sys.platform and
platform.machine() are translated accordingly:

- OS: linux, darwin -> macos, win32 -> windows, freebsd, openbsd, netbsd
- Arch: x86_64/amd64 -> amd64, aarch64/arm64 -> arm64, i386/i686/x86 -> 386,
  armv6l/armv7l -> arm

Example:
    Resolve a single release:

        from histver.config import load_config
        from histver.discovery import list_releases
        from histver.resolver import resolve_release

        settings = load_config()
        release = list_releases(settings.repo)[0]
        record = resolve_release(release, settings)

"""

from __future__ import annotations

import platform
import sys

from histver.archive import detect_format, is_supported_archive, open_executable
from histver.config import Settings
from histver.discovery import ReleaseAsset, ReleaseCandidate
from histver.exceptions import AssetNotFoundError
from histver.io import download_bytes
from histver.logging import get_global_logger
from histver.probe import probe
from histver.versioning import VersionRecord

_OS_NAMES = {
    "linux": "linux",
    "darwin": "macos",
    "win32": "windows",
    "cygwin": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
}

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}


def host_os_name(system: str | None = None) -> str:
    """Asset OS name for a sys.platform value (default: this host)."""
    system = system if system is not None else sys.platform
    for prefix, name in _OS_NAMES.items():
        if system.startswith(prefix):
            return name
    return system


def host_arch_name(machine: str | None = None) -> str:
    """Asset architecture name for a platform.machine() value (default: this host)."""
    machine = (machine if machine is not None else platform.machine()).lower()
    return _ARCH_NAMES.get(machine, machine)


def platform_asset_prefix(
    product: str, system: str | None = None, machine: str | None = None
) -> str:
    """Asset name prefix for a platform, e.g. ``syncthing-macos-arm64-``.

    The trailing dash keeps "arm" from matching "arm64" assets.
    """
    return f"{product}-{host_os_name(system)}-{host_arch_name(machine)}-"


def executable_name(product: str, system: str | None = None) -> str:
    """Executable base name inside the archive (``.exe`` on Windows)."""
    if host_os_name(system) == "windows":
        return f"{product}.exe"
    return product


def seed_record(release: ReleaseCandidate) -> VersionRecord:
    """Record holding what release metadata alone tells us."""
    return VersionRecord(
        version=release.tag_name,
        date=release.created_at.date().isoformat(),
    )


def select_asset(release: ReleaseCandidate, prefix: str) -> ReleaseAsset:
    """Pick the first supported archive whose name starts with prefix.

    Raises:
        AssetNotFoundError: If no asset matches.
    """
    for asset in release.assets:
        if asset.name.startswith(prefix) and is_supported_archive(asset.name):
            return asset
    raise AssetNotFoundError(
        f"no asset found for prefix {prefix!r} in release {release.tag_name}"
    )


def resolve_release(
    release: ReleaseCandidate,
    settings: Settings,
    *,
    system: str | None = None,
    machine: str | None = None,
) -> VersionRecord:
    """Build the table row for one release.

    Args:
        release: Release to resolve.
        settings: Effective configuration.
        system: Override sys.platform (for selecting another platform's
            asset; the self-report probe will then usually fail and the
            build-info probe takes over).
        machine: Override platform.machine().

    Returns:
        The seed record with empty fields filled from the probe.

    Raises:
        AssetNotFoundError: If no asset matches this platform.
        NetworkError: If the download fails.
        ExtractionError: If the archive is corrupt or lacks the executable.
        ProbeError: If no probe strategy succeeds.

    """
    logger = get_global_logger()
    seed = seed_record(release)

    prefix = platform_asset_prefix(settings.product, system, machine)
    asset = select_asset(release, prefix)
    logger.verbose("RESOLVE", f"Downloading {asset.name}")
    data = download_bytes(asset.download_url, timeout=settings.download_timeout)

    fmt = detect_format(asset.name)
    name = executable_name(settings.product, system)
    with open_executable(data, fmt, name) as stream:
        probed = probe(stream, settings.probe_settings())

    record = seed.merge(probed)
    if not record.is_complete:
        logger.verbose("RESOLVE", f"Partial record for {release.tag_name}: {record}")
    return record
