"""
Tests for histver.resolver module.

Tests per-release resolution including:
- Host platform naming and asset prefixes
- Asset selection
- Seed record construction
- Download -> extract -> probe -> merge, end to end
"""

from __future__ import annotations

import sys
from unittest.mock import patch

import pytest
import requests_mock

from histver.config import Settings
from histver.discovery import release_from_api
from histver.exceptions import AssetNotFoundError, ExecutableNotFoundError, ProbeError
from histver.resolver import (
    executable_name,
    host_arch_name,
    host_os_name,
    platform_asset_prefix,
    resolve_release,
    seed_record,
    select_asset,
)
from histver.versioning import VersionRecord

ASSETS = [
    "sha256sum.txt.asc",
    "syncthing-linux-arm-v1.23.1.tar.gz",
    "syncthing-linux-arm64-v1.23.1.tar.gz",
    "syncthing-linux-amd64-v1.23.1.tar.gz",
    "syncthing-macos-arm64-v1.23.1.zip",
    "syncthing-windows-amd64-v1.23.1.zip",
    "syncthing-source-v1.23.1.tar.gz",
]


class TestPlatformNames:
    """Tests for host platform translation."""

    @pytest.mark.parametrize(
        "system, expected",
        [
            ("linux", "linux"),
            ("darwin", "macos"),
            ("win32", "windows"),
            ("freebsd14", "freebsd"),
        ],
    )
    def test_os_names(self, system, expected):
        """Test OS name mapping."""
        assert host_os_name(system) == expected

    @pytest.mark.parametrize(
        "machine, expected",
        [
            ("x86_64", "amd64"),
            ("AMD64", "amd64"),
            ("aarch64", "arm64"),
            ("arm64", "arm64"),
            ("i686", "386"),
            ("armv7l", "arm"),
            ("riscv64", "riscv64"),
        ],
    )
    def test_arch_names(self, machine, expected):
        """Test architecture name mapping, unknown values passed through."""
        assert host_arch_name(machine) == expected

    def test_prefix(self):
        """Test the asset prefix shape."""
        assert (
            platform_asset_prefix("syncthing", "darwin", "arm64")
            == "syncthing-macos-arm64-"
        )

    def test_executable_name(self):
        """Test the .exe suffix on Windows only."""
        assert executable_name("syncthing", "win32") == "syncthing.exe"
        assert executable_name("syncthing", "linux") == "syncthing"


class TestSelectAsset:
    """Tests for select_asset."""

    def test_prefix_match(self, release_payload):
        """Test the host asset is picked."""
        release = release_from_api(release_payload("v1.23.1", "2023-01-12T00:00:00Z", ASSETS))
        asset = select_asset(release, "syncthing-macos-arm64-")
        assert asset.name == "syncthing-macos-arm64-v1.23.1.zip"

    def test_arm_does_not_match_arm64(self, release_payload):
        """Test that the trailing dash separates arm from arm64."""
        assets = ["syncthing-linux-arm64-v1.23.1.tar.gz", "syncthing-linux-arm-v1.23.1.tar.gz"]
        release = release_from_api(release_payload("v1.23.1", "2023-01-12T00:00:00Z", assets))

        asset = select_asset(release, "syncthing-linux-arm-")

        assert asset.name == "syncthing-linux-arm-v1.23.1.tar.gz"

    def test_unsupported_formats_skipped(self, release_payload):
        """Test that a non-archive asset with the prefix is passed over."""
        assets = [
            "syncthing-linux-amd64-v1.23.1.tar.gz.sig",
            "syncthing-linux-amd64-v1.23.1.tar.gz",
        ]
        release = release_from_api(release_payload("v1.23.1", "2023-01-12T00:00:00Z", assets))

        asset = select_asset(release, "syncthing-linux-amd64-")

        assert asset.name == "syncthing-linux-amd64-v1.23.1.tar.gz"

    def test_no_match_raises(self, release_payload):
        """Test releases without a build for this host."""
        release = release_from_api(release_payload("v0.9.0", "2014-01-01T00:00:00Z", ASSETS))
        with pytest.raises(AssetNotFoundError, match="syncthing-solaris-sparc64-"):
            select_asset(release, "syncthing-solaris-sparc64-")


class TestSeedRecord:
    """Tests for seed_record."""

    def test_tag_and_creation_date(self, release_payload):
        """Test version and ISO date come from release metadata."""
        release = release_from_api(
            release_payload(
                "v1.23.1",
                "2023-01-12T23:59:59Z",
                published_at="2023-01-13T10:00:00Z",
            )
        )

        assert seed_record(release) == VersionRecord(
            version="v1.23.1", date="2023-01-12"
        )


@pytest.mark.skipif(sys.platform == "win32", reason="requires POSIX shell scripts")
class TestResolveRelease:
    """Tests for resolve_release."""

    def _release(self, release_payload, created_at="2023-01-14T03:30:17Z"):
        return release_from_api(release_payload("v1.23.1", created_at, ASSETS))

    def test_end_to_end(self, release_payload, make_tar_gz, version_script):
        """Test download, extraction and self-report probing together."""
        release = self._release(release_payload)
        archive = make_tar_gz(
            {
                "syncthing-linux-amd64-v1.23.1/": b"",
                "syncthing-linux-amd64-v1.23.1/syncthing": version_script,
            }
        )
        url = release.assets[3].download_url

        with requests_mock.Mocker() as m:
            m.get(url, content=archive)
            record = resolve_release(
                release, Settings(), system="linux", machine="x86_64"
            )

        # The banner says 2023-01-12; release metadata wins.
        assert record == VersionRecord("v1.23.1", "go1.19.5", "2023-01-14")

    def test_runtime_only_probe_fills_runtime(self, release_payload, make_zip):
        """Test a build-info style result merged into the seed."""
        release = self._release(release_payload)
        archive = make_zip({"syncthing-macos-arm64-v1.23.1/syncthing": b"\xcf\xfa"})

        with requests_mock.Mocker() as m:
            m.get(release.assets[4].download_url, content=archive)
            with patch(
                "histver.resolver.probe", return_value=VersionRecord(runtime="go1.19.5")
            ):
                record = resolve_release(
                    release, Settings(), system="darwin", machine="arm64"
                )

        assert record == VersionRecord("v1.23.1", "go1.19.5", "2023-01-14")

    def test_seed_wins_over_conflicting_probe(self, release_payload, make_zip):
        """Test that probe output never overwrites release metadata."""
        release = self._release(release_payload)
        archive = make_zip({"syncthing": b"\xcf\xfa"})

        with requests_mock.Mocker() as m:
            m.get(release.assets[4].download_url, content=archive)
            with patch(
                "histver.resolver.probe",
                return_value=VersionRecord("v9.9.9", "go1.19.5", "1999-01-01"),
            ):
                record = resolve_release(
                    release, Settings(), system="darwin", machine="arm64"
                )

        assert record.version == "v1.23.1"
        assert record.date == "2023-01-14"
        assert record.runtime == "go1.19.5"

    def test_probe_settings_passed(self, release_payload, make_zip):
        """Test that configured probe options reach the prober."""
        release = self._release(release_payload)
        archive = make_zip({"syncthing": b"\xcf\xfa"})
        settings = Settings(runtime_prefix="go", probe_timeout=5)

        with requests_mock.Mocker() as m:
            m.get(release.assets[4].download_url, content=archive)
            with patch(
                "histver.resolver.probe", return_value=VersionRecord()
            ) as mock_probe:
                resolve_release(release, settings, system="darwin", machine="arm64")

        probe_settings = mock_probe.call_args.args[1]
        assert probe_settings.timeout == 5
        assert probe_settings.product == "syncthing"

    def test_missing_executable_raises(self, release_payload, make_zip):
        """Test an archive without the product binary."""
        release = self._release(release_payload)
        archive = make_zip({"README.txt": b"readme"})

        with requests_mock.Mocker() as m:
            m.get(release.assets[4].download_url, content=archive)
            with pytest.raises(ExecutableNotFoundError):
                resolve_release(release, Settings(), system="darwin", machine="arm64")

    def test_probe_failure_propagates(self, release_payload, make_zip):
        """Test that probe errors reach the caller."""
        release = self._release(release_payload)
        archive = make_zip({"syncthing": b"\xcf\xfa"})

        with requests_mock.Mocker() as m:
            m.get(release.assets[4].download_url, content=archive)
            with patch("histver.resolver.probe", side_effect=ProbeError("nope")):
                with pytest.raises(ProbeError):
                    resolve_release(
                        release, Settings(), system="darwin", machine="arm64"
                    )

    def test_no_asset_raises_before_download(self, release_payload):
        """Test that no request is made without a matching asset."""
        release = self._release(release_payload)

        with requests_mock.Mocker() as m:
            with pytest.raises(AssetNotFoundError):
                resolve_release(release, Settings(), system="plan9", machine="mips")
            assert m.call_count == 0
