"""
Pytest configuration and shared fixtures for histver tests.

This module provides reusable fixtures and test utilities used across
the test suite: in-memory archive builders, fake executables and GitHub
API payloads.
"""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Any
import zipfile

import pytest

from histver.logging import SilentLogger, set_global_logger

BANNER = (
    'syncthing v1.23.1-rc.1 "Fermium Flea" (go1.19.5 darwin-arm64) '
    "teamcity@build.syncthing.net 2023-01-12 03:30:17 UTC [stnoupgrade]"
)


@pytest.fixture(autouse=True)
def silent_logger():
    """Reset the global logger so tests never inherit CLI verbosity."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def banner() -> str:
    """Provide a realistic ``syncthing --version`` banner."""
    return BANNER


@pytest.fixture
def make_zip():
    """
    Factory fixture for building zip archives in memory.

    Usage:
        data = make_zip({"syncthing": b"...", "bin/syncthing": b"..."})
    """

    def _create(entries: dict[str, bytes]) -> bytes:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            for name, content in entries.items():
                zf.writestr(name, content)
        return buf.getvalue()

    return _create


@pytest.fixture
def make_tar_gz():
    """
    Factory fixture for building tar.gz archives in memory.

    Names ending in "/" are added as directories.
    """

    def _create(entries: dict[str, bytes]) -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w:gz") as tf:
            for name, content in entries.items():
                info = tarfile.TarInfo(name.rstrip("/"))
                if name.endswith("/"):
                    info.type = tarfile.DIRTYPE
                    info.mode = 0o755
                    tf.addfile(info)
                    continue
                info.size = len(content)
                info.mode = 0o755
                tf.addfile(info, io.BytesIO(content))
        return buf.getvalue()

    return _create


@pytest.fixture
def unsupported_method_zip() -> bytes:
    """Zip whose root ``syncthing`` entry claims compression method 9 (deflate64)."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("syncthing", b"binary")
        # Written to the central directory on close
        zf.infolist()[0].compress_type = 9
    return buf.getvalue()


@pytest.fixture
def version_script(banner: str) -> bytes:
    """Shell script that prints the banner when run with --version."""
    return (
        "#!/bin/sh\n"
        'if [ "$1" = "--version" ]; then\n'
        f"  echo '{banner}'\n"
        "  exit 0\n"
        "fi\n"
        "exit 2\n"
    ).encode()


@pytest.fixture
def failing_script() -> bytes:
    """Shell script that refuses to run."""
    return b"#!/bin/sh\necho 'bad CPU type in executable' >&2\nexit 126\n"


@pytest.fixture
def fake_go(tmp_path: Path) -> Path:
    """
    Fake ``go`` tool whose ``version -m <file>`` prints build info.

    Mirrors the real output shape:
        /path/to/binary: go1.19.5
        \tpath\tgithub.com/syncthing/syncthing/cmd/syncthing
    """
    script = tmp_path / "go"
    script.write_text(
        "#!/bin/sh\n"
        'echo "$3: go1.19.5"\n'
        'printf "\\tpath\\tgithub.com/syncthing/syncthing/cmd/syncthing\\n"\n',
        encoding="utf-8",
    )
    script.chmod(0o755)
    return script


@pytest.fixture
def release_payload():
    """
    Factory fixture for GitHub API release objects.

    Usage:
        payload = release_payload("v1.23.1", "2023-01-12T03:30:17Z", ["a.tar.gz"])
    """

    def _create(
        tag: str,
        created_at: str,
        assets: list[str] | None = None,
        *,
        published_at: str | None = None,
        prerelease: bool = False,
        draft: bool = False,
    ) -> dict[str, Any]:
        return {
            "tag_name": tag,
            "created_at": created_at,
            "published_at": published_at or created_at,
            "prerelease": prerelease,
            "draft": draft,
            "assets": [
                {
                    "name": name,
                    "browser_download_url": (
                        f"https://github.com/syncthing/syncthing/releases/download/"
                        f"{tag}/{name}"
                    ),
                }
                for name in (assets or [])
            ],
        }

    return _create
