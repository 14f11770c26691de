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

"""Executable extraction from release archives.

Release assets come in two formats, picked by file extension:

- ZIP (.zip): Windows and macOS builds
- TAR_GZ (.tar.gz, .tgz): Linux and BSD builds

Both are handled entirely in memory: the caller passes the downloaded
bytes and gets back a readable binary stream for the executable entry.
Nothing is written to disk here.

Entry Selection:

- ZIP: The entry's base name must equal the executable name and it must
  sit at the archive root or directly inside one top-level directory
  (release archives wrap everything in ``syncthing-<os>-<arch>-<tag>/``).
  Deeper entries are never used. When several entries qualify, the one
  closest to the root wins, then archive order.
- TAR_GZ: The archive is read as a stream (mode ``r|gz``) and the first
  regular file whose base name matches is used. The stream is single-pass:
  once yielded, the entry cannot be re-read and the archive cannot be
  re-scanned.

Error Handling:

- ArchiveError: Corrupt archive, bad headers (including a bad tar header
  after the first member), bad compressed data, an unsupported compression
  method or encrypted zip entry, or an unsupported extension. Also raised
  for decompression errors that happen while the caller is reading the
  yielded stream.
- ExecutableNotFoundError: The archive is readable but holds no matching
  entry.

Example:
    Read the executable out of a downloaded asset:

        from histver.archive import detect_format, open_executable

        fmt = detect_format("syncthing-linux-amd64-v1.23.1.tar.gz")
        with open_executable(data, fmt, "syncthing") as fp:
            payload = fp.read()

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
import gzip
import io
import lzma
import posixpath
import tarfile
from typing import IO
import zipfile
import zlib

from histver.exceptions import ArchiveError, ExecutableNotFoundError
from histver.logging import get_global_logger


class ArchiveFormat(Enum):
    """Supported release archive formats."""

    ZIP = "zip"
    TAR_GZ = "tar.gz"


_EXTENSIONS: tuple[tuple[str, ArchiveFormat], ...] = (
    (".zip", ArchiveFormat.ZIP),
    (".tar.gz", ArchiveFormat.TAR_GZ),
    (".tgz", ArchiveFormat.TAR_GZ),
)

# Errors raised by zipfile/tarfile/zlib/lzma on malformed data. zipfile raises
# NotImplementedError for unsupported compression methods (e.g. deflate64)
# and RuntimeError for encrypted entries.
_CORRUPT_ERRORS = (
    zipfile.BadZipFile,
    tarfile.TarError,
    zlib.error,
    lzma.LZMAError,
    EOFError,
    NotImplementedError,
    RuntimeError,
)


def detect_format(asset_name: str) -> ArchiveFormat:
    """Pick the archive format from an asset file name.

    Args:
        asset_name: Asset file name (e.g., "syncthing-macos-arm64-v1.23.1.zip").

    Returns:
        The matching ArchiveFormat.

    Raises:
        ArchiveError: If the extension is not a supported archive type.

    """
    lowered = asset_name.lower()
    for suffix, fmt in _EXTENSIONS:
        if lowered.endswith(suffix):
            return fmt
    raise ArchiveError(f"Unsupported archive format: {asset_name!r}")


def is_supported_archive(asset_name: str) -> bool:
    try:
        detect_format(asset_name)
    except ArchiveError:
        return False
    return True


@contextmanager
def open_executable(
    data: bytes, fmt: ArchiveFormat, executable_name: str
) -> Iterator[IO[bytes]]:
    """Open the executable entry of an in-memory archive.

    The archive stays open for the duration of the ``with`` block; read
    the yielded stream inside it.

    Args:
        data: Complete archive bytes.
        fmt: Archive format (see detect_format()).
        executable_name: Base name of the entry to find (e.g., "syncthing").

    Yields:
        A readable binary stream positioned at the start of the entry.

    Raises:
        ArchiveError: If the archive is corrupt.
        ExecutableNotFoundError: If no matching entry exists.

    """
    opener = _open_zip_entry if fmt is ArchiveFormat.ZIP else _open_tar_entry
    with opener(data, executable_name) as stream:
        try:
            yield stream
        except _CORRUPT_ERRORS as err:
            raise ArchiveError(f"Corrupt {fmt.value} entry data: {err}") from err


@contextmanager
def _open_zip_entry(data: bytes, executable_name: str) -> Iterator[IO[bytes]]:
    logger = get_global_logger()
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except _CORRUPT_ERRORS as err:
        raise ArchiveError(f"Invalid zip archive: {err}") from err

    with zf:
        best: zipfile.ZipInfo | None = None
        best_depth = 0
        for info in zf.infolist():
            if info.is_dir():
                continue
            directory, base = posixpath.split(info.filename)
            if base != executable_name:
                continue
            if "/" in directory:
                logger.debug("ARCHIVE", f"Skipping nested entry: {info.filename}")
                continue
            depth = 1 if directory else 0
            if best is None or depth < best_depth:
                best, best_depth = info, depth

        if best is None:
            raise ExecutableNotFoundError(
                f"No {executable_name!r} entry found in zip archive"
            )

        logger.verbose("ARCHIVE", f"Using zip entry: {best.filename}")
        try:
            stream = zf.open(best)
        except _CORRUPT_ERRORS as err:
            raise ArchiveError(f"Invalid zip entry {best.filename!r}: {err}") from err
        with stream:
            yield stream


@contextmanager
def _open_tar_entry(data: bytes, executable_name: str) -> Iterator[IO[bytes]]:
    logger = get_global_logger()
    try:
        tf = tarfile.open(fileobj=io.BytesIO(data), mode="r|gz")
    except _CORRUPT_ERRORS as err:
        raise ArchiveError(f"Invalid tar.gz archive: {err}") from err

    with tf:
        stream: IO[bytes] | None = None
        try:
            for member in tf:
                if not member.isfile():
                    continue
                if posixpath.basename(member.name) != executable_name:
                    continue
                logger.verbose("ARCHIVE", f"Using tar entry: {member.name}")
                stream = tf.extractfile(member)
                break
        except _CORRUPT_ERRORS as err:
            raise ArchiveError(f"Invalid tar.gz archive: {err}") from err

        if stream is None:
            # Stream mode stops silently at a bad header past the first
            # member; only zero padding may follow the last member read.
            if not _is_end_of_archive(data, tf.offset):
                raise ArchiveError(
                    f"Invalid tar.gz archive: bad header at offset {tf.offset}"
                )
            raise ExecutableNotFoundError(
                f"No {executable_name!r} entry found in tar.gz archive"
            )
        yield stream


def _is_end_of_archive(data: bytes, offset: int) -> bool:
    """True if the decompressed tar holds only zero bytes from offset on."""
    try:
        raw = gzip.decompress(data)
    except (gzip.BadGzipFile, *_CORRUPT_ERRORS):
        return False
    return not raw[offset:].strip(b"\0")
