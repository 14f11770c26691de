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

"""Version facts from an extracted executable.

The prober writes the executable to a temporary file, marks it executable
and runs a fixed list of strategies against it. The first strategy that
succeeds wins; results are never combined within one probe.

Strategy Order:

1. self_report: Run ``<binary> --version`` and parse the banner. Yields
   version, runtime and date, but only works when the binary can run on
   this host (same OS and architecture).
2. build_info: Run ``go version -m <binary>`` and take the runtime from the
   first output line. Works for any Go binary regardless of platform, but
   only recovers the runtime.

Each strategy has the signature ``(path, settings) -> VersionRecord`` and
raises ProbeError on failure, so custom strategies can be slotted in.

Example:
    Probe an executable stream:

        from histver.probe import ProbeSettings, probe

        with open("syncthing", "rb") as fp:
            record = probe(fp, ProbeSettings())
        print(record.runtime)

Note:
    The temporary file is removed on every exit path, including strategy
    failures and unexpected exceptions. Subprocess calls honor
    ProbeSettings.timeout; a timeout counts as a strategy failure.

"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
import shutil
import subprocess
import tempfile
from typing import IO

from histver.exceptions import ProbeError, VersionParseError
from histver.logging import get_global_logger
from histver.versioning import VersionRecord, parse_self_report


@dataclass(frozen=True)
class ProbeSettings:
    """Options shared by all probe strategies.

    Attributes:
        product: Product name, used as the temp file prefix.
        runtime_prefix: Name part of runtime identifiers (e.g., "go").
        version_flag: Flag that makes the binary print its version banner.
        build_info_command: Command (without the binary path) that prints
            embedded build info.
        timeout: Per-subprocess timeout in seconds.

    """

    product: str = "syncthing"
    runtime_prefix: str = "go"
    version_flag: str = "--version"
    build_info_command: tuple[str, ...] = ("go", "version", "-m")
    timeout: float = 60


ProbeStrategy = Callable[[Path, ProbeSettings], VersionRecord]


def _run(cmd: list[str], timeout: float) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            cmd,
            check=True,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.CalledProcessError as err:
        detail = (err.stderr or "").strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        raise ProbeError(
            f"{Path(cmd[0]).name} exited with status {err.returncode}{suffix}"
        ) from err
    except subprocess.TimeoutExpired:
        raise ProbeError(f"{Path(cmd[0]).name} timed out after {timeout}s") from None
    except OSError as err:
        # Wrong OS/architecture (ENOEXEC), permissions, missing interpreter
        raise ProbeError(f"cannot execute {Path(cmd[0]).name}: {err}") from err


def version_from_self_report(path: Path, settings: ProbeSettings) -> VersionRecord:
    """Run the binary with its version flag and parse the banner.

    Args:
        path: Executable to run.
        settings: Probe settings (version flag, runtime prefix, timeout).

    Returns:
        A complete record (version, runtime and date).

    Raises:
        ProbeError: If the binary cannot run, exits non-zero, or prints
            something that is not a version banner.

    """
    result = _run([str(path), settings.version_flag], settings.timeout)
    try:
        return parse_self_report(result.stdout, runtime_prefix=settings.runtime_prefix)
    except VersionParseError as err:
        raise ProbeError(str(err)) from err


def version_from_build_info(path: Path, settings: ProbeSettings) -> VersionRecord:
    """Read the runtime version from the binary's embedded build info.

    The first line of ``go version -m`` output looks like
    ``/tmp/syncthing-x1y2: go1.19.5``; its last field is the runtime.

    Returns:
        A record with only ``runtime`` populated.

    Raises:
        ProbeError: If the tool is not installed, rejects the file, or
            prints an unexpected first line.

    """
    if not settings.build_info_command:
        raise ProbeError("no build info command configured")
    tool = shutil.which(settings.build_info_command[0])
    if tool is None:
        raise ProbeError(f"{settings.build_info_command[0]!r} not found on PATH")

    cmd = [tool, *settings.build_info_command[1:], str(path)]
    result = _run(cmd, settings.timeout)

    lines = result.stdout.splitlines()
    tokens = lines[0].split() if lines else []
    if len(tokens) < 2:
        raise ProbeError(f"unexpected build info output: {result.stdout[:200]!r}")
    runtime = tokens[-1]
    if not runtime.startswith(settings.runtime_prefix):
        raise ProbeError(f"unexpected runtime token in build info: {runtime!r}")
    return VersionRecord(runtime=runtime)


DEFAULT_STRATEGIES: tuple[ProbeStrategy, ...] = (
    version_from_self_report,
    version_from_build_info,
)


@contextmanager
def materialized_executable(stream: IO[bytes], prefix: str) -> Iterator[Path]:
    """Copy a stream to a uniquely named executable temp file.

    The file is deleted when the block exits, however it exits.
    """
    tmp = tempfile.NamedTemporaryFile(prefix=f"{prefix}-", delete=False)
    path = Path(tmp.name)
    try:
        with tmp:
            shutil.copyfileobj(stream, tmp)
        path.chmod(0o755)
        yield path
    finally:
        path.unlink(missing_ok=True)


def probe(
    stream: IO[bytes],
    settings: ProbeSettings,
    strategies: Sequence[ProbeStrategy] = DEFAULT_STRATEGIES,
) -> VersionRecord:
    """Recover version facts from an executable.

    Args:
        stream: Readable binary stream with the executable's bytes.
        settings: Probe settings.
        strategies: Strategies to try, in order. Default is self-report
            then build-info.

    Returns:
        The record from the first successful strategy.

    Raises:
        ProbeError: If every strategy fails.

    """
    logger = get_global_logger()
    failures: list[str] = []

    with materialized_executable(stream, settings.product) as path:
        logger.debug("PROBE", f"Materialized executable: {path}")
        for strategy in strategies:
            name = getattr(strategy, "__name__", repr(strategy))
            logger.debug("PROBE", f"Trying strategy: {name}")
            try:
                record = strategy(path, settings)
            except ProbeError as err:
                logger.debug("PROBE", f"{name} failed: {err}")
                failures.append(f"{name}: {err}")
                continue
            logger.verbose("PROBE", f"{name} succeeded: {record}")
            return record

    raise ProbeError("all probe strategies failed (" + "; ".join(failures) + ")")
