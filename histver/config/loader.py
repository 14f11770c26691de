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

"""
Configuration loader for histver.

Settings come from two layers, merged in order:

1. **Built-in defaults** (DEFAULT_CONFIG)
   - Track syncthing/syncthing, a Go project
   - Always present

2. **Config file** (optional, YAML)
   - Passed with ``histver --config histver.yaml``
   - Overrides the defaults

Merge Behavior
--------------
The loader performs deep merging with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Example config file
-------------------

    repo: syncthing/syncthing
    product: syncthing
    runtime_prefix: go
    build_info_command: [go, version, -m]
    timeouts:
      download: 600

Functions
---------
load_config : function
    Load, merge and validate configuration (main public API).

Error Handling
--------------
- ConfigError: Missing file, YAML parse errors, non-mapping documents,
  unknown keys, invalid values
- All errors are chained with "from err" for better debugging

Examples
--------
Defaults only:

    >>> from histver.config import load_config
    >>> settings = load_config()
    >>> settings.repo
    'syncthing/syncthing'

With a config file:

    >>> settings = load_config(Path("histver.yaml"))
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

import yaml

from histver.exceptions import ConfigError
from histver.probe import ProbeSettings

DEFAULT_CONFIG: dict[str, Any] = {
    "repo": "syncthing/syncthing",
    "product": "syncthing",
    "runtime_prefix": "go",
    "version_flag": "--version",
    "build_info_command": ["go", "version", "-m"],
    "include_prereleases": False,
    "token_env": "GITHUB_TOKEN",
    "timeouts": {
        "api": 30,
        "download": 300,
        "probe": 60,
    },
}


@dataclass(frozen=True)
class Settings:
    """Effective histver configuration.

    Attributes:
        repo: GitHub repository, "owner/name".
        product: Product name; asset prefix and executable base name.
        runtime_prefix: Name part of runtime identifiers ("go").
        version_flag: Flag that makes the binary print its banner.
        build_info_command: Build-info tool invocation, without the path.
        include_prereleases: Keep releases flagged as prerelease.
        token_env: Environment variable holding a GitHub token.
        api_timeout: GitHub API request timeout (seconds).
        download_timeout: Asset download timeout (seconds).
        probe_timeout: Subprocess timeout (seconds).

    """

    repo: str = "syncthing/syncthing"
    product: str = "syncthing"
    runtime_prefix: str = "go"
    version_flag: str = "--version"
    build_info_command: tuple[str, ...] = ("go", "version", "-m")
    include_prereleases: bool = False
    token_env: str = "GITHUB_TOKEN"
    api_timeout: float = 30
    download_timeout: float = 300
    probe_timeout: float = 60

    @property
    def token(self) -> str | None:
        """GitHub token from the configured environment variable, if set."""
        if not self.token_env:
            return None
        return os.environ.get(self.token_env) or None

    def probe_settings(self) -> ProbeSettings:
        return ProbeSettings(
            product=self.product,
            runtime_prefix=self.runtime_prefix,
            version_flag=self.version_flag,
            build_info_command=self.build_info_command,
            timeout=self.probe_timeout,
        )


# -------------------------------
# Private helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML file and return a dict.
    Empty files load as an empty mapping.
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as err:
        raise ConfigError(f"Config file not found: {p}") from err
    except OSError as err:
        raise ConfigError(f"Cannot read config file {p}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigError(f"Failed to parse YAML: {p}: {err}") from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping: {p}")
    return data


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins" semantics.
    Dicts merge recursively; lists and scalars are replaced.
    """
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _require_str(cfg: dict[str, Any], key: str) -> str:
    value = cfg.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value


def _require_timeout(timeouts: dict[str, Any], key: str) -> float:
    value = timeouts.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ConfigError(f"'timeouts.{key}' must be a positive number")
    return float(value)


def _settings_from_dict(cfg: dict[str, Any]) -> Settings:
    unknown = sorted(set(cfg) - set(DEFAULT_CONFIG))
    if unknown:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

    repo = _require_str(cfg, "repo")
    if repo.count("/") != 1 or not all(repo.split("/")):
        raise ConfigError(f"Invalid repo format: {repo!r}. Expected 'owner/repository'")

    command = cfg.get("build_info_command")
    if (
        not isinstance(command, list)
        or not command
        or not all(isinstance(part, str) and part for part in command)
    ):
        raise ConfigError("'build_info_command' must be a non-empty list of strings")

    include_prereleases = cfg.get("include_prereleases")
    if not isinstance(include_prereleases, bool):
        raise ConfigError("'include_prereleases' must be true or false")

    token_env = cfg.get("token_env")
    if token_env is not None and not isinstance(token_env, str):
        raise ConfigError("'token_env' must be a string")

    timeouts = cfg.get("timeouts")
    if not isinstance(timeouts, dict):
        raise ConfigError("'timeouts' must be a mapping")
    unknown_timeouts = sorted(set(timeouts) - set(DEFAULT_CONFIG["timeouts"]))
    if unknown_timeouts:
        raise ConfigError(f"Unknown timeout key(s): {', '.join(unknown_timeouts)}")

    return Settings(
        repo=repo,
        product=_require_str(cfg, "product"),
        runtime_prefix=_require_str(cfg, "runtime_prefix"),
        version_flag=_require_str(cfg, "version_flag"),
        build_info_command=tuple(command),
        include_prereleases=include_prereleases,
        token_env=token_env or "",
        api_timeout=_require_timeout(timeouts, "api"),
        download_timeout=_require_timeout(timeouts, "download"),
        probe_timeout=_require_timeout(timeouts, "probe"),
    )


# -------------------------------
# Public API
# -------------------------------


def load_config(config_path: Path | None = None) -> Settings:
    """Load and validate the effective configuration.

    Args:
        config_path: Optional YAML file overriding the built-in defaults.

    Returns:
        Validated settings.

    Raises:
        ConfigError: If the file is missing or unparsable, or any value is
            invalid.

    Example:
        Override the download timeout:
            ```python
            settings = load_config(Path("histver.yaml"))
            print(settings.download_timeout)
            ```

    """
    from histver.logging import get_global_logger

    logger = get_global_logger()
    cfg = DEFAULT_CONFIG
    if config_path is not None:
        logger.verbose("CONFIG", f"Loading config file: {config_path}")
        cfg = _deep_merge_dicts(DEFAULT_CONFIG, _load_yaml_file(config_path))
    settings = _settings_from_dict(cfg)
    logger.debug("CONFIG", f"Effective settings: {settings}")
    return settings
