"""Configuration loading for histver.

Built-in defaults target syncthing/syncthing; an optional YAML file
overrides them.

Public API:

load_config : function
    Load, merge and validate configuration.
Settings : class
    Effective, validated configuration.

Example:
    from pathlib import Path
    from histver.config import load_config

    settings = load_config(Path("histver.yaml"))
    print(settings.repo)

"""

from .loader import DEFAULT_CONFIG, Settings, load_config

__all__ = ["DEFAULT_CONFIG", "Settings", "load_config"]
