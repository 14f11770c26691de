"""Release discovery for histver.

Public API:

list_releases : function
    List a GitHub repository's releases, newest first.
ReleaseCandidate : class
    One release (tag, timestamps, flags, assets).
ReleaseAsset : class
    One downloadable release file.
"""

from .github_releases import (
    ReleaseAsset,
    ReleaseCandidate,
    list_releases,
    release_from_api,
)

__all__ = ["ReleaseAsset", "ReleaseCandidate", "list_releases", "release_from_api"]
