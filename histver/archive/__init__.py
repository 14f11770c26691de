"""Release archive handling for histver.

Public API:

ArchiveFormat : enum
    ZIP or TAR_GZ.
detect_format : function
    Pick the format from an asset file name.
open_executable : function
    Context manager yielding the executable entry of an in-memory archive.
"""

from .extract import (
    ArchiveFormat,
    detect_format,
    is_supported_archive,
    open_executable,
)

__all__ = ["ArchiveFormat", "detect_format", "is_supported_archive", "open_executable"]
