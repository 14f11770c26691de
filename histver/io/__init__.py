"""Input/Output operations for histver.

Modules:

download : module
    HTTP(S) download with retries, fully into memory.

Public API:

download_bytes : function
    Download a URL and return its body.
make_session : function
    requests.Session with retry/backoff defaults.

Example:
    from histver.io import download_bytes

    data = download_bytes("https://example.com/syncthing-linux-amd64-v1.0.0.tar.gz")

"""

from .download import download_bytes, make_session

__all__ = ["download_bytes", "make_session"]
