"""
HTTP(S) fetching for histver.

Release archives are small enough (tens of MB) to hold in memory, and the
archive extractor works on bytes, so assets are downloaded in full rather
than streamed to disk.

Key Features:

- **Retry Logic with Exponential Backoff** - Automatically retries on transient failures (429, 500, 502, 503, 504) with exponential backoff. Configurable via urllib3.util.Retry.
- **Redirect Following** - GitHub asset URLs redirect to a CDN; redirects are followed and logged.
- **Identity Encoding** - Forces Accept-Encoding: identity so archives arrive byte-for-byte as published.
- **Error Chaining** - All request failures surface as NetworkError with the original exception chained.

Constants:

- DEFAULT_CHUNK (int): Stream chunk size (1 MiB) used while reading the body.
- USER_AGENT (str): User-Agent sent with every request.

Example:
Download an asset:

    >>> from histver.io import download_bytes
    >>> data = download_bytes(
    ...     "https://github.com/syncthing/syncthing/releases/download/v1.23.1/"
    ...     "syncthing-linux-amd64-v1.23.1.tar.gz"
    ... )
    >>> len(data)
    10431062

Notes:
- Timeouts are per-request, not total download time
- Progress output goes through the global logger at debug level
"""

from __future__ import annotations

import time

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from histver import __version__
from histver.exceptions import NetworkError
from histver.logging import get_global_logger

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024

USER_AGENT = f"histver/{__version__} (+https://github.com/syncthing/syncthing)"


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a helpful User-Agent to avoid being blocked.
    - Requests the raw (uncompressed) representation of each resource.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept-Encoding": "identity",
        }
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def download_bytes(url: str, *, timeout: float = 300) -> bytes:
    """Download a URL fully into memory.

    Follows redirects and retries transient failures.

    Args:
        url: Source URL.
        timeout: Per-request timeout (seconds).

    Returns:
        The response body.

    Raises:
        NetworkError: On connection failures, timeouts, or non-2xx
            responses (after retries).

    """
    logger = get_global_logger()
    logger.debug("HTTP", f"GET {url}")

    started_at = time.time()
    with make_session() as session:
        try:
            resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
        except requests.RequestException as err:
            raise NetworkError(f"download failed for {url}: {err}") from err

        with resp:
            for hist in resp.history:
                logger.debug(
                    "HTTP",
                    f"Redirect {hist.status_code} -> "
                    f"{hist.headers.get('Location', 'unknown')}",
                )

            try:
                resp.raise_for_status()
            except requests.HTTPError as err:
                raise NetworkError(f"download failed for {url}: {err}") from err

            logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")

            chunks: list[bytes] = []
            try:
                for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                    if chunk:
                        chunks.append(chunk)
            except requests.RequestException as err:
                raise NetworkError(f"download interrupted for {url}: {err}") from err

    data = b"".join(chunks)
    elapsed = time.time() - started_at
    size_mb = len(data) / (1024 * 1024)
    logger.verbose("HTTP", f"Downloaded {size_mb:.1f} MB in {elapsed:.1f}s")
    return data
