"""Streaming image download."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 16


def fetch_image(
    url: str,
    dest: Path,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> bool:
    """Stream *url* into *dest*, following redirects.

    Returns False on transport errors, non-success statuses or when *dest*
    cannot be written. A partially written file is removed.
    """
    dest = Path(dest)
    http = session or requests
    try:
        response = http.get(url, stream=True, allow_redirects=True, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Failed to download %s: %s", url, exc)
        return False

    try:
        if not 200 <= response.status_code < 300:
            logger.error("Failed to download %s: HTTP %s", url, response.status_code)
            return False
        with dest.open("wb") as handle:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    handle.write(chunk)
    except (requests.RequestException, OSError) as exc:
        logger.error("Failed to download %s to %s: %s", url, dest, exc)
        if dest.is_file():
            dest.unlink()
        return False
    finally:
        response.close()

    logger.debug("Saved %s -> %s", url, dest)
    return True
