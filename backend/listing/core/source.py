import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import httpx

from listing.core.config import settings

logger = logging.getLogger(__name__)


class RecordSourceError(ValueError):
    """The record payload could not be fetched or is not a JSON array."""


def _ensure_list(data: Any, where: str) -> List[Any]:
    if not isinstance(data, list):
        raise RecordSourceError(
            f"Record payload from {where} must be a JSON array, got {type(data).__name__}"
        )
    return data


def read_local_records(path: str) -> List[Any]:
    """
    Reads the embedded payload (a JSON array of product records) from disk.
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RecordSourceError(f"Could not read records from {p}: {e}") from e
    return _ensure_list(data, str(p))


async def fetch_remote_records(
    url: str,
    timeout: float = 30.0,
    client: Optional[httpx.AsyncClient] = None,
) -> List[Any]:
    """
    GETs the record array from url. A client can be passed in (tests use a
    MockTransport); otherwise a short-lived one is created.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as c:
                r = await c.get(url)
        else:
            r = await client.get(url)
    except httpx.HTTPError as e:
        raise RecordSourceError(f"Record request failed: {type(e).__name__}: {e}") from e

    if r.status_code >= 400:
        raise RecordSourceError(f"Record request failed: {r.status_code}\nBODY:\n{r.text[:2000]}")

    try:
        data = r.json()
    except ValueError as e:
        raise RecordSourceError(f"Record response from {url} is not JSON") from e
    return _ensure_list(data, url)


async def load_records() -> List[Any]:
    """
    Default loader:
      1) RECORDS_PATH if the file exists (works without a remote server)
      2) RECORDS_URL otherwise
    """
    path = (settings.RECORDS_PATH or "").strip()
    if path and Path(path).is_file():
        logger.info("loading records from file %s", path)
        return read_local_records(path)

    url = (settings.RECORDS_URL or "").strip()
    if url:
        logger.info("loading records from %s", url)
        return await fetch_remote_records(url, timeout=settings.RECORDS_TIMEOUT_SECONDS)

    raise RecordSourceError("No record source: set RECORDS_PATH or RECORDS_URL")
