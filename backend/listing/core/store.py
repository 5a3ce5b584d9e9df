import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional

from pydantic import ValidationError

from listing.core.query import query
from listing.core.source import RecordSourceError, load_records
from listing.schemas.products import QueryRequest, QueryResult, Record

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[List[Any]]]


def to_records(raw: List[Any]) -> List[Record]:
    """
    Validates raw payload entries into Records, keeping insertion order.
    Entries that are not JSON objects are skipped.
    """
    out: List[Record] = []
    skipped = 0
    for item in raw:
        if not isinstance(item, Mapping):
            skipped += 1
            continue
        try:
            out.append(Record.model_validate(dict(item)))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("skipped %d malformed record entries", skipped)
    return out


class RecordStore:
    """
    Holds the product records for the session.

    The first query loads them through loader; concurrent queries wait on the
    same load instead of fetching again. A failed load leaves the store empty
    (queries return nothing) and the next query tries again.
    """

    def __init__(self, loader: Optional[Loader] = None) -> None:
        self._loader: Loader = loader or load_records
        self._records: List[Record] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def records(self) -> List[Record]:
        return self._records

    async def ensure_loaded(self) -> List[Record]:
        if self._loaded:
            return self._records

        async with self._lock:
            # Another query may have finished the load while we waited
            if self._loaded:
                return self._records
            try:
                raw = await self._loader()
            except RecordSourceError as e:
                logger.error("failed to load records: %s", e)
                return self._records
            except Exception:
                logger.exception("failed to load records")
                return self._records

            # Swap in only a complete list
            self._records = to_records(raw)
            self._loaded = True
            logger.info("loaded %d records", len(self._records))
            return self._records

    async def query(self, req: QueryRequest) -> QueryResult:
        records = await self.ensure_loaded()
        return query(records, req)
