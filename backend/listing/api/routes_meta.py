from fastapi import APIRouter, Depends

from listing.api.routes_products import get_store
from listing.core.config import settings
from listing.core.store import RecordStore

router = APIRouter(prefix="/v1", tags=["meta"])


@router.get("/meta")
def meta(store: RecordStore = Depends(get_store)):
    return {
        "version": settings.APP_VERSION,
        "build": settings.BUILD_ID,
        "records_loaded": store.loaded,
        "record_count": len(store.records),
    }
