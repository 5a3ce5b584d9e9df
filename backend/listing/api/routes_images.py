from fastapi import APIRouter, Query

from listing.core.images import PLACEHOLDER_IMAGE, next_fallback
from listing.schemas.products import FallbackResponse

router = APIRouter(prefix="/v1", tags=["images"])


@router.get("/images/fallback", response_model=FallbackResponse)
def image_fallback(url: str, attempt: int = Query(..., ge=1)):
    """
    Called by the page each time an <img> fails to load.
    attempt counts failures for that image so far (1 on the first error).
    """
    nxt = next_fallback(url, attempt)
    return FallbackResponse(
        url=nxt,
        attempt=attempt,
        exhausted=nxt is None or nxt == PLACEHOLDER_IMAGE,
    )
