import math
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from listing.core.config import settings
from listing.core.images import resolve_image_url
from listing.core.pagination import page_range, total_pages
from listing.core.store import RecordStore
from listing.schemas.products import (
    ListingResponse,
    ProductRow,
    QueryRequest,
    Record,
    parse_sort,
)

router = APIRouter(prefix="/v1", tags=["products"])

# One store per process; records are loaded on the first listing request
_store = RecordStore()


def get_store() -> RecordStore:
    return _store


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _format_price(record: Record) -> str:
    value = record.price_value
    if math.isinf(value):
        return "$Infinity" if value > 0 else "$-Infinity"
    return f"${value:.2f}"


def _rows(records: List[Record], req: QueryRequest, origin: str) -> List[ProductRow]:
    rows: List[ProductRow] = []
    for idx, r in enumerate(records):
        rows.append(
            ProductRow(
                index=req.offset + idx + 1,
                title=r.display_title,
                price_display=_format_price(r),
                slug=r.display_slug,
                image_url=resolve_image_url(r, origin),
                image_alt=r.display_title or "No Image",
            )
        )
    return rows


@router.get("/products", response_model=ListingResponse)
async def products(
    request: Request,
    page: int = 1,
    limit: Optional[int] = None,
    search: str = "",
    sort: str = "",
    store: RecordStore = Depends(get_store),
):
    """
    One page of the product table plus what the pager needs.
    sort takes the combined "field:dir" form, e.g. "price:desc"; empty = insertion order.
    """
    sort_field, sort_dir = parse_sort(sort)
    try:
        req = QueryRequest(
            page=page,
            limit=limit if limit is not None else settings.DEFAULT_LIMIT,
            search=search,
            sort_field=sort_field,
            sort_dir=sort_dir,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = await store.query(req)
    pages = total_pages(result.total, req.limit)

    return ListingResponse(
        items=_rows(result.data, req, _origin(request)),
        total=result.total,
        page=req.page,
        limit=req.limit,
        pages=pages,
        page_range=page_range(req.page, pages, settings.MAX_PAGES_SHOWN),
        has_prev=req.page > 1,
        has_next=req.page < pages,
        rows_info=f"{len(result.data)} / {result.total} products (page {req.page})",
    )
