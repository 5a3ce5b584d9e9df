from typing import List, Sequence

from listing.schemas.products import QueryRequest, QueryResult, Record


def _matches(record: Record, needle: str) -> bool:
    if not needle:
        return True
    text = record.search_text
    return bool(text) and needle in text.lower()


def _sort(items: List[Record], field: str, direction: str) -> List[Record]:
    # list.sort is stable, and stays stable with reverse=True, so equal keys
    # keep their filtered order in both directions
    if field == "title":
        items.sort(key=lambda r: r.title_key, reverse=direction == "desc")
    elif field == "price":
        items.sort(key=lambda r: r.price_value, reverse=direction == "desc")
    return items


def query(records: Sequence[Record], req: QueryRequest) -> QueryResult:
    """
    Filter -> sort -> paginate over an in-memory record list.

    - Keeps records whose title contains the search term (case-insensitive)
    - Sorts by title or price when a sort field is given
    - total is counted BEFORE slicing
    """
    needle = (req.search or "").lower()
    items = [r for r in records if _matches(r, needle)]

    if req.sort_field:
        items = _sort(items, req.sort_field, req.sort_dir)

    total = len(items)
    start = req.offset
    return QueryResult(data=items[start:start + req.limit], total=total)
