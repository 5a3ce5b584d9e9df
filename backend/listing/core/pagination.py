import math
from typing import List

from listing.schemas.products import ELLIPSIS, PageIndicator


def total_pages(total: int, limit: int) -> int:
    """Number of pages for total rows at limit per page (never less than 1)."""
    return max(1, math.ceil(max(0, total) / max(1, limit)))


def page_range(current: int, total: int, max_shown: int = 7) -> List[PageIndicator]:
    """
    Page numbers to show in the pager, compressed with ellipsis markers.

    Pages 1 and total are always shown; a window of pages around current
    fills the rest, pinned to the edges when current is close to them:

      page_range(1, 20, 7)  -> [1, 2, 3, 4, 5, "...", 20]
      page_range(10, 20, 7) -> [1, "...", 8, 9, 10, 11, 12, "...", 20]
      page_range(10, 10, 7) -> [1, "...", 6, 7, 8, 9, 10]
    """
    if max_shown < 5:
        raise ValueError(f"max_shown must be at least 5, got {max_shown}")

    total = max(1, total)
    current = min(max(1, current), total)

    if total <= max_shown:
        return list(range(1, total + 1))

    side = (max_shown - 3) // 2
    left = max(2, current - side)
    right = min(total - 1, current + side)
    if current - 1 <= side:
        left = 2
        right = max_shown - 2
    if total - current <= side:
        left = total - (max_shown - 3)
        right = total - 1

    pages: List[PageIndicator] = [1]
    if left > 2:
        pages.append(ELLIPSIS)
    pages.extend(range(left, right + 1))
    if right < total - 1:
        pages.append(ELLIPSIS)
    pages.append(total)
    return pages
