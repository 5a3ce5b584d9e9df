import logging
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlsplit

from listing.core.config import settings
from listing.schemas.products import Record

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = (
    "data:image/svg+xml;utf8,<svg xmlns='http://www.w3.org/2000/svg' width='160' height='100'>"
    "<rect fill='%23ffdfe8' width='100%25' height='100%25'/>"
    "<text x='50%25' y='50%25' dominant-baseline='middle' text-anchor='middle' fill='%23663' "
    "font-size='12'>No Image</text></svg>"
)

IMAGE_PROXY = "https://images.weserv.nl/?url="

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"

_PROTOCOL_RELATIVE = re.compile(r"^//")
_ABSOLUTE = re.compile(r"^https?://", re.IGNORECASE)
_ROOT_RELATIVE = re.compile(r"^/")
# Heuristic: "cdn.example.com/a.jpg", "images/x.png" or "example.com..."
_DOMAIN_PATH = re.compile(r"^[\w.-]+/", re.ASCII)
_DOMAIN_TLD = re.compile(r"^[\w.-]+\.[a-z]{2,}", re.IGNORECASE | re.ASCII)
_HTTP_SCHEME = re.compile(r"^http:", re.IGNORECASE)
_ANY_SCHEME = re.compile(r"^https?://")


def _candidates(record: Record) -> List[Any]:
    """
    Image candidates in priority order:
      1) each entry of images (string, or mapping with a url)
      2) image
      3) thumbnail
    """
    out: List[Any] = []
    images = record.images
    if isinstance(images, (list, tuple)):
        for it in images:
            if not it:
                continue
            if isinstance(it, str):
                out.append(it)
            elif isinstance(it, Mapping) and it.get("url"):
                out.append(it["url"])
    if record.image:
        out.append(record.image)
    if record.thumbnail:
        out.append(record.thumbnail)
    return out


def first_candidate(record: Record) -> Optional[str]:
    """First non-blank candidate, trimmed; None when the record has no image."""
    for c in _candidates(record):
        s = str(c).strip()
        if s:
            return s
    return None


def _split_origin(origin: str) -> Tuple[str, str]:
    origin = origin.rstrip("/")
    scheme = urlsplit(origin).scheme or "http"
    return f"{scheme}:", origin


def normalize_url(raw: Optional[str], origin: Optional[str] = None) -> Optional[str]:
    """
    Turns a raw image reference into an absolute URL, or None when it does
    not look like one.
    """
    if not raw:
        return None
    raw = str(raw).strip()
    if not raw:
        return None

    protocol, base = _split_origin(origin or settings.PAGE_ORIGIN)

    if _PROTOCOL_RELATIVE.match(raw):
        return protocol + raw
    if _ABSOLUTE.match(raw):
        return raw
    if _ROOT_RELATIVE.match(raw):
        return base + raw
    if _DOMAIN_PATH.match(raw) or _DOMAIN_TLD.match(raw):
        return "https://" + raw
    return None


def resolve_image_url(record: Record, origin: Optional[str] = None) -> str:
    url = normalize_url(first_candidate(record), origin)
    return url or PLACEHOLDER_IMAGE


def next_fallback(current_url: str, attempt_count: int) -> Optional[str]:
    """
    Next URL to try after the image at current_url failed to display.
    attempt_count is the number of failures so far (1 for the first one).

      1st failure of an http:// URL -> same URL over https
      2nd failure                   -> via the weserv image proxy
      anything else                 -> placeholder
    Returns None once the placeholder itself has failed.
    """
    if current_url == PLACEHOLDER_IMAGE:
        return None
    if attempt_count == 1 and _HTTP_SCHEME.match(current_url):
        return _HTTP_SCHEME.sub("https:", current_url, count=1)
    if attempt_count == 2:
        cleaned = _ANY_SCHEME.sub("", current_url, count=1)
        return IMAGE_PROXY + quote(cleaned, safe=_URI_COMPONENT_SAFE)
    return PLACEHOLDER_IMAGE


@dataclass
class ImageRetry:
    """Retry state for one displayed image."""

    url: str
    attempt_count: int = 0
    exhausted: bool = False

    def fail(self) -> Optional[str]:
        """Record a display failure and return the URL to try next, or None."""
        if self.exhausted:
            return None
        self.attempt_count += 1
        nxt = next_fallback(self.url, self.attempt_count)
        if nxt is None or nxt == PLACEHOLDER_IMAGE:
            self.exhausted = True
        if nxt is not None:
            logger.debug("image fallback %d: %s -> %s", self.attempt_count, self.url, nxt[:80])
            self.url = nxt
        return nxt
