import math
import re
from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ELLIPSIS = "..."

SortField = Literal["title", "price"]
SortDir = Literal["asc", "desc"]

# A page number or the ellipsis marker
PageIndicator = Union[int, Literal["..."]]

# Numeric text the way a browser's Number() reads it
_DECIMAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$", re.ASCII)
_INFINITY = re.compile(r"^[+-]?Infinity$")
_RADIX_TEXT = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_RADIX = {"x": 16, "o": 8, "b": 2}


def _int_to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_number_text(s: str) -> float:
    if not s:
        return 0.0
    if _DECIMAL.match(s):
        return float(s)
    if _INFINITY.match(s):
        return -math.inf if s.startswith("-") else math.inf
    if _RADIX_TEXT.match(s):
        return _int_to_float(int(s[2:], _RADIX[s[1].lower()]))
    # "inf", "nan", "1_000", "abc"
    return 0.0


def _coerce_number(value: Any) -> float:
    """
    Loose numeric coercion for untrusted price fields.
    "12.50" -> 12.5, "0x10" -> 16.0, True -> 1.0, 10**400 -> inf,
    None / "" / "abc" / "inf" / NaN -> 0.0
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, int):
        num = _int_to_float(value)
    elif isinstance(value, float):
        num = value
    elif isinstance(value, str):
        num = _parse_number_text(value.strip())
    else:
        return 0.0
    if math.isnan(num):
        return 0.0
    return num


def _js_text(value: Any) -> str:
    """
    Text of a non-string field as the listing page shows it:
    1.0 -> "1", True -> "true", ["a", "b"] -> "a,b", {} -> "[object Object]"
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_js_text(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


class Record(BaseModel):
    """
    One product entry. Every field is optional and untrusted: values are kept
    as they arrived and the properties below apply the coercion rules.
    """
    model_config = ConfigDict(extra="allow")

    title: Any = None
    price: Any = None
    slug: Any = None
    images: Any = None
    image: Any = None
    thumbnail: Any = None

    @property
    def search_text(self) -> Optional[str]:
        # Non-string titles never match a search term
        return self.title if isinstance(self.title, str) else None

    @property
    def title_key(self) -> str:
        return _js_text(self.title or "").lower()

    @property
    def price_value(self) -> float:
        return _coerce_number(self.price)

    @property
    def display_title(self) -> str:
        return _js_text(self.title or "")

    @property
    def display_slug(self) -> str:
        return str(self.slug or "")


class QueryRequest(BaseModel):
    page: int = 1
    limit: int = 10
    search: str = ""
    sort_field: Optional[SortField] = None
    sort_dir: SortDir = "asc"

    @field_validator("page", "limit")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        # Out-of-range pagination input is clamped, never rejected
        return max(1, v)

    @field_validator("search", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class QueryResult(BaseModel):
    data: List[Record] = Field(default_factory=list)
    total: int = 0


class ProductRow(BaseModel):
    index: int                    # 1-based position across all pages
    title: str
    price_display: str            # e.g. "$599.99"
    slug: str
    image_url: str
    image_alt: str


class ListingResponse(BaseModel):
    items: List[ProductRow]
    total: int
    page: int
    limit: int
    pages: int
    page_range: List[PageIndicator]
    has_prev: bool
    has_next: bool
    rows_info: str


class FallbackResponse(BaseModel):
    url: Optional[str] = None     # None means stop retrying
    attempt: int
    exhausted: bool


def parse_sort(value: Optional[str]) -> Tuple[Optional[str], str]:
    """
    Splits the UI's combined sort value ("price:desc") into (field, dir).
    Empty value means no sorting; a missing direction means ascending.
    """
    if not value or not value.strip():
        return None, "asc"
    field, _, direction = value.strip().partition(":")
    return field or None, direction or "asc"
