"""
Shared fixtures: a small product catalog with the messy shapes real
payloads have (missing titles, string prices, mixed image references).
"""

import pytest

from listing.core.store import to_records


@pytest.fixture
def raw_catalog():
    return [
        {"title": "Red Shoe", "price": 30, "slug": "red-shoe", "images": ["https://cdn.example.com/red.jpg"]},
        {"title": "blue shoe", "price": "12.5", "slug": "blue-shoe", "images": [{"url": "//cdn.example.com/blue.png"}]},
        {"title": "Green Hat", "price": None, "slug": "green-hat", "image": "/static/hat.png"},
        {"price": 99, "slug": "untitled", "thumbnail": "example.com/thumb.jpg"},
        {"title": "Shoe Laces", "price": "abc", "images": []},
        {"title": 12345, "price": 5},
        {"title": "Apple Watch", "price": 30, "images": ["   ", {"url": ""}, "img.example.org/w.jpg"]},
    ]


@pytest.fixture
def catalog(raw_catalog):
    return to_records(raw_catalog)
