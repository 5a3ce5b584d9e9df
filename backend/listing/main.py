"""
Product Listing API - FastAPI Main Entry

LOCAL:
    cd backend
    python -m uvicorn listing.main:app --reload --host 0.0.0.0 --port 8000

RECORDS:
    RECORDS_PATH=db.json            (local JSON array, checked first)
    RECORDS_URL=https://.../db.json (fetched when the file is missing)

TEST:
    curl -i http://127.0.0.1:8000/health
    curl -i "http://127.0.0.1:8000/v1/products?page=1&limit=10&search=phone&sort=price:desc"
    curl -i "http://127.0.0.1:8000/v1/images/fallback?url=http://x/y.jpg&attempt=1"
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from listing.api.routes_images import router as images_router
from listing.api.routes_meta import router as meta_router
from listing.api.routes_products import router as products_router
from listing.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Product Listing API",
        version=settings.APP_VERSION,
        description="Filter, sort and paginate product records for the listing page",
    )

    # The listing page may be served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {
            "name": "Product Listing API",
            "status": "ok",
            "docs": "/docs",
            "health": "/health",
            "version": "/version",
        }

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/version")
    def version():
        return {"version": settings.APP_VERSION, "build": settings.BUILD_ID}

    app.include_router(products_router)
    app.include_router(images_router)
    app.include_router(meta_router)

    return app


app = create_app()
