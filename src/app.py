"""Zeloura Reviews FastAPI application.

Serves the storefront's review endpoints and the admin moderation panel.
Every request runs inside the reviews domain context.

Usage:
    uvicorn app:app --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay.
from reviews.domain import logger, reviews  # noqa: E402

reviews.init()

from reviews.api.routes import review_router  # noqa: E402
from reviews.catalog.memory_adapter import InMemoryProductCatalog  # noqa: E402
from reviews.collection import create_collection  # noqa: E402
from reviews.store.review_store import ReviewStore  # noqa: E402
from reviews.utils.logging import add_context, clear_context  # noqa: E402


# ---------------------------------------------------------------------------
# Review store lifecycle
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    store = ReviewStore(create_collection(), catalog=InMemoryProductCatalog())
    with store:
        app.state.review_store = store
        logger.info("Review store opened", review_count=len(store.reviews))
        yield
    logger.info("Review store closed")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Zeloura Reviews API",
    description="Product reviews, moderation and ratings",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the reviews domain context and bind request details to the logs."""
    clear_context()
    add_context(
        method=request.method,
        path=request.url.path,
        admin_id=request.headers.get("x-admin-id"),
    )
    with reviews.domain_context():
        response = await call_next(request)
    return response


register_exception_handlers(app)

app.include_router(review_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health(request: Request):
    store = request.app.state.review_store
    return JSONResponse(
        content={
            "status": "ok",
            "domain": reviews.name,
            "review_store": {"open": store.is_open, "reviews": len(store.reviews)},
        }
    )
