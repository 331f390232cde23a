"""ElectroStore FastAPI application.

Single-domain web server that processes commands synchronously via HTTP.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the domain.toml overlay ("production" → PostgreSQL).
from storefront.domain import storefront

storefront.init()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from storefront.api import mount  # noqa: E402
from storefront.identity.registration import seed_main_admin  # noqa: E402
from storefront.settings import get_settings  # noqa: E402
from storefront.utils.logging import get_logger  # noqa: E402

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    with storefront.domain_context():
        admin_id = seed_main_admin()
    logger.info("storefront_started", main_admin_id=admin_id)
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="ElectroStore API",
    description="Electronics storefront: catalogue, cash-on-delivery checkout, reviews, wishlists and admin console",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

mount(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
