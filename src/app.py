"""Fleetdesk FastAPI application.

Web server that processes delivery and user intents synchronously via HTTP.
Every request is wrapped in the logistics domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - unset        → in-memory stores, projectors fire in the UoW
#   - "production" → sqlite-backed stores (see domain.toml)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from logistics.domain import logistics  # noqa: E402
from logistics.utils.logging import clear_context
from protean.integrations.fastapi import register_exception_handlers

logistics.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Fleetdesk API",
    description="Delivery coordination — business users, administrators and drivers",
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
    """Push the Protean domain context for each request."""
    clear_context()
    with logistics.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from logistics.api import delivery_router, register_error_handlers, user_router  # noqa: E402

app.include_router(delivery_router)
app.include_router(user_router)
register_exception_handlers(app)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"logistics": {"name": logistics.name}},
        }
    )
