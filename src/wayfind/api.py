"""FastAPI REST backend for the wayfind instruction pipeline."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wayfind.errors import ConfigurationError, GenerationError, GenerationFailed, WayfindError
from wayfind.routers import instructions, user_settings

log = logging.getLogger(__name__)

app = FastAPI(title="Wayfind", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(instructions.router)
app.include_router(user_settings.router)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

@app.exception_handler(WayfindError)
async def wayfind_error_handler(request: Request, exc: WayfindError):
    if isinstance(exc, ConfigurationError):
        status = 503
    elif isinstance(exc, GenerationFailed):
        status = 400
    elif isinstance(exc, GenerationError):
        status = 502
    else:
        status = 500
    log.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=status, content={"detail": exc.message, "context": exc.details})


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    redis_ok = False
    try:
        from wayfind.store.redis_client import get_redis
        r = get_redis()
        if r is not None:
            r.ping()
            redis_ok = True
    except Exception:
        pass

    return {"status": "ok", "redis": redis_ok}
