"""Redis connection + JSON helpers.

All operations are wrapped in try/except — Redis failure never breaks the app;
callers fall back to the in-memory store.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

log = logging.getLogger(__name__)

_redis_client = None
_redis_checked = False


def get_redis():
    """Lazy singleton.  Returns ``redis.Redis`` or ``None`` if unavailable."""
    global _redis_client, _redis_checked
    if _redis_checked:
        return _redis_client
    _redis_checked = True
    try:
        from wayfind.config import settings

        if not settings.redis_url:
            return None
        import redis

        _redis_client = redis.Redis.from_url(
            settings.redis_url, decode_responses=True, socket_connect_timeout=3
        )
        _redis_client.ping()
        log.info("Redis connected: %s", settings.redis_url)
    except Exception as exc:
        log.warning("Redis unavailable (%s), using in-memory store", exc)
        _redis_client = None
    return _redis_client


def reset_redis() -> None:
    """Forget the cached connection (tests, settings reload)."""
    global _redis_client, _redis_checked
    _redis_client = None
    _redis_checked = False


# ── JSON helpers ─────────────────────────────────────────────────────────

def get_json(r, key: str) -> Optional[Any]:
    try:
        raw = r.get(key)
        if raw is None:
            return None
        return json.loads(raw)
    except Exception as exc:
        log.warning("Redis read failed for %s: %s", key, exc)
        return None

