from __future__ import annotations

import os
import threading
from typing import Any, Dict, Optional, Tuple

from .session import AuthContext, make_client

_CLIENT_CACHE: Dict[Tuple[int, str, str], Any] = {}
_CLIENT_CACHE_LOCK = threading.Lock()
_CONNECTION_POOL_SIZE: Optional[int] = None


def set_client_connection_pool_size(size: Optional[int]) -> None:
    global _CONNECTION_POOL_SIZE
    _CONNECTION_POOL_SIZE = size if size and size > 0 else None


def clear_client_cache() -> None:
    with _CLIENT_CACHE_LOCK:
        _CLIENT_CACHE.clear()


def _cache_disabled() -> bool:
    return (os.getenv("NETCFG_INV_DISABLE_CLIENT_CACHE") or "").lower() in {"1", "true", "yes"}


def _get_client(service_name: str, ctx: AuthContext, region: Optional[str]) -> Any:
    resolved_region = region or ctx.region
    if _cache_disabled():
        return make_client(service_name, ctx, region=resolved_region, connection_pool_size=_CONNECTION_POOL_SIZE)
    # Sessions are not hashable by value; identity is enough within one run.
    key = (id(ctx.session), service_name, resolved_region)
    with _CLIENT_CACHE_LOCK:
        client = _CLIENT_CACHE.get(key)
        if client is None:
            client = make_client(
                service_name,
                ctx,
                region=resolved_region,
                connection_pool_size=_CONNECTION_POOL_SIZE,
            )
            _CLIENT_CACHE[key] = client
        return client


def get_ec2_client(ctx: AuthContext, region: Optional[str] = None) -> Any:
    return _get_client("ec2", ctx, region)


def get_sts_client(ctx: AuthContext) -> Any:
    return _get_client("sts", ctx, None)
