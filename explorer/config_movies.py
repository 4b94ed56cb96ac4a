from __future__ import annotations

from typing import Final

from explorer.config_base import (
    _cap_float_min,
    _cap_int,
    _get_env_bool,
    _get_env_float,
    _get_env_int,
    _get_env_str,
)

# ============================================================
# Movies API (endpoint paginado + HTTP)
# ============================================================

MOVIES_API_BASE_URL: Final[str] = (
    _get_env_str("MOVIES_API_BASE_URL", "https://challenge.iugolabs.com/api/movies/search")
    or "https://challenge.iugolabs.com/api/movies/search"
)

MOVIES_HTTP_TIMEOUT_SECONDS: float = _cap_float_min(
    "MOVIES_HTTP_TIMEOUT_SECONDS",
    _get_env_float("MOVIES_HTTP_TIMEOUT_SECONDS", 10.0),
    min_v=0.5,
)

# Páginas 2..N se piden en paralelo; esto limita los workers del pool.
MOVIES_HTTP_MAX_CONCURRENCY: int = _cap_int(
    "MOVIES_HTTP_MAX_CONCURRENCY",
    _get_env_int("MOVIES_HTTP_MAX_CONCURRENCY", 8),
    min_v=1,
    max_v=64,
)

MOVIES_HTTP_RETRY_TOTAL: int = _cap_int(
    "MOVIES_HTTP_RETRY_TOTAL",
    _get_env_int("MOVIES_HTTP_RETRY_TOTAL", 2),
    min_v=0,
    max_v=10,
)
MOVIES_HTTP_RETRY_BACKOFF_FACTOR: float = _cap_float_min(
    "MOVIES_HTTP_RETRY_BACKOFF_FACTOR",
    _get_env_float("MOVIES_HTTP_RETRY_BACKOFF_FACTOR", 0.5),
    min_v=0.0,
)

MOVIES_HTTP_USER_AGENT: Final[str] = (
    _get_env_str("MOVIES_HTTP_USER_AGENT", "Movie-Explorer/1.0 (local)")
    or "Movie-Explorer/1.0 (local)"
)


# ============================================================
# Catálogo (caché en memoria del corpus completo)
# ============================================================

MOVIES_CATALOG_TTL_SECONDS: float = _cap_float_min(
    "MOVIES_CATALOG_TTL_SECONDS",
    _get_env_float("MOVIES_CATALOG_TTL_SECONDS", 30.0),
    min_v=0.0,
)

MOVIES_ITEMS_PER_PAGE: int = _cap_int(
    "MOVIES_ITEMS_PER_PAGE",
    _get_env_int("MOVIES_ITEMS_PER_PAGE", 10),
    min_v=1,
    max_v=500,
)


# ============================================================
# Métricas
# ============================================================

MOVIES_METRICS_ENABLED: bool = _get_env_bool("MOVIES_METRICS_ENABLED", True)
