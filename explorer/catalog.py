"""
explorer/catalog.py

Capa de servicio: coordina descarga, normalización, agregación, filtros y paginación.

- El corpus completo se descarga una vez y se mantiene en memoria durante
  MOVIES_CATALOG_TTL_SECONDS (ventana de deduplicación intra-sesión).
- Las funciones puras (agregador, filtros) nunca lanzan; aquí solo se propagan
  los errores del cliente y la validación del umbral.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass

from explorer import logger as logger
from explorer.config_movies import MOVIES_CATALOG_TTL_SECONDS, MOVIES_ITEMS_PER_PAGE
from explorer.directors import DirectorCount, aggregate_directors
from explorer.movie_mapper import (
    NormalizedMovie,
    normalize_movies,
    unique_directors,
    unique_genres,
    year_range,
)
from explorer.movies_client import (
    AbortError,
    ApiClientError,
    CancellationToken,
    MoviesApiClient,
    ValidationError,
)
from explorer.movies_filter import MoviesSearchFilters, PaginatedResult, filter_movies, paginate


@dataclass(frozen=True, slots=True)
class FilterOptions:
    directors: tuple[str, ...]
    genres: tuple[str, ...]
    year_range: tuple[int, int] | None


_ERROR_MESSAGES: dict[str, str] = {
    "validation": "Los datos introducidos no son válidos",
    "network": "Problema de red. Revisa la conexión e inténtalo de nuevo",
    "api": "Respuesta inesperada del servidor",
}


def describe_error(exc: BaseException) -> str:
    """
    Mensaje para el usuario según el tipo de error.

    AbortError -> "" (cancelación pedida por el propio llamante: no se muestra).
    """
    if isinstance(exc, AbortError):
        return ""
    kind = exc.kind if isinstance(exc, ApiClientError) else "unknown"
    headline = _ERROR_MESSAGES.get(kind, "Error inesperado")
    detail = str(exc).strip()
    return f"{headline}: {detail}" if detail else headline


class MovieCatalog:
    def __init__(
        self,
        client: MoviesApiClient,
        *,
        ttl_seconds: float = MOVIES_CATALOG_TTL_SECONDS,
    ) -> None:
        self._client = client
        self._ttl_seconds = max(0.0, float(ttl_seconds))
        self._lock = threading.Lock()
        self._raw: list[dict[str, object]] | None = None
        self._movies: list[NormalizedMovie] | None = None
        self._fetched_at: float = 0.0

    def invalidate(self) -> None:
        with self._lock:
            self._raw = None
            self._movies = None
            self._fetched_at = 0.0
        logger.debug("Catalog corpus invalidated")

    def _fresh_unlocked(self) -> bool:
        if self._raw is None:
            return False
        return (time.monotonic() - self._fetched_at) < self._ttl_seconds

    def raw_movies(self, cancel: CancellationToken | None = None) -> list[dict[str, object]]:
        with self._lock:
            if self._fresh_unlocked() and self._raw is not None:
                return self._raw

        raw = self._client.fetch_all(cancel)
        movies = normalize_movies(raw)

        with self._lock:
            self._raw = raw
            self._movies = movies
            self._fetched_at = time.monotonic()

        logger.debug_ctx("CATALOG", f"corpus refreshed: {len(raw)} movies")
        return raw

    def movies(self, cancel: CancellationToken | None = None) -> list[NormalizedMovie]:
        with self._lock:
            if self._fresh_unlocked() and self._movies is not None:
                return self._movies

        raw = self.raw_movies(cancel)
        with self._lock:
            if self._movies is not None:
                return self._movies
        return normalize_movies(raw)

    def directors_by_threshold(
        self,
        threshold: float,
        cancel: CancellationToken | None = None,
    ) -> list[DirectorCount]:
        """Directores con más de `threshold` películas (orden alfabético)."""
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not math.isfinite(threshold):
            raise ValidationError("Threshold must be a finite number")

        return aggregate_directors(self.raw_movies(cancel), threshold)

    def search(
        self,
        filters: MoviesSearchFilters,
        *,
        page: int = 1,
        items_per_page: int = MOVIES_ITEMS_PER_PAGE,
        cancel: CancellationToken | None = None,
    ) -> PaginatedResult[NormalizedMovie]:
        filtered = filter_movies(self.movies(cancel), filters)
        return paginate(filtered, page=page, items_per_page=items_per_page)

    def filter_options(self, cancel: CancellationToken | None = None) -> FilterOptions:
        movies = self.movies(cancel)
        return FilterOptions(
            directors=tuple(unique_directors(movies)),
            genres=tuple(unique_genres(movies)),
            year_range=year_range(movies),
        )
