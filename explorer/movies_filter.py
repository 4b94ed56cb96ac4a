"""
explorer/movies_filter.py

Filtros compuestos sobre películas normalizadas + paginación en memoria.

Predicados (AND entre filtros activos; un filtro ausente siempre pasa):
- title: substring, sin distinguir mayúsculas ni acentos.
- year_from / year_to: límites inclusivos; una película SIN año pasa siempre.
- genres: basta con que algún género de la película coincida con alguno del filtro.
- director: substring contra cualquiera de los directores.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Final, Generic, TypeVar

from explorer.movie_mapper import NormalizedMovie, remove_accents

T = TypeVar("T")

DEFAULT_ITEMS_PER_PAGE: Final[int] = 10


@dataclass(frozen=True, slots=True)
class MoviesSearchFilters:
    title: str | None = None
    year_from: int | None = None
    year_to: int | None = None
    genres: tuple[str, ...] | None = None
    director: str | None = None


@dataclass(frozen=True, slots=True)
class PaginatedResult(Generic[T]):
    items: tuple[T, ...]
    total_pages: int
    current_page: int
    total_items: int


def _fold(text: str) -> str:
    return remove_accents(text.lower())


def _matches_title(movie: NormalizedMovie, title: str | None) -> bool:
    needle = _fold((title or "").strip())
    if not needle:
        return True
    return needle in _fold(movie.title)


def _matches_years(movie: NormalizedMovie, year_from: int | None, year_to: int | None) -> bool:
    if movie.year is None:
        return True
    if year_from is not None and movie.year < year_from:
        return False
    if year_to is not None and movie.year > year_to:
        return False
    return True


def _matches_genres(movie: NormalizedMovie, genres: Iterable[str] | None) -> bool:
    if not genres:
        return True
    wanted = {_fold(g.strip()) for g in genres if g and g.strip()}
    if not wanted:
        return True
    return any(_fold(g) in wanted for g in movie.genres)


def _matches_director(movie: NormalizedMovie, director: str | None) -> bool:
    needle = _fold((director or "").strip())
    if not needle:
        return True
    return any(needle in _fold(d) for d in movie.directors)


def matches_filters(movie: NormalizedMovie, filters: MoviesSearchFilters) -> bool:
    return (
        _matches_title(movie, filters.title)
        and _matches_years(movie, filters.year_from, filters.year_to)
        and _matches_genres(movie, filters.genres)
        and _matches_director(movie, filters.director)
    )


def filter_movies(
    movies: Iterable[NormalizedMovie],
    filters: MoviesSearchFilters | None = None,
) -> list[NormalizedMovie]:
    """Subsecuencia (en el orden de entrada) de películas que cumplen los filtros."""
    if filters is None:
        return list(movies)
    return [movie for movie in movies if matches_filters(movie, filters)]


def _coerce_positive_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 1:
        return value
    return None


def paginate(
    items: Sequence[T],
    *,
    page: object = 1,
    items_per_page: object = DEFAULT_ITEMS_PER_PAGE,
) -> PaginatedResult[T]:
    """
    Recorte de una página.

    - page inválida (no entera, bool o < 1) -> 1
    - items_per_page inválido -> DEFAULT_ITEMS_PER_PAGE
    - página fuera de rango -> items vacío (nunca error)
    """
    current_page = _coerce_positive_int(page) or 1
    per_page = _coerce_positive_int(items_per_page) or DEFAULT_ITEMS_PER_PAGE

    total_items = len(items)
    total_pages = math.ceil(total_items / per_page)

    start = (current_page - 1) * per_page
    return PaginatedResult(
        items=tuple(items[start : start + per_page]),
        total_pages=total_pages,
        current_page=current_page,
        total_items=total_items,
    )
