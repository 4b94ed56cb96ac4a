"""
explorer/movie_mapper.py

Normalización de registros crudos de la API (wire format) a un modelo canónico:
- Campos con nombre capitalizado (Title, Year, Runtime, Genre, Director, ...)
- Valores siempre string; "N/A" o vacío significan "ausente"
- Listas unidas por comas (Genre, Director, Writer, Actors)

Reglas:
- Funciones totales: nunca lanzan; entrada inválida => campo ausente (None / []).
- Claves de comparación (normalize_*_name) solo sirven para agrupar, nunca para mostrar.
- No hace logging (módulo core/utility).
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final, Union

# ============================================================================
# Regex/constantes
# ============================================================================

_NA: Final[str] = "N/A"

_YEAR_MIN: Final[int] = 1800
_YEAR_MAX: Final[int] = 2100

# Primer bloque de 4 dígitos ("1999", "1999–2000", "c. 1999")
_YEAR_RE: Final[re.Pattern[str]] = re.compile(r"[0-9]{4}")

_RUNTIME_HOURS_RE: Final[re.Pattern[str]] = re.compile(r"([0-9]+)\s*h", re.IGNORECASE)
_RUNTIME_MINUTES_RE: Final[re.Pattern[str]] = re.compile(r"([0-9]+)\s*min", re.IGNORECASE)

_WS_RE: Final[re.Pattern[str]] = re.compile(r"\s+")


# ============================================================================
# Modelo canónico
# ============================================================================


@dataclass(frozen=True, slots=True)
class NormalizedMovie:
    """
    Película normalizada (inmutable).

    year/runtime:
      - None si el dato crudo es ausente o inválido

    genres/directors/writers/actors:
      - tuplas en el orden de origen (sin deduplicar)

    original:
      - registro crudo, excluido de igualdad y repr
    """

    title: str
    year: int | None
    rated: str
    released: str
    runtime: int | None
    genres: tuple[str, ...]
    directors: tuple[str, ...]
    writers: tuple[str, ...]
    actors: tuple[str, ...]
    original: Mapping[str, object] = field(default_factory=dict, compare=False, repr=False)


MovieLike = Union[NormalizedMovie, Mapping[str, object]]


# ============================================================================
# Primitivas de parseo
# ============================================================================


def safe_string(value: object) -> str:
    """None => ""; cualquier otro valor se convierte a str y se recorta."""
    if value is None:
        return ""
    return str(value).strip()


def _is_absent(text: str) -> bool:
    return not text or text == _NA


def parse_year(value: object) -> int | None:
    """
    Año desde el primer bloque de 4 dígitos.

    "1999–2000" -> 1999 (el resto del rango se descarta).
    Fuera de [1800, 2100] -> None.
    """
    text = safe_string(value)
    if _is_absent(text):
        return None

    match = _YEAR_RE.search(text)
    if match is None:
        return None

    year = int(match.group(0))
    if year < _YEAR_MIN or year > _YEAR_MAX:
        return None
    return year


def parse_runtime(value: object) -> int | None:
    """Minutos desde "136 min" o "2h 16min"; total <= 0 -> None."""
    text = safe_string(value)
    if _is_absent(text):
        return None

    total = 0
    hours = _RUNTIME_HOURS_RE.search(text)
    if hours is not None:
        total += int(hours.group(1)) * 60
    minutes = _RUNTIME_MINUTES_RE.search(text)
    if minutes is not None:
        total += int(minutes.group(1))

    return total if total > 0 else None


def parse_comma_separated(value: object) -> list[str]:
    """Split por comas, trim y descarte de vacíos. Conserva orden y duplicados."""
    text = safe_string(value)
    if _is_absent(text):
        return []
    return [part.strip() for part in text.split(",") if part.strip()]


def collapse_whitespace(value: object) -> str:
    return _WS_RE.sub(" ", safe_string(value))


def normalize_director_name(director: object) -> str:
    """Clave de comparación: casefold + espacios colapsados."""
    return collapse_whitespace(director).casefold()


def normalize_genre_name(genre: object) -> str:
    """Clave de comparación de géneros (misma regla que directores)."""
    return collapse_whitespace(genre).casefold()


def remove_accents(text: str) -> str:
    """Elimina diacríticos (NFD + descarte de marcas combinantes)."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def sort_key(name: str) -> str:
    """
    Orden alfabético "base": ignora mayúsculas y acentos.

    Aproxima localeCompare(..., {sensitivity: "base"}); al ser sorted() estable,
    nombres con la misma clave mantienen el orden de entrada.
    """
    return remove_accents(name).casefold()


# ============================================================================
# Normalización de registros
# ============================================================================


def _as_record(raw: object) -> Mapping[str, object]:
    return raw if isinstance(raw, Mapping) else {}


def normalize_movie(raw: object) -> NormalizedMovie:
    """Convierte un registro crudo en NormalizedMovie. Nunca lanza."""
    record = _as_record(raw)
    return NormalizedMovie(
        title=safe_string(record.get("Title")),
        year=parse_year(record.get("Year")),
        rated=safe_string(record.get("Rated")),
        released=safe_string(record.get("Released")),
        runtime=parse_runtime(record.get("Runtime")),
        genres=tuple(parse_comma_separated(record.get("Genre"))),
        directors=tuple(parse_comma_separated(record.get("Director"))),
        writers=tuple(parse_comma_separated(record.get("Writer"))),
        actors=tuple(parse_comma_separated(record.get("Actors"))),
        original=record,
    )


def normalize_movies(raws: Iterable[object]) -> list[NormalizedMovie]:
    return [normalize_movie(raw) for raw in raws]


def movie_matches_query(raw: object, query: str | None) -> bool:
    """Búsqueda libre (case-insensitive) sobre título, director, actores y género."""
    if not query:
        return True

    record = _as_record(raw)
    needle = query.strip().lower()
    haystack = " ".join(
        safe_string(record.get(key)) for key in ("Title", "Director", "Actors", "Genre")
    ).lower()
    return needle in haystack


# ============================================================================
# Extracción de valores únicos (opciones de filtros)
# ============================================================================


def directors_of(movie: object) -> list[str]:
    """Directores de un registro crudo o normalizado."""
    if isinstance(movie, NormalizedMovie):
        return list(movie.directors)
    return parse_comma_separated(_as_record(movie).get("Director"))


def genres_of(movie: object) -> list[str]:
    if isinstance(movie, NormalizedMovie):
        return list(movie.genres)
    return parse_comma_separated(_as_record(movie).get("Genre"))


def _unique_names(movies: Iterable[object], values_of, key_of) -> list[str]:
    first_seen: dict[str, str] = {}
    for movie in movies:
        for value in values_of(movie):
            key = key_of(value)
            if key and key not in first_seen:
                first_seen[key] = collapse_whitespace(value)
    return sorted(first_seen.values(), key=sort_key)


def unique_directors(movies: Iterable[object]) -> list[str]:
    return _unique_names(movies, directors_of, normalize_director_name)


def unique_genres(movies: Iterable[object]) -> list[str]:
    return _unique_names(movies, genres_of, normalize_genre_name)


def year_range(movies: Iterable[object]) -> tuple[int, int] | None:
    """(min, max) de años parseables; None si no hay ninguno."""
    years: list[int] = []
    for movie in movies:
        if isinstance(movie, NormalizedMovie):
            year = movie.year
        else:
            year = parse_year(_as_record(movie).get("Year"))
        if year is not None:
            years.append(year)

    if not years:
        return None
    return min(years), max(years)
