"""
explorer/directors.py

Agregación de directores por número de películas (cliente-side: la API no expone
ningún endpoint de agregación).

Contrato de aggregate_directors(movies, threshold):
- movies vacío -> []
- threshold < 0 -> [] (decisión de producto: umbral negativo = "nada cualifica")
- Varios directores en un mismo campo ("A, B") cuentan cada uno por separado.
- Agrupa por clave normalizada (casefold + espacios colapsados); muestra el
  nombre tal y como apareció la PRIMERA vez.
- Solo sobreviven count > threshold (estricto).
- Orden alfabético sin distinguir mayúsculas ni acentos (estable).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from explorer.movie_mapper import (
    collapse_whitespace,
    directors_of,
    normalize_director_name,
    sort_key,
)


@dataclass(frozen=True, slots=True)
class DirectorCount:
    name: str
    count: int


@dataclass(slots=True)
class _DirectorTally:
    first_seen_name: str
    count: int = 0


def _is_usable_threshold(threshold: object) -> bool:
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        return False
    return not math.isnan(threshold) and threshold >= 0


def count_directors(movies: Iterable[object]) -> dict[str, _DirectorTally]:
    """Clave normalizada -> (primer nombre visto, nº de películas)."""
    tallies: dict[str, _DirectorTally] = {}
    for movie in movies:
        for director in directors_of(movie):
            key = normalize_director_name(director)
            if not key:
                continue
            tally = tallies.get(key)
            if tally is None:
                tally = _DirectorTally(first_seen_name=collapse_whitespace(director))
                tallies[key] = tally
            tally.count += 1
    return tallies


def aggregate_directors(movies: Iterable[object], threshold: float) -> list[DirectorCount]:
    """
    Directores con MÁS de `threshold` películas, ordenados alfabéticamente.

    Acepta registros crudos (mappings con "Director") o NormalizedMovie.
    Nunca lanza: un threshold no numérico o NaN devuelve [].
    """
    if not _is_usable_threshold(threshold):
        return []

    tallies = count_directors(movies)
    if not tallies:
        return []

    kept = [
        DirectorCount(name=tally.first_seen_name, count=tally.count)
        for tally in tallies.values()
        if tally.count > threshold
    ]
    return sorted(kept, key=lambda d: sort_key(d.name))
