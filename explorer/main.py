from __future__ import annotations

"""
explorer/main.py

Punto de entrada (CLI) del explorador de películas.

Subcomandos:
- directors --threshold N : directores con MÁS de N películas
- movies [filtros]        : búsqueda filtrada y paginada
- options                 : directores, géneros y rango de años disponibles

Reglas de consola (alineado con explorer/logger.py)
---------------------------------------------------
- Resultados: SIEMPRE visibles -> logger.info(..., always=True)
- Ctrl+C: cancela los requests en curso y sale limpio, sin stacktrace.
"""

import argparse
import sys
from collections.abc import Sequence

from explorer import config_base as _config_base  # noqa: F401  (carga .env + modos)
from explorer import logger as logger
from explorer.catalog import MovieCatalog, describe_error
from explorer.movies_client import (
    ApiClientError,
    CancellationToken,
    MoviesApiClient,
    ValidationError,
    log_metrics_summary,
)
from explorer.movies_filter import MoviesSearchFilters

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_INTERRUPTED = 130


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="start",
        description="Movie Explorer - directores por umbral y búsqueda de películas",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_dir = sub.add_parser("directors", help="Directores con más de N películas")
    p_dir.add_argument("--threshold", type=int, required=True, help="Umbral (estrictamente mayor)")

    p_mov = sub.add_parser("movies", help="Buscar películas con filtros")
    p_mov.add_argument("--title", default=None)
    p_mov.add_argument("--year-from", type=int, default=None)
    p_mov.add_argument("--year-to", type=int, default=None)
    p_mov.add_argument("--genre", action="append", default=[], help="Repetible; basta con uno")
    p_mov.add_argument("--director", default=None)
    p_mov.add_argument("--page", type=int, default=1)
    p_mov.add_argument("--per-page", type=int, default=None)

    sub.add_parser("options", help="Valores disponibles para los filtros")
    return parser


def filters_from_args(args: argparse.Namespace) -> MoviesSearchFilters:
    return MoviesSearchFilters(
        title=args.title,
        year_from=args.year_from,
        year_to=args.year_to,
        genres=tuple(args.genre or ()),
        director=args.director,
    )


def _format_year(year: int | None) -> str:
    return "N/A" if year is None else str(year)


def _run_directors(catalog: MovieCatalog, args: argparse.Namespace, cancel: CancellationToken) -> None:
    directors = catalog.directors_by_threshold(args.threshold, cancel)
    if not directors:
        logger.info(f"No hay directores con más de {args.threshold} películas.", always=True)
        return
    for d in directors:
        logger.info(f"{d.name}\t{d.count}", always=True)


def _run_movies(catalog: MovieCatalog, args: argparse.Namespace, cancel: CancellationToken) -> None:
    kwargs: dict[str, int] = {"page": args.page}
    if args.per_page is not None:
        kwargs["items_per_page"] = args.per_page

    result = catalog.search(filters_from_args(args), cancel=cancel, **kwargs)
    for movie in result.items:
        logger.info(
            f"{movie.title} ({_format_year(movie.year)}) | "
            f"{', '.join(movie.genres) or 'N/A'} | {', '.join(movie.directors) or 'N/A'}",
            always=True,
        )
    logger.info(
        f"Página {result.current_page}/{result.total_pages} · {result.total_items} películas",
        always=True,
    )


def _run_options(catalog: MovieCatalog, cancel: CancellationToken) -> None:
    options = catalog.filter_options(cancel)
    logger.info(f"Géneros ({len(options.genres)}): {', '.join(options.genres)}", always=True)
    logger.info(f"Directores ({len(options.directors)}): {', '.join(options.directors)}", always=True)
    if options.year_range is not None:
        logger.info(f"Años: {options.year_range[0]}-{options.year_range[1]}", always=True)


def run(argv: Sequence[str] | None = None, *, client: MoviesApiClient | None = None) -> int:
    args = _build_parser().parse_args(argv)
    cancel = CancellationToken()
    owned_client = client is None
    api_client = client if client is not None else MoviesApiClient()
    catalog = MovieCatalog(api_client)

    try:
        if args.command == "directors":
            _run_directors(catalog, args, cancel)
        elif args.command == "movies":
            _run_movies(catalog, args, cancel)
        else:
            _run_options(catalog, cancel)
    except KeyboardInterrupt:
        cancel.cancel()
        logger.info("\n[MovieExplorer] Interrumpido por el usuario (Ctrl+C).", always=True)
        return EXIT_INTERRUPTED
    except ValidationError as exc:
        logger.error(describe_error(exc))
        return EXIT_INVALID_INPUT
    except ApiClientError as exc:
        message = describe_error(exc)
        if not message:
            return EXIT_INTERRUPTED
        logger.error(message)
        return EXIT_ERROR
    finally:
        log_metrics_summary()
        if owned_client:
            api_client.close()

    return EXIT_OK


def start() -> None:
    sys.exit(run())


if __name__ == "__main__":
    start()
