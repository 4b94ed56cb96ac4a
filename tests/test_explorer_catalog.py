import logging

import pytest

import explorer.catalog as cat
import explorer.movies_client as mc
from conftest import FakeSession, make_movie, paged_router
from explorer.directors import DirectorCount
from explorer.movies_filter import MoviesSearchFilters

PAGES = {
    1: [
        make_movie("The Matrix", year="1999", genre="Action, Sci-Fi", director="Lana Wachowski, Lilly Wachowski"),
        make_movie("Inception", year="2010", genre="Action, Thriller", director="Christopher Nolan"),
    ],
    2: [
        make_movie("Interstellar", year="2014", genre="Sci-Fi, Drama", director="Christopher Nolan"),
        make_movie("Cloud Atlas", year="2012", genre="Drama", director="Lana Wachowski, Tom Tykwer"),
    ],
}


@pytest.fixture()
def session():
    return FakeSession(paged_router(PAGES))


@pytest.fixture()
def catalog(make_client, session):
    return cat.MovieCatalog(make_client(session), ttl_seconds=30)


def test_directors_by_threshold(catalog):
    assert catalog.directors_by_threshold(1) == [
        DirectorCount("Christopher Nolan", 2),
        DirectorCount("Lana Wachowski", 2),
    ]
    assert catalog.directors_by_threshold(-1) == []


@pytest.mark.parametrize("threshold", [float("nan"), float("inf"), "2", None])
def test_directors_by_threshold_rejects_non_finite(catalog, session, threshold):
    with pytest.raises(mc.ValidationError):
        catalog.directors_by_threshold(threshold)
    assert session.calls == []


def test_corpus_is_cached_within_ttl(catalog, session, monkeypatch):
    now = [100.0]
    monkeypatch.setattr(cat.time, "monotonic", lambda: now[0])

    catalog.directors_by_threshold(0)
    catalog.search(MoviesSearchFilters())
    catalog.filter_options()
    assert session.pages_requested() == [1, 2]

    now[0] = 200.0
    catalog.movies()
    assert session.pages_requested() == [1, 2, 1, 2]


def test_invalidate_forces_refetch(catalog, session, caplog, monkeypatch):
    monkeypatch.setattr(cat.logger, "_resolve_level_from_config", lambda: logging.DEBUG)
    caplog.set_level(logging.DEBUG, logger="movie_explorer")
    catalog.raw_movies()
    catalog.invalidate()
    assert "Catalog corpus invalidated" in [r.getMessage() for r in caplog.records]
    catalog.raw_movies()
    assert session.pages_requested() == [1, 2, 1, 2]


def test_search_filters_and_paginates(catalog):
    result = catalog.search(MoviesSearchFilters(genres=("sci-fi",)), page=1, items_per_page=1)

    assert [m.title for m in result.items] == ["The Matrix"]
    assert result.total_items == 2
    assert result.total_pages == 2

    second = catalog.search(MoviesSearchFilters(genres=("sci-fi",)), page=2, items_per_page=1)
    assert [m.title for m in second.items] == ["Interstellar"]


def test_filter_options(catalog):
    options = catalog.filter_options()

    assert options.genres == ("Action", "Drama", "Sci-Fi", "Thriller")
    assert options.directors == ("Christopher Nolan", "Lana Wachowski", "Lilly Wachowski", "Tom Tykwer")
    assert options.year_range == (1999, 2014)


def test_describe_error_distinguishes_kinds():
    validation = cat.describe_error(mc.ValidationError("bad page"))
    network = cat.describe_error(mc.NetworkError("down"))
    api = cat.describe_error(mc.ApiError("boom", status_code=500))

    assert len({validation, network, api}) == 3
    assert "bad page" in validation
    assert cat.describe_error(mc.AbortError()) == ""
    assert cat.describe_error(RuntimeError("x")).startswith("Error inesperado")
