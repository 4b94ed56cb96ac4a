import pytest

from conftest import make_movie
from explorer.movie_mapper import normalize_movie
from explorer.movies_filter import (
    DEFAULT_ITEMS_PER_PAGE,
    MoviesSearchFilters,
    filter_movies,
    matches_filters,
    paginate,
)


def _movie(title="Movie", *, year="2000", genre="Drama", director="Someone"):
    return normalize_movie(make_movie(title, year=year, genre=genre, director=director))


def test_no_filters_returns_everything_in_order():
    movies = [_movie("A"), _movie("B", year="N/A"), _movie("C")]
    assert filter_movies(movies, MoviesSearchFilters()) == movies
    assert filter_movies(movies) == movies


def test_year_range_is_inclusive():
    movies = [_movie("old", year="1990"), _movie("mid", year="2000"), _movie("new", year="2020")]
    result = filter_movies(movies, MoviesSearchFilters(year_from=1995, year_to=2005))
    assert [m.title for m in result] == ["mid"]

    edges = filter_movies(movies, MoviesSearchFilters(year_from=1990, year_to=2000))
    assert [m.title for m in edges] == ["old", "mid"]


def test_movie_without_year_passes_year_filters():
    unknown = _movie("unknown", year="N/A")
    assert matches_filters(unknown, MoviesSearchFilters(year_from=2000, year_to=2001))


def test_title_is_case_and_accent_insensitive_substring():
    movies = [_movie("Amélie"), _movie("The Matrix"), _movie("Matrix Reloaded")]
    assert [m.title for m in filter_movies(movies, MoviesSearchFilters(title="  matrix "))] == [
        "The Matrix",
        "Matrix Reloaded",
    ]
    assert [m.title for m in filter_movies(movies, MoviesSearchFilters(title="AMELIE"))] == ["Amélie"]


def test_blank_title_filter_is_inactive():
    movies = [_movie("A"), _movie("B")]
    assert filter_movies(movies, MoviesSearchFilters(title="   ")) == movies


def test_genres_match_any():
    movies = [
        _movie("a", genre="Action, Sci-Fi"),
        _movie("b", genre="Comedy"),
        _movie("c", genre="Animación"),
        _movie("d", genre="N/A"),
    ]
    result = filter_movies(movies, MoviesSearchFilters(genres=("sci-fi", "ANIMACION")))
    assert [m.title for m in result] == ["a", "c"]
    assert filter_movies(movies, MoviesSearchFilters(genres=())) == movies
    assert filter_movies(movies, MoviesSearchFilters(genres=None)) == movies


def test_genre_requires_exact_name_not_substring():
    movies = [_movie("a", genre="Science Fiction")]
    assert filter_movies(movies, MoviesSearchFilters(genres=("Science",))) == []


def test_director_substring_against_any_director():
    movies = [
        _movie("matrix", director="Lana Wachowski, Lilly Wachowski"),
        _movie("volver", director="Pedro Almodóvar"),
        _movie("inception", director="Christopher Nolan"),
    ]
    assert [m.title for m in filter_movies(movies, MoviesSearchFilters(director="lilly"))] == ["matrix"]
    assert [m.title for m in filter_movies(movies, MoviesSearchFilters(director="almodovar"))] == ["volver"]


def test_filters_are_combined_with_and():
    movies = [
        _movie("Dark Knight", year="2008", genre="Action", director="Christopher Nolan"),
        _movie("Dark", year="2017", genre="Drama", director="Christopher Nolan"),
        _movie("Dark City", year="1998", genre="Action", director="Alex Proyas"),
    ]
    filters = MoviesSearchFilters(title="dark", year_from=2000, genres=("action",), director="nolan")
    assert [m.title for m in filter_movies(movies, filters)] == ["Dark Knight"]


def test_paginate_slices_and_counts():
    items = list(range(25))

    first = paginate(items, page=1, items_per_page=10)
    assert first.items == tuple(range(10))
    assert first.total_pages == 3
    assert first.current_page == 1
    assert first.total_items == 25

    last = paginate(items, page=3, items_per_page=10)
    assert last.items == (20, 21, 22, 23, 24)


def test_paginate_out_of_range_page_is_empty():
    result = paginate(list(range(5)), page=4, items_per_page=2)
    assert result.items == ()
    assert result.total_pages == 3
    assert result.current_page == 4


@pytest.mark.parametrize("page", [0, -3, 1.5, "2", None, True, float("nan")])
def test_paginate_invalid_page_is_coerced_to_first(page):
    result = paginate(list(range(5)), page=page, items_per_page=2)
    assert result.current_page == 1
    assert result.items == (0, 1)


def test_paginate_empty_input():
    result = paginate([], page=1, items_per_page=10)
    assert result.items == ()
    assert result.total_pages == 0
    assert result.total_items == 0


def test_paginate_invalid_page_size_uses_default():
    result = paginate(list(range(30)), page=1, items_per_page=0)
    assert len(result.items) == DEFAULT_ITEMS_PER_PAGE
    assert result.total_pages == 3


@pytest.mark.parametrize("items_per_page", [0, -5, 2.5, "3", None, True])
def test_paginate_invalid_page_size_values_use_default(items_per_page):
    result = paginate(list(range(15)), page=1, items_per_page=items_per_page)
    assert len(result.items) == DEFAULT_ITEMS_PER_PAGE
    assert result.total_pages == 2


def test_paginate_accepts_integral_floats():
    result = paginate(list(range(10)), page=2.0, items_per_page=4.0)
    assert result.current_page == 2
    assert result.items == (4, 5, 6, 7)
    assert result.total_pages == 3


def test_genre_filter_absent_on_every_field():
    movie = _movie("a", genre="Action")
    assert matches_filters(movie, MoviesSearchFilters(title=None, year_from=None, year_to=None, genres=None, director=None))
