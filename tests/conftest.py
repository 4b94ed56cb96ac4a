from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable

import pytest

import explorer.movies_client as mc

NOT_JSON = object()


@dataclass
class FakeHTTPResponse:
    status_code: int = 200
    payload: object = None
    reason: str = "OK"

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> object:
        if self.payload is NOT_JSON:
            raise ValueError("not json")
        return self.payload


@dataclass
class GetCall:
    url: str
    page: int
    timeout: float | None


class FakeSession:
    """
    Minimal requests.Session fake with programmable routing.

    The router receives the page number and returns a FakeHTTPResponse or raises.
    If a gate is set for a page, the call blocks until the gate is released.
    """

    def __init__(self, router: Callable[[int], FakeHTTPResponse]) -> None:
        self._router = router
        self._lock = threading.Lock()
        self.calls: list[GetCall] = []
        self.gates: dict[int, threading.Event] = {}
        self.closed = False

    def get(self, url: str, params: dict[str, int] | None = None, timeout: float | None = None) -> FakeHTTPResponse:
        page = int((params or {}).get("page", 1))
        with self._lock:
            self.calls.append(GetCall(url=url, page=page, timeout=timeout))
        gate = self.gates.get(page)
        if gate is not None:
            assert gate.wait(timeout=5), f"gate for page {page} never released"
        return self._router(page)

    def pages_requested(self) -> list[int]:
        with self._lock:
            return [c.page for c in self.calls]

    def close(self) -> None:
        self.closed = True


def make_movie(
    title: str = "Test Movie",
    *,
    year: str = "2023",
    genre: str = "Action",
    director: str = "Test Director",
    runtime: str = "120 min",
) -> dict[str, object]:
    return {
        "Title": title,
        "Year": year,
        "Rated": "PG-13",
        "Released": "01 Jan 2023",
        "Runtime": runtime,
        "Genre": genre,
        "Director": director,
        "Writer": "Test Writer",
        "Actors": "Test Actor",
    }


def page_payload(page: int, total_pages: int, data: list[dict[str, object]], *, per_page: int = 10) -> dict[str, object]:
    return {
        "page": page,
        "per_page": per_page,
        "total": total_pages * per_page,
        "total_pages": total_pages,
        "data": data,
    }


def paged_router(pages: dict[int, list[dict[str, object]]]) -> Callable[[int], FakeHTTPResponse]:
    total_pages = len(pages)

    def router(page: int) -> FakeHTTPResponse:
        return FakeHTTPResponse(payload=page_payload(page, total_pages, pages[page]))

    return router


@dataclass
class ClientFactory:
    created: list[mc.MoviesApiClient] = field(default_factory=list)

    def __call__(self, session: FakeSession, *, max_workers: int = 4) -> mc.MoviesApiClient:
        client = mc.MoviesApiClient(
            base_url="https://movies.test/api/movies/search",
            timeout_s=2.0,
            max_workers=max_workers,
            session=session,  # type: ignore[arg-type]
        )
        self.created.append(client)
        return client


@pytest.fixture()
def make_client():
    factory = ClientFactory()
    yield factory
    for client in factory.created:
        client.close()


@pytest.fixture(autouse=True)
def _reset_client_metrics():
    mc.reset_metrics()
    yield
    mc.reset_metrics()
