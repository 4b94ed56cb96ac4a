from __future__ import annotations

"""
explorer/movies_client.py

Cliente del endpoint paginado de películas + orquestación de la descarga completa.

🧠 Principios
-------------
1) Un solo request por página en vuelo:
   - Caché de requests en vuelo (page -> Future) propiedad de la instancia.
   - Llamadas concurrentes a la misma página comparten el mismo Future.
   - La entrada se elimina en un `finally` del worker ANTES de que el Future se
     resuelva: tras resolverse, una nueva llamada lanza un request nuevo.

2) Orden por índice, no por llegada:
   - fetch_all pide la página 1, descubre total_pages y lanza 2..N en paralelo
     (ThreadPoolExecutor). El resultado se concatena en orden de página.

3) Todo o nada:
   - Si falla (o se cancela) cualquier página, fetch_all falla con el primer
     error observado. Nunca hay resultados parciales.

4) Cancelación cooperativa:
   - CancellationToken explícito; se comprueba antes de despachar el request y
     al volver del transporte (únicos puntos de espera).

5) Errores distinguibles (atributo `kind`):
   - ValidationError (validation): página inválida, sin tocar la red.
   - NetworkError (network): fallo de transporte (DNS, conexión, timeout).
   - ApiError (api): status no-2xx o payload estructuralmente inválido.
   - AbortError (abort): cancelado por el llamante; se puede ignorar en silencio.

Transporte: requests.Session compartida (pooling) + Retry de urllib3.
"""

import itertools
import threading
from collections.abc import Mapping
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Final

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from explorer import logger as logger
from explorer.config_movies import (
    MOVIES_API_BASE_URL,
    MOVIES_HTTP_MAX_CONCURRENCY,
    MOVIES_HTTP_RETRY_BACKOFF_FACTOR,
    MOVIES_HTTP_RETRY_TOTAL,
    MOVIES_HTTP_TIMEOUT_SECONDS,
    MOVIES_HTTP_USER_AGENT,
    MOVIES_METRICS_ENABLED,
)

# ============================================================
# ERRORES
# ============================================================


class ApiClientError(Exception):
    """Base de los errores del cliente. `kind` permite despachar sin isinstance."""

    kind: str = "unknown"


class ValidationError(ApiClientError):
    kind = "validation"


class NetworkError(ApiClientError):
    kind = "network"


class ApiError(ApiClientError):
    kind = "api"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AbortError(ApiClientError):
    kind = "abort"

    def __init__(self, message: str = "Request was cancelled") -> None:
        super().__init__(message)


# ============================================================
# CANCELACIÓN
# ============================================================


class CancellationToken:
    """Handle de cancelación cooperativa (thread-safe)."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AbortError()


# ============================================================
# PAYLOAD
# ============================================================


@dataclass(frozen=True, slots=True)
class MoviesPage:
    page: int
    per_page: int
    total: int
    total_pages: int
    data: tuple[dict[str, object], ...]


def _strict_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _parse_page(payload: object, *, requested_page: int) -> MoviesPage:
    if not isinstance(payload, dict):
        raise ApiError("Invalid response format from API")

    data_obj = payload.get("data")
    if not isinstance(data_obj, list):
        raise ApiError("Invalid response: missing or invalid 'data' array")

    items: list[dict[str, object]] = []
    for it in data_obj:
        if not isinstance(it, dict):
            raise ApiError("Invalid response: movie record is not an object")
        items.append(it)

    total_pages = _strict_int(payload.get("total_pages"))
    if total_pages is None:
        raise ApiError("Invalid response: 'total_pages' is not an int")

    page = _strict_int(payload.get("page"))
    per_page = _strict_int(payload.get("per_page"))
    total = _strict_int(payload.get("total"))

    return MoviesPage(
        page=requested_page if page is None else page,
        per_page=len(items) if per_page is None else per_page,
        total=len(items) if total is None else total,
        total_pages=total_pages,
        data=tuple(items),
    )


def _validate_page(page: object) -> int:
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValidationError(f"Invalid page number: {page!r}. Must be >= 1")
    return page


# ============================================================
# MÉTRICAS (ThreadPool safe)
# ============================================================

_METRICS_LOCK = threading.Lock()
_METRICS: dict[str, int] = {
    "http_requests": 0,
    "http_failures": 0,
    "inflight_joins": 0,
    "pages_fetched": 0,
    "aborts": 0,
}


def _m_inc(key: str, delta: int = 1) -> None:
    if not MOVIES_METRICS_ENABLED:
        return
    with _METRICS_LOCK:
        _METRICS[key] = _METRICS.get(key, 0) + delta


def get_metrics_snapshot() -> dict[str, int]:
    with _METRICS_LOCK:
        return dict(_METRICS)


def reset_metrics() -> None:
    with _METRICS_LOCK:
        for key in _METRICS:
            _METRICS[key] = 0


def log_metrics_summary() -> None:
    snapshot = get_metrics_snapshot()
    if not any(snapshot.values()):
        return
    parts = " ".join(f"{k}={v}" for k, v in snapshot.items())
    logger.debug_ctx("MOVIES", f"metrics {parts}")


# ============================================================
# HTTP session + retry
# ============================================================


def build_session(*, pool_size: int = MOVIES_HTTP_MAX_CONCURRENCY) -> requests.Session:
    """
    requests.Session con retries y pool ajustado a la concurrencia del cliente.

    Retry de urllib3 gestiona 429/5xx best-effort; si se agota, la respuesta
    final llega al cliente y se traduce a ApiError.
    """
    session = requests.Session()

    retries = Retry(
        total=MOVIES_HTTP_RETRY_TOTAL,
        backoff_factor=MOVIES_HTTP_RETRY_BACKOFF_FACTOR,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
        respect_retry_after_header=True,
    )
    adapter = HTTPAdapter(
        max_retries=retries,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "User-Agent": MOVIES_HTTP_USER_AGENT,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
    )
    return session


# ============================================================
# CLIENTE
# ============================================================

_WORKER_PREFIX: Final[str] = "movies-api"


class MoviesApiClient:
    """
    Cliente de sesión: una instancia por aplicación, inyectada donde se descargue.

    Es el dueño de la caché de requests en vuelo (única estructura mutable
    compartida); todas sus mutaciones ocurren bajo `_lock`.
    """

    def __init__(
        self,
        *,
        base_url: str = MOVIES_API_BASE_URL,
        timeout_s: float = MOVIES_HTTP_TIMEOUT_SECONDS,
        max_workers: int = MOVIES_HTTP_MAX_CONCURRENCY,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout_s = timeout_s
        self._session = session if session is not None else build_session(pool_size=max_workers)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=_WORKER_PREFIX)
        # submit + registro ocurren bajo el lock: el finally del worker nunca
        # puede adelantarse al registro de su propia entrada.
        self._lock = threading.Lock()
        self._inflight: dict[int, tuple[int, Future[MoviesPage]]] = {}
        self._tickets = itertools.count(1)

    # ------------------------------------------------------------------
    # ciclo de vida
    # ------------------------------------------------------------------

    def __enter__(self) -> MoviesApiClient:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def close(self) -> None:
        self.cancel_all()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._session.close()

    # ------------------------------------------------------------------
    # caché de requests en vuelo
    # ------------------------------------------------------------------

    def inflight_count(self) -> int:
        with self._lock:
            return len(self._inflight)

    def cancel_all(self) -> None:
        """
        Olvida todos los requests en vuelo; los que aún no arrancaron se cancelan.

        Los que ya están en el transporte terminan por su cuenta, pero nuevas
        llamadas ya no se unen a ellos.
        """
        with self._lock:
            entries = list(self._inflight.values())
            self._inflight.clear()
        for _, future in entries:
            future.cancel()

    def _forget(self, page: int, ticket: int) -> None:
        with self._lock:
            entry = self._inflight.get(page)
            if entry is not None and entry[0] == ticket:
                del self._inflight[page]

    def submit_page(self, page: object, cancel: CancellationToken | None = None) -> Future[MoviesPage]:
        """
        Versión no bloqueante de fetch_page.

        Lanza ValidationError de inmediato si la página no es válida.
        """
        page_num = _validate_page(page)

        with self._lock:
            existing = self._inflight.get(page_num)
            if existing is not None:
                _m_inc("inflight_joins", 1)
                logger.debug_ctx("MOVIES", f"page={page_num} joins in-flight request")
                return existing[1]

            ticket = next(self._tickets)
            future = self._executor.submit(self._run_request, page_num, ticket, cancel)
            self._inflight[page_num] = (ticket, future)
            return future

    def _run_request(self, page: int, ticket: int, cancel: CancellationToken | None) -> MoviesPage:
        try:
            return self._request_page(page, cancel)
        finally:
            self._forget(page, ticket)

    # ------------------------------------------------------------------
    # transporte
    # ------------------------------------------------------------------

    def _request_page(self, page: int, cancel: CancellationToken | None) -> MoviesPage:
        try:
            if cancel is not None:
                cancel.raise_if_cancelled()

            _m_inc("http_requests", 1)
            try:
                resp = self._session.get(
                    self._base_url,
                    params={"page": page},
                    timeout=self._timeout_s,
                )
            except RequestException as exc:
                _m_inc("http_failures", 1)
                raise NetworkError(f"Network request failed: {exc!r}") from exc

            # Si el llamante canceló mientras esperábamos, la respuesta se descarta.
            if cancel is not None:
                cancel.raise_if_cancelled()

            if not resp.ok:
                _m_inc("http_failures", 1)
                raise ApiError(
                    f"API request failed: {resp.status_code} {resp.reason or ''}".rstrip(),
                    status_code=resp.status_code,
                )

            try:
                payload = resp.json()
            except ValueError as exc:
                raise ApiError("Invalid response: body is not JSON", status_code=resp.status_code) from exc

            result = _parse_page(payload, requested_page=page)
        except AbortError:
            _m_inc("aborts", 1)
            logger.debug_ctx("MOVIES", f"page={page} cancelled")
            raise

        _m_inc("pages_fetched", 1)
        logger.debug_ctx("MOVIES", f"page={page} items={len(result.data)} total_pages={result.total_pages}")
        return result

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------

    def fetch_page(self, page: object, cancel: CancellationToken | None = None) -> MoviesPage:
        """
        Descarga una página (1-indexed).

        Raises:
            ValidationError, NetworkError, ApiError, AbortError
        """
        return _unwrap(self.submit_page(page, cancel))

    def fetch_all(self, cancel: CancellationToken | None = None) -> list[dict[str, object]]:
        """
        Descarga el corpus completo: [página 1, página 2, ..., página N].

        Si cualquier página falla o se cancela, se propaga el primer error
        observado y no se devuelve nada.
        """
        first = self.fetch_page(1, cancel)
        movies: list[dict[str, object]] = list(first.data)

        if first.total_pages <= 1:
            return movies

        futures = [self.submit_page(p, cancel) for p in range(2, first.total_pages + 1)]
        logger.debug_ctx("MOVIES", f"fetching pages 2..{first.total_pages} concurrently")

        for done in as_completed(futures):
            _unwrap(done)

        for future in futures:
            movies.extend(future.result().data)

        logger.debug_ctx("MOVIES", f"fetched {len(movies)} movies from {first.total_pages} pages")
        return movies


def _unwrap(future: Future[MoviesPage]) -> MoviesPage:
    """Resultado del Future; un Future cancelado se traduce a AbortError."""
    try:
        return future.result()
    except CancelledError as exc:
        raise AbortError() from exc
