"""Transporte HTTP sobre httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y redirecciones para todas las peticiones.
- Cumple el contrato `HTTPTransport`: el cliente tipado no conoce httpx y los
  tests lo sustituyen por un doble o por `httpx.MockTransport`.
"""

from __future__ import annotations

import asyncio
import threading

import httpx
import structlog

from core.config import AppSettings
from core.interfaces.transport import ResponseMetadata, TransportCompletion

logger = structlog.get_logger(__name__)

# asyncio solo guarda referencias débiles a las tasks.
_pending_tasks: set[asyncio.Task[None]] = set()


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las peticiones se comporten igual.
    - `transport` permite inyectar `httpx.MockTransport` en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": settings.accept,
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=settings.follow_redirects,
        headers=headers,
        transport=transport,
    )


class HttpxDataTask:
    """Petición GET pendiente; arranca con `resume()`.

    Con un event loop corriendo se programa como task en ese loop; si no,
    corre en un hilo daemon con su propio loop.
    """

    def __init__(
        self,
        url: httpx.URL,
        completion: TransportCompletion,
        *,
        settings: AppSettings,
        extra_headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._completion = completion
        self._settings = settings
        self._extra_headers = extra_headers
        self._transport = transport
        self._started = False
        self._task: asyncio.Task[None] | None = None
        self._thread: threading.Thread | None = None

    @property
    def started(self) -> bool:
        return self._started

    def resume(self) -> None:
        if self._started:
            return
        self._started = True

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            self._task = loop.create_task(self._run())
            _pending_tasks.add(self._task)
            self._task.add_done_callback(_pending_tasks.discard)
            return

        self._thread = threading.Thread(
            target=asyncio.run,
            args=(self._run(),),
            name=f"typed-http-{self.url.host}",
            daemon=True,
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        """Espera al hilo de trabajo (solo cuando no había event loop)."""

        if self._thread is not None:
            self._thread.join(timeout)

    async def _run(self) -> None:
        try:
            async with build_async_client(
                self._settings,
                extra_headers=self._extra_headers,
                transport=self._transport,
            ) as client:
                response = await client.get(self.url)
        except Exception as exc:
            logger.debug("transport_error", url=str(self.url), error=repr(exc))
            self._completion(None, None, exc)
            return

        metadata = ResponseMetadata(
            url=str(response.url),
            status_code=response.status_code,
            headers=dict(response.headers),
        )
        self._completion(response.content, metadata, None)


class HttpxTransport:
    """Implementación de producción de `HTTPTransport`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        extra_headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._extra_headers = extra_headers
        self._transport = transport

    def data_task(self, url: httpx.URL, completion: TransportCompletion) -> HttpxDataTask:
        return HttpxDataTask(
            url,
            completion,
            settings=self._settings,
            extra_headers=self._extra_headers,
            transport=self._transport,
        )
