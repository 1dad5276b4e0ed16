"""Orquestación del cliente HTTP tipado.

Por qué un único punto de orquestación:
- `HttpClient` hace un ciclo petición/respuesta: resuelve el descriptor, delega
  la red en el `HTTPTransport` inyectado, clasifica el resultado crudo y
  decodifica el cuerpo al tipo pedido por el llamador.
- El llamador recibe exactamente un `Result`; nada se lanza más allá de esta
  frontera y nada se reintenta.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Callable, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from core.domain.endpoint import ClientSetup, resolve_url
from core.domain.errors import UNEXPECTED_ERROR_MESSAGE, ClientError, ErrorKind
from core.domain.result import Failure, Result, Success
from core.interfaces.transport import HTTPTransport, ResponseMetadata
from core.services.dispatch import Dispatcher, OneShotCompletion, current_dispatcher

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_STATUS_ERRORS: dict[int, Callable[[], ClientError]] = {
    403: ClientError.authentication_required,
    404: ClientError.could_not_find_host,
    500: ClientError.bad_request,
}


def classify_status(status_code: int) -> ClientError | None:
    """Traduce un status a su fallo, o `None` si es 2xx.

    Solo 403, 404 y 500 tienen tipo propio; cualquier otro no-2xx es
    `unknown("Unexpected Error.")`. El error conserva `status_code`.
    """

    if 200 <= status_code <= 299:
        return None
    factory = _STATUS_ERRORS.get(status_code)
    if factory is not None:
        return dataclasses.replace(factory(), status_code=status_code)
    return ClientError(ErrorKind.UNKNOWN, UNEXPECTED_ERROR_MESSAGE, status_code=status_code)


def decode_body(data: bytes, target_type: type[T] | Any) -> T:
    """Decodifica JSON a `target_type`; lanza `pydantic.ValidationError`."""

    return TypeAdapter(target_type).validate_json(data)


def _transport_failure(error: BaseException) -> ClientError:
    return ClientError.unknown(str(error) or type(error).__name__)


def classify_outcome(
    data: bytes | None,
    response: ResponseMetadata | None,
    error: BaseException | None,
    target_type: type[T] | Any,
) -> Result[T]:
    """Convierte un resultado del transporte en `Result`. Gana la primera regla que aplique."""

    if error is not None:
        return Failure(_transport_failure(error))
    if data is None:
        return Failure(ClientError.broken_data())
    if response is None or not response.is_http_response:
        return Failure(ClientError.invalid_http_response())

    status_error = classify_status(response.status_code)
    if status_error is not None:
        return Failure(status_error)

    try:
        return Success(decode_body(data, target_type))
    except (ValidationError, ValueError) as exc:
        logger.debug("decode_failed", url=response.url, error=str(exc))
        return Failure(ClientError.could_not_parse_object())


class HttpClient:
    """Cliente tipado genérico sobre un `HTTPTransport`.

    Solo guarda sus colaboradores; cada llamada mantiene su propio estado.
    """

    def __init__(
        self,
        transport: HTTPTransport | None = None,
        *,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        if transport is None:
            from adapters.http_client import HttpxTransport

            transport = HttpxTransport()
        self._transport = transport
        self._dispatcher = dispatcher

    def request_data(
        self,
        descriptor: ClientSetup,
        target_type: type[T] | Any,
        completion: Callable[[Result[T]], None],
    ) -> None:
        """Hace una petición y llama a `completion` exactamente una vez."""

        deliver: OneShotCompletion[Result[T]] = OneShotCompletion(
            completion, self._dispatcher or current_dispatcher()
        )

        url = resolve_url(descriptor)
        if url is None:
            logger.info("request_url_invalid", endpoint=getattr(descriptor, "endpoint", None))
            deliver(Failure(ClientError.url_not_found()))
            return

        log = logger.bind(url=str(url))

        def on_outcome(
            data: bytes | None,
            response: ResponseMetadata | None,
            error: BaseException | None,
        ) -> None:
            result = classify_outcome(data, response, error, target_type)
            if isinstance(result, Failure):
                log.info("request_failed", kind=result.error.kind.value, message=result.error.message)
            else:
                log.debug("request_succeeded")
            deliver(result)

        log.debug("request_started")
        try:
            self._transport.data_task(url, on_outcome).resume()
        except Exception as exc:
            # Si el transporte ya había entregado, OneShotCompletion descarta este fallo.
            log.info("request_failed", kind=ErrorKind.UNKNOWN.value, error=repr(exc))
            deliver(Failure(_transport_failure(exc)))

    async def fetch(self, descriptor: ClientSetup, target_type: type[T] | Any) -> Result[T]:
        """Forma awaitable de `request_data` sobre el event loop en curso."""

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Result[T]] = loop.create_future()

        def settle(result: Result[T]) -> None:
            if not future.done():
                future.set_result(result)

        def complete(result: Result[T]) -> None:
            loop.call_soon_threadsafe(settle, result)

        self.request_data(descriptor, target_type, complete)
        return await future
