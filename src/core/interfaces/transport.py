"""Contrato del transporte HTTP.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Producción usa httpx (`adapters.http_client.HttpxTransport`); los tests
  devuelven resultados enlatados, síncronos o diferidos, sin red real.

Reglas del contrato:
- `data_task` no bloquea: devuelve un `DataTask` y nada ocurre hasta `resume()`.
- La `completion` se invoca exactamente una vez con (data, response, error).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, runtime_checkable

import httpx


@dataclass(frozen=True)
class ResponseMetadata:
    """Metadatos de respuesta recibidos del transporte.

    Si `status_code` es `None` la respuesta no es HTTP bien formada.
    """

    url: str
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_http_response(self) -> bool:
        return self.status_code is not None


TransportCompletion = Callable[
    [Optional[bytes], Optional[ResponseMetadata], Optional[BaseException]],
    None,
]


@runtime_checkable
class DataTask(Protocol):
    """Handle de una petición pendiente; su única obligación es arrancarla."""

    def resume(self) -> None:
        ...


@runtime_checkable
class HTTPTransport(Protocol):
    """Transporte de bytes: una petición, un resultado."""

    def data_task(self, url: httpx.URL, completion: TransportCompletion) -> DataTask:
        ...
