"""Taxonomía cerrada de errores del cliente HTTP.

Por qué un valor y no una jerarquía de excepciones:
- Cada fallo es un resultado esperado de una llamada de red, no algo fatal.
- El cliente nunca lanza más allá de su frontera; entrega `Failure(ClientError)`.
- Dos errores se comparan por valor (kind + mensaje), útil en tests y en la CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNEXPECTED_ERROR_MESSAGE = "Unexpected Error."


class ErrorKind(str, Enum):
    """Tipos de fallo que puede reportar `HttpClient`."""

    URL_NOT_FOUND = "url_not_found"
    UNKNOWN = "unknown"
    BROKEN_DATA = "broken_data"
    INVALID_HTTP_RESPONSE = "invalid_http_response"
    AUTHENTICATION_REQUIRED = "authentication_required"
    COULD_NOT_FIND_HOST = "could_not_find_host"
    BAD_REQUEST = "bad_request"
    COULD_NOT_PARSE_OBJECT = "could_not_parse_object"


_DESCRIPTIONS: dict[ErrorKind, str] = {
    ErrorKind.URL_NOT_FOUND: "URL not found.",
    ErrorKind.BROKEN_DATA: "Broken data.",
    ErrorKind.INVALID_HTTP_RESPONSE: "Invalid HTTP response.",
    ErrorKind.AUTHENTICATION_REQUIRED: "Authentication required.",
    ErrorKind.COULD_NOT_FIND_HOST: "Could not find host.",
    ErrorKind.BAD_REQUEST: "Bad request.",
    ErrorKind.COULD_NOT_PARSE_OBJECT: "Could not parse object.",
}


@dataclass(frozen=True)
class ClientError:
    """Fallo clasificado de una petición.

    `message` solo se usa con `ErrorKind.UNKNOWN` (texto de diagnóstico).
    `status_code` indica que hubo respuesta HTTP; no participa en la igualdad.
    """

    kind: ErrorKind
    message: str | None = None
    status_code: int | None = field(default=None, compare=False)

    @property
    def has_response(self) -> bool:
        """El servidor respondió (el fallo viene del status, no del transporte)."""

        return self.status_code is not None

    @classmethod
    def url_not_found(cls) -> "ClientError":
        return cls(ErrorKind.URL_NOT_FOUND)

    @classmethod
    def unknown(cls, message: str) -> "ClientError":
        return cls(ErrorKind.UNKNOWN, message)

    @classmethod
    def broken_data(cls) -> "ClientError":
        return cls(ErrorKind.BROKEN_DATA)

    @classmethod
    def invalid_http_response(cls) -> "ClientError":
        return cls(ErrorKind.INVALID_HTTP_RESPONSE)

    @classmethod
    def authentication_required(cls) -> "ClientError":
        return cls(ErrorKind.AUTHENTICATION_REQUIRED)

    @classmethod
    def could_not_find_host(cls) -> "ClientError":
        return cls(ErrorKind.COULD_NOT_FIND_HOST)

    @classmethod
    def bad_request(cls) -> "ClientError":
        return cls(ErrorKind.BAD_REQUEST)

    @classmethod
    def could_not_parse_object(cls) -> "ClientError":
        return cls(ErrorKind.COULD_NOT_PARSE_OBJECT)

    @property
    def description(self) -> str:
        """Texto legible para presentar al usuario."""

        if self.kind is ErrorKind.UNKNOWN:
            return self.message or UNEXPECTED_ERROR_MESSAGE
        return _DESCRIPTIONS[self.kind]

    def __str__(self) -> str:
        return self.description


class ClientRequestError(Exception):
    """Se lanza solo desde `Result.unwrap()` cuando el llamador lo pide."""

    def __init__(self, error: ClientError) -> None:
        super().__init__(error.description)
        self.error = error
