"""Resultado discriminado de una petición: `Success[T]` o `Failure`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from core.domain.errors import ClientError, ClientRequestError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: ClientError

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise ClientRequestError(self.error)


Result = Union[Success[T], Failure]
