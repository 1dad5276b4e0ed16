"""Entrega de resultados a una superficie de presentación.

El presenter no es dueño de la vista: guarda una referencia débil. Si la
vista ya no existe, presentar es un no-op (no un error).
"""

from __future__ import annotations

import weakref
from typing import Any, Protocol

import structlog

from core.domain.errors import ClientError
from core.domain.result import Failure, Result

logger = structlog.get_logger(__name__)


class ResultDisplay(Protocol):
    """Superficie que muestra valores decodificados o errores clasificados."""

    def show_value(self, value: Any) -> None:
        ...

    def show_error(self, error: ClientError) -> None:
        ...


class ResultPresenter:
    def __init__(self, display: ResultDisplay | None = None) -> None:
        self._display_ref: weakref.ReferenceType[ResultDisplay] | None = None
        if display is not None:
            self.attach(display)

    def attach(self, display: ResultDisplay) -> None:
        self._display_ref = weakref.ref(display)

    @property
    def display(self) -> ResultDisplay | None:
        if self._display_ref is None:
            return None
        return self._display_ref()

    def present(self, result: Result[Any]) -> bool:
        """Reenvía `result` a la vista. Devuelve `False` si no hay vista."""

        display = self.display
        if display is None:
            logger.debug("display_released", success=result.is_success)
            return False
        if isinstance(result, Failure):
            display.show_error(result.error)
        else:
            display.show_value(result.value)
        return True
