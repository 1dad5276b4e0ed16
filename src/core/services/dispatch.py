"""Entrega de resultados al contexto del llamador.

El transporte puede completar en cualquier hilo. El cliente entrega su
resultado por un único punto (`Dispatcher`): el event loop del llamador si
existe, o en línea si no.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Generic, Protocol, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class Dispatcher(Protocol):
    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        ...


class InlineDispatcher:
    """Ejecuta en el hilo que completa (sin event loop de por medio)."""

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        fn(*args)


class LoopDispatcher:
    """Reprograma la entrega en un event loop concreto (thread-safe)."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        self._loop.call_soon_threadsafe(fn, *args)


def current_dispatcher() -> Dispatcher:
    """Dispatcher por defecto para una llamada hecha ahora mismo."""

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return InlineDispatcher()
    return LoopDispatcher(loop)


class OneShotCompletion(Generic[T]):
    """Completion que solo puede cumplirse una vez.

    La primera llamada consume la capacidad y entrega vía dispatcher; las
    siguientes se descartan con un warning.
    """

    def __init__(self, completion: Callable[[T], None], dispatcher: Dispatcher) -> None:
        self._completion: Callable[[T], None] | None = completion
        self._dispatcher = dispatcher
        self._lock = threading.Lock()

    @property
    def delivered(self) -> bool:
        return self._completion is None

    def __call__(self, result: T) -> None:
        with self._lock:
            completion, self._completion = self._completion, None
        if completion is None:
            logger.warning("completion_already_delivered", result=repr(result))
            return
        self._dispatcher.dispatch(completion, result)
