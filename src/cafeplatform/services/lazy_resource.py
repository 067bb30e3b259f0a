# src/cafeplatform/services/lazy_resource.py
from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class LazyResource(Generic[T]):
    """
    Recurso de proceso inicializado una sola vez (single-flight).
    - get(): la primera llamada ejecuta la factory bajo lock; las demás
      devuelven el valor cacheado sin tomar el lock.
    - Si la factory falla no se cachea nada y la excepción se propaga.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def get(self) -> T:
        if self._ready:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._ready:
                self._value = self._factory()
                self._ready = True
        return self._value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        """Reemplaza el valor cacheado (p.ej. tras un re-entrenamiento explícito)."""
        with self._lock:
            self._value = value
            self._ready = True

__all__ = ["LazyResource"]
