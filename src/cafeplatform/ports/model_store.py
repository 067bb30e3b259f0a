# src/cafeplatform/ports/model_store.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..contracts.model import ClassifierModel

@runtime_checkable
class ModelStorePort(Protocol):
    """
    Almacenamiento durable del clasificador (JSON, DB, blob...).
    """
    def exists(self) -> bool: ...
    def load(self) -> ClassifierModel: ...
    def save(self, model: ClassifierModel) -> None: ...

__all__ = ["ModelStorePort"]
