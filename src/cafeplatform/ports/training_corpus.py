# src/cafeplatform/ports/training_corpus.py
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..contracts.core import Sample

@runtime_checkable
class TrainingCorpusPort(Protocol):
    """
    Origen de muestras etiquetadas (CSV de puntos sobre polígonos de cultivo).
    read_samples() descarta filas con feature no finita.
    """
    def exists(self) -> bool: ...
    def read_samples(self) -> Sequence[Sample]: ...

__all__ = ["TrainingCorpusPort"]
