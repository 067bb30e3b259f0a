# src/cafeplatform/contracts/errors.py
from __future__ import annotations

from .core import Stage


class CafePlatformError(Exception):
    """Error base del pipeline. Guarda la etapa donde ocurrió."""
    stage: Stage = Stage.VALIDATE

    def __init__(self, message: str, *, stage: Stage | None = None) -> None:
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage


class InvalidInputError(CafePlatformError, ValueError):
    """Polígono mal formado, anillo con < 3 vértices o parámetros inválidos."""
    stage = Stage.VALIDATE


class RasterUnavailableError(CafePlatformError):
    stage = Stage.RASTER


class RasterNotFoundError(RasterUnavailableError):
    pass


class RasterDecodeError(RasterUnavailableError):
    pass


class ModelUnavailableError(CafePlatformError):
    """No hay modelo persistido ni corpus de entrenamiento."""
    stage = Stage.MODEL


class EmptyCorpusError(CafePlatformError, ValueError):
    """El corpus existe pero no tiene filas utilizables."""
    stage = Stage.MODEL


class CorpusFormatError(CafePlatformError):
    """El CSV no tiene la columna de feature configurada."""
    stage = Stage.MODEL


class OutOfBoundsError(CafePlatformError):
    """El polígono cae fuera de la cobertura del raster (política 'error')."""
    stage = Stage.WINDOW


__all__ = [
    "CafePlatformError",
    "InvalidInputError",
    "RasterUnavailableError",
    "RasterNotFoundError",
    "RasterDecodeError",
    "ModelUnavailableError",
    "EmptyCorpusError",
    "CorpusFormatError",
    "OutOfBoundsError",
]
