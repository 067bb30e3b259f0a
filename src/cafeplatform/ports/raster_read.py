# src/cafeplatform/ports/raster_read.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

from ..contracts.geo import GeoProfile, PixelWindow

URI = str

@dataclass(frozen=True)
class RasterHandle:
    """
    Raster abierto: perfil decodificado + dataset del backend.
    Se crea una vez por proceso y no se muta.
    """
    uri: URI
    profile: GeoProfile
    band_index: int = 1
    source: Any = field(default=None, repr=False, compare=False)

@runtime_checkable
class RasterReaderPort(Protocol):
    """
    Lector de raster de banda única con acceso por ventanas.
    Reglas:
      - open() falla con RasterNotFoundError / RasterDecodeError.
      - read_window() devuelve un array 1-D float64 (row-major) de
        window.width * window.height muestras; nodata -> NaN.
    """
    def open(self, uri: URI) -> RasterHandle: ...
    def read_window(self, handle: RasterHandle, window: PixelWindow) -> npt.NDArray[np.float64]: ...
    def exists(self, uri: URI) -> bool: ...

__all__ = ["RasterReaderPort", "RasterHandle", "URI"]
