# src/cafeplatform/ports/pixel_class.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

@runtime_checkable
class PixelClassifierPort(Protocol):
    """
    Clasificador binario por píxel sobre una feature escalar.
    Reglas:
      - predict() devuelve P(cafe | valor) en [0, 1].
      - predict_many() aplica la misma regla a un array.
    """
    def predict(self, value: float) -> float: ...
    def predict_many(self, values: npt.ArrayLike) -> npt.NDArray[np.float64]: ...

__all__ = ["PixelClassifierPort"]
