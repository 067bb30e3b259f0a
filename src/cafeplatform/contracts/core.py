# src/cafeplatform/contracts/core.py
from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# -------------------------
# Etiquetas de clase
# -------------------------
class CoverClass(str, Enum):
    TARGET = "cafe"
    OTHER = "no_cafe"

    @classmethod
    def from_raw(cls, raw: object, target_label: str = "cafe") -> "CoverClass":
        """Cualquier valor distinto de `target_label` (trim + lower) es OTHER."""
        s = "" if raw is None else str(raw).strip().lower()
        return cls.TARGET if s == target_label.strip().lower() else cls.OTHER

# -------------------------
# Muestras de entrenamiento
# -------------------------
class Sample(BaseModel):
    model_config = ConfigDict(frozen=True)
    value: float
    label: CoverClass

    @field_validator("value")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("value debe ser finito")
        return v

# -------------------------
# Resultado de análisis
# -------------------------
class ClassificationResult(BaseModel):
    """Conteos por polígono. Serializa en camelCase (totalPixels, ...)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    total_pixels: int = Field(0, ge=0, alias="totalPixels")
    coffee_pixels: int = Field(0, ge=0, alias="coffeePixels")
    coffee_percentage: float = Field(0.0, ge=0.0, le=100.0, alias="coffeePercentage")

    @model_validator(mode="after")
    def _coffee_le_total(self) -> "ClassificationResult":
        if self.coffee_pixels > self.total_pixels:
            raise ValueError("coffee_pixels no puede superar total_pixels")
        return self

    @classmethod
    def empty(cls) -> "ClassificationResult":
        return cls(total_pixels=0, coffee_pixels=0, coffee_percentage=0.0)

    @classmethod
    def from_counts(cls, total: int, coffee: int) -> "ClassificationResult":
        pct = round(coffee / total * 100.0, 2) if total else 0.0
        return cls(total_pixels=total, coffee_pixels=coffee, coffee_percentage=pct)

    def as_response(self) -> dict:
        return self.model_dump(by_alias=True)

# -------------------------
# Ejecuciones / errores
# -------------------------
class Stage(str, Enum):
    VALIDATE = "validate"
    MODEL = "model"
    RASTER = "raster"
    WINDOW = "window"
    CLASSIFY = "classify"

class RunError(BaseModel):
    model_config = ConfigDict(frozen=True)
    stage: Stage
    error: str
    message: str
    detail: str | None = None
