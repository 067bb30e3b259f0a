# src/cafeplatform/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.geo import CRSRef

class Settings(BaseSettings):
    """
    Config unificada del proyecto. No toca disco.
    Debe ser construida y provista por composition/di.py (CLI/adapters).
    """
    model_config = SettingsConfigDict(
        frozen=True,
        env_file=".env",
        env_prefix="CAFE_",
        env_nested_delimiter="__",
        extra="forbid",
    )

    # --- básicos ---
    project_root: Path = Path(".")
    # Importante: declaramos como str para que pydantic-settings NO intente json.loads
    expected_crs: str = "EPSG:4326"
    log_level: str = "INFO"

    # --- datos (relativos a project_root) ---
    raster_path: Path = Path("data/sentinel2/ndvi.tif")
    model_path: Path = Path("data/model/coffee-model.json")
    training_csv: Path = Path("data/entrenamiento/poligonos_cultivos_points.csv")
    band_index: int = Field(1, ge=1)

    # --- corpus ---
    label_column: str = "clase"
    target_label: str = "cafe"
    feature_column: Optional[str] = None  # si None, se detecta por nombre/heurística

    # --- análisis ---
    sample_step: int = Field(1, ge=1)
    empty_window_policy: Literal["zero", "error"] = "zero"
    probability_threshold: float = Field(0.5, gt=0.0, lt=1.0)

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("project_root", mode="before")
    @classmethod
    def _abs_root(cls, v: Path | str) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("expected_crs", "label_column", "target_label", mode="before")
    @classmethod
    def _non_empty(cls, v: str, info) -> str:
        v2 = str(v).strip()
        if not v2:
            raise ValueError(f"{info.field_name} no puede ser vacío")
        return v2

    @field_validator("feature_column", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v2 = str(v).strip()
        return v2 or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if v2 not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"log_level inválido: {v}")
        return v2

    @field_validator("raster_path", "model_path", "training_csv", mode="after")
    @classmethod
    def _rel_to_root(cls, p: Path, info) -> Path:
        root: Path = info.data.get("project_root")
        return p if p.is_absolute() else (root / p)

    # ----------------------------
    # Helpers puros (sin side-effects)
    # ----------------------------
    def expected_crs_ref(self) -> CRSRef:
        return CRSRef.parse(self.expected_crs)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala SOLO desde composition/di.py o CLI.
    Prohibido usarla en services/ (dominio). Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
