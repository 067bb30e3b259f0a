# src/cafeplatform/services/coffee_analysis_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

import numpy as np

from ..contracts.core import ClassificationResult, Stage
from ..contracts.errors import InvalidInputError, OutOfBoundsError
from ..contracts.geo import CRSRef, PixelWindow, pixel_center, project_bbox_to_window
from ..contracts.polygon import GeoJSON, bounding_box, contains_points, extract_ring
from ..ports.pixel_class import PixelClassifierPort
from ..ports.raster_read import RasterHandle, RasterReaderPort
from .lazy_resource import LazyResource
from .model_service import ModelService

"""
Servicio de % de café dentro de un polígono, contracts-first.
Pipeline determinista:
  VALIDATE → MODEL → RASTER → WINDOW → READ → (CONTAINS + CLASSIFY) → AGGREGATE

No asume backends concretos: raster y modelo van vía *ports*. No usa Settings.
"""

logger = logging.getLogger(__name__)

EmptyWindowPolicy = Literal["zero", "error"]


@dataclass
class CoffeeAnalysisService:
    reader: RasterReaderPort
    models: ModelService
    raster_uri: str
    empty_window_policy: EmptyWindowPolicy = "zero"
    threshold: float = 0.5
    expected_crs: Optional[CRSRef] = None
    _raster: LazyResource[RasterHandle] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.empty_window_policy not in ("zero", "error"):
            raise ValueError(f"empty_window_policy inválida: {self.empty_window_policy}")
        self._raster = LazyResource(self._open_raster)

    # --------- API principal ---------
    def raster(self) -> RasterHandle:
        return self._raster.get()

    def analyze(self, polygon: GeoJSON, sample_step: int = 1) -> ClassificationResult:
        # 1) VALIDATE
        ring = extract_ring(polygon)
        if isinstance(sample_step, bool) or not isinstance(sample_step, int) or sample_step < 1:
            raise InvalidInputError(f"sample_step debe ser un entero >= 1 (recibido {sample_step!r})")

        # 2) MODEL (entrena la primera vez si no hay modelo persistido)
        model = self.models.get()

        # 3) RASTER
        handle = self.raster()
        profile = handle.profile

        # 4) WINDOW
        window = project_bbox_to_window(bounding_box(ring), profile)
        if window.is_empty:
            if self.empty_window_policy == "error":
                raise OutOfBoundsError(
                    f"El polígono queda fuera de la cobertura del raster {handle.uri}",
                    stage=Stage.WINDOW,
                )
            logger.info("Polígono fuera de cobertura: resultado vacío")
            return ClassificationResult.empty()

        # 5) READ
        data = self.reader.read_window(handle, window)

        # 6) CONTAINS + CLASSIFY
        total, coffee = self._count(data, window, ring, model, profile.transform, sample_step)

        # 7) AGGREGATE
        result = ClassificationResult.from_counts(total, coffee)
        logger.info(
            "Análisis: ventana %dx%d step=%d total=%d cafe=%d (%.2f%%)",
            window.width, window.height, sample_step, total, coffee, result.coffee_percentage,
        )
        return result

    # --------- Fases internas ---------
    def _open_raster(self) -> RasterHandle:
        handle = self.reader.open(self.raster_uri)
        crs = handle.profile.crs
        if self.expected_crs is not None and not crs.is_empty() and not crs.equals(self.expected_crs):
            logger.warning(
                "CRS del raster (%s) distinto del esperado (%s); no se reproyecta el polígono",
                crs.to_string(), self.expected_crs.to_string(),
            )
        return handle

    def _count(self, data, window: PixelWindow, ring, model: PixelClassifierPort, gt, step: int) -> tuple[int, int]:
        ys = np.arange(0, window.height, step)
        xs = np.arange(0, window.width, step)
        rows, cols = np.meshgrid(ys, xs, indexing="ij")

        # centroide geográfico de cada celda visitada
        lng, lat = pixel_center(window.min_x + cols, window.min_y + rows, gt)

        values = data.reshape(window.height, window.width)[rows, cols]
        keep = contains_points(lng, lat, ring) & np.isfinite(values)
        retained = values[keep]
        if retained.size == 0:
            return 0, 0
        probs = model.predict_many(retained)
        return int(retained.size), int(np.count_nonzero(probs > self.threshold))

__all__ = ["CoffeeAnalysisService", "EmptyWindowPolicy"]
