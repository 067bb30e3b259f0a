# src/cafeplatform/services/training_service.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ..contracts.core import CoverClass, Sample
from ..contracts.errors import EmptyCorpusError
from ..contracts.model import (
    VARIANCE_FLOOR, ClassifierModel, ClassStats, DegenerateModel, TrainedModel,
)

logger = logging.getLogger(__name__)

@dataclass
class TrainingDataset:
    X: np.ndarray  # (N,) float64
    y: np.ndarray  # (N,) bool, True = cafe

    @property
    def n_target(self) -> int:
        return int(self.y.sum())

    @property
    def n_other(self) -> int:
        return int(self.y.size - self.y.sum())

@dataclass
class TrainingService:
    """
    Entrenamiento del clasificador gaussiano de una feature (puro dominio):
    - Partición por etiqueta
    - Media y varianza insesgada (n-1) por clase, con piso VARIANCE_FLOOR
    - Priors como frecuencia relativa
    - Si falta una clase -> DegenerateModel
    """
    variance_floor: float = VARIANCE_FLOOR

    def build_dataset(self, samples: Sequence[Sample]) -> TrainingDataset:
        X = np.fromiter((s.value for s in samples), dtype=np.float64, count=len(samples))
        y = np.fromiter((s.label is CoverClass.TARGET for s in samples), dtype=bool, count=len(samples))
        mask = np.isfinite(X)
        return TrainingDataset(X=X[mask], y=y[mask])

    def _stats(self, values: np.ndarray) -> ClassStats:
        mean = float(values.mean())
        var = float(values.var(ddof=1)) if values.size > 1 else 0.0
        return ClassStats(mean=mean, variance=var if var > 0 else self.variance_floor)

    def train(self, samples: Sequence[Sample]) -> ClassifierModel:
        ds = self.build_dataset(samples)
        n = int(ds.X.size)
        if n == 0:
            raise EmptyCorpusError("El corpus de entrenamiento no tiene muestras utilizables")

        if ds.n_target == 0 or ds.n_other == 0:
            present = CoverClass.TARGET if ds.n_target else CoverClass.OTHER
            logger.warning("Corpus con una sola clase (%s, n=%d): modelo degenerado", present.value, n)
            return DegenerateModel(present=present)

        target, other = self.split(ds)
        model = TrainedModel(
            target=self._stats(target),
            other=self._stats(other),
            prior_target=ds.n_target / n,
            prior_other=ds.n_other / n,
        )
        logger.info(
            "Modelo entrenado: cafe(n=%d, mean=%.4f, var=%.4g) no_cafe(n=%d, mean=%.4f, var=%.4g)",
            ds.n_target, model.target.mean, model.target.variance,
            ds.n_other, model.other.mean, model.other.variance,
        )
        return model

    @staticmethod
    def split(ds: TrainingDataset) -> Tuple[np.ndarray, np.ndarray]:
        """Valores (cafe, no_cafe)."""
        return ds.X[ds.y], ds.X[~ds.y]

__all__ = ["TrainingService", "TrainingDataset"]
