# =============================
# FILE: src/cafeplatform/adapters/csv_training_corpus.py
# =============================
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..contracts.core import CoverClass, Sample
from ..contracts.errors import CorpusFormatError, ModelUnavailableError
from ..ports.training_corpus import TrainingCorpusPort

logger = logging.getLogger(__name__)

# Nombres reconocidos para la feature, en orden de preferencia
FEATURE_CANDIDATES: Tuple[str, ...] = ("valor_banda", "band", "value", "valor", "valor_b", "valor_band")
# Columnas que nunca son la feature
SKIP_COLUMNS: Tuple[str, ...] = ("clase", "class", "id", "id_muestra", "orig_fid")


def _norm(name: object) -> str:
    return str(name).strip().lower()


def _first_present(df: pd.DataFrame, candidates: Tuple[str, ...]) -> Optional[str]:
    by_norm = {_norm(c): c for c in df.columns}
    for c in candidates:
        if c in by_norm:
            return by_norm[c]
    return None


def _first_numeric(df: pd.DataFrame, skip: Sequence[str]) -> Optional[str]:
    for c in df.columns:
        if _norm(c) in skip:
            continue
        col = pd.to_numeric(df[c], errors="coerce")
        if np.isfinite(col.to_numpy(dtype=np.float64)).any():
            return c
    return None


class CsvTrainingCorpus(TrainingCorpusPort):
    """Adapter que **lee el CSV de puntos** y expone un **TrainingCorpusPort**.

    - Etiqueta: columna `label_column` (por defecto `clase`); `cafe` vs. cualquier otro valor.
    - Feature: `feature_column` si se configura; si no, el primer nombre reconocido
      (`valor_banda`, `band`, `value`, ...); si no, la primera columna numérica
      que no sea clase/id.
    - Filas con feature no finita se descartan.
    """

    def __init__(
        self,
        path: Path,
        *,
        label_column: str = "clase",
        target_label: str = "cafe",
        feature_column: Optional[str] = None,
        encoding: str = "utf-8",
    ) -> None:
        self.path = Path(path)
        self.label_column = label_column
        self.target_label = target_label
        self.feature_column = feature_column
        self.encoding = encoding

    def exists(self) -> bool:
        return self.path.is_file()

    # -------------
    # Resolución de columnas
    # -------------
    def _resolve_feature(self, df: pd.DataFrame) -> Optional[str]:
        if self.feature_column:
            col = _first_present(df, (_norm(self.feature_column),))
            if col is None:
                raise CorpusFormatError(
                    f"Columna de feature '{self.feature_column}' no existe en {self.path} "
                    f"(columnas: {list(df.columns)})"
                )
            return col
        col = _first_present(df, FEATURE_CANDIDATES)
        if col is not None:
            return col
        skip = tuple(SKIP_COLUMNS) + (_norm(self.label_column),)
        col = _first_numeric(df, skip)
        if col is not None:
            logger.warning("Feature inferida por heurística: columna '%s' en %s", col, self.path)
        return col

    # -------------
    # API TrainingCorpusPort
    # -------------
    def read_samples(self) -> Sequence[Sample]:
        if not self.exists():
            raise ModelUnavailableError(f"Corpus de entrenamiento no encontrado: {self.path}")
        try:
            df = pd.read_csv(self.path, encoding=self.encoding, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return []
        if df.empty:
            return []

        feat_col = self._resolve_feature(df)
        if feat_col is None:
            logger.warning("Sin columna numérica utilizable en %s", self.path)
            return []

        label_col = _first_present(df, (_norm(self.label_column),))
        if label_col is None:
            logger.warning("Columna de clase '%s' ausente en %s: todo será %s",
                           self.label_column, self.path, CoverClass.OTHER.value)
            labels = pd.Series([""] * len(df), index=df.index)
        else:
            labels = df[label_col]

        values = pd.to_numeric(df[feat_col], errors="coerce").to_numpy(dtype=np.float64)
        keep = np.isfinite(values)
        out: List[Sample] = [
            Sample(value=float(v), label=CoverClass.from_raw(lab, self.target_label))
            for v, lab, ok in zip(values, labels, keep)
            if ok
        ]
        dropped = int((~keep).sum())
        if dropped:
            logger.debug("%d filas descartadas por feature no finita", dropped)
        logger.info("Corpus %s: %d muestras (feature='%s')", self.path, len(out), feat_col)
        return out

__all__ = ["CsvTrainingCorpus", "FEATURE_CANDIDATES", "SKIP_COLUMNS"]
