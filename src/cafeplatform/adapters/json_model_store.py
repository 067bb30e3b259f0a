# src/cafeplatform/adapters/json_model_store.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from ..contracts.errors import ModelUnavailableError
from ..contracts.model import ClassifierModel, ModelRecord
from ..ports.model_store import ModelStorePort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JsonModelStore(ModelStorePort):
    """Persiste el clasificador como JSON {cafe, noCafe, priorCafe, priorNoCafe, degenerate}."""
    path: Path

    def exists(self) -> bool:
        return Path(self.path).is_file()

    def load(self) -> ClassifierModel:
        p = Path(self.path)
        try:
            raw = p.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ModelUnavailableError(f"Modelo no encontrado: {p}") from e
        try:
            record = ModelRecord.model_validate_json(raw)
            model = record.to_model()
        except ValidationError as e:
            raise ModelUnavailableError(f"Modelo persistido inválido en {p}: {e}") from e
        logger.info("Modelo cargado desde %s (degenerate=%s)", p, record.degenerate)
        return model

    def save(self, model: ClassifierModel) -> None:
        p = Path(self.path)
        p.parent.mkdir(parents=True, exist_ok=True)
        record = ModelRecord.from_model(model)
        tmp = p.with_suffix(p.suffix + ".tmp")
        tmp.write_text(json.dumps(record.as_json(), indent=2), encoding="utf-8")
        tmp.replace(p)
        logger.info("Modelo persistido en %s", p)

__all__ = ["JsonModelStore"]
