# src/cafeplatform/services/model_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..contracts.errors import ModelUnavailableError
from ..contracts.model import ClassifierModel
from ..ports.model_store import ModelStorePort
from ..ports.training_corpus import TrainingCorpusPort
from .lazy_resource import LazyResource
from .training_service import TrainingService

logger = logging.getLogger(__name__)


@dataclass
class ModelService:
    """
    Ciclo de vida del clasificador:
      LOAD (persistido) → si no existe: TRAIN (corpus) → PERSIST → CACHE
    Una vez cargado no se re-entrena solo, aunque cambie el corpus.
    """
    store: ModelStorePort
    corpus: TrainingCorpusPort
    trainer: TrainingService = field(default_factory=TrainingService)
    _cache: LazyResource[ClassifierModel] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._cache = LazyResource(self._load_or_train)

    @property
    def loaded(self) -> bool:
        return self._cache.ready

    def get(self) -> ClassifierModel:
        return self._cache.get()

    def predict(self, value: float) -> float:
        return self.get().predict(value)

    def train(self) -> ClassifierModel:
        """Re-entrena desde el corpus, persiste y reemplaza el modelo cacheado."""
        model = self._train_and_persist()
        self._cache.set(model)
        return model

    # --------- internas ---------
    def _train_and_persist(self) -> ClassifierModel:
        if not self.corpus.exists():
            raise ModelUnavailableError("No hay corpus de entrenamiento disponible")
        model = self.trainer.train(self.corpus.read_samples())
        self.store.save(model)
        return model

    def _load_or_train(self) -> ClassifierModel:
        if self.store.exists():
            logger.debug("Usando modelo persistido")
            return self.store.load()
        if not self.corpus.exists():
            raise ModelUnavailableError(
                "No hay modelo persistido ni corpus de entrenamiento; "
                "agrega el CSV de puntos para entrenar el modelo"
            )
        logger.info("Modelo persistido ausente: entrenando desde el corpus")
        return self._train_and_persist()

__all__ = ["ModelService"]
