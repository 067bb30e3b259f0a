from __future__ import annotations
from pathlib import Path
import yaml

from ..config import Settings
from ..adapters.csv_training_corpus import CsvTrainingCorpus
from ..adapters.json_model_store import JsonModelStore
from ..adapters.rasterio_raster_reader import RasterioRasterReader
from ..services.coffee_analysis_service import CoffeeAnalysisService
from ..services.model_service import ModelService
from ..services.training_service import TrainingService

def load_settings_from_yaml(path: Path, **defaults) -> Settings:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings(**{**defaults, **data})

def build_settings(project_root: Path) -> Settings:
    cfg = (project_root / "00-Config" / "settings.yaml").resolve()
    if not cfg.exists():
        return Settings(project_root=project_root)
    # project_root del YAML manda; si no viene, se usa el del llamador
    return load_settings_from_yaml(cfg, project_root=project_root)

# Factories simples
def build_model_service(s: Settings) -> ModelService:
    corpus = CsvTrainingCorpus(
        s.training_csv,
        label_column=s.label_column,
        target_label=s.target_label,
        feature_column=s.feature_column,
    )
    return ModelService(store=JsonModelStore(s.model_path), corpus=corpus, trainer=TrainingService())

def build_analysis_service(s: Settings, models: ModelService | None = None) -> CoffeeAnalysisService:
    return CoffeeAnalysisService(
        reader=RasterioRasterReader(band_index=s.band_index),
        models=models or build_model_service(s),
        raster_uri=str(s.raster_path),
        empty_window_policy=s.empty_window_policy,
        threshold=s.probability_threshold,
        expected_crs=s.expected_crs_ref(),
    )
