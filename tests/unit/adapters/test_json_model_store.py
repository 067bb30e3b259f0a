import json
from pathlib import Path
import numpy as np
import pytest
from factories import samples
from cafeplatform.adapters.json_model_store import JsonModelStore
from cafeplatform.contracts.core import CoverClass
from cafeplatform.contracts.errors import ModelUnavailableError
from cafeplatform.contracts.model import DegenerateModel
from cafeplatform.services.training_service import TrainingService

def test_persist_load_roundtrip_predictions(tmp_path: Path):
    model = TrainingService().train(samples([0.71, 0.8, 0.93, 0.66], [0.1, 0.24, 0.35]))
    store = JsonModelStore(tmp_path / "model" / "coffee-model.json")
    assert not store.exists()
    store.save(model)
    assert store.exists()
    loaded = store.load()
    probes = np.linspace(-0.5, 1.5, 41)
    assert loaded.predict_many(probes).tolist() == model.predict_many(probes).tolist()

def test_file_format(tmp_path: Path):
    store = JsonModelStore(tmp_path / "m.json")
    store.save(TrainingService().train(samples([0.8, 0.9], [0.1, 0.2])))
    raw = json.loads((tmp_path / "m.json").read_text(encoding="utf-8"))
    assert set(raw) == {"cafe", "noCafe", "priorCafe", "priorNoCafe", "degenerate"}
    assert set(raw["cafe"]) == {"mean", "variance"}
    assert raw["degenerate"] is False

def test_degenerate_roundtrip(tmp_path: Path):
    store = JsonModelStore(tmp_path / "m.json")
    store.save(DegenerateModel(present=CoverClass.OTHER))
    assert store.load() == DegenerateModel(present=CoverClass.OTHER)

def test_reads_record_written_by_hand(tmp_path: Path):
    p = tmp_path / "m.json"
    p.write_text(json.dumps({
        "cafe": {"mean": 0.8, "variance": 0.01},
        "noCafe": {"mean": 0.2, "variance": 0.01},
        "priorCafe": 0.5, "priorNoCafe": 0.5, "degenerate": False,
    }), encoding="utf-8")
    m = JsonModelStore(p).load()
    assert m.predict(0.5) == pytest.approx(0.5)

@pytest.mark.parametrize("content", ["{not json", json.dumps({"cafe": {"mean": 1}})])
def test_invalid_file(tmp_path: Path, content):
    p = tmp_path / "m.json"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ModelUnavailableError):
        JsonModelStore(p).load()

def test_load_missing(tmp_path: Path):
    with pytest.raises(ModelUnavailableError):
        JsonModelStore(tmp_path / "none.json").load()
