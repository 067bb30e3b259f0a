# tests/unit/test_cli.py
import json
from pathlib import Path
import numpy as np
import pytest
from factories import square, write_geotiff
from cafeplatform.cli import main

CSV = "id,clase,valor_banda\n1,cafe,0.8\n2,cafe,0.85\n3,cafe,0.9\n4,pasto,0.1\n5,pasto,0.15\n6,bosque,0.2\n"

@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "data" / "sentinel2").mkdir(parents=True)
    (tmp_path / "data" / "entrenamiento").mkdir(parents=True)
    # 6x6 desde (0,0) con 1°/px: mitad oeste cafe, mitad este no
    data = np.where(np.arange(6) < 3, 0.85, 0.15) * np.ones((6, 1))
    write_geotiff(tmp_path / "data" / "sentinel2" / "ndvi.tif", data)
    (tmp_path / "data" / "entrenamiento" / "poligonos_cultivos_points.csv").write_text(CSV, encoding="utf-8")
    (tmp_path / "finca.geojson").write_text(json.dumps(square(0, -6, 6, 0)), encoding="utf-8")
    return tmp_path

def test_train_prints_and_persists_model(project: Path, capsys):
    assert main(["--root", str(project), "train"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["degenerate"] is False
    assert out["priorCafe"] == pytest.approx(0.5)
    assert out["cafe"]["mean"] == pytest.approx(0.85)
    assert (project / "data" / "model" / "coffee-model.json").is_file()

def test_analyze_trains_on_first_use(project: Path, capsys):
    code = main(["--root", str(project), "analyze", "--polygon", str(project / "finca.geojson")])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"totalPixels": 36, "coffeePixels": 18, "coffeePercentage": 50.0}
    assert (project / "data" / "model" / "coffee-model.json").is_file()

def test_analyze_feature_collection_and_step(project: Path, capsys):
    fc = {"type": "FeatureCollection", "features": [
        {"type": "Feature", "properties": {"nombre": "lote 1"}, "geometry": square(0, -6, 3, 0)},
    ]}
    (project / "lote.geojson").write_text(json.dumps(fc), encoding="utf-8")
    code = main(["--root", str(project), "analyze", "--polygon", str(project / "lote.geojson"),
                 "--sample-step", "2"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["totalPixels"] > 0
    assert out["coffeePercentage"] == 100.0

def test_info(project: Path, capsys):
    assert main(["--root", str(project), "info"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert (out["width"], out["height"]) == (6, 6)
    assert out["crs"] == "EPSG:4326"
    assert out["resolution"] == [1.0, -1.0]

def test_missing_raster_reports_stage(project: Path, capsys):
    code = main(["--root", str(project), "--raster", str(project / "no.tif"),
                 "analyze", "--polygon", str(project / "finca.geojson")])
    assert code == 1
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["stage"] == "raster"
    assert err["error"] == "RasterNotFoundError"

def test_unreadable_polygon_is_validation_error(project: Path, capsys):
    (project / "roto.geojson").write_text("{no es json", encoding="utf-8")
    code = main(["--root", str(project), "analyze", "--polygon", str(project / "roto.geojson")])
    assert code == 1
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["stage"] == "validate"

def test_no_corpus_no_model(tmp_path: Path, capsys):
    (tmp_path / "finca.geojson").write_text(json.dumps(square(0, -1, 1, 0)), encoding="utf-8")
    code = main(["--root", str(tmp_path), "analyze", "--polygon", str(tmp_path / "finca.geojson")])
    assert code == 1
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["stage"] == "model"

def _capture_log_level(monkeypatch):
    levels = []
    monkeypatch.setattr("cafeplatform.cli._setup_logging", levels.append)
    return levels

def test_log_level_from_project_yaml(project: Path, monkeypatch, capsys):
    (project / "00-Config").mkdir()
    (project / "00-Config" / "settings.yaml").write_text("log_level: debug\n", encoding="utf-8")
    levels = _capture_log_level(monkeypatch)
    assert main(["--root", str(project), "info"]) == 0
    assert levels == ["DEBUG"]

def test_log_level_flag_wins_over_settings(project: Path, monkeypatch, capsys):
    monkeypatch.setenv("CAFE_LOG_LEVEL", "ERROR")
    levels = _capture_log_level(monkeypatch)
    assert main(["--root", str(project), "--log-level", "WARNING", "info"]) == 0
    assert levels == ["WARNING"]
