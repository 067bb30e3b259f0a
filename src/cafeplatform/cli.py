# src/cafeplatform/cli.py
from __future__ import annotations

"""
CLI para el análisis de cobertura de café (contracts-first, minimal).

Comandos principales:
  - train: entrena el clasificador desde el CSV de puntos y lo persiste.
  - analyze: % de café dentro de un polígono GeoJSON.
  - info: perfil del raster (tamaño, geotransform, CRS, nodata).

Ejemplos rápidos:
  python -m cafeplatform.cli --root ./proyecto train

  python -m cafeplatform.cli --root ./proyecto analyze \
      --polygon ./data/roi/finca.geojson --sample-step 2
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Mapping

from .config import Settings, get_settings
from .contracts.core import RunError
from .contracts.errors import CafePlatformError, InvalidInputError
from .contracts.geo import pretty_bounds
from .contracts.model import ModelRecord
from .composition.di import build_analysis_service, build_model_service, build_settings

logger = logging.getLogger(__name__)

# ----------------------
# Utilidades locales
# ----------------------

def _resolve_settings(args: argparse.Namespace) -> Settings:
    s = build_settings(Path(args.root)) if args.root else get_settings()
    upd: dict = {}
    if getattr(args, "raster", None):
        upd["raster_path"] = Path(args.raster).resolve()
    if getattr(args, "model", None):
        upd["model_path"] = Path(args.model).resolve()
    if getattr(args, "training_csv", None):
        upd["training_csv"] = Path(args.training_csv).resolve()
    if upd:
        s = s.model_copy(update=upd)
    return s


def _load_polygon_geojson(path: str | Path) -> Mapping[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidInputError(f"No se pudo leer el GeoJSON {path}: {e}") from e
    if not isinstance(obj, dict):
        raise InvalidInputError("Formato GeoJSON no reconocido para el polígono")
    # FeatureCollection -> primer Feature; Polygon/Feature pasan tal cual
    if obj.get("type") == "FeatureCollection":
        feats = obj.get("features", [])
        if not feats:
            raise InvalidInputError("GeoJSON vacío")
        return feats[0]
    return obj


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


# ----------------------
# Comandos
# ----------------------

def cmd_train(args: argparse.Namespace) -> int:
    s = _resolve_settings(args)
    models = build_model_service(s)
    model = models.train()
    _print_json(ModelRecord.from_model(model).as_json())
    logger.info("Modelo guardado en %s", s.model_path)
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    s = _resolve_settings(args)
    svc = build_analysis_service(s)
    polygon = _load_polygon_geojson(args.polygon)
    step = args.sample_step if args.sample_step is not None else s.sample_step
    result = svc.analyze(polygon, sample_step=step)
    _print_json(result.as_response())
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    s = _resolve_settings(args)
    svc = build_analysis_service(s)
    p = svc.raster().profile
    _print_json({
        "uri": str(s.raster_path),
        "width": p.width,
        "height": p.height,
        "count": p.count,
        "dtype": p.dtype,
        "origin": list(p.origin),
        "resolution": list(p.pixel_size()),
        "crs": p.crs.to_string() if not p.crs.is_empty() else None,
        "nodata": p.nodata,
        "bounds": pretty_bounds(p.bounds, ndigits=6),
    })
    return 0


# ----------------------
# Parser
# ----------------------

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="cafeplatform", description="CLI de cobertura de café por polígono")
    p.add_argument("--root", help="project_root (lee 00-Config/settings.yaml si existe)")
    p.add_argument("--raster", help="ruta al raster de banda única (sobre-escribe Settings.raster_path)")
    p.add_argument("--model", help="ruta al JSON del modelo (sobre-escribe Settings.model_path)")
    p.add_argument("--training-csv", help="CSV de entrenamiento (sobre-escribe Settings.training_csv)")
    p.add_argument("--log-level", default=None, help="DEBUG|INFO|WARNING|ERROR (por defecto Settings.log_level)")
    sub = p.add_subparsers(dest="cmd", required=True)

    # train
    pt = sub.add_parser("train", help="entrena y persiste el clasificador")
    pt.set_defaults(func=cmd_train)

    # analyze
    pa = sub.add_parser("analyze", help="% de café dentro de un polígono")
    pa.add_argument("--polygon", required=True, help="GeoJSON (Polygon/Feature/FeatureCollection)")
    pa.add_argument("--sample-step", type=int, default=None, help="paso de muestreo en píxeles (>=1)")
    pa.set_defaults(func=cmd_analyze)

    # info
    pi = sub.add_parser("info", help="perfil del raster")
    pi.set_defaults(func=cmd_info)

    return p


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        # --log-level manda; si no, el de Settings (env o settings.yaml de --root)
        _setup_logging(args.log_level or _resolve_settings(args).log_level)
        return int(bool(args.func(args)))  # 0 si todo bien
    except KeyboardInterrupt:
        return 130
    except CafePlatformError as ex:
        err = RunError(stage=ex.stage, error=type(ex).__name__, message=ex.message)
        print(err.model_dump_json(), file=sys.stderr)
        return 1
    except Exception as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
