# src/cafeplatform/contracts/polygon.py
from __future__ import annotations

import math
from typing import Any, Mapping, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .errors import InvalidInputError
from .geo import GeoBBox

LngLat = Tuple[float, float]
Ring = Tuple[LngLat, ...]
GeoJSON = Mapping[str, Any]


def _is_seq(v: Any) -> bool:
    return isinstance(v, Sequence) and not isinstance(v, (str, bytes))


def extract_ring(geojson: GeoJSON | None) -> Ring:
    """
    Devuelve el anillo exterior de un Polygon o de un Feature(Polygon).
    Sólo se usa el primer anillo: los huecos se ignoran.
    """
    if not isinstance(geojson, Mapping) or not geojson.get("type"):
        raise InvalidInputError("Se requiere un GeoJSON Polygon o Feature(Polygon)")

    t = geojson.get("type")
    geom: Any = None
    if t == "Polygon":
        geom = geojson
    elif t == "Feature":
        g = geojson.get("geometry")
        if isinstance(g, Mapping) and g.get("type") == "Polygon":
            geom = g
    if geom is None:
        raise InvalidInputError(f"Geometría no soportada: {t!r} (sólo Polygon)")

    coords = geom.get("coordinates")
    if not _is_seq(coords) or not coords:
        raise InvalidInputError("El polígono no tiene coordenadas")
    if not _is_seq(coords[0]):
        raise InvalidInputError(f"Anillo exterior inválido: {coords[0]!r}")

    ring: list[LngLat] = []
    for pt in coords[0]:
        if not _is_seq(pt):
            raise InvalidInputError(f"Vértice inválido: {pt!r}")
        try:
            lng, lat = float(pt[0]), float(pt[1])
        except (TypeError, ValueError, IndexError) as e:
            raise InvalidInputError(f"Vértice inválido: {pt!r}") from e
        if not (math.isfinite(lng) and math.isfinite(lat)):
            raise InvalidInputError(f"Vértice no finito: {pt!r}")
        ring.append((lng, lat))

    if len(set(ring)) < 3:
        raise InvalidInputError("El anillo necesita al menos 3 vértices distintos")
    return tuple(ring)


def bounding_box(ring: Sequence[LngLat]) -> GeoBBox:
    min_lng = min_lat = math.inf
    max_lng = max_lat = -math.inf
    for lng, lat in ring:
        min_lng = min(min_lng, lng); max_lng = max(max_lng, lng)
        min_lat = min(min_lat, lat); max_lat = max(max_lat, lat)
    return GeoBBox(min_lng, max_lng, min_lat, max_lat)


def contains_point(point: LngLat, ring: Sequence[LngLat]) -> bool:
    """
    Ray casting par-impar sobre coordenadas geográficas planas.
    Supone un anillo simple (sin auto-intersecciones); no soporta huecos.
    Las aristas horizontales quedan fuera por la desigualdad estricta en y.
    """
    x, y = point
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def contains_points(
    xs: npt.ArrayLike, ys: npt.ArrayLike, ring: Sequence[LngLat]
) -> npt.NDArray[np.bool_]:
    """Misma regla que `contains_point`, vectorizada sobre arrays de x/y."""
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    inside = np.zeros(np.broadcast(x, y).shape, dtype=bool)
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i]
        xj, yj = ring[j]
        crosses = (yi > y) != (yj > y)
        if yj != yi:
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            inside ^= crosses & (x < x_cross)
        j = i
    return inside


__all__ = ["LngLat", "Ring", "GeoJSON", "extract_ring", "bounding_box", "contains_point", "contains_points"]
