# src/cafeplatform/contracts/geo.py

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Literal, NamedTuple, Tuple, Optional

GeoTransform = Tuple[float, float, float, float, float, float]
DTypeStr = Literal["uint8","uint16","int16","uint32","int32","float32","float64"]

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

class GeoBBox(NamedTuple):
    """Bounding box geográfico (lng/lat) de un anillo."""
    min_lng: float; max_lng: float; min_lat: float; max_lat: float

# ---------- CRS (puro dominio, sin GDAL) ----------
@dataclass(frozen=True)
class CRSRef:
    wkt: Optional[str] = None
    epsg: Optional[int] = None

    @staticmethod
    def from_epsg(code: int) -> "CRSRef":
        return CRSRef(epsg=int(code))

    @staticmethod
    def from_wkt(wkt: str) -> "CRSRef":
        return CRSRef(wkt=wkt)

    @staticmethod
    def parse(s: str) -> "CRSRef":
        """'EPSG:4326' -> epsg, cualquier otra cosa se guarda como WKT."""
        s2 = s.strip()
        if s2.upper().startswith("EPSG:"):
            return CRSRef.from_epsg(int(s2.split(":")[1]))
        return CRSRef.from_wkt(s2)

    def is_empty(self) -> bool:
        return self.epsg is None and not self.wkt

    def to_string(self) -> str:
        if self.epsg is not None:
            return f"EPSG:{int(self.epsg)}"
        if self.wkt:
            return self.wkt
        raise ValueError("CRSRef vacío: no hay WKT ni EPSG.")

    def equals(self, other: "CRSRef") -> bool:
        """
        Comparación determinista:
        1) Si ambos tienen EPSG -> compara enteros.
        2) Si ambos tienen WKT -> compara WKT normalizado (upper, espacios colapsados).
        3) Cualquier mezcla -> False.
        """
        if self is other:
            return True
        if self.epsg is not None and other.epsg is not None:
            return int(self.epsg) == int(other.epsg)
        if self.wkt and other.wkt:
            return " ".join(self.wkt.upper().split()) == " ".join(other.wkt.upper().split())
        return False

# ---------- Perfil (puro dominio) ----------
@dataclass(frozen=True)
class GeoProfile:
    count: int
    dtype: DTypeStr
    width: int
    height: int
    transform: GeoTransform
    crs: CRSRef
    nodata: Optional[float] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Dimensiones inválidas: {self.width}x{self.height}")
        px, py = self.pixel_size()
        if px == 0 or py == 0:
            raise ValueError("Resolución nula en el geotransform")

    @property
    def bounds(self) -> Bounds:
        return geotransform_bounds(self.transform, self.width, self.height)

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.transform[0], self.transform[3])

    def pixel_size(self) -> Tuple[float, float]:
        _, px, _, _, _, py = self.transform
        return (px, py)

# ---------- Ventana en píxeles ----------
@dataclass(frozen=True)
class PixelWindow:
    """Ventana inclusiva [min_x..max_x] x [min_y..max_y] (col/fila)."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @staticmethod
    def empty() -> "PixelWindow":
        return PixelWindow(0, 0, -1, -1)

    @property
    def width(self) -> int:
        return max(0, self.max_x - self.min_x + 1)

    @property
    def height(self) -> int:
        return max(0, self.max_y - self.min_y + 1)

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

# ---------- GeoTransform helpers (afines a GDAL pero sin dependencia) ----------
def geotransform_bounds(gt: GeoTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

# ---------- Mapeo geo <-> píxel (rasters sin rotación) ----------
def to_pixel_x(lng: float, gt: GeoTransform) -> int:
    return math.floor((lng - gt[0]) / gt[1])

def to_pixel_y(lat: float, gt: GeoTransform) -> int:
    return math.floor((lat - gt[3]) / gt[5])

def pixel_center(col: float, row: float, gt: GeoTransform) -> Tuple[float, float]:
    """Centroide geográfico de la celda (col, row)."""
    return (gt[0] + (col + 0.5) * gt[1], gt[3] + (row + 0.5) * gt[5])

def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))

def project_bbox_to_window(bbox: GeoBBox, profile: GeoProfile) -> PixelWindow:
    """
    Proyecta un bbox geográfico a la ventana mínima de píxeles que lo cubre.
    No asume signo de resY: toma min/max de los dos extremos por eje, así
    sirve para north-up y south-up. Si el rango cae entero fuera del raster
    devuelve una ventana vacía; si no, recorta a [0,w-1] x [0,h-1].
    """
    gt = profile.transform
    xa, xb = to_pixel_x(bbox.min_lng, gt), to_pixel_x(bbox.max_lng, gt)
    ya, yb = to_pixel_y(bbox.min_lat, gt), to_pixel_y(bbox.max_lat, gt)
    min_x, max_x = min(xa, xb), max(xa, xb)
    min_y, max_y = min(ya, yb), max(ya, yb)

    w, h = profile.width, profile.height
    if max_x < 0 or min_x > w - 1 or max_y < 0 or min_y > h - 1:
        return PixelWindow.empty()
    return PixelWindow(
        min_x=_clamp(min_x, 0, w - 1),
        min_y=_clamp(min_y, 0, h - 1),
        max_x=_clamp(max_x, 0, w - 1),
        max_y=_clamp(max_y, 0, h - 1),
    )

def pretty_bounds(b: Bounds, ndigits: int = 3) -> str:
    return (f"Bounds(minx={b.minx:.{ndigits}f}, miny={b.miny:.{ndigits}f}, "
            f"maxx={b.maxx:.{ndigits}f}, maxy={b.maxy:.{ndigits}f})")

__all__ = [
    "GeoTransform","Bounds","GeoBBox","CRSRef","GeoProfile","PixelWindow",
    "geotransform_bounds",
    "to_pixel_x","to_pixel_y","pixel_center","project_bbox_to_window",
    "pretty_bounds","DTypeStr",
]
