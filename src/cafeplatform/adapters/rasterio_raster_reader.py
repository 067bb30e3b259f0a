# src/cafeplatform/adapters/rasterio_raster_reader.py
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
import rasterio
from rasterio.errors import RasterioIOError
from rasterio.transform import Affine
from rasterio.windows import Window

from ..contracts.errors import RasterDecodeError, RasterNotFoundError
from ..contracts.geo import CRSRef, DTypeStr, GeoProfile, GeoTransform, PixelWindow
from ..ports.raster_read import RasterHandle, RasterReaderPort

logger = logging.getLogger(__name__)

_DTYPE_MAP = {
    np.dtype("uint8"): "uint8",
    np.dtype("uint16"): "uint16",
    np.dtype("int16"): "int16",
    np.dtype("uint32"): "uint32",
    np.dtype("int32"): "int32",
    np.dtype("float32"): "float32",
    np.dtype("float64"): "float64",
}


def _np_to_dtype_str(dt: np.dtype) -> DTypeStr:
    try:
        return _DTYPE_MAP[np.dtype(dt)]  # type: ignore[return-value]
    except KeyError as e:
        raise RasterDecodeError(f"dtype {dt} no soportado") from e


def _affine_to_gt(a: Affine) -> GeoTransform:
    return (a.c, a.a, a.b, a.f, a.d, a.e)


def _rasterio_crs_to_crsref(crs_obj) -> CRSRef:
    """Convierte rasterio CRS → CRSRef (intenta EPSG, si no WKT, si no vacío)."""
    if not crs_obj:
        return CRSRef()
    epsg = crs_obj.to_epsg()
    if epsg is not None:
        return CRSRef.from_epsg(int(epsg))
    wkt = crs_obj.to_wkt()
    return CRSRef.from_wkt(wkt) if wkt else CRSRef()


@dataclass
class RasterioRasterReader(RasterReaderPort):
    """Lector de raster de banda única basado en rasterio.

    `open()` deja el dataset abierto dentro del handle; las lecturas por
    ventana sobre ese dataset compartido se serializan con un lock porque
    un DatasetReader no es seguro entre hilos.
    """
    band_index: int = 1
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def exists(self, uri: str) -> bool:
        return os.path.exists(uri)

    def open(self, uri: str) -> RasterHandle:
        if not self.exists(uri):
            raise RasterNotFoundError(f"Raster no encontrado: {uri}")
        try:
            ds = rasterio.open(uri)
        except RasterioIOError as e:
            raise RasterDecodeError(f"No se pudo decodificar el raster {uri}: {e}") from e

        try:
            if not 1 <= self.band_index <= ds.count:
                raise RasterDecodeError(
                    f"Banda {self.band_index} fuera de rango (el raster tiene {ds.count})"
                )
            dtype = np.dtype(ds.dtypes[self.band_index - 1])
            profile = GeoProfile(
                count=ds.count,
                dtype=_np_to_dtype_str(dtype),
                width=ds.width,
                height=ds.height,
                transform=_affine_to_gt(ds.transform),
                crs=_rasterio_crs_to_crsref(ds.crs),
                nodata=float(ds.nodata) if ds.nodata is not None else None,
            )
        except ValueError as e:
            ds.close()
            raise RasterDecodeError(f"Geotransform inválido en {uri}: {e}") from e
        except RasterDecodeError:
            ds.close()
            raise

        if ds.count > 1:
            logger.warning("Raster %s tiene %d bandas; se usa la banda %d", uri, ds.count, self.band_index)
        logger.info("Raster abierto %s (%dx%d, res=%s)", uri, profile.width, profile.height, profile.pixel_size())
        return RasterHandle(uri=uri, profile=profile, band_index=self.band_index, source=ds)

    def read_window(self, handle: RasterHandle, window: PixelWindow) -> npt.NDArray[np.float64]:
        if window.is_empty:
            return np.empty(0, dtype=np.float64)
        win = Window(col_off=window.min_x, row_off=window.min_y, width=window.width, height=window.height)
        with self._lock:
            try:
                arr = handle.source.read(handle.band_index, window=win, out_dtype="float64")
            except RasterioIOError as e:
                raise RasterDecodeError(f"Error leyendo ventana {window} de {handle.uri}: {e}") from e

        nodata = handle.profile.nodata
        if nodata is not None and not np.isnan(nodata):
            arr[arr == nodata] = np.nan
        logger.debug("Ventana %dx%d leída de %s", window.width, window.height, handle.uri)
        return arr.reshape(-1)

    def close(self, handle: RasterHandle) -> None:
        if handle.source is not None:
            handle.source.close()

__all__ = ["RasterioRasterReader"]
