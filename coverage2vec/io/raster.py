"""Coverage sources — read a coverage raster and build the 2×2-averaged grid."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
from numpy.typing import NDArray
from rasterio.errors import NotGeoreferencedWarning, RasterioIOError

from coverage2vec.engine.context import PipelineContext
from coverage2vec.errors import SourceError

logger = logging.getLogger(__name__)


@dataclass
class CoverageSource:
    """Coverage grid, its fine sub-samples and the georeferencing of the fine raster."""

    coverage: NDArray[np.uint8]
    fine: NDArray[np.uint8]
    geotransform: tuple[float, ...]
    crs: Any = None
    path: Path | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_context(self, **kwargs: Any) -> PipelineContext:
        return PipelineContext.from_arrays(
            self.coverage,
            self.fine,
            geotransform=self.geotransform,
            crs=self.crs,
            **kwargs,
        )


def _block_mean(img: NDArray[np.integer], height: int, width: int) -> NDArray[np.float64]:
    """Mean of each 2×2 block; a trailing odd row / column is ignored."""
    a = img[: height * 2, : width * 2].astype(np.float64)
    return 0.25 * (a[0::2, 0::2] + a[0::2, 1::2] + a[1::2, 0::2] + a[1::2, 1::2])


def build_coverage(
    fine: NDArray[np.integer],
    combined: NDArray[np.integer] | None = None,
    complement: bool = False,
) -> tuple[NDArray[np.uint8], NDArray[np.uint8]]:
    """Return (coverage, fine) built from a fine raster.

    coverage = floor(mean of each 2×2 block). With ``combined`` data,
    ``complement`` subtracts the source from the combined coverage, and
    partial cells are raised so that, blended over the combined coverage
    ``fc``, they reproduce the target:

        s' = 255·(1 − (1 − fc/255) / (1 − (fc − s)/255))   when fc > s
    """
    fine = np.asarray(fine)
    if fine.ndim != 2:
        raise SourceError(f"Expected a single-band raster, got shape {fine.shape}")
    height, width = fine.shape[0] // 2, fine.shape[1] // 2
    if height == 0 or width == 0:
        raise SourceError(f"Raster of shape {fine.shape} is too small to reduce")

    fine_out = np.clip(fine[: height * 2, : width * 2], 0, 255).astype(np.int32)
    s = np.floor(_block_mean(fine_out, height, width)).astype(np.int32)

    if combined is not None:
        combined = np.asarray(combined)
        if combined.shape != fine.shape:
            raise SourceError(
                f"Combined raster shape {combined.shape} does not match source {fine.shape}"
            )
        comb = np.clip(combined[: height * 2, : width * 2], 0, 255).astype(np.int32)
        mean_c = _block_mean(comb, height, width)

        if complement:
            s = np.clip(np.floor(mean_c - s), 0, 255).astype(np.int32)
            fine_out = np.clip(comb - fine_out, 0, 255)

        fc = np.floor(mean_c).astype(np.int32)
        partial = (s != 0) & (s != 255) & (fc > s)
        if np.any(partial):
            fcp = fc[partial] / 255.0
            sp = s[partial] / 255.0
            blended = 255.0 * (1.0 - (1.0 - fcp) / (1.0 - (fcp - sp)))
            s[partial] = np.clip(blended.astype(np.int32), 0, 255)
        logger.info("Blended %d partial cells against combined coverage", int(np.count_nonzero(partial)))

    return s.astype(np.uint8), fine_out.astype(np.uint8)


def _read_band(path: Path) -> tuple[NDArray[np.uint8], tuple[float, ...], Any]:
    if not path.exists():
        raise SourceError(f"Input raster not found: {path}")
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with rasterio.open(path) as src:
                band = src.read(1)
                transform = src.transform
                crs = src.crs
    except RasterioIOError as e:
        raise SourceError(f"Failed to read {path}: {e}") from e

    if band.dtype != np.uint8:
        logger.warning("%s: band 1 is %s, clipping to 8 bit", path, band.dtype)
        band = np.clip(band, 0, 255).astype(np.uint8)
    return band, transform.to_gdal(), crs


def read_source(
    path: str | Path,
    combined: str | Path | None = None,
    complement: bool = False,
) -> CoverageSource:
    """Read band 1 of ``path`` (and optionally a combined raster) into a CoverageSource."""
    path = Path(path)
    fine, gt, crs = _read_band(path)
    if tuple(gt) == (0.0, 1.0, 0.0, 0.0, 0.0, 1.0) and crs is None:
        raise SourceError(f"{path} has no georeferencing")

    logger.info(
        "Input %s: %d x %d pixels (%d x %d reduced)",
        path,
        fine.shape[1],
        fine.shape[0],
        fine.shape[1] // 2,
        fine.shape[0] // 2,
    )

    combined_band = None
    if combined is not None:
        combined_band, _, _ = _read_band(Path(combined))
    elif complement:
        raise SourceError("Complement mode needs a combined raster")

    coverage, fine_grid = build_coverage(fine, combined_band, complement)
    return CoverageSource(
        coverage=coverage,
        fine=fine_grid,
        geotransform=tuple(float(v) for v in gt),
        crs=crs.to_wkt() if crs else None,
        path=path,
    )
