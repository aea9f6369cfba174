"""Vector sinks — where extracted polygons go.

A sink has ``write(polygon, attributes)`` and ``close()``. ``MemorySink``
keeps polygons in a list; ``LayerSink`` writes them to a named layer of a
vector file through geopandas, in batches.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import geopandas as gpd
from shapely.geometry import Polygon

from coverage2vec.errors import SinkError

logger = logging.getLogger(__name__)

ATTRIBUTE_FIELDS = ("x", "y", "z")


class MemorySink:
    """Collects polygons (and their attributes) in memory."""

    def __init__(self) -> None:
        self.polygons: list[Polygon] = []
        self.attributes: list[dict[str, int]] = []
        self.closed = False

    def write(self, polygon: Polygon, attributes: dict[str, int] | None = None) -> None:
        self.polygons.append(polygon)
        self.attributes.append(dict(attributes or {}))

    def close(self) -> None:
        self.closed = True

    def __len__(self) -> int:
        return len(self.polygons)


class LayerSink:
    """Writes polygons to ``layer`` of the vector file at ``path``.

    The layer is created (replacing an existing one) unless ``append`` is set.
    Integer ``x`` / ``y`` / ``z`` fields are written only when given.
    """

    def __init__(
        self,
        path: str | Path,
        layer: str = "polygons",
        driver: str = "GPKG",
        crs: Any = None,
        append: bool = False,
        batch_size: int = 1000,
    ) -> None:
        self.path = Path(path)
        self.layer = layer
        self.driver = driver
        self.crs = crs
        self.append = append
        self.batch_size = batch_size
        self.count = 0
        self._pending: list[dict[str, Any]] = []
        self._batches = 0

        if append and not self.path.exists():
            raise SinkError(f"Cannot append: {self.path} does not exist")
        if not self.path.parent.exists():
            raise SinkError(f"Output directory does not exist: {self.path.parent}")

    def write(self, polygon: Polygon, attributes: dict[str, int] | None = None) -> None:
        record: dict[str, Any] = {"geometry": polygon}
        for name in ATTRIBUTE_FIELDS:
            if attributes and name in attributes:
                record[name] = int(attributes[name])
        self._pending.append(record)
        if len(self._pending) >= self.batch_size:
            self._flush()

    def _flush(self) -> None:
        if not self._pending:
            return
        gdf = gpd.GeoDataFrame(self._pending, geometry="geometry", crs=self.crs)
        mode = "a" if (self.append or self._batches) else "w"
        try:
            gdf.to_file(self.path, layer=self.layer, driver=self.driver, mode=mode)
        except Exception as e:
            raise SinkError(f"Failed to write layer {self.layer!r} to {self.path}: {e}") from e
        self.count += len(self._pending)
        self._batches += 1
        logger.debug("Wrote %d features to %s:%s", len(self._pending), self.path, self.layer)
        self._pending = []

    def close(self) -> None:
        self._flush()
        if self.count == 0:
            logger.warning("No polygons written to %s:%s", self.path, self.layer)
        else:
            logger.info("Wrote %d polygons to %s:%s", self.count, self.path, self.layer)

    def __enter__(self) -> "LayerSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
