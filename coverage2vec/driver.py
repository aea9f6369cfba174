"""One-call driver: coverage source in, polygons out."""

from __future__ import annotations

import logging
import time
from typing import Any

from coverage2vec.engine.config import PipelineConfig
from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.pipeline import create_pipeline
from coverage2vec.errors import PipelineError
from coverage2vec.io.raster import CoverageSource

logger = logging.getLogger(__name__)


def vectorize(
    source: CoverageSource,
    sink: Any,
    max_error: float = 0.05,
    schedule: str = "fixed",
    attributes: dict[str, int] | None = None,
    config: PipelineConfig | None = None,
) -> PipelineContext:
    """Run the full pass schedule on ``source`` and write polygons to ``sink``.

    The sink is left open; closing it is the caller's business.
    Raises PipelineError when any pass failed.
    """
    start = time.perf_counter()
    ctx = source.to_context(sink=sink, attributes=dict(attributes or {}), max_error=max_error)

    pipeline = create_pipeline(config)
    pipeline.run(ctx, mode=schedule)

    if ctx.errors:
        raise PipelineError(ctx.errors)

    logger.info(
        "Vectorized %d x %d cells into %d polygons in %.0fms",
        ctx.width,
        ctx.height,
        ctx.polygons_emitted,
        (time.perf_counter() - start) * 1000,
    )
    return ctx
