"""T3.01 — Polygon Extraction. ★★★

Expand cell codes into a fine 0/1 mask, label its 4-connected foreground
regions, follow the cracks between differently-labeled pixels into closed
rings, move ring points onto the estimated boundary and hand each region to
the sink as one polygon (first ring = shell, later rings = holes).

Regions idle for more than a row are flushed every few rows, so only the
rings of regions crossing the current window stay in memory.
"""

from __future__ import annotations

import logging

from shapely.geometry import Polygon

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.extraction.enumerator import BACKGROUND, PolygonEnumerator
from coverage2vec.engine.extraction.mask import build_mask
from coverage2vec.engine.extraction.ring_set import RingSet
from coverage2vec.engine.extraction.vertex_placer import place_ring
from coverage2vec.engine.registry import Layer, transform
from coverage2vec.io.vector import MemorySink

logger = logging.getLogger(__name__)


def _emit(ctx: PipelineContext, ring_set: RingSet) -> bool:
    ring_set.coalesce()
    rings = [place_ring(ctx, ring) for ring in ring_set.rings]
    if not rings or rings[0] is None:
        logger.debug("Region %d: shell degenerated, skipped", ring_set.region_id)
        return False
    holes = [r for r in rings[1:] if r is not None]
    polygon = Polygon(shell=rings[0], holes=holes)
    ctx.sink.write(polygon, ctx.attributes)
    ctx.polygons_emitted += 1
    return True


def label_regions(mask) -> PolygonEnumerator:
    """First pass: provisional ids per row, merges flattened at the end."""
    enum = PolygonEnumerator()
    prev_values = None
    prev_ids = None
    for row in mask:
        prev_ids = enum.process_line(row, prev_values, prev_ids)
        prev_values = row
    enum.complete_merges()
    return enum


@transform(
    id="T3.01",
    layer=Layer.EXTRACTION,
    dependencies=["T0.01"],
    description="Trace region boundaries and emit sub-pixel polygons",
)
def polygonize(ctx: PipelineContext) -> None:
    if ctx.sink is None:
        ctx.sink = MemorySink()

    mask = build_mask(ctx)
    height, width = mask.shape
    flush_rows = ctx.config.flush_rows

    first = label_regions(mask)
    second = PolygonEnumerator()

    ring_sets: dict[int, RingSet] = {}
    emitted = 0
    skipped = 0

    def add_edge(region: int, x1: int, y1: int, x2: int, y2: int) -> None:
        if region == BACKGROUND:
            return
        ring_set = ring_sets.get(region)
        if ring_set is None:
            ring_set = ring_sets[region] = RingSet(region)
        ring_set.add_segment(x1, y1, x2, y2)

    last_ids = [BACKGROUND] * (width + 2)
    prev_values = None
    prev_raw = None

    # One virtual empty row below the raster closes the bottom edges
    for y in range(height + 1):
        if y < height:
            row = mask[y]
            raw = second.process_line(row, prev_values, prev_raw)
            prev_values, prev_raw = row, raw
            this_ids = [BACKGROUND] + [first.final_id(pid) for pid in raw] + [BACKGROUND]
        else:
            this_ids = [BACKGROUND] * (width + 2)

        for xp in range(width + 1):
            this_id = this_ids[xp]
            right_id = this_ids[xp + 1]
            above_id = last_ids[xp]

            if this_id != above_id:
                add_edge(this_id, xp - 1, y, xp, y)
                add_edge(above_id, xp - 1, y, xp, y)

            if this_id != right_id:
                add_edge(this_id, xp, y, xp, y + 1)
                add_edge(right_id, xp, y, xp, y + 1)

        last_ids = this_ids

        if y % flush_rows == flush_rows - 1:
            idle = [rid for rid, rs in ring_sets.items() if rs.last_line_updated < y - 1]
            for rid in sorted(idle):
                if _emit(ctx, ring_sets.pop(rid)):
                    emitted += 1
                else:
                    skipped += 1

    for rid in sorted(ring_sets):
        if _emit(ctx, ring_sets[rid]):
            emitted += 1
        else:
            skipped += 1
    ring_sets.clear()

    ctx.stats["T3.01"] = {"polygons": emitted, "skipped": skipped}
    logger.info("Extracted %d polygons (%d degenerate skipped)", emitted, skipped)
