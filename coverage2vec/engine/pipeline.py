"""Pipeline orchestrator — runs a schedule of passes over one context."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import time

from coverage2vec.engine.config import (
    CONVERGE_MARKER,
    SCHEDULE_FIXED,
    PipelineConfig,
)
from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.registry import TransformRegistry, TransformSpec, get_registry
from coverage2vec.errors import ScheduleError

logger = logging.getLogger(__name__)

_SMOOTH_ID = "T2.03"
_TUNE_ID = "T2.02"

_LAYER_PACKAGES = ["layer0", "layer1", "layer2", "layer3"]


class Pipeline:
    """Orchestrates the pass schedule.

    Passes mutate shared grids, so a failed pass stops the schedule: every
    later pass would read half-written state.
    """

    def __init__(
        self,
        registry: TransformRegistry | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or PipelineConfig()

    def run(
        self,
        ctx: PipelineContext,
        schedule: list[str] | None = None,
        mode: str = SCHEDULE_FIXED,
    ) -> PipelineContext:
        """Run ``schedule`` (or the configured one for ``mode``) on ``ctx``."""
        if schedule is None:
            schedule = self.config.schedule(mode)
        self.validate(schedule)

        ctx.config = self.config
        start = time.perf_counter()
        logger.info("Pipeline: %d entries scheduled", len(schedule))

        for entry in schedule:
            if entry == CONVERGE_MARKER:
                ok = self._converge(ctx)
            else:
                ok = self._run_one(ctx, self.registry.get(entry))
            if not ok:
                logger.warning("Pipeline stopped after failure in %s", entry)
                break

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %d passes in %.0fms (%d failed)",
            len(ctx.pass_log),
            total,
            len(ctx.errors),
        )
        return ctx

    def validate(self, schedule: list[str]) -> None:
        """Raise ScheduleError for unknown ids or passes run before their dependencies."""
        seen: set[str] = set()
        for entry in schedule:
            if entry == CONVERGE_MARKER:
                for tid in (_SMOOTH_ID, _TUNE_ID):
                    self._check_entry(tid, seen)
                    seen.add(tid)
                continue
            self._check_entry(entry, seen)
            seen.add(entry)

    def _check_entry(self, tid: str, seen: set[str]) -> None:
        if tid not in self.registry:
            raise ScheduleError(f"Unknown transform ID in schedule: {tid}")
        missing = [d for d in self.registry.get(tid).dependencies if d not in seen]
        if missing:
            raise ScheduleError(f"{tid} scheduled before its dependencies: {missing}")

    def _run_one(self, ctx: PipelineContext, spec: TransformSpec) -> bool:
        t0 = time.perf_counter()
        try:
            spec.fn(ctx)
        except Exception as e:
            ctx.errors[spec.id] = str(e)
            logger.warning("  %s FAILED: %s", spec.id, e)
            return False
        ctx.pass_log.append(spec.id)
        elapsed = (time.perf_counter() - t0) * 1000
        logger.debug("  %s (%s) completed in %.1fms", spec.id, spec.layer.name, elapsed)
        return True

    def _converge(self, ctx: PipelineContext) -> bool:
        """Repeat smoothing + tuning until the largest fraction change settles."""
        smooth = self.registry.get(_SMOOTH_ID)
        tune = self.registry.get(_TUNE_ID)
        change = float("inf")
        rounds = 0
        while rounds < self.config.max_rounds:
            if not (self._run_one(ctx, smooth) and self._run_one(ctx, tune)):
                return False
            rounds += 1
            change = float(ctx.stats.get(_TUNE_ID, {}).get("max_change", 0.0))
            if change <= self.config.converge_epsilon:
                break
        logger.info("Converged after %d rounds (max change %.2f)", rounds, change)
        return True


def register_transforms() -> None:
    """Import all pass modules so @transform decorators fire."""
    for layer_name in _LAYER_PACKAGES:
        package_name = f"coverage2vec.engine.{layer_name}"
        package = importlib.import_module(package_name)
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            importlib.import_module(f"{package_name}.{module_name}")


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline over the registered passes."""
    register_transforms()
    return Pipeline(config=config)
