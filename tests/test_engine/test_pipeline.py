"""Tests for the pipeline orchestrator and pass schedules."""

import pytest

from coverage2vec.engine.config import CONVERGE_MARKER, PipelineConfig
from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.pipeline import Pipeline
from coverage2vec.engine.registry import Layer, TransformRegistry, TransformSpec
from coverage2vec.errors import ConfigError, ScheduleError


def _recorder(results, name):
    def fn(ctx: PipelineContext) -> None:
        results.append(name)

    return fn


def test_pipeline_runs_schedule_in_order():
    reg = TransformRegistry()
    results = []
    reg.register(TransformSpec(id="T0.01", layer=Layer.CLASSIFY, fn=_recorder(results, "t1")))
    reg.register(
        TransformSpec(id="T1.01", layer=Layer.CONSISTENCY, fn=_recorder(results, "t2"), dependencies=["T0.01"])
    )

    ctx = PipelineContext()
    Pipeline(registry=reg).run(ctx, schedule=["T0.01", "T1.01", "T1.01"])

    assert results == ["t1", "t2", "t2"]
    assert ctx.pass_log == ["T0.01", "T1.01", "T1.01"]
    assert ctx.errors == {}


def test_failure_stops_the_schedule():
    reg = TransformRegistry()
    results = []

    def fail(ctx: PipelineContext) -> None:
        raise ValueError("test error")

    reg.register(TransformSpec(id="T0.01", layer=Layer.CLASSIFY, fn=fail))
    reg.register(TransformSpec(id="T1.01", layer=Layer.CONSISTENCY, fn=_recorder(results, "t2")))

    ctx = PipelineContext()
    Pipeline(registry=reg).run(ctx, schedule=["T0.01", "T1.01"])

    assert "test error" in ctx.errors["T0.01"]
    assert results == []
    assert ctx.pass_log == []


def test_unknown_id_rejected_before_running():
    reg = TransformRegistry()
    results = []
    reg.register(TransformSpec(id="T0.01", layer=Layer.CLASSIFY, fn=_recorder(results, "t1")))
    with pytest.raises(ScheduleError, match="T9.99"):
        Pipeline(registry=reg).run(PipelineContext(), schedule=["T0.01", "T9.99"])
    assert results == []


def test_dependency_order_enforced():
    reg = TransformRegistry()
    reg.register(TransformSpec(id="T0.01", layer=Layer.CLASSIFY, fn=lambda ctx: None))
    reg.register(
        TransformSpec(id="T1.01", layer=Layer.CONSISTENCY, fn=lambda ctx: None, dependencies=["T0.01"])
    )
    with pytest.raises(ScheduleError, match="dependencies"):
        Pipeline(registry=reg).validate(["T1.01", "T0.01"])


def test_converge_repeats_until_change_settles():
    reg = TransformRegistry()
    changes = iter([40.0, 9.0, 0.3, 0.1])

    def tune(ctx: PipelineContext) -> None:
        ctx.stats["T2.02"] = {"max_change": next(changes)}

    reg.register(TransformSpec(id="T2.03", layer=Layer.FRACTIONS, fn=lambda ctx: None))
    reg.register(TransformSpec(id="T2.02", layer=Layer.FRACTIONS, fn=tune))

    ctx = PipelineContext()
    Pipeline(registry=reg, config=PipelineConfig(converge_epsilon=0.5)).run(
        ctx, schedule=[CONVERGE_MARKER]
    )
    assert ctx.pass_log == ["T2.03", "T2.02"] * 3


def test_converge_stops_at_round_limit():
    reg = TransformRegistry()

    def tune(ctx: PipelineContext) -> None:
        ctx.stats["T2.02"] = {"max_change": 10.0}

    reg.register(TransformSpec(id="T2.03", layer=Layer.FRACTIONS, fn=lambda ctx: None))
    reg.register(TransformSpec(id="T2.02", layer=Layer.FRACTIONS, fn=tune))

    ctx = PipelineContext()
    Pipeline(registry=reg, config=PipelineConfig(max_rounds=4)).run(ctx, schedule=[CONVERGE_MARKER])
    assert len(ctx.pass_log) == 8


def test_fixed_schedule_shape():
    config = PipelineConfig(initial_rounds=2, block_rounds=1, reclassify_blocks=1)
    assert config.schedule("fixed") == [
        "T0.01", "T1.01", "T1.02", "T2.01",
        "T2.03", "T2.02", "T2.03", "T2.02",
        "T1.03", "T1.02", "T2.03", "T2.02",
        "T2.03", "T2.04", "T3.01",
    ]
    converge = config.schedule("converge")
    assert converge.count(CONVERGE_MARKER) == 2
    with pytest.raises(ConfigError):
        config.schedule("sometimes")


def test_default_schedules_validate(registry):
    pipeline = Pipeline(registry=registry)
    pipeline.validate(pipeline.config.schedule("fixed"))
    pipeline.validate(pipeline.config.schedule("converge"))
