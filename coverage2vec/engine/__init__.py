"""coverage2vec pass engine: classification, relaxation, fractions, extraction."""

from coverage2vec.engine.registry import transform, Layer, get_registry
from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.config import PipelineConfig
from coverage2vec.engine.pipeline import Pipeline, create_pipeline

__all__ = [
    "transform",
    "Layer",
    "get_registry",
    "PipelineContext",
    "PipelineConfig",
    "Pipeline",
    "create_pipeline",
]
