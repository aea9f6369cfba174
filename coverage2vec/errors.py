"""Exception hierarchy for coverage2vec."""

from __future__ import annotations


class Coverage2VecError(Exception):
    """Base class for all coverage2vec failures."""


class SourceError(Coverage2VecError):
    """The input raster is missing, unreadable or lacks georeferencing."""


class SinkError(Coverage2VecError):
    """The output layer could not be created, opened or written."""


class ScheduleError(Coverage2VecError):
    """A schedule names an unknown pass or runs a pass before its dependencies."""


class PipelineError(Coverage2VecError):
    """One or more passes failed; ``errors`` maps pass id to message."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{tid}: {msg}" for tid, msg in self.errors.items())
        super().__init__(f"Pipeline failed: {detail}")


class ConfigError(Coverage2VecError):
    """A setting holds a value outside its allowed set."""
