"""Pipeline configuration — thresholds, pass schedule and extraction window."""

from __future__ import annotations

from dataclasses import dataclass

from coverage2vec.errors import ConfigError

SCHEDULE_FIXED = "fixed"
SCHEDULE_CONVERGE = "converge"

# Marker in a schedule: repeat the smoothing/tuning pair until it settles
CONVERGE_MARKER = "*converge*"


@dataclass
class PipelineConfig:
    """Controls relaxation thresholds and how often each pass repeats."""

    # Classifier bands (coverage below / above → small / large corner)
    corner_band: int = 255 // 3
    large_corner_band: int = 2 * 255 // 3

    # Topology alignment only reshapes corners above this coverage
    alignment_min_coverage: int = 255 // 6

    # Fixed schedule: smoothing/tuning rounds before and after each
    # reclassification block
    initial_rounds: int = 6
    block_rounds: int = 3
    reclassify_blocks: int = 2

    # Convergence schedule
    converge_epsilon: float = 0.5  # largest per-cell fraction change
    max_rounds: int = 12

    # Ring sets idle for more than a row are flushed every `flush_rows` rows
    flush_rows: int = 8

    def schedule(self, mode: str = SCHEDULE_FIXED) -> list[str]:
        """Ordered transform ids for one run (repeats allowed).

        In converge mode each smoothing/tuning block is a single
        ``CONVERGE_MARKER`` entry the pipeline expands at run time.
        """
        if mode not in (SCHEDULE_FIXED, SCHEDULE_CONVERGE):
            raise ConfigError(f"Unknown schedule mode: {mode!r}")

        def rounds(n: int) -> list[str]:
            if mode == SCHEDULE_CONVERGE:
                return [CONVERGE_MARKER]
            return ["T2.03", "T2.02"] * n

        ids = ["T0.01", "T1.01", "T1.02", "T2.01"]
        ids += rounds(self.initial_rounds)
        for _ in range(self.reclassify_blocks):
            ids += ["T1.03", "T1.02"]
            ids += rounds(self.block_rounds)
        ids += ["T2.03", "T2.04", "T3.01"]
        return ids
