"""Data types for the diagnostic logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DecodingStepRecord:
    """Immutable record of a single beam-search step.

    Attributes:
        timestamp_ns: Monotonic time at the start of the step (nanoseconds).
        predict_ms: Time spent in the scoring collaborator (milliseconds).
        total_step_ms: Total time for the step (milliseconds).
        step: Current length ``cur_len`` (1-based).
        num_active_beams: Beams alive after this step.
        num_hypotheses: Finished hypotheses tracked after this step.
        best_score: Total score of the best ranked candidate.
        worst_hypothesis_score: Score of the worst tracked hypothesis, or
            ``None`` if none are tracked.
        eos_committed: EOS candidates turned into hypotheses this step.
        eos_dropped: EOS candidates ranked below ``num_beams`` and dropped.
        is_done: True if this step ended the search.
    """

    # Timing
    timestamp_ns: int
    predict_ms: float
    total_step_ms: float

    # Beams
    step: int
    num_active_beams: int
    num_hypotheses: int

    # Scores
    best_score: float
    worst_hypothesis_score: float | None

    # End of sequence
    eos_committed: int
    eos_dropped: int
    is_done: bool
