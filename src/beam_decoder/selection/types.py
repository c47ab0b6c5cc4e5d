"""Data types for the candidate selection subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ScoredToken:
    """A candidate continuation of one beam.

    Attributes:
        beam_index: Index of the beam being extended, in the previous
            step's beam ordering.
        token_index: Vocabulary id of the continuation token.
        score: Total path score (cumulative log-prob plus this step's score).
    """

    beam_index: int
    token_index: int
    score: float
