"""Minimum-length enforcement."""

from __future__ import annotations

from typing import TYPE_CHECKING

from beam_decoder.processing.base import FILTER_VALUE, ScoreProcessor

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np


class MinLengthProcessor(ScoreProcessor):
    """Forbids end of sequence while the beam is shorter than ``min_length``."""

    def __init__(self, min_length: int, eos_token_id: int) -> None:
        self.min_length = min_length
        self.eos_token_id = eos_token_id

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        result = scores.copy()
        if len(sequence) < self.min_length:
            result[self.eos_token_id] = FILTER_VALUE
        return result
