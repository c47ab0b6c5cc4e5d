"""Temperature scaling of score rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from beam_decoder.processing.base import ScoreProcessor

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np


class TemperatureProcessor(ScoreProcessor):
    """Multiplies every score by ``1 / temperature``.

    Temperatures above 1 flatten the distribution, below 1 sharpen it.
    """

    def __init__(self, temperature: float) -> None:
        if temperature <= 0:
            raise ValueError(f"temperature must be positive, got {temperature}")
        self.temperature = temperature
        self._inv_temperature = 1.0 / temperature

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        result: np.ndarray = scores * self._inv_temperature
        return result
