"""Blocking of repeated n-grams."""

from __future__ import annotations

from typing import TYPE_CHECKING

from beam_decoder.processing.base import FILTER_VALUE, ScoreProcessor

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np


class NoRepeatNGramProcessor(ScoreProcessor):
    """Prevents a beam from generating any n-gram it has already generated.

    Every n-gram of the history is indexed by its first ``n - 1`` tokens.
    If the last ``n - 1`` tokens of the history match such a prefix, the
    tokens that completed it before are banned.
    """

    def __init__(self, ngram_size: int) -> None:
        if ngram_size < 1:
            raise ValueError(f"ngram_size must be >= 1, got {ngram_size}")
        self.ngram_size = ngram_size

    def banned_tokens(self, sequence: Sequence[int]) -> list[int]:
        """List the tokens that would repeat an n-gram of *sequence*."""
        n = self.ngram_size
        cur_len = len(sequence)
        if cur_len + 1 < n:
            return []

        tokens = tuple(sequence)
        generated: dict[tuple[int, ...], list[int]] = {}
        for start in range(cur_len - n + 1):
            ngram = tokens[start : start + n]
            generated.setdefault(ngram[:-1], []).append(ngram[-1])

        return generated.get(tokens[cur_len + 1 - n :], [])

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        result = scores.copy()
        banned = self.banned_tokens(sequence)
        if banned:
            result[banned] = FILTER_VALUE
        return result
