"""Suppression of banned token sequences."""

from __future__ import annotations

from typing import TYPE_CHECKING

from beam_decoder.processing.base import FILTER_VALUE, ScoreProcessor

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    import numpy as np


class BadWordsProcessor(ScoreProcessor):
    """Prevents a beam from completing any banned token sequence.

    For a banned sequence ``seq``, the score of ``seq[-1]`` is set to -inf
    whenever the beam's history ends with ``seq[:-1]``. Single-token
    sequences are therefore always banned. The lone ``(eos_token_id,)``
    sequence is ignored: end of sequence is governed by the minimum-length
    filter instead.
    """

    def __init__(self, bad_words_ids: Iterable[Sequence[int]], eos_token_id: int) -> None:
        self.bad_words_ids: tuple[tuple[int, ...], ...] = tuple(
            tuple(seq)
            for seq in bad_words_ids
            if not (len(seq) == 1 and seq[0] == eos_token_id)
        )

    def banned_tokens(self, sequence: Sequence[int]) -> list[int]:
        """List the tokens *sequence* must not be extended with."""
        banned = []
        for banned_seq in self.bad_words_ids:
            if _ends_with(sequence, banned_seq[:-1]):
                banned.append(banned_seq[-1])
        return banned

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        banned = self.banned_tokens(sequence)
        if not banned:
            return scores.copy()
        result = scores.copy()
        result[banned] = FILTER_VALUE
        return result


def _ends_with(sequence: Sequence[int], suffix: Sequence[int]) -> bool:
    if not suffix:
        return True
    if len(suffix) > len(sequence):
        return False
    return list(sequence[len(sequence) - len(suffix) :]) == list(suffix)
