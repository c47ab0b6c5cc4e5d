"""Bounded collection of finished hypotheses.

The tracker keeps at most ``num_beams`` finished sequences, sorted by
length-normalized score, and decides when beam search may stop.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from beam_decoder.config import DecoderConfig


@dataclass(frozen=True, slots=True)
class Hypothesis:
    """A finished candidate sequence.

    Attributes:
        sequence: Token ids, seed token included, without the closing EOS.
        score: Length-normalized score,
            ``sum_log_prob / len(sequence) ** length_penalty``.
    """

    sequence: tuple[int, ...]
    score: float


class HypothesisTracker:
    """Score-ordered, capacity-bounded list of finished hypotheses."""

    def __init__(self, num_beams: int, length_penalty: float, early_stopping: bool) -> None:
        self.num_beams = num_beams
        self.length_penalty = length_penalty
        self.early_stopping = early_stopping
        self._items: list[Hypothesis] = []

    @classmethod
    def from_config(cls, config: DecoderConfig) -> HypothesisTracker:
        return cls(
            num_beams=config.num_beams,
            length_penalty=config.length_penalty,
            early_stopping=config.early_stopping,
        )

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Hypothesis]:
        return iter(self._items)

    @property
    def hypotheses(self) -> tuple[Hypothesis, ...]:
        """Tracked hypotheses, best first."""
        return tuple(self._items)

    @property
    def worst_score(self) -> float | None:
        """Score of the worst tracked hypothesis, or ``None`` when empty."""
        if not self._items:
            return None
        return self._items[-1].score

    def normalize(self, sum_log_prob: float, length: int) -> float:
        """Apply the length penalty: ``sum_log_prob / length ** length_penalty``."""
        return sum_log_prob / float(length) ** self.length_penalty

    def insert(self, sequence: Sequence[int], sum_log_prob: float) -> bool:
        """Add a finished sequence if it ranks among the best ``num_beams``.

        The sequence is copied. When the tracker is full, a candidate scoring
        no better than the current worst is rejected; otherwise the worst is
        evicted.

        Args:
            sequence: Finished token sequence.
            sum_log_prob: Its cumulative (un-normalized) log-probability.

        Returns:
            True if the hypothesis was stored.
        """
        score = self.normalize(sum_log_prob, len(sequence))
        if len(self._items) >= self.num_beams:
            if score <= self._items[-1].score:
                return False
            self._items.pop()

        self._items.append(Hypothesis(sequence=tuple(sequence), score=score))
        # Stable: equal scores keep insertion order.
        self._items.sort(key=lambda h: h.score, reverse=True)
        return True

    def is_done(self, best_sum_log_prob: float, cur_len: int) -> bool:
        """Report whether no live beam can still beat the worst tracked hypothesis.

        Args:
            best_sum_log_prob: Total score of the best candidate of this step.
            cur_len: Current decoding step.

        Returns:
            False until ``num_beams`` hypotheses are tracked; then True if
            early stopping is on, or if the best candidate, normalized at
            ``cur_len``, does not exceed the worst tracked score.
        """
        if len(self._items) < self.num_beams:
            return False
        if self.early_stopping:
            return True
        cur_score = self.normalize(best_sum_log_prob, cur_len)
        return self._items[-1].score >= cur_score

    def prepare_output(self, max_length: int, eos_token_id: int) -> tuple[list[list[int]], list[float]]:
        """Build the final output, best first.

        Sequences shorter than ``max_length`` are closed with
        ``eos_token_id`` (unless EOS handling is disabled).

        Returns:
            Tuple of (sequences, scores).
        """
        sequences: list[list[int]] = []
        scores: list[float] = []
        for hypothesis in self._items:
            sequence = list(hypothesis.sequence)
            if len(sequence) < max_length and eos_token_id >= 0:
                sequence.append(eos_token_id)
            sequences.append(sequence)
            scores.append(hypothesis.score)
        return sequences, scores
