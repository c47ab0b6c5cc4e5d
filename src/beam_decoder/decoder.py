"""Beam-search decoder: the generation loop of beam-decoder.

Orchestrates one decode call:
    predict -> adjust scores -> add beam scores -> select -> commit/extend -> stop?

The scoring collaborator is called once per step with every active beam::

    predict_next(sequences, beam_indices, caches) -> [(scores, cache), ...]

``beam_indices[i]`` is the previous-step beam that active beam ``i``
descends from, and ``caches[i]`` is the cache the collaborator returned for
that origin beam. Caches are opaque: the decoder only reorders them, it never
copies or inspects them. Two beams descending from the same origin share the
same cache object.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import numpy as np

from beam_decoder.config import DecoderSettings
from beam_decoder.exceptions import PredictionContractError, TokenSelectionError
from beam_decoder.hypotheses import HypothesisTracker
from beam_decoder.logging.logger import DecodingLogger
from beam_decoder.logging.types import DecodingStepRecord
from beam_decoder.processing.base import SCORE_DTYPE
from beam_decoder.processing.pipeline import build_inhibitors

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Sequence

    from beam_decoder.config import DecoderConfig
    from beam_decoder.processing.base import ScoreProcessor
    from beam_decoder.selection.base import SelectionStrategy
    from beam_decoder.selection.types import ScoredToken

    PredictNextFunc = Callable[
        [list[list[int]], list[int], list[Any]],
        Sequence[tuple[Any, Any]],
    ]

logger = logging.getLogger("beam_decoder")


class _BeamState:
    """Active beams, as parallel lists of equal length.

    Attributes:
        sequences: Tokens generated so far, seed token included.
        sum_log_probs: Cumulative total score of each beam.
        beam_indices: Previous-step beam each active beam extends.
        caches: Collaborator cache matching each active beam.
    """

    __slots__ = ("beam_indices", "caches", "sequences", "sum_log_probs")

    def __init__(
        self,
        sequences: list[list[int]],
        sum_log_probs: list[float],
        beam_indices: list[int],
        caches: list[Any],
    ) -> None:
        self.sequences = sequences
        self.sum_log_probs = sum_log_probs
        self.beam_indices = beam_indices
        self.caches = caches

    def __len__(self) -> int:
        return len(self.sequences)


class BeamSearchDecoder:
    """Beam-search decoding for models with a language-modeling head.

    A decoder instance is bound to one configuration and one set of
    collaborators; every ``decode()`` call owns its own beams and
    hypotheses, so nothing leaks from one call into the next.
    """

    def __init__(
        self,
        config: DecoderConfig,
        predict_next: PredictNextFunc,
        select_next: SelectionStrategy,
        score_adjust: ScoreProcessor | None = None,
        decoding_logger: DecodingLogger | None = None,
    ) -> None:
        """Initialize the decoder.

        Args:
            config: Decoding parameters. Validated here, before any step runs.
            predict_next: Scoring collaborator.
            select_next: Candidate selection strategy.
            score_adjust: Sampling pipeline applied to every score row before
                the config-driven inhibitors. ``None`` applies nothing.
            decoding_logger: Per-step diagnostic logger. Defaults to one
                built from ``DecoderSettings()``.

        Raises:
            ConfigValidationError: If *config* cannot be decoded with.
        """
        config.validate_for_decoding()
        self._config = config
        self._predict_next = predict_next
        self._select_next = select_next
        self._score_adjust = score_adjust
        self._inhibitors = build_inhibitors(config)
        self._logger = decoding_logger if decoding_logger is not None else DecodingLogger(
            DecoderSettings()
        )

    @property
    def config(self) -> DecoderConfig:
        return self._config

    @property
    def decoding_logger(self) -> DecodingLogger:
        """The diagnostic logger for this decoder."""
        return self._logger

    def decode(
        self,
        cancel_event: threading.Event | None = None,
        deadline: float | None = None,
    ) -> tuple[list[list[int]], list[float]]:
        """Generate sequences with beam search.

        Args:
            cancel_event: When set, decoding stops at the next step boundary.
            deadline: ``time.monotonic()`` value after which decoding stops
                at the next step boundary.

        Returns:
            Tuple of (sequences, scores), best first, at most ``num_beams``
            entries. A cancelled decode returns the hypotheses finished so
            far plus the flushed active beams, or empty lists if cancelled
            before the first step.

        Raises:
            PredictionContractError: If the collaborator breaks its contract.
            TokenSelectionError: If the selection strategy fails.
        """
        config = self._config
        hypotheses = HypothesisTracker.from_config(config)
        beams = _BeamState(
            sequences=[[config.decoder_start_token_id]],
            sum_log_probs=[0.0],
            beam_indices=[0],
            caches=[None],
        )
        is_done = False

        for cur_len in range(1, config.max_length):
            if _is_cancelled(cancel_event, deadline):
                logger.info("Decoding cancelled at step %d, returning partial results", cur_len)
                if cur_len == 1:
                    return [], []
                break

            t_start_ns = time.perf_counter_ns()
            scores, caches = self._predict(beams)
            t_predict_ns = time.perf_counter_ns()

            candidates = self._candidate_scores(beams, scores)
            selected = self._select_next.select(candidates, config.num_beams * 2)
            if not selected:
                raise TokenSelectionError(
                    f"Selection strategy returned no candidates at step {cur_len}"
                )

            beams, eos_committed, eos_dropped = self._advance(beams, caches, selected, hypotheses)
            is_done = hypotheses.is_done(selected[0].score, cur_len)

            t_end_ns = time.perf_counter_ns()
            self._logger.log_step(
                DecodingStepRecord(
                    timestamp_ns=t_start_ns,
                    predict_ms=(t_predict_ns - t_start_ns) / 1_000_000.0,
                    total_step_ms=(t_end_ns - t_start_ns) / 1_000_000.0,
                    step=cur_len,
                    num_active_beams=len(beams),
                    num_hypotheses=len(hypotheses),
                    best_score=selected[0].score,
                    worst_hypothesis_score=hypotheses.worst_score,
                    eos_committed=eos_committed,
                    eos_dropped=eos_dropped,
                    is_done=is_done,
                )
            )

            if is_done:
                logger.info("Stopping early at step %d", cur_len)
                break
            if len(beams) == 0:
                break

        if not is_done:
            for sequence, sum_log_prob in zip(beams.sequences, beams.sum_log_probs):
                hypotheses.insert(sequence, sum_log_prob)

        return hypotheses.prepare_output(config.max_length, config.eos_token_id)

    def _predict(self, beams: _BeamState) -> tuple[list[np.ndarray], list[Any]]:
        """Call the scoring collaborator and check its contract.

        Returns:
            Tuple of (one score row per beam, one updated cache per beam).

        Raises:
            PredictionContractError: On a result count or vector length mismatch.
        """
        results = list(
            self._predict_next(
                [list(sequence) for sequence in beams.sequences],
                list(beams.beam_indices),
                list(beams.caches),
            )
        )
        if len(results) != len(beams):
            logger.error(
                "predict_next returned %d results for %d beams", len(results), len(beams)
            )
            raise PredictionContractError(
                f"predict_next returned {len(results)} results for {len(beams)} beams"
            )

        scores: list[np.ndarray] = []
        caches: list[Any] = []
        for i, result in enumerate(results):
            try:
                vector, cache = result
            except (TypeError, ValueError) as exc:
                raise PredictionContractError(
                    f"predict_next result {i} is not a (scores, cache) pair"
                ) from exc
            row = np.asarray(vector, dtype=SCORE_DTYPE)
            if row.shape != (self._config.vocab_size,):
                logger.error(
                    "predict_next returned scores of shape %s for beam %d, expected (%d,)",
                    row.shape,
                    i,
                    self._config.vocab_size,
                )
                raise PredictionContractError(
                    f"Score vector {i} has shape {row.shape}, expected ({self._config.vocab_size},)"
                )
            scores.append(row)
            caches.append(cache)
        return scores, caches

    def _candidate_scores(self, beams: _BeamState, scores: list[np.ndarray]) -> list[np.ndarray]:
        """Adjust each beam's row and add its cumulative score."""
        candidates = []
        for row, sequence, sum_log_prob in zip(scores, beams.sequences, beams.sum_log_probs):
            if self._score_adjust is not None:
                row = self._score_adjust.process(row, sequence)
            row = self._inhibitors.process(row, sequence)
            candidates.append(row + sum_log_prob)
        return candidates

    def _advance(
        self,
        beams: _BeamState,
        caches: list[Any],
        selected: list[ScoredToken],
        hypotheses: HypothesisTracker,
    ) -> tuple[_BeamState, int, int]:
        """Turn ranked candidates into finished hypotheses and next-step beams.

        An EOS candidate finishes its origin beam only if it ranks within the
        first ``num_beams`` candidates; any other candidate takes the next
        free beam slot. Partitioning stops once ``num_beams`` slots are filled.

        Returns:
            Tuple of (next beams, EOS candidates committed, EOS candidates dropped).
        """
        num_beams = self._config.num_beams
        eos_token_id = self._config.eos_token_id

        sequences: list[list[int]] = []
        sum_log_probs: list[float] = []
        beam_indices: list[int] = []
        eos_committed = 0
        eos_dropped = 0

        for rank, candidate in enumerate(selected):
            if eos_token_id >= 0 and candidate.token_index == eos_token_id:
                if rank >= num_beams:
                    eos_dropped += 1
                    continue
                hypotheses.insert(beams.sequences[candidate.beam_index], candidate.score)
                eos_committed += 1
            else:
                sequences.append(beams.sequences[candidate.beam_index] + [candidate.token_index])
                sum_log_probs.append(candidate.score)
                beam_indices.append(candidate.beam_index)

            if len(beam_indices) == num_beams:
                break

        next_beams = _BeamState(
            sequences=sequences,
            sum_log_probs=sum_log_probs,
            beam_indices=beam_indices,
            caches=reorder_caches(caches, beam_indices),
        )
        return next_beams, eos_committed, eos_dropped


def reorder_caches(caches: Sequence[Any], beam_indices: Sequence[int]) -> list[Any]:
    """Pair every new beam with the cache of the beam it descends from.

    Args:
        caches: Caches of the previous step's beams.
        beam_indices: Origin beam of each new beam.

    Returns:
        ``[caches[i] for i in beam_indices]``.
    """
    return [caches[beam_index] for beam_index in beam_indices]


def _is_cancelled(cancel_event: threading.Event | None, deadline: float | None) -> bool:
    if cancel_event is not None and cancel_event.is_set():
        return True
    return deadline is not None and time.monotonic() >= deadline


def decode(
    config: DecoderConfig,
    predict_next: PredictNextFunc,
    select_next: SelectionStrategy,
    score_adjust: ScoreProcessor | None = None,
    *,
    cancel_event: threading.Event | None = None,
    deadline: float | None = None,
    decoding_logger: DecodingLogger | None = None,
) -> tuple[list[list[int]], list[float]]:
    """Run one beam-search decode.

    Convenience wrapper around ``BeamSearchDecoder(...).decode(...)``.

    Returns:
        Tuple of (sequences, scores), best first.
    """
    decoder = BeamSearchDecoder(
        config,
        predict_next,
        select_next,
        score_adjust=score_adjust,
        decoding_logger=decoding_logger,
    )
    return decoder.decode(cancel_event=cancel_event, deadline=deadline)
