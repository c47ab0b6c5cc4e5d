"""Concurrent per-beam scoring.

Adapts a function that scores a single beam into the ``predict_next``
collaborator expected by the decoder. The active beams of one step are
scored concurrently on a thread pool; the call returns only once every beam
has been scored, and the first failure is re-raised.

The wrapped function must be safe to call from several threads at once
(e.g. a model held read-only).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from beam_decoder.config import DecoderSettings

    BeamScoringFunc = Callable[[list[int], Any], tuple[Any, Any]]

logger = logging.getLogger("beam_decoder")


class ParallelScorer:
    """``predict_next`` implementation fanning beams out to a thread pool.

    Usable as a context manager; ``close()`` shuts the pool down.
    """

    def __init__(self, score_beam: BeamScoringFunc, max_workers: int | None = None) -> None:
        """Initialize the scorer.

        Args:
            score_beam: ``score_beam(sequence, cache) -> (scores, new_cache)``
                for one beam.
            max_workers: Thread pool size. ``None`` lets the executor pick.
        """
        self._score_beam = score_beam
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="beam-scorer",
        )

    @classmethod
    def from_settings(
        cls,
        score_beam: BeamScoringFunc,
        settings: DecoderSettings,
        num_beams: int,
    ) -> ParallelScorer:
        """Build a scorer sized by ``settings.max_workers``, else *num_beams*."""
        max_workers = settings.max_workers if settings.max_workers is not None else num_beams
        return cls(score_beam, max_workers=max_workers)

    def __call__(
        self,
        sequences: list[list[int]],
        beam_indices: list[int],
        caches: list[Any],
    ) -> list[tuple[Any, Any]]:
        """Score every active beam and wait for all of them.

        Args:
            sequences: Active beam sequences.
            beam_indices: Origin beam of each sequence (unused; caches are
                already aligned by the decoder).
            caches: Cache of each sequence.

        Returns:
            One ``(scores, cache)`` pair per sequence, in input order.
        """
        if len(sequences) == 1:
            return [self._score_beam(sequences[0], caches[0])]
        # Executor.map yields in input order and raises the first failure.
        return list(self._executor.map(self._score_beam, sequences, caches))

    def close(self) -> None:
        """Release the thread pool."""
        self._executor.shutdown(wait=True)
        logger.debug("ParallelScorer thread pool shut down")

    def __enter__(self) -> ParallelScorer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
