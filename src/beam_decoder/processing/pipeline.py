"""Composition of score processors.

Two pipelines run on every beam at every step, in this order:

- the sampling pipeline (temperature -> top-k -> top-p), built from the
  caller's GenerationOptions;
- the inhibitors (bad words -> min length -> no-repeat n-gram), built from
  the DecoderConfig.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from beam_decoder.processing.bad_words import BadWordsProcessor
from beam_decoder.processing.base import FILTER_VALUE, ScoreProcessor
from beam_decoder.processing.min_length import MinLengthProcessor
from beam_decoder.processing.no_repeat_ngram import NoRepeatNGramProcessor
from beam_decoder.processing.temperature import TemperatureProcessor
from beam_decoder.processing.top_k import TopKProcessor
from beam_decoder.processing.top_p import TopPProcessor

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    import numpy as np

    from beam_decoder.config import DecoderConfig, GenerationOptions


class ProcessorPipeline(ScoreProcessor):
    """Applies processors left to right. An empty pipeline is the identity."""

    def __init__(self, processors: Iterable[ScoreProcessor] = ()) -> None:
        self._processors: tuple[ScoreProcessor, ...] = tuple(processors)

    @property
    def processors(self) -> tuple[ScoreProcessor, ...]:
        return self._processors

    def __len__(self) -> int:
        return len(self._processors)

    def process(self, scores: np.ndarray, sequence: Sequence[int]) -> np.ndarray:
        if not self._processors:
            return scores.copy()
        for processor in self._processors:
            scores = processor.process(scores, sequence)
        return scores


def build_sampling_pipeline(options: GenerationOptions, num_beams: int) -> ProcessorPipeline:
    """Build the temperature/top-k/top-p pipeline for one request.

    Args:
        options: Per-request sampling options; unset fields add nothing.
        num_beams: Beam count, used to size the top-p minimum keep set.

    Returns:
        The composed pipeline (possibly empty).
    """
    processors: list[ScoreProcessor] = []
    if options.temperature is not None and options.temperature != 1:
        processors.append(TemperatureProcessor(options.temperature))
    if options.top_k is not None:
        processors.append(TopKProcessor(options.top_k, FILTER_VALUE))
    if options.top_p is not None:
        min_size = 2 if num_beams > 1 else 1
        processors.append(TopPProcessor(options.top_p, FILTER_VALUE, min_size))
    return ProcessorPipeline(processors)


def build_inhibitors(config: DecoderConfig) -> ProcessorPipeline:
    """Build the config-driven filters that run after the sampling pipeline.

    Args:
        config: Decoder configuration.

    Returns:
        The composed pipeline (possibly empty).
    """
    processors: list[ScoreProcessor] = []
    if config.bad_words_ids:
        processors.append(BadWordsProcessor(config.bad_words_ids, config.eos_token_id))
    if config.min_length >= 0 and config.eos_token_id >= 0:
        processors.append(MinLengthProcessor(config.min_length, config.eos_token_id))
    if config.no_repeat_ngram_size > 0:
        processors.append(NoRepeatNGramProcessor(config.no_repeat_ngram_size))
    return ProcessorPipeline(processors)
