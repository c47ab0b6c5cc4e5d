"""Score adjustment subsystem for beam-decoder.

Composable processors that rewrite a beam's vocabulary scores before
ranking: temperature, top-k, top-p, bad words, minimum length and
no-repeat n-gram.
"""

from beam_decoder.processing.bad_words import BadWordsProcessor
from beam_decoder.processing.base import FILTER_VALUE, SCORE_DTYPE, ScoreProcessor
from beam_decoder.processing.min_length import MinLengthProcessor
from beam_decoder.processing.no_repeat_ngram import NoRepeatNGramProcessor
from beam_decoder.processing.pipeline import (
    ProcessorPipeline,
    build_inhibitors,
    build_sampling_pipeline,
)
from beam_decoder.processing.temperature import TemperatureProcessor
from beam_decoder.processing.top_k import TopKProcessor
from beam_decoder.processing.top_p import TopPProcessor

__all__ = [
    "FILTER_VALUE",
    "SCORE_DTYPE",
    "BadWordsProcessor",
    "MinLengthProcessor",
    "NoRepeatNGramProcessor",
    "ProcessorPipeline",
    "ScoreProcessor",
    "TemperatureProcessor",
    "TopKProcessor",
    "TopPProcessor",
    "build_inhibitors",
    "build_sampling_pipeline",
]
