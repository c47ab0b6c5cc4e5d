"""beam-decoder: beam-search decoding for autoregressive text generation.

Drives translation, summarization, paraphrase and abstractive QA models
through a pluggable scoring function: composable score processors,
top-k or multinomial candidate selection, and a bounded hypothesis tracker
with early stopping.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("beam-decoder")
except PackageNotFoundError:
    __version__ = "0.0.0"

from beam_decoder.config import (
    DecoderConfig,
    DecoderSettings,
    GenerationOptions,
    resolve_settings,
    validate_overrides,
)
from beam_decoder.decoder import BeamSearchDecoder, decode, reorder_caches
from beam_decoder.exceptions import (
    BeamDecoderError,
    ConfigValidationError,
    PredictionContractError,
    SamplingExhaustedError,
    TokenSelectionError,
)
from beam_decoder.generation import generate, select_strategy
from beam_decoder.hypotheses import Hypothesis, HypothesisTracker
from beam_decoder.scoring import ParallelScorer
from beam_decoder.selection import MultinomialSelection, ScoredToken, TopKSelection

__all__ = [
    "BeamDecoderError",
    "BeamSearchDecoder",
    "ConfigValidationError",
    "DecoderConfig",
    "DecoderSettings",
    "GenerationOptions",
    "Hypothesis",
    "HypothesisTracker",
    "MultinomialSelection",
    "ParallelScorer",
    "PredictionContractError",
    "SamplingExhaustedError",
    "ScoredToken",
    "TokenSelectionError",
    "TopKSelection",
    "__version__",
    "decode",
    "generate",
    "reorder_caches",
    "resolve_settings",
    "select_strategy",
    "validate_overrides",
]
