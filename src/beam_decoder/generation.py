"""High-level text generation entry point.

Builds the per-request pieces of a decode call from settings and options:
the sampling pipeline (temperature, top-k, top-p), the selection strategy
(top-k ranking or multinomial sampling) and the diagnostic logger, then runs
the beam-search decoder.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from beam_decoder.config import DecoderSettings, resolve_settings
from beam_decoder.decoder import BeamSearchDecoder
from beam_decoder.logging.logger import DecodingLogger
from beam_decoder.processing.pipeline import build_sampling_pipeline
from beam_decoder.selection.registry import SelectionStrategyRegistry

if TYPE_CHECKING:
    import threading

    from beam_decoder.config import DecoderConfig, GenerationOptions
    from beam_decoder.decoder import PredictNextFunc
    from beam_decoder.selection.base import SelectionStrategy

logger = logging.getLogger("beam_decoder")


def strategy_name(options: GenerationOptions) -> str:
    """Name of the selection strategy requested by *options*."""
    return "multinomial" if options.sample else "top_k"


def select_strategy(options: GenerationOptions, seed: int | None = None) -> SelectionStrategy:
    """Build the selection strategy requested by *options*.

    Args:
        options: Per-request options; ``sample=True`` selects multinomial
            sampling, anything else deterministic top-k ranking.
        seed: Seed for the multinomial sampler.

    Returns:
        A SelectionStrategy instance.
    """
    return SelectionStrategyRegistry.build(strategy_name(options), seed=seed)


def generate(
    config: DecoderConfig,
    predict_next: PredictNextFunc,
    options: GenerationOptions | None = None,
    settings: DecoderSettings | None = None,
    overrides: dict[str, Any] | None = None,
    *,
    cancel_event: threading.Event | None = None,
    deadline: float | None = None,
) -> tuple[list[list[int]], list[float]]:
    """Generate sequences for one request.

    Args:
        config: Decoding parameters of the model.
        predict_next: Scoring collaborator.
        options: Sampling options. Defaults to the ones held by the
            (resolved) settings.
        settings: Process-wide settings. Defaults to ``DecoderSettings()``,
            i.e. environment and ``.env`` values.
        overrides: Per-request ``beam_*`` overrides applied on top of
            *settings*.
        cancel_event: When set, decoding stops at the next step boundary.
        deadline: ``time.monotonic()`` value after which decoding stops.

    Returns:
        Tuple of (sequences, scores), best first.

    Raises:
        ConfigValidationError: If the config or the overrides are invalid.
    """
    settings = resolve_settings(settings if settings is not None else DecoderSettings(), overrides)
    if options is None:
        options = settings.generation_options()

    select_next = select_strategy(options, seed=settings.seed)
    score_adjust = build_sampling_pipeline(options, config.num_beams)
    logger.debug(
        "Generating: num_beams=%d max_length=%d strategy=%s processors=%d",
        config.num_beams,
        config.max_length,
        strategy_name(options),
        len(score_adjust),
    )

    decoder = BeamSearchDecoder(
        config,
        predict_next,
        select_next,
        score_adjust=score_adjust,
        decoding_logger=DecodingLogger(settings),
    )
    return decoder.decode(cancel_event=cancel_event, deadline=deadline)
