"""Shared pytest fixtures for beam-decoder tests.

Provides decoder configurations, quiet settings, and a scripted scoring
collaborator whose scores depend only on a beam's last token, so that every
beam-search step can be worked out by hand.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pytest

from beam_decoder.config import DecoderConfig, DecoderSettings
from beam_decoder.logging.logger import DecodingLogger

EOS = 2
START = 0


class ScriptedModel:
    """Scoring collaborator driven by a last-token lookup table.

    ``table[last_token][token]`` is the score of ``token`` after a beam
    ending in ``last_token``; unlisted tokens get ``default``. The cache
    returned for a beam is the tuple of its sequence, so cache provenance
    can be checked after reordering. Every call is recorded.
    """

    def __init__(
        self,
        vocab_size: int,
        table: dict[int, dict[int, float]],
        default: float = -10.0,
    ) -> None:
        self.vocab_size = vocab_size
        self.table = table
        self.default = default
        self.calls: list[dict[str, Any]] = []

    def row(self, sequence: list[int]) -> np.ndarray:
        row = np.full(self.vocab_size, self.default, dtype=np.float64)
        for token, score in self.table.get(sequence[-1], {}).items():
            row[token] = score
        return row

    def score_beam(self, sequence: list[int], cache: Any) -> tuple[np.ndarray, Any]:
        return self.row(sequence), tuple(sequence)

    def __call__(
        self,
        sequences: list[list[int]],
        beam_indices: list[int],
        caches: list[Any],
    ) -> list[tuple[np.ndarray, Any]]:
        self.calls.append(
            {
                "sequences": [list(s) for s in sequences],
                "beam_indices": list(beam_indices),
                "caches": list(caches),
            }
        )
        return [self.score_beam(sequence, cache) for sequence, cache in zip(sequences, caches)]


@pytest.fixture
def make_config():
    """Return a factory for DecoderConfig with test-friendly defaults."""

    def _make(**overrides: Any) -> DecoderConfig:
        fields: dict[str, Any] = {
            "num_beams": 2,
            "max_length": 5,
            "min_length": 0,
            "length_penalty": 1.0,
            "early_stopping": False,
            "eos_token_id": EOS,
            "pad_token_id": 1,
            "decoder_start_token_id": START,
            "vocab_size": 6,
        }
        fields.update(overrides)
        return DecoderConfig(**fields)

    return _make


@pytest.fixture
def silent_settings() -> DecoderSettings:
    """Settings with no log output and no .env lookup."""
    return DecoderSettings(_env_file=None, log_level="none")  # type: ignore[call-arg]


@pytest.fixture
def diagnostic_logger() -> DecodingLogger:
    """A DecodingLogger that keeps every step record in memory."""
    settings = DecoderSettings(
        _env_file=None,
        log_level="none",
        diagnostic_mode=True,  # type: ignore[call-arg]
    )
    return DecodingLogger(settings)


@pytest.fixture
def eos_after_first_step_model() -> ScriptedModel:
    """Collaborator that ranks EOS highest from the second step onward.

    Step 1 (after the start token): 3 > 4 > 5 > everything else.
    Afterwards: EOS at -0.1, everything else at -3.0.
    """
    return ScriptedModel(
        vocab_size=6,
        table={
            START: {3: -0.5, 4: -1.0, 5: -2.0},
            3: {EOS: -0.1},
            4: {EOS: -0.1},
            5: {EOS: -0.1},
        },
        default=-3.0,
    )


@pytest.fixture
def never_eos_model() -> ScriptedModel:
    """Collaborator that always prefers tokens 3 and 4 and never EOS."""
    preferred = {3: -0.1, 4: -0.2, EOS: -50.0}
    return ScriptedModel(
        vocab_size=6,
        table={token: dict(preferred) for token in range(6)},
        default=-5.0,
    )


@pytest.fixture
def make_model():
    """Return a factory for ScriptedModel collaborators."""

    def _make(
        table: dict[int, dict[int, float]],
        vocab_size: int = 6,
        default: float = -10.0,
    ) -> ScriptedModel:
        return ScriptedModel(vocab_size=vocab_size, table=table, default=default)

    return _make
