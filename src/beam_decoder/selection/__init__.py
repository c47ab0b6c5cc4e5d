"""Candidate selection subsystem for beam-decoder.

Ranks ``(beam, token, score)`` continuations either deterministically
(top-k) or stochastically (multinomial sampling without replacement).
"""

from beam_decoder.selection.base import SelectionStrategy
from beam_decoder.selection.multinomial import MultinomialSelection
from beam_decoder.selection.registry import SelectionStrategyRegistry
from beam_decoder.selection.top_k import TopKSelection
from beam_decoder.selection.types import ScoredToken

__all__ = [
    "MultinomialSelection",
    "ScoredToken",
    "SelectionStrategy",
    "SelectionStrategyRegistry",
    "TopKSelection",
]
