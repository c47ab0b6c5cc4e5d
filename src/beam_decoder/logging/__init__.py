"""Diagnostic logging subsystem for beam-decoder.

Provides immutable per-step decoding records and a configurable logger
that supports none/summary/full verbosity and in-memory diagnostic mode.
"""

from beam_decoder.logging.logger import DecodingLogger
from beam_decoder.logging.types import DecodingStepRecord

__all__ = [
    "DecodingLogger",
    "DecodingStepRecord",
]
