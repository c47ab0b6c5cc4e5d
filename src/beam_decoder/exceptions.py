"""Exception hierarchy for beam-decoder.

All exceptions derive from BeamDecoderError, enabling broad catch patterns
at the application boundary while allowing fine-grained handling internally.
"""


class BeamDecoderError(Exception):
    """Base exception for all beam-decoder errors."""


class ConfigValidationError(BeamDecoderError):
    """Configuration field validation failed.

    Raised before decoding starts when the decoder config is unusable
    (non-positive beam count or max length, malformed bad-words sequences,
    token ids outside the vocabulary), or when per-request overrides contain
    unknown or non-overridable keys.
    """


class PredictionContractError(BeamDecoderError):
    """The scoring collaborator broke its contract.

    Raised when ``predict_next`` returns a different number of results than
    active beams, a result that is not a ``(scores, cache)`` pair, or a
    score vector whose length is not ``vocab_size``.
    Fatal to the current decode call.
    """


class TokenSelectionError(BeamDecoderError):
    """Candidate selection failed.

    Raised when a selection strategy is called with arguments it cannot
    satisfy, such as more samples than vocabulary entries, or returns no
    candidates at all.
    """


class SamplingExhaustedError(TokenSelectionError):
    """Multinomial sampling cannot produce the requested unique draws.

    Raised when more unique samples are requested than there are tokens
    with non-zero probability in a beam's distribution.
    """
