"""Configuration system for beam-decoder.

Three layers, each immutable once built:

- ``DecoderConfig``: per-model decoding parameters (beam count, lengths,
  special token ids, bad words). Supplied once per decode call.
- ``GenerationOptions``: nullable per-request sampling options
  (temperature, top-k, top-p, sample). ``None`` means "not set".
- ``DecoderSettings``: process-wide defaults loaded with pydantic-settings:
  init kwargs -> environment variables (BEAM_*) -> .env file -> field defaults.

Per-request overrides are applied via resolve_settings() which creates a new
settings instance without mutating the defaults. Infrastructure fields are
protected from per-request override.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from beam_decoder.exceptions import ConfigValidationError

# Fields that can be overridden per-request via the ``beam_`` prefixed keys.
# Infrastructure fields (worker pool size, RNG seed) cannot change per-request.
_PER_REQUEST_FIELDS: frozenset[str] = frozenset(
    {
        "temperature",
        "top_k",
        "top_p",
        "sample",
        "log_level",
        "diagnostic_mode",
    }
)

_OVERRIDE_PREFIX = "beam_"

# All known settings field names (populated after class definition).
_ALL_FIELDS: frozenset[str] = frozenset()


class DecoderConfig(BaseModel):
    """Decoding parameters derived from the model configuration.

    Token ids follow the BART convention by default (bos=0, pad=1, eos=2,
    decoder start=2). A negative ``eos_token_id`` disables end-of-sequence
    handling; a negative ``min_length`` disables the minimum-length filter.
    """

    model_config = ConfigDict(frozen=True)

    num_beams: int = Field(default=4, description="Number of beams kept alive per step")
    max_length: int = Field(default=20, description="Maximum output length, seed token included")
    min_length: int = Field(default=0, description="EOS is suppressed below this length")
    length_penalty: float = Field(
        default=1.0,
        description="Exponent applied to the sequence length when normalizing scores",
    )
    early_stopping: bool = Field(
        default=False,
        description="Stop as soon as num_beams hypotheses are finished",
    )
    eos_token_id: int = Field(default=2, description="End-of-sequence token id (<0 disables)")
    pad_token_id: int = Field(default=1, description="Padding token id")
    bos_token_id: int = Field(default=0, description="Beginning-of-sequence token id")
    decoder_start_token_id: int = Field(
        default=2,
        description="Token id seeding every decode",
    )
    bad_words_ids: tuple[tuple[int, ...], ...] = Field(
        default=(),
        description="Token sequences that must never be generated",
    )
    vocab_size: int = Field(description="Length of every score vector")
    is_encoder_decoder: bool = Field(default=True, description="Model has a separate encoder")
    no_repeat_ngram_size: int = Field(
        default=0,
        description="Ban repeating n-grams of this size (<=0 disables)",
    )

    def validate_for_decoding(self) -> None:
        """Check the fields a decode call depends on.

        Called before the first decoding step so that nothing is partially
        executed on a bad config.

        Raises:
            ConfigValidationError: If any field makes decoding impossible.
        """
        if self.num_beams <= 0:
            raise ConfigValidationError(f"num_beams must be positive, got {self.num_beams}")
        if self.max_length <= 0:
            raise ConfigValidationError(f"max_length must be positive, got {self.max_length}")
        if self.vocab_size <= 0:
            raise ConfigValidationError(f"vocab_size must be positive, got {self.vocab_size}")
        if self.no_repeat_ngram_size < 0:
            raise ConfigValidationError(
                f"no_repeat_ngram_size must be >= 0, got {self.no_repeat_ngram_size}"
            )
        if not 0 <= self.decoder_start_token_id < self.vocab_size:
            raise ConfigValidationError(
                f"decoder_start_token_id {self.decoder_start_token_id} is outside "
                f"the vocabulary (size {self.vocab_size})"
            )
        if self.eos_token_id >= self.vocab_size:
            raise ConfigValidationError(
                f"eos_token_id {self.eos_token_id} is outside the vocabulary "
                f"(size {self.vocab_size})"
            )
        for i, sequence in enumerate(self.bad_words_ids):
            if not sequence:
                raise ConfigValidationError(f"bad_words_ids[{i}] is empty")
            for token_id in sequence:
                if not 0 <= token_id < self.vocab_size:
                    raise ConfigValidationError(
                        f"bad_words_ids[{i}] contains token id {token_id} outside "
                        f"the vocabulary (size {self.vocab_size})"
                    )


class GenerationOptions(BaseModel):
    """Per-request sampling options. Unset fields are ``None``."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = Field(default=None, gt=0, description="Sampling temperature")
    top_k: int | None = Field(default=None, ge=1, description="Top-k candidates kept per beam")
    top_p: float | None = Field(default=None, gt=0, le=1, description="Nucleus threshold")
    sample: bool | None = Field(default=None, description="Sample instead of ranking")


class DecoderSettings(BaseSettings):
    """Process-wide defaults for beam-decoder.

    Resolution order: init kwargs -> env vars (BEAM_*) -> .env file -> defaults.

    Fields are divided into two groups:
    - **Infrastructure**: worker pool and RNG seed. NOT overridable per-request.
    - **Sampling and logging**: overridable per-request via ``beam_`` keys.
    """

    model_config = SettingsConfigDict(
        env_prefix="BEAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Infrastructure (NOT per-request overridable) ---

    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Thread pool size for per-beam scoring (None = number of beams)",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the multinomial sampler's RNG (None = OS entropy)",
    )

    # --- Sampling (per-request overridable) ---

    temperature: float | None = Field(default=None, gt=0, description="Sampling temperature")
    top_k: int | None = Field(default=None, ge=1, description="Top-k filtering (None disables)")
    top_p: float | None = Field(
        default=None,
        gt=0,
        le=1,
        description="Nucleus sampling threshold (None disables)",
    )
    sample: bool = Field(
        default=False,
        description="Use multinomial sampling instead of top-k ranking",
    )

    # --- Logging (per-request overridable) ---

    log_level: str = Field(
        default="summary",
        description="Logging verbosity: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Store all step records in memory for analysis",
    )

    def generation_options(self) -> GenerationOptions:
        """Project the sampling fields onto a GenerationOptions."""
        return GenerationOptions(
            temperature=self.temperature,
            top_k=self.top_k,
            top_p=self.top_p,
            sample=self.sample,
        )


# Populate _ALL_FIELDS now that the class is defined.
_ALL_FIELDS = frozenset(DecoderSettings.model_fields.keys())


def _strip_prefix(key: str) -> str:
    """Strip the 'beam_' prefix from an override key.

    Args:
        key: The key with or without 'beam_' prefix.

    Returns:
        The key with 'beam_' prefix removed if present.
    """
    if key.startswith(_OVERRIDE_PREFIX):
        return key[len(_OVERRIDE_PREFIX) :]
    return key


def validate_overrides(overrides: dict[str, Any]) -> None:
    """Validate all beam_* keys in overrides without creating settings.

    Args:
        overrides: Dictionary of per-request arguments, potentially with
            beam_ prefix.

    Raises:
        ConfigValidationError: If any beam_* key is unknown or non-overridable.
    """
    for key in overrides:
        if not key.startswith(_OVERRIDE_PREFIX):
            continue
        field_name = _strip_prefix(key)
        if field_name not in _ALL_FIELDS:
            raise ConfigValidationError(
                f"Unknown settings field: '{key}' (no field '{field_name}' exists)"
            )
        if field_name not in _PER_REQUEST_FIELDS:
            raise ConfigValidationError(
                f"Field '{field_name}' is an infrastructure field and cannot be "
                f"overridden per-request"
            )


def resolve_settings(
    defaults: DecoderSettings,
    overrides: dict[str, Any] | None,
) -> DecoderSettings:
    """Create a new settings instance merging defaults with per-request overrides.

    Override keys use the 'beam_' prefix (e.g., 'beam_top_k': 10). Keys
    without the prefix are silently ignored (they belong to other layers).

    Args:
        defaults: The base settings loaded from environment.
        overrides: Per-request overrides.

    Returns:
        A new DecoderSettings with overrides applied, or ``defaults`` itself
        if there is nothing to apply.

    Raises:
        ConfigValidationError: If any beam_* key is unknown, non-overridable,
            or fails type validation.
    """
    if not overrides:
        return defaults

    validate_overrides(overrides)

    updates: dict[str, Any] = {}
    for key, value in overrides.items():
        if not key.startswith(_OVERRIDE_PREFIX):
            continue
        updates[_strip_prefix(key)] = value

    if not updates:
        return defaults

    # model_validate (not model_copy) so that "10" is coerced to 10.
    merged = defaults.model_dump()
    merged.update(updates)
    try:
        return DecoderSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigValidationError(f"Invalid per-request override: {exc}") from exc
