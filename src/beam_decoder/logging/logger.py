"""Diagnostic logger for beam-search steps.

Uses the standard ``logging`` module with the ``"beam_decoder"`` logger.
No ``print()`` statements. Supports three verbosity levels and an
in-memory diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from beam_decoder.config import DecoderSettings
    from beam_decoder.logging.types import DecodingStepRecord

logger = logging.getLogger("beam_decoder")


class DecodingLogger:
    """Per-step diagnostic logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per step with key metrics (active beams,
        finished hypotheses, best and worst scores, timing).

        ``"full"``: Full JSON dump of all record fields.

    Diagnostic mode stores all records in memory for post-hoc analysis via
    ``get_diagnostic_data()`` and ``get_summary_stats()``.
    """

    def __init__(self, settings: DecoderSettings) -> None:
        """Initialize the logger from settings.

        Args:
            settings: Settings providing ``log_level`` and ``diagnostic_mode``.
        """
        self._log_level = settings.log_level
        self._diagnostic_mode = settings.diagnostic_mode
        self._records: list[DecodingStepRecord] = []

    def log_step(self, record: DecodingStepRecord) -> None:
        """Log a single decoding step.

        Args:
            record: Immutable record of the step.
        """
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                "step=%d beams=%d hypotheses=%d best=%.4f worst=%s eos=%d/%d "
                "predict=%.2fms total=%.2fms%s",
                record.step,
                record.num_active_beams,
                record.num_hypotheses,
                record.best_score,
                "n/a"
                if record.worst_hypothesis_score is None
                else f"{record.worst_hypothesis_score:.4f}",
                record.eos_committed,
                record.eos_dropped,
                record.predict_ms,
                record.total_step_ms,
                " [DONE]" if record.is_done else "",
            )
        elif self._log_level == "full":
            logger.info("decoding_step: %s", json.dumps(asdict(record), default=str))

    def get_diagnostic_data(self) -> list[DecodingStepRecord]:
        """Return all stored records (requires ``diagnostic_mode=True``)."""
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with aggregate stats, or empty dict if no records.
        """
        if not self._records:
            return {}

        predict_times = [r.predict_ms for r in self._records]
        total_times = [r.total_step_ms for r in self._records]
        n = len(self._records)
        return {
            "total_steps": n,
            "final_hypotheses": self._records[-1].num_hypotheses,
            "eos_committed": sum(r.eos_committed for r in self._records),
            "eos_dropped": sum(r.eos_dropped for r in self._records),
            "early_stopped": self._records[-1].is_done,
            "mean_predict_ms": sum(predict_times) / n,
            "mean_step_ms": sum(total_times) / n,
            "max_step_ms": max(total_times),
        }
