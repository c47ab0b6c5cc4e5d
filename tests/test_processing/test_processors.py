"""Tests for the individual score processors."""

from __future__ import annotations

import numpy as np
import pytest

from beam_decoder.processing.bad_words import BadWordsProcessor
from beam_decoder.processing.min_length import MinLengthProcessor
from beam_decoder.processing.no_repeat_ngram import NoRepeatNGramProcessor
from beam_decoder.processing.temperature import TemperatureProcessor
from beam_decoder.processing.top_k import TopKProcessor
from beam_decoder.processing.top_p import TopPProcessor

NEG_INF = float("-inf")


class TestTemperatureProcessor:
    def test_scales_by_inverse_temperature(self) -> None:
        result = TemperatureProcessor(2.0).process(np.array([1.0, 2.0, -3.0]), [0])
        np.testing.assert_allclose(result, [0.5, 1.0, -1.5])

    def test_rejects_non_positive(self) -> None:
        with pytest.raises(ValueError):
            TemperatureProcessor(0.0)

    def test_does_not_mutate_input(self) -> None:
        scores = np.array([1.0, 2.0])
        TemperatureProcessor(0.5).process(scores, [0])
        np.testing.assert_array_equal(scores, [1.0, 2.0])


class TestTopKProcessor:
    def test_keeps_k_largest(self) -> None:
        result = TopKProcessor(2).process(np.array([1.0, 5.0, 3.0, 4.0]), [0])
        np.testing.assert_array_equal(result, [NEG_INF, 5.0, NEG_INF, 4.0])

    def test_idempotent(self) -> None:
        rng = np.random.default_rng(seed=7)
        scores = rng.standard_normal(50)
        processor = TopKProcessor(5)
        once = processor.process(scores, [0])
        twice = processor.process(once, [0])
        np.testing.assert_array_equal(once, twice)
        assert np.isfinite(once).sum() == 5

    def test_k_clamped_to_row_size(self) -> None:
        scores = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(TopKProcessor(10).process(scores, [0]), scores)

    def test_ties_with_kth_value_survive(self) -> None:
        result = TopKProcessor(1).process(np.array([5.0, 1.0, 5.0]), [0])
        np.testing.assert_array_equal(result, [5.0, NEG_INF, 5.0])

    def test_custom_filter_value(self) -> None:
        result = TopKProcessor(1, filter_value=-100.0).process(np.array([1.0, 2.0]), [0])
        np.testing.assert_array_equal(result, [-100.0, 2.0])


class TestTopPProcessor:
    @staticmethod
    def _log_probs(*probs: float) -> np.ndarray:
        return np.log(np.array(probs))

    def test_top_p_one_filters_nothing(self) -> None:
        rng = np.random.default_rng(seed=3)
        scores = rng.standard_normal(100)
        result = TopPProcessor(1.0).process(scores, [0])
        np.testing.assert_allclose(result, scores)

    def test_keeps_first_token_crossing_threshold(self) -> None:
        # Sorted probabilities 0.5, 0.3, 0.15, 0.05: cumulative 0.5, 0.8, ...
        scores = self._log_probs(0.15, 0.5, 0.05, 0.3)
        result = TopPProcessor(0.7).process(scores, [0])
        assert np.isfinite(result).tolist() == [False, True, False, True]
        np.testing.assert_array_equal(result[[1, 3]], scores[[1, 3]])

    def test_min_size_keeps_at_least_that_many(self) -> None:
        scores = self._log_probs(0.9, 0.05, 0.03, 0.02)
        single = TopPProcessor(0.3, min_size=1).process(scores, [0])
        double = TopPProcessor(0.3, min_size=2).process(scores, [0])
        assert np.isfinite(single).sum() == 1
        assert np.isfinite(double).sum() == 2
        assert np.isfinite(double[[0, 1]]).all()

    def test_invalid_arguments(self) -> None:
        with pytest.raises(ValueError):
            TopPProcessor(0.0)
        with pytest.raises(ValueError):
            TopPProcessor(1.5)
        with pytest.raises(ValueError):
            TopPProcessor(0.5, min_size=0)


class TestBadWordsProcessor:
    def test_bans_last_token_after_matching_prefix(self) -> None:
        processor = BadWordsProcessor([[3, 4, 9]], eos_token_id=2)
        result = processor.process(np.zeros(10), [0, 1, 3, 4])
        assert result[9] == NEG_INF
        assert np.isfinite(np.delete(result, 9)).all()

    def test_non_matching_prefix_unaffected(self) -> None:
        processor = BadWordsProcessor([[3, 4, 9]], eos_token_id=2)
        result = processor.process(np.zeros(10), [0, 1, 3, 5])
        assert np.isfinite(result).all()

    def test_history_shorter_than_prefix(self) -> None:
        processor = BadWordsProcessor([[3, 4, 9]], eos_token_id=2)
        assert processor.banned_tokens([4]) == []

    def test_single_token_always_banned(self) -> None:
        processor = BadWordsProcessor([[7]], eos_token_id=2)
        assert processor.process(np.zeros(10), [0])[7] == NEG_INF

    def test_lone_eos_sequence_ignored(self) -> None:
        processor = BadWordsProcessor([[2], [5, 2]], eos_token_id=2)
        assert processor.bad_words_ids == ((5, 2),)
        assert processor.process(np.zeros(10), [0, 1])[2] == 0.0
        assert processor.process(np.zeros(10), [0, 5])[2] == NEG_INF


class TestMinLengthProcessor:
    def test_blocks_eos_below_min_length(self) -> None:
        result = MinLengthProcessor(min_length=3, eos_token_id=2).process(np.zeros(5), [0, 4])
        assert result[2] == NEG_INF
        assert np.isfinite(np.delete(result, 2)).all()

    def test_allows_eos_at_min_length(self) -> None:
        result = MinLengthProcessor(min_length=3, eos_token_id=2).process(np.zeros(5), [0, 4, 4])
        assert np.isfinite(result).all()


class TestNoRepeatNGramProcessor:
    def test_bigram_repeat_banned(self) -> None:
        processor = NoRepeatNGramProcessor(2)
        # Bigrams seen: (0, 3), (3, 4), (4, 3). Last token 3 was followed by 4.
        assert processor.banned_tokens([0, 3, 4, 3]) == [4]
        result = processor.process(np.zeros(6), [0, 3, 4, 3])
        assert result[4] == NEG_INF

    def test_trigram_repeat_banned(self) -> None:
        assert NoRepeatNGramProcessor(3).banned_tokens([1, 2, 3, 1, 2]) == [3]

    def test_short_history_bans_nothing(self) -> None:
        processor = NoRepeatNGramProcessor(3)
        assert processor.banned_tokens([1]) == []
        assert processor.banned_tokens([1, 2]) == []

    def test_unigram_bans_every_seen_token(self) -> None:
        assert sorted(NoRepeatNGramProcessor(1).banned_tokens([0, 3, 5])) == [0, 3, 5]

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            NoRepeatNGramProcessor(0)
