"""Tests for ProcessorPipeline and the pipeline builders."""

from __future__ import annotations

import numpy as np

from beam_decoder.config import GenerationOptions
from beam_decoder.processing.bad_words import BadWordsProcessor
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


class TestProcessorPipeline:
    def test_empty_pipeline_is_identity(self) -> None:
        scores = np.array([1.0, 2.0, 3.0])
        result = ProcessorPipeline().process(scores, [0])
        np.testing.assert_array_equal(result, scores)
        assert result is not scores

    def test_applies_left_to_right(self) -> None:
        scores = np.array([1.0, 2.0, 4.0])
        # Top-1 first, then halve: [-inf, -inf, 2.0].
        pipeline = ProcessorPipeline([TopKProcessor(1), TemperatureProcessor(2.0)])
        np.testing.assert_array_equal(pipeline(scores, [0]), [-np.inf, -np.inf, 2.0])

    def test_len_and_processors(self) -> None:
        processors = [TemperatureProcessor(2.0), TopKProcessor(3)]
        pipeline = ProcessorPipeline(processors)
        assert len(pipeline) == 2
        assert pipeline.processors == tuple(processors)


class TestBuildSamplingPipeline:
    def test_no_options_builds_empty_pipeline(self) -> None:
        assert len(build_sampling_pipeline(GenerationOptions(), num_beams=4)) == 0

    def test_unit_temperature_skipped(self) -> None:
        assert len(build_sampling_pipeline(GenerationOptions(temperature=1.0), num_beams=4)) == 0

    def test_order_temperature_top_k_top_p(self) -> None:
        options = GenerationOptions(temperature=0.7, top_k=10, top_p=0.9)
        pipeline = build_sampling_pipeline(options, num_beams=4)
        assert [type(p) for p in pipeline.processors] == [
            TemperatureProcessor,
            TopKProcessor,
            TopPProcessor,
        ]

    def test_top_p_min_size_depends_on_beams(self) -> None:
        options = GenerationOptions(top_p=0.9)
        (multi,) = build_sampling_pipeline(options, num_beams=4).processors
        (single,) = build_sampling_pipeline(options, num_beams=1).processors
        assert isinstance(multi, TopPProcessor)
        assert isinstance(single, TopPProcessor)
        assert multi.min_size == 2
        assert single.min_size == 1


class TestBuildInhibitors:
    def test_default_config_only_min_length(self, make_config) -> None:
        inhibitors = build_inhibitors(make_config())
        assert [type(p) for p in inhibitors.processors] == [MinLengthProcessor]

    def test_all_inhibitors_in_order(self, make_config) -> None:
        config = make_config(bad_words_ids=((4,),), no_repeat_ngram_size=2)
        inhibitors = build_inhibitors(config)
        assert [type(p) for p in inhibitors.processors] == [
            BadWordsProcessor,
            MinLengthProcessor,
            NoRepeatNGramProcessor,
        ]

    def test_disabled_eos_skips_min_length(self, make_config) -> None:
        assert len(build_inhibitors(make_config(eos_token_id=-1))) == 0

    def test_negative_min_length_skips_min_length(self, make_config) -> None:
        assert len(build_inhibitors(make_config(min_length=-1))) == 0
