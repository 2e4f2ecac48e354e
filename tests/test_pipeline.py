"""run_pipeline: caps, skipped leaves, failure fallback, timeout, statistics."""

import asyncio
import copy

import pytest
from conftest import RecordingSleep, RecordingTranslator, make_doc

from json_translator.config import Settings
from json_translator.services.backends import BackendAdapter
from json_translator.services.batching import BatchScheduler
from json_translator.services.errors import InputError, PipelineTimeout, SizeLimitError
from json_translator.services.translate import PipelineStatistics, run_pipeline


def cfg(**kw):
    base = dict(MAX_STRING_KEYS=50, MAX_TRANSLATED_KEYS=20, BATCH_SIZE=5, BATCH_DELAY_MS=0, TRANSLATE_TIMEOUT_S=5)
    base.update(kw)
    return Settings(**base)


def scheduler_for(provider, sleep=None):
    return BatchScheduler(BackendAdapter(provider), batch_size=5, delay_s=0, sleep=sleep or RecordingSleep())


def run(doc, provider, settings=None, src="en", tgt="es"):
    return asyncio.run(
        run_pipeline(doc, src, tgt, scheduler=scheduler_for(provider), cfg=settings or cfg())
    )


class TestHappyPath:
    def test_translates_every_leaf_and_keeps_structure(self):
        provider = RecordingTranslator()
        doc = {"a": "Hello", "b": ["World", 42, None], "c": {"d": True}}
        result = run(doc, provider)

        assert result.translated_json == {"a": "es:Hello", "b": ["es:World", 42, None], "c": {"d": True}}
        assert [(d.path, d.status) for d in result.details] == [("a", "success"), ("b[0]", "success")]
        assert result.details[0].translated == "es:Hello"
        assert result.warning is None
        assert doc == {"a": "Hello", "b": ["World", 42, None], "c": {"d": True}}

    def test_statistics(self):
        result = run(make_doc(3), RecordingTranslator())
        s = result.statistics
        assert (s.total_keys, s.translated_keys, s.failed_keys, s.skipped_keys) == (3, 3, 0, 0)
        assert s.average_time_per_key == s.processing_time_ms / 3

    def test_no_strings(self):
        provider = RecordingTranslator()
        result = run({"n": 1, "list": [True, None]}, provider)
        assert result.translated_json == {"n": 1, "list": [True, None]}
        assert result.details == []
        assert result.statistics.total_keys == 0
        assert result.statistics.average_time_per_key == 0
        assert provider.calls == []


class TestLimits:
    def test_over_hard_cap_rejected_without_backend_calls(self):
        provider = RecordingTranslator()
        with pytest.raises(SizeLimitError) as exc:
            run(make_doc(51), provider)
        assert isinstance(exc.value, InputError)
        assert exc.value.status_code == 400
        assert exc.value.suggestion
        assert provider.calls == []

    def test_exactly_at_hard_cap_is_accepted(self):
        result = run(make_doc(50), RecordingTranslator())
        assert result.statistics.total_keys == 50

    @pytest.mark.parametrize("n", [21, 35, 50])
    def test_only_first_twenty_translated_rest_skipped(self, n):
        provider = RecordingTranslator()
        doc = make_doc(n)
        result = run(doc, provider)

        statuses = [d.status for d in result.details]
        assert statuses[:20] == ["success"] * 20
        assert statuses[20:] == ["skipped"] * (n - 20)
        assert len(provider.calls) == 20
        for d in result.details[20:]:
            assert d.translated is None and d.elapsed_ms == 0
            assert result.translated_json[d.path] == doc[d.path]
        assert result.statistics.skipped_keys == n - 20
        assert f"first 20 of {n}" in result.warning

    def test_twenty_exactly_has_no_skips(self):
        result = run(make_doc(20), RecordingTranslator())
        assert result.statistics.skipped_keys == 0
        assert result.warning is None


class TestFailures:
    def test_single_call_failure_marks_only_that_leaf(self):
        provider = RecordingTranslator(fail_on={"text 1"})
        result = run(make_doc(3), provider)

        by_path = {d.path: d for d in result.details}
        assert by_path["k01"].status == "failed"
        assert "backend down" in by_path["k01"].error
        assert by_path["k01"].translated is None
        assert result.translated_json["k01"] == "text 1"
        assert by_path["k00"].status == by_path["k02"].status == "success"
        assert result.statistics.failed_keys == 1

    def test_batch_failure_marks_everything_failed_and_returns_original(self):
        class ExplodingScheduler(BatchScheduler):
            async def translate_all(self, texts, source_lang, target_lang):
                raise RuntimeError("connection reset")

        doc = make_doc(25)
        snapshot = copy.deepcopy(doc)
        result = asyncio.run(
            run_pipeline(doc, "en", "es", scheduler=ExplodingScheduler(BackendAdapter(RecordingTranslator())), cfg=cfg())
        )

        assert result.translated_json == snapshot
        assert result.translated_json is not doc
        assert all(d.status == "failed" and d.error == "connection reset" for d in result.details)
        assert len(result.details) == 25
        assert result.statistics.failed_keys == 25
        assert result.statistics.translated_keys == 0

    def test_timeout_returns_no_partial_output(self):
        provider = RecordingTranslator(delay_s=1.0)
        with pytest.raises(PipelineTimeout) as exc:
            run(make_doc(3), provider, settings=cfg(TRANSLATE_TIMEOUT_S=0.05))
        assert exc.value.status_code == 408
        assert "0.05 seconds" in exc.value.message


def test_average_time_guarded_for_zero_keys():
    stats = PipelineStatistics(0, 0, 0, 0, 123)
    assert stats.average_time_per_key == 0


def test_dotted_key_does_not_take_nested_translation():
    result = run({"a.b": "Hello", "a": {"b": "World"}}, RecordingTranslator())
    assert result.translated_json == {"a.b": "es:Hello", "a": {"b": "es:World"}}
    assert len({d.path for d in result.details}) == 2


def test_blank_leaves_pass_through_as_success():
    provider = RecordingTranslator()
    result = run({"a": "", "b": "  ", "c": "Hi"}, provider)
    assert [(d.path, d.status) for d in result.details] == [("a", "success"), ("b", "success"), ("c", "success")]
    assert result.translated_json == {"a": "", "b": "  ", "c": "es:Hi"}
    assert provider.calls == [("Hi", "en", "es")]
