"""Tests for transcript quality scoring."""

from __future__ import annotations

import pytest

from vetscribe.quality.scorer import (
    alert_level,
    compute_transcript_quality,
    is_weird_token,
    organ_hits,
    quality_band,
    repetition_score,
    tokenize,
)


class TestEmptyTranscript:
    @pytest.mark.parametrize("clean", ["", "   ", "\n\n"])
    def test_empty_scores_zero(self, clean: str) -> None:
        q = compute_transcript_quality(clean, "raw noise")
        assert q.score == 0
        assert q.flags == ["EMPTY_TRANSCRIPT"]
        assert q.metrics.unknown_token_ratio == 1.0
        assert q.metrics.repetition_score == 1.0
        assert q.metrics.raw_length == len("raw noise")


class TestDeterminism:
    def test_same_input_same_output(self, sample_transcript: str) -> None:
        a = compute_transcript_quality(sample_transcript, sample_transcript)
        b = compute_transcript_quality(sample_transcript, sample_transcript)
        assert a == b

    def test_result_is_frozen(self, sample_transcript: str) -> None:
        q = compute_transcript_quality(sample_transcript)
        with pytest.raises(Exception):
            q.score = 1  # type: ignore[misc]


class TestScoring:
    def test_full_exam_scores_good(self, sample_transcript: str) -> None:
        q = compute_transcript_quality(sample_transcript, sample_transcript)
        assert q.score >= 75
        assert "QUALITY_GOOD" in q.flags
        assert q.metrics.organ_hit_count >= 6

    def test_short_text_without_organs_is_flagged(self) -> None:
        q = compute_transcript_quality("spokojnie spokojnie dobrze")
        assert "VERY_SHORT_TRANSCRIPT" in q.flags
        assert "VERY_LOW_ORGAN_COVERAGE" in q.flags
        assert "QUALITY_LOW" in q.flags

    def test_repetition_flag(self) -> None:
        text = " ".join(["wątroba wątroba wątroba"] * 10)
        q = compute_transcript_quality(text)
        assert "HEAVY_REPETITIONS" in q.flags

    def test_suspicious_terms_counted(self) -> None:
        q = compute_transcript_quality("Mocznik powiększony, wątroba bez zmian.")
        assert q.metrics.suspicious_term_count == 1
        assert "SUSPICIOUS_TERMS" in q.flags


class TestHelpers:
    def test_tokenize_strips_punctuation(self) -> None:
        assert tokenize("Wątroba: jednorodna, OK.") == ["wątroba", "jednorodna", "ok"]

    @pytest.mark.parametrize(
        ("token", "weird"),
        [("wątroba", False), ("ok", False), ("brrrz", True), ("xqab", True), ("a" * 21, True)],
    )
    def test_is_weird_token(self, token: str, weird: bool) -> None:
        assert is_weird_token(token) is weird

    def test_fillers_do_not_count_as_repetition(self) -> None:
        assert repetition_score(["spokojnie", "spokojnie", "spokojnie"]) == 0.0

    def test_organ_hits(self) -> None:
        hits = organ_hits("Pęcherz moczowy wypełniony, nerki bez zmian, trzustka niewidoczna.")
        assert set(hits) == {"urinary_bladder", "kidneys", "pancreas"}

    @pytest.mark.parametrize(("score", "band"), [(90, "good"), (75, "good"), (74, "medium"), (60, "medium"), (59, "low")])
    def test_quality_band(self, score: int, band: str) -> None:
        assert quality_band(score) == band

    @pytest.mark.parametrize(("score", "level"), [(10, "critical"), (60, "warn"), (70, "info"), (80, "ok")])
    def test_alert_level(self, score: int, level: str) -> None:
        assert alert_level(score) == level
