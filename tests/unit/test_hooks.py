"""Tests for the audit hook, stage tracker and logging setup."""

from __future__ import annotations

import logging

import structlog

from vetscribe.core.config import ObservabilityConfig
from vetscribe.hooks import AuditHook, setup_logging, track_stage
from vetscribe.inference.protocols import InferenceResult


class TestAuditHook:
    def test_logs_call(self, caplog) -> None:
        hook = AuditHook("svc")
        result = InferenceResult(
            content="{}", usage={"prompt_tokens": 12, "completion_tokens": 3}, model="m", latency_ms=40
        )
        with caplog.at_level(logging.INFO, logger="vetscribe.hooks.audit_hook"):
            hook.on_model_call(stage="facts", result=result, max_tokens=900)

        assert hook.calls == 1
        assert "stage=facts" in caplog.text
        assert "prompt_tokens=12" in caplog.text
        assert "service=svc" in caplog.text

    def test_truncation_warned(self, caplog) -> None:
        hook = AuditHook()
        with caplog.at_level(logging.WARNING, logger="vetscribe.hooks.audit_hook"):
            hook.on_model_call(
                stage="impression", result=InferenceResult(content="", finish_reason="length"), max_tokens=1
            )
        assert "truncated" in caplog.text


class TestTrackStage:
    def test_meta_filled(self) -> None:
        with track_stage("facts", exam_id="e1", version="facts-v14") as meta:
            meta.telemetry["x"] = 1
            bound = structlog.contextvars.get_contextvars()
            assert bound["exam_id"] == "e1"
            assert bound["stage"] == "facts"

        assert meta.version == "facts-v14"
        assert meta.duration_ms >= 0
        assert meta.telemetry == {"x": 1}
        assert "exam_id" not in structlog.contextvars.get_contextvars()

    def test_version_defaults_to_stage(self) -> None:
        with track_stage("report") as meta:
            pass
        assert meta.version == "report"

    def test_unbinds_on_error(self) -> None:
        try:
            with track_stage("analysis", exam_id="e2"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert "stage" not in structlog.contextvars.get_contextvars()


class TestSetupLogging:
    def test_root_level_and_handler(self) -> None:
        root = logging.getLogger()
        saved = (list(root.handlers), root.level)
        try:
            setup_logging(ObservabilityConfig(log_level="debug"))
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert logging.getLogger("LiteLLM").level == logging.WARNING
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
