"""Tests for the pluggable inference backend layer."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tests.fakes.fake_inference import FakeInferenceBackend, SettingsAwareBackend
from vetscribe.core.config import AppSettings, LLMConfig
from vetscribe.inference.factory import create_inference_backend
from vetscribe.inference.protocols import IInferenceBackend, InferenceResult
from vetscribe.inference.realtime import RealTimeBackend

# ── Protocol compliance ──────────────────────────────────────────────


class TestProtocolCompliance:
    def test_fake_backend_satisfies_protocol(self) -> None:
        assert isinstance(FakeInferenceBackend(), IInferenceBackend)

    def test_realtime_backend_satisfies_protocol(self) -> None:
        assert isinstance(RealTimeBackend(), IInferenceBackend)


class TestInferenceResult:
    def test_defaults(self) -> None:
        result = InferenceResult(content="hello")
        assert result.finish_reason == "stop"
        assert result.usage == {}
        assert not result.truncated

    @pytest.mark.parametrize("reason", ["length", "content_filter", ""])
    def test_anything_but_stop_is_truncated(self, reason: str) -> None:
        assert InferenceResult(content="x", finish_reason=reason).truncated


# ── RealTimeBackend ──────────────────────────────────────────────────


def _litellm_response(content: str | None = "odpowiedź", finish_reason: str = "stop") -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].finish_reason = finish_reason
    response.usage = MagicMock(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    response.model = "ollama/qwen2.5"
    return response


class TestRealTimeBackend:
    @pytest.mark.asyncio
    async def test_infer_delegates_to_litellm(self) -> None:
        with patch("vetscribe.inference.realtime.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _litellm_response()
            backend = RealTimeBackend(api_base="http://localhost:1234/v1", api_key="k")
            result = await backend.infer(
                [{"role": "user", "content": "hi"}], "ollama/qwen2.5", temperature=0, max_tokens=50
            )

        assert result.content == "odpowiedź"
        assert result.finish_reason == "stop"
        assert result.usage == {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
        kwargs = mock_acomp.call_args.kwargs
        assert kwargs["api_base"] == "http://localhost:1234/v1"
        assert kwargs["api_key"] == "k"
        assert kwargs["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_none_content_becomes_empty(self) -> None:
        with patch("vetscribe.inference.realtime.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _litellm_response(content=None, finish_reason="length")
            result = await RealTimeBackend().infer([], "m")

        assert result.content == ""
        assert result.truncated

    @pytest.mark.asyncio
    async def test_explicit_params_win_over_defaults(self) -> None:
        with patch("vetscribe.inference.realtime.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _litellm_response()
            await RealTimeBackend(api_base="http://a").infer([], "m", api_base="http://b")

        assert mock_acomp.call_args.kwargs["api_base"] == "http://b"


# ── Factory ──────────────────────────────────────────────────────────


class TestFactory:
    def test_realtime_default(self) -> None:
        assert isinstance(create_inference_backend(AppSettings()), RealTimeBackend)

    def test_dotted_path(self) -> None:
        settings = AppSettings(
            llm=LLMConfig(inference_backend="tests.fakes.fake_inference:SettingsAwareBackend")
        )
        backend = create_inference_backend(settings)
        assert isinstance(backend, SettingsAwareBackend)
        assert backend.settings is settings

    def test_missing_attribute(self) -> None:
        settings = AppSettings(llm=LLMConfig(inference_backend="vetscribe.inference:Nope"))
        with pytest.raises(ImportError):
            create_inference_backend(settings)

    def test_not_callable(self) -> None:
        settings = AppSettings(
            llm=LLMConfig(inference_backend="tests.fakes.fake_inference:NOT_A_BACKEND")
        )
        with pytest.raises(TypeError):
            create_inference_backend(settings)
