"""Shared fixtures for vetscribe tests."""

from __future__ import annotations


import pytest

from tests.fakes.fake_inference import FakeInferenceBackend
from vetscribe.context import PipelineContext
from vetscribe.core.config import AppSettings, LLMConfig, PersistenceConfig
from vetscribe.inference.client import LLMClient
from vetscribe.models import Facts, Impression, Measurement
from vetscribe.persistence.memory_backend import MemoryPersistenceBackend
from vetscribe.services.exam_store import ExamStore
from vetscribe.validation import create_rules_engine

SAMPLE_TRANSCRIPT = (
    "Pani Kowalska, pies Burek, badanie USG jamy brzusznej z powodu wymiotów.\n"
    "Wątroba jednorodna, prawidłowej wielkości. Pęcherzyk żółciowy bez zmian.\n"
    "Śledziona jednorodna. Nerki prawidłowej wielkości, lewa nerka z poszerzoną miedniczką 4 mm.\n"
    "Pęcherz moczowy wypełniony, ściana gładka. Jelita bez zmian, perystaltyka prawidłowa.\n"
    "Podsumowując, poszerzenie miedniczki lewej nerki do obserwacji."
)


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    """Default test settings: memory store, no real LLM, single transport attempt."""
    return AppSettings(
        llm=LLMConfig(provider="ollama", model="test-model", max_retries=1),
        persistence=PersistenceConfig(backend="memory", store_path=tmp_path / "exams"),
    )


@pytest.fixture
def fake_backend() -> FakeInferenceBackend:
    return FakeInferenceBackend()


@pytest.fixture
def client(fake_backend, settings) -> LLMClient:
    return LLMClient(fake_backend, settings.llm)


@pytest.fixture
def context(settings, client) -> PipelineContext:
    return PipelineContext(
        settings=settings,
        client=client,
        store=ExamStore(MemoryPersistenceBackend()),
        rules_engine=create_rules_engine(settings),
    )


@pytest.fixture
def sample_transcript() -> str:
    return SAMPLE_TRANSCRIPT


@pytest.fixture
def sample_facts() -> Facts:
    return Facts.model_validate(
        {
            "exam": {"bodyRegion": "jama brzuszna", "reason": "wymioty", "patientName": "Burek"},
            "conditions": ["bez sedacji", "wątroba jednorodna"],
            "findings": [
                "Wątroba: jednorodna, prawidłowej wielkości",
                "Nerki: lewa nerka z poszerzoną miedniczką",
                "Pęcherz moczowy: ściana gładka",
            ],
            "measurements": [
                Measurement(structure="miedniczka lewej nerki", value=[4], unit="mm"),
            ],
        }
    )


@pytest.fixture
def sample_impression() -> Impression:
    return Impression(
        doctor_overall="Poszerzenie miedniczki lewej nerki.",
        doctor_key_concerns=["poszerzenie miedniczki lewej nerki"],
        doctor_plan=["kontrola USG za 2 tygodnie"],
        doctor_red_flags=["brak oddawania moczu"],
        quotes=["lewa nerka z poszerzoną miedniczką 4 mm"],
    )
