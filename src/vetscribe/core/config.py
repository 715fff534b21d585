"""Nested pydantic-settings configuration for the application.

Each group reads its own ``VETSCRIBE_<GROUP>_*`` env vars, so both
``AppSettings().llm.model`` and ``VETSCRIBE_LLM_MODEL=...`` work.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """LLM backend configuration.

    Env vars use ``VETSCRIBE_LLM_`` prefix::

        export VETSCRIBE_LLM_PROVIDER=openai
        export VETSCRIBE_LLM_MODEL=gpt-4o-mini
    """

    model_config = {"env_prefix": "VETSCRIBE_LLM_"}

    provider: Literal["openai", "ollama", "litellm", "anthropic"] = "ollama"
    base_url: str = "http://localhost:11434/v1"
    api_key: str = "no-key"
    model: str = "ollama/qwen2.5:7b-instruct"
    temperature: float = 0.0
    timeout: float = 60.0
    max_retries: int = Field(default=1, ge=1, le=5)
    retry_max_delay: float = 10.0
    inference_backend: str = "realtime"


class TranscriptionConfig(BaseSettings):
    """Speech-to-text orchestration.

    Env vars use ``VETSCRIBE_TRANSCRIPTION_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_TRANSCRIPTION_"}

    binary: str = "mlx_whisper"
    model: str = "mlx-community/whisper-large-v3-turbo"
    language: str = "pl"
    timeout_seconds: float = 300.0
    beam_size_low: int = Field(default=1, ge=1)
    beam_size_high: int = Field(default=5, ge=1)
    retry_threshold: int = Field(default=65, ge=0, le=100)
    work_dir: Path = Path("./stt-work")


class NormalizationConfig(BaseSettings):
    """Dictionary correction and anti-loop collapsing.

    Env vars use ``VETSCRIBE_NORMALIZATION_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_NORMALIZATION_"}

    enable_dictionary: bool = True
    repeat_threshold: int = Field(default=2, ge=1)
    repeat_keep: int = Field(default=1, ge=1)


class FactsExtractionConfig(BaseSettings):
    """Facts extraction budgets.

    Env vars use ``VETSCRIBE_FACTS_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_FACTS_"}

    head_chars: int = 6000
    tail_chars: int = 4500
    max_tokens: int = 900
    timeout: float = 60.0
    retry_tail_chars: int = 3500
    retry_max_tokens: int = 600
    retry_timeout: float = 45.0
    use_response_schema: bool = True


class ImpressionExtractionConfig(BaseSettings):
    """Impression extraction budgets.

    Env vars use ``VETSCRIBE_IMPRESSION_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_IMPRESSION_"}

    max_input_chars: int = 2800
    max_tokens: int = 700
    timeout: float = 45.0
    retry_max_input_chars: int = 2000
    retry_max_tokens: int = 500
    retry_timeout: float = 35.0
    max_quotes: int = Field(default=2, ge=0)


class AnalysisConfig(BaseSettings):
    """Analysis synthesis.

    Env vars use ``VETSCRIBE_ANALYSIS_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_ANALYSIS_"}

    max_tokens: int = 600
    timeout: float = 45.0
    max_input_chars: int = 14_000
    default_confidence: int = Field(default=80, ge=0, le=100)
    sanitize: bool = True
    low_quality_threshold: int = Field(default=60, ge=0, le=100)


class ValidationConfig(BaseSettings):
    """Logic validation rules source.

    Env vars use ``VETSCRIBE_VALIDATION_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_VALIDATION_"}

    enabled: bool = True
    backend: Literal["builtin", "file"] = "builtin"
    rules_path: Path = Path("./rules/anatomy.json")


class ReportConfig(BaseSettings):
    """Report rendering.

    Env vars use ``VETSCRIBE_REPORT_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_REPORT_"}

    body_region: str = "USG jamy brzusznej"
    quality_notice_threshold: int = Field(default=75, ge=0, le=100)
    include_quality_notice: bool = True


class PersistenceConfig(BaseSettings):
    """Persistence configuration.

    Env vars use ``VETSCRIBE_PERSISTENCE_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_PERSISTENCE_"}

    backend: Literal["file", "memory"] = "file"
    store_path: Path = Path("./exams")


class APIConfig(BaseSettings):
    """HTTP API configuration.

    Env vars use ``VETSCRIBE_API_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_API_"}

    host: str = "0.0.0.0"
    port: int = 8080
    title: str = "vetscribe"
    description: str = "Ultrasound transcript to structured report pipeline"


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``VETSCRIBE_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "VETSCRIBE_OBSERVABILITY_"}

    service_name: str = "vetscribe"
    log_level: str = "INFO"
    audit_model_calls: bool = True


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    facts: FactsExtractionConfig = Field(default_factory=FactsExtractionConfig)
    impression: ImpressionExtractionConfig = Field(default_factory=ImpressionExtractionConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
