"""Explicit dependency bundle passed to every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from vetscribe.hooks.audit_hook import AuditHook
from vetscribe.inference.client import LLMClient
from vetscribe.inference.factory import create_inference_backend
from vetscribe.persistence import create_persistence_backend
from vetscribe.services.exam_store import ExamStore
from vetscribe.synthesis.sanitize import SanitizePolicy
from vetscribe.validation import create_rules_engine

if TYPE_CHECKING:
    from vetscribe.core.config import AppSettings
    from vetscribe.transcription.runner import ISttRunner
    from vetscribe.validation.engine import RulesEngine


@dataclass
class PipelineContext:
    """Settings plus the constructed collaborators; there are no module-level singletons."""

    settings: AppSettings
    client: LLMClient
    store: ExamStore
    rules_engine: RulesEngine | None = None
    stt_runner: ISttRunner | None = None
    sanitize_policy: SanitizePolicy | None = None

    @classmethod
    def from_settings(cls, settings: AppSettings) -> PipelineContext:
        audit = AuditHook(settings.observability.service_name) if settings.observability.audit_model_calls else None
        client = LLMClient(create_inference_backend(settings), settings.llm, audit=audit)
        store = ExamStore(create_persistence_backend(settings.persistence))
        return cls(
            settings=settings,
            client=client,
            store=store,
            rules_engine=create_rules_engine(settings),
        )
