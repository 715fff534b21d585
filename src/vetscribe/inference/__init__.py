"""Pluggable inference backend layer.

Usage::

    from vetscribe.inference import LLMClient, create_inference_backend
    client = LLMClient(create_inference_backend(settings), settings.llm)
"""

from __future__ import annotations

from vetscribe.inference.client import LLMClient
from vetscribe.inference.factory import create_inference_backend
from vetscribe.inference.protocols import IInferenceBackend, InferenceResult
from vetscribe.inference.realtime import RealTimeBackend

__all__ = [
    "IInferenceBackend",
    "InferenceResult",
    "LLMClient",
    "RealTimeBackend",
    "create_inference_backend",
]
