"""Inference backend factory — resolves backend from config."""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from vetscribe.inference.protocols import IInferenceBackend
from vetscribe.inference.realtime import RealTimeBackend

if TYPE_CHECKING:
    from vetscribe.core.config import AppSettings

log = logging.getLogger(__name__)


def _import_dotted_path(spec: str) -> object:
    """Resolve ``package.module:ClassName`` (or ``package.module.ClassName``)."""
    if ":" in spec:
        module_path, attr = spec.split(":", 1)
    else:
        module_path, _, attr = spec.rpartition(".")
    if not module_path or not attr:
        raise ImportError(f"Invalid dotted path: {spec!r}")
    module = importlib.import_module(module_path)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ImportError(f"{module_path!r} has no attribute {attr!r}") from exc


def create_inference_backend(settings: AppSettings) -> IInferenceBackend:
    """Create an inference backend based on settings.

    ``"realtime"`` returns the built-in :class:`RealTimeBackend`; a dotted path
    like ``mypackage.backends:MyBackend`` is imported and instantiated with
    ``settings``.

    Raises:
        ImportError: If the dotted-path class cannot be found.
        TypeError: If the resolved object is not callable.
    """
    backend_spec = settings.llm.inference_backend

    if backend_spec == "realtime":
        log.info("Using built-in RealTimeBackend (model=%s)", settings.llm.model)
        return RealTimeBackend(api_base=settings.llm.base_url, api_key=settings.llm.api_key)

    log.info("Loading external inference backend: %s", backend_spec)
    cls = _import_dotted_path(backend_spec)
    if not callable(cls):
        raise TypeError(
            f"Inference backend {backend_spec!r} resolved to {cls!r}, which is not callable"
        )
    return cls(settings)
