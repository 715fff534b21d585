"""Cross-cutting hooks: audit logging, structured logging setup, stage tracking."""

from __future__ import annotations

from vetscribe.hooks.audit_hook import AuditHook
from vetscribe.hooks.logging_config import setup_logging
from vetscribe.hooks.run_tracker import track_stage

__all__ = ["AuditHook", "setup_logging", "track_stage"]
