"""Load and save ``ExamRecord`` documents through a persistence backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from vetscribe.exceptions import NotFoundError, ValidationError
from vetscribe.models import ExamRecord

if TYPE_CHECKING:
    from vetscribe.persistence.protocols import IPersistenceBackend

log = logging.getLogger(__name__)


class ExamStore:
    """Typed facade over an :class:`IPersistenceBackend`.

    Records are stored in their camelCase wire form.  ``update`` rewrites only
    the named fields of the latest stored document, so a stage never clobbers
    another stage's output with a stale copy.
    """

    def __init__(self, backend: IPersistenceBackend) -> None:
        self._backend = backend

    @staticmethod
    def _check_id(exam_id: str) -> str:
        if not exam_id or not exam_id.strip():
            raise ValidationError("Missing exam_id")
        return exam_id.strip()

    def exists(self, exam_id: str) -> bool:
        return self._backend.exists(self._check_id(exam_id))

    def load(self, exam_id: str) -> ExamRecord:
        """Raises:
            NotFoundError: no record stored under ``exam_id``.
        """
        key = self._check_id(exam_id)
        try:
            raw = self._backend.load(key)
        except KeyError as exc:
            raise NotFoundError(f"Exam not found: {key}") from exc
        return ExamRecord.model_validate_json(raw)

    def load_or_create(self, exam_id: str) -> ExamRecord:
        key = self._check_id(exam_id)
        if self._backend.exists(key):
            return self.load(key)
        return ExamRecord(exam_id=key)

    def save(self, record: ExamRecord) -> ExamRecord:
        key = self._check_id(record.exam_id)
        self._backend.save(key, record.model_dump_json(by_alias=True, indent=2))
        log.debug("Saved exam %s", key)
        return record

    def update(self, exam_id: str, **fields: Any) -> ExamRecord:
        """Set the given snake_case fields on the stored record and persist it."""
        record = self.load_or_create(exam_id)
        updated = record.model_copy(update=fields)
        # model_copy skips validation; round-trip so nested dicts become models.
        updated = ExamRecord.model_validate(updated.model_dump(by_alias=True))
        return self.save(updated)

    def record_error(self, exam_id: str, stage: str, error: Any) -> ExamRecord:
        record = self.load_or_create(exam_id)
        errors = dict(record.errors)
        errors[stage] = error
        return self.update(exam_id, errors=errors)

    def clear_error(self, exam_id: str, stage: str) -> None:
        record = self.load_or_create(exam_id)
        if stage in record.errors:
            errors = {k: v for k, v in record.errors.items() if k != stage}
            self.update(exam_id, errors=errors)

    def delete(self, exam_id: str) -> None:
        self._backend.delete(self._check_id(exam_id))

    def list_ids(self) -> list[str]:
        return self._backend.list_keys()
