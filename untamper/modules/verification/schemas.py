"""Pydantic schemas for audit log records returned by the unTamper API."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from untamper.core.errors import RecordValidationError


class ActionResult(StrEnum):
    """Outcomes the service records for an audited action.

    ``LogRecord.result`` keeps the raw wire string: the record hash protects
    its value, so an outcome outside this set is a hash mismatch finding.
    """

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    DENIED = "DENIED"
    ERROR = "ERROR"


class LogRecord(BaseModel):
    """A single server-issued audit log record.

    Accepts the camelCase wire format (``sequenceNumber``, ``previousHash``, ...)
    as well as snake_case field names. Unknown wire fields are ignored.

    Only the record's shape is validated here. Hashed values are kept as sent,
    so tampered content still parses and is reported by the hash check.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    id: str | None = None
    project_id: str
    sequence_number: int
    previous_hash: str | None = None
    timestamp: str | int | float
    event_time: str | None = None
    action: str
    result: str
    actor: dict[str, Any]
    target: dict[str, Any] | None = None
    changes: list[dict[str, Any]] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    hash: str
    signature: str

    def hash_content(self) -> dict[str, Any]:
        """Return the content covered by the record hash, keyed by wire name."""
        return {
            "projectId": self.project_id,
            "sequenceNumber": self.sequence_number,
            "previousHash": self.previous_hash,
            "timestamp": self.timestamp,
            # an empty event time is treated as absent; an empty target is not
            "eventTime": self.event_time or None,
            "action": self.action,
            "result": self.result,
            "actor": self.actor,
            "target": self.target,
            "changes": self.changes,
            "context": self.context,
            "metadata": self.metadata,
        }


def parse_record(payload: LogRecord | Mapping[str, Any]) -> LogRecord:
    """Coerce a wire payload into a :class:`LogRecord`.

    Raises
    ------
    RecordValidationError
        If the payload is not a mapping or is missing required fields.
    """
    if isinstance(payload, LogRecord):
        return payload
    if not isinstance(payload, Mapping):
        raise RecordValidationError(
            f"Expected a log record mapping, got {type(payload).__name__}"
        )
    try:
        return LogRecord.model_validate(dict(payload))
    except ValidationError as exc:
        seq = payload.get("sequenceNumber", payload.get("sequence_number"))
        raise RecordValidationError(f"Invalid log record (sequence {seq}): {exc}") from exc
