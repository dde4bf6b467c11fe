"""Tests for log record parsing."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from untamper.core.crypto.hash_chain import HASHED_FIELDS
from untamper.core.errors import RecordValidationError
from untamper.modules.verification.schemas import ActionResult, LogRecord, parse_record


class TestParseRecord:
    def test_parses_camel_case_wire_format(self, record_factory: Any) -> None:
        record = parse_record(record_factory.record(3, "a" * 64))
        assert record.sequence_number == 3
        assert record.previous_hash == "a" * 64
        assert record.project_id == "proj_456"
        assert record.result == ActionResult.SUCCESS
        assert record.actor["display_name"] == "John Doe"

    def test_accepts_snake_case_names(self, record_factory: Any) -> None:
        wire = record_factory.record(1, None)
        snake = {
            "project_id": wire["projectId"],
            "sequence_number": wire["sequenceNumber"],
            "timestamp": wire["timestamp"],
            "action": wire["action"],
            "result": wire["result"],
            "actor": wire["actor"],
            "hash": wire["hash"],
            "signature": wire["signature"],
        }
        assert parse_record(snake).sequence_number == 1

    def test_passes_through_log_record(self, record_factory: Any) -> None:
        record = parse_record(record_factory.record(1, None))
        assert parse_record(record) is record

    def test_ignores_unknown_wire_fields(self, record_factory: Any) -> None:
        record = parse_record(record_factory.record(1, None, createdAt="x", extra=1))
        assert "createdAt" not in record.hash_content()

    def test_missing_field_raises(self, record_factory: Any) -> None:
        wire = record_factory.record(1, None)
        del wire["signature"]
        with pytest.raises(RecordValidationError, match="sequence 1"):
            parse_record(wire)

    def test_tampered_values_parse_as_sent(self, record_factory: Any) -> None:
        record = parse_record(
            record_factory.record(1, None, sequenceNumber=0, result="HACKED", timestamp=1704103200)
        )
        assert record.sequence_number == 0
        assert record.result == "HACKED"
        assert record.timestamp == 1704103200

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(RecordValidationError, match="list"):
            parse_record([1, 2, 3])  # type: ignore[arg-type]

    def test_record_is_immutable(self, record_factory: Any) -> None:
        record = parse_record(record_factory.record(1, None))
        with pytest.raises(ValidationError):
            record.action = "user.logout"  # type: ignore[misc]


class TestHashContent:
    def test_covers_exactly_the_hashed_fields(self, record_factory: Any) -> None:
        content = parse_record(record_factory.record(1, None)).hash_content()
        assert set(content) == set(HASHED_FIELDS)

    def test_optional_fields_default_to_null(self, record_factory: Any) -> None:
        wire = record_factory.record(1, None)
        for name in ("eventTime", "target", "previousHash"):
            wire.pop(name)
        content = LogRecord.model_validate(wire).hash_content()
        assert content["eventTime"] is None
        assert content["target"] is None
        assert content["previousHash"] is None

    def test_empty_event_time_is_null(self, record_factory: Any) -> None:
        content = parse_record(record_factory.record(1, None, eventTime="")).hash_content()
        assert content["eventTime"] is None

    def test_empty_target_is_kept(self, record_factory: Any) -> None:
        content = parse_record(record_factory.record(1, None, target={})).hash_content()
        assert content["target"] == {}

    def test_result_is_plain_string(self, record_factory: Any) -> None:
        content = parse_record(record_factory.record(1, None)).hash_content()
        assert type(content["result"]) is str
