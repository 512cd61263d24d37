"""Tests for the Transcript facade."""

from __future__ import annotations

import pytest

from chainmend import Transcript
from chainmend.errors import InvalidRecordError, SplitError
from chainmend.events.bus import ChainEvent
from chainmend.models.config import ChainmendConfig, DeletionConfig
from tests.conftest import (
    SESSION_ID,
    make_progress,
    make_record,
    tool_result,
    tool_use,
)


def _records() -> list[dict]:
    return [
        {"type": "file-history-snapshot", "messageId": "snap-1", "snapshot": {}},
        make_record("user", "1", None),
        make_record("assistant", "2", "1", [tool_use("toolu_1")]),
        make_record("user", "3", "2", [tool_result("toolu_1")]),
        make_record("assistant", "4", "3"),
        make_record("user", "5", None),
    ]


class TestTranscriptBasics:
    def test_from_records_and_back(self) -> None:
        records = _records()
        transcript = Transcript.from_records(records)
        assert len(transcript) == 6
        assert transcript.to_records() == records

    def test_session_id_from_first_record_with_one(self) -> None:
        assert Transcript.from_records(_records()).session_id == SESSION_ID

    def test_invalid_record_line(self) -> None:
        records = _records()
        records[2]["uuid"] = 7
        with pytest.raises(InvalidRecordError) as exc_info:
            Transcript.from_records(records)
        assert exc_info.value.line == 3

    def test_iteration(self) -> None:
        transcript = Transcript.from_records(_records())
        assert [m.id for m in transcript][1:] == ["1", "2", "3", "4", "5"]

    def test_default_config(self, config) -> None:
        assert Transcript([]).config == config


class TestTranscriptOperations:
    def test_validate_publishes_report(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        report = transcript.validate()

        assert report.valid is False
        assert [e.id for e in report.chain.errors] == ["5"]
        assert report.tool_use.valid is True
        assert report.progress.valid is True
        assert event_bus.collected == [
            (
                ChainEvent.TRANSCRIPT_VALIDATED,
                {"session_id": SESSION_ID, "valid": False, "error_count": 1},
            )
        ]

    def test_repair(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        assert transcript.repair() == 1
        assert transcript.messages[-1].parent_id == "4"
        assert transcript.validate().valid is True
        assert event_bus.collected[0] == (
            ChainEvent.CHAIN_REPAIRED,
            {"session_id": SESSION_ID, "repair_count": 1},
        )

    def test_delete_with_cascade(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        result = transcript.delete("2")

        assert result.deleted is not None
        assert [m.id for m in transcript][1:] == ["1", "4", "5"]
        event, payload = event_bus.collected[0]
        assert event == ChainEvent.MESSAGE_DELETED
        assert payload["deleted"] == "2"
        assert payload["also_deleted"] == ["3"]
        assert payload["relinked_count"] == 1

    def test_delete_respects_config(self) -> None:
        config = ChainmendConfig(deletion=DeletionConfig(cascade_tool_results=False))
        transcript = Transcript.from_records(_records(), config=config)
        transcript.delete("2")
        assert len(transcript) == 5

    def test_delete_missing_publishes_nothing(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        assert transcript.delete("missing").deleted is None
        assert event_bus.collected == []

    def test_delete_snapshot_by_kind(self) -> None:
        transcript = Transcript.from_records(_records())
        transcript.delete("snap-1", "file-history-snapshot")
        assert transcript.messages[0].id == "1"

    def test_restore(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        deleted = transcript.delete("4").deleted
        assert deleted is not None

        assert transcript.restore(deleted, 4) == 4
        assert transcript.to_records() == _records()
        assert event_bus.collected[-1] == (
            ChainEvent.MESSAGE_RESTORED,
            {"session_id": SESSION_ID, "message_id": "4", "index": 4},
        )

    def test_strip_progress(self, event_bus) -> None:
        transcript = Transcript.from_records(_records()[:3], event_bus=event_bus)
        transcript.messages.append(make_progress("p", "2", hook_event="Stop", hook_name="Stop"))

        removed = transcript.strip_progress()
        assert [m.id for m in removed] == ["p"]
        assert event_bus.collected == [
            (
                ChainEvent.MESSAGES_STRIPPED,
                {"session_id": SESSION_ID, "reason": "unwanted_progress", "removed_count": 1},
            )
        ]

    def test_strip_nothing_publishes_nothing(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        assert transcript.strip_invalid_api_key_messages() == []
        assert event_bus.collected == []

    def test_strip_invalid_api_key_messages(self) -> None:
        records = _records()[:2] + [
            make_record("assistant", "2", "1", "Invalid API key · Please run /login"),
            make_record("user", "3", "2"),
        ]
        transcript = Transcript.from_records(records)
        assert [m.id for m in transcript.strip_invalid_api_key_messages()] == ["2"]
        assert transcript.messages[-1].parent_id == "1"

    def test_split(self, event_bus) -> None:
        transcript = Transcript.from_records(_records(), event_bus=event_bus)
        kept, moved = transcript.split("4", new_session_id="sess-new")

        assert [m.id for m in kept] == ["4", "5"]
        assert moved.session_id == "sess-new"
        assert kept.event_bus is event_bus
        assert len(transcript) == 6
        event, payload = event_bus.collected[0]
        assert event == ChainEvent.TRANSCRIPT_SPLIT
        assert payload["moved_message_count"] == 4

    def test_split_at_head_fails(self) -> None:
        with pytest.raises(SplitError):
            Transcript.from_records(_records()[1:]).split("1")

    def test_subscribe_shortcut(self) -> None:
        transcript = Transcript.from_records(_records())
        seen: list[ChainEvent] = []
        transcript.subscribe(ChainEvent.CHAIN_REPAIRED, lambda e, p: seen.append(e))
        transcript.repair()
        assert seen == [ChainEvent.CHAIN_REPAIRED]

    def test_failing_handler_does_not_escape(self) -> None:
        """A broken subscriber cannot turn a completed repair into an exception."""
        transcript = Transcript.from_records(
            [make_record("user", "1", None), make_record("assistant", "2", None)]
        )

        def broken(event: ChainEvent, payload: dict) -> None:
            raise ValueError("subscriber failed")

        transcript.subscribe(ChainEvent.CHAIN_REPAIRED, broken)
        assert transcript.repair() == 1
        assert transcript.messages[1].parent_id == "1"
