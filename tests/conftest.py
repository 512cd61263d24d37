"""Shared fixtures for chainmend tests."""

from __future__ import annotations

from typing import Any

import pytest

from chainmend.events.bus import ChainEvent, EventBus
from chainmend.models.config import ChainmendConfig
from chainmend.models.message import Message

SESSION_ID = "sess-0001"


@pytest.fixture
def config():
    """ChainmendConfig with all defaults."""
    return ChainmendConfig.default()


@pytest.fixture
def event_bus():
    """EventBus with a .collected list for asserting events."""
    bus = EventBus()
    collected: list[tuple[ChainEvent, dict[str, Any]]] = []

    def _collect(event: ChainEvent, payload: dict[str, Any]) -> None:
        collected.append((event, payload))

    bus.subscribe_all(_collect)
    bus.collected = collected  # type: ignore[attr-defined]
    return bus


def make_record(
    kind: str = "user",
    uuid: str | None = None,
    parent: str | None = None,
    content: str | list[dict[str, Any]] | None = "hello",
    **extra: Any,
) -> dict[str, Any]:
    """Helper to create a raw JSONL record as Claude Code writes it."""
    record: dict[str, Any] = {
        "type": kind,
        "parentUuid": parent,
        "sessionId": SESSION_ID,
        "timestamp": "2025-01-01T00:00:00.000Z",
    }
    if uuid is not None:
        record["uuid"] = uuid
    if kind in ("user", "assistant"):
        record["message"] = {"role": kind, "content": content}
    record.update(extra)
    return record


def make_message(
    kind: str = "user",
    uuid: str | None = None,
    parent: str | None = None,
    content: str | list[dict[str, Any]] | None = "hello",
    **extra: Any,
) -> Message:
    """Helper to create a test Message."""
    return Message.from_record(make_record(kind, uuid, parent, content, **extra))


def make_snapshot(message_id: str) -> Message:
    """A file-history-snapshot marker. These carry no uuid."""
    return Message.from_record(
        {
            "type": "file-history-snapshot",
            "messageId": message_id,
            "snapshot": {"trackedFileBackups": {}},
            "isSnapshotUpdate": False,
        }
    )


def make_summary(leaf_id: str, text: str = "Earlier work") -> Message:
    """A summary marker pointing at the last message it covers."""
    return Message.from_record({"type": "summary", "summary": text, "leafUuid": leaf_id})


def make_progress(
    uuid: str,
    parent: str | None,
    hook_event: str = "PostToolUse",
    hook_name: str = "PostToolUse:Bash",
    parent_tool_use_id: str | None = None,
) -> Message:
    """A hook progress record with its hook metadata nested under ``data``."""
    record = make_record(
        "progress",
        uuid,
        parent,
        data={"type": "hook_progress", "hookEvent": hook_event, "hookName": hook_name},
    )
    if parent_tool_use_id is not None:
        record["parentToolUseID"] = parent_tool_use_id
        record["toolUseID"] = parent_tool_use_id
    return Message.from_record(record)


def tool_use(tool_use_id: str, name: str = "Bash") -> dict[str, Any]:
    return {"type": "tool_use", "id": tool_use_id, "name": name, "input": {"command": "ls"}}


def tool_result(tool_use_id: str, output: str = "ok") -> dict[str, Any]:
    return {"type": "tool_result", "tool_use_id": tool_use_id, "content": output}


def linear_chain(count: int, prefix: str = "m") -> list[Message]:
    """Alternating user/assistant messages, each linked to the one before."""
    messages = []
    parent = None
    for i in range(1, count + 1):
        uuid = f"{prefix}{i}"
        kind = "user" if i % 2 else "assistant"
        messages.append(make_message(kind, uuid, parent))
        parent = uuid
    return messages


def parents(messages: list[Message]) -> dict[str, str | None]:
    """Map of uuid to parent_id for every message that has a uuid."""
    return {m.id: m.parent_id for m in messages if m.id}
