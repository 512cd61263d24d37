"""Typed payload definitions for each ChainEvent.

Usage example::

    from chainmend.events.bus import ChainEvent, EventBus
    from chainmend.events.payloads import MessageDeletedPayload

    def on_delete(event: ChainEvent, payload: MessageDeletedPayload) -> None:
        print(f"{payload['target_id']}: relinked {payload['relinked_count']}")

    bus.subscribe(ChainEvent.MESSAGE_DELETED, on_delete)  # type: ignore[arg-type]
"""

from __future__ import annotations

from typing import Literal, TypedDict

# ── Validation ────────────────────────────────────────────────────────────────


class TranscriptValidatedPayload(TypedDict):
    """Payload for :attr:`ChainEvent.TRANSCRIPT_VALIDATED`."""

    session_id: str | None
    valid: bool
    error_count: int
    """Chain, tool-use and progress errors combined."""


# ── Mutation ──────────────────────────────────────────────────────────────────


class ChainRepairedPayload(TypedDict):
    """Payload for :attr:`ChainEvent.CHAIN_REPAIRED`."""

    session_id: str | None
    repair_count: int


class MessageDeletedPayload(TypedDict):
    """Payload for :attr:`ChainEvent.MESSAGE_DELETED`.

    Only published when the target was found.
    """

    session_id: str | None
    target_id: str
    deleted: str | None
    """uuid of the removed message (None for uuid-less markers)."""
    also_deleted: list[str]
    """uuids of tool_result carriers removed alongside."""
    relinked_count: int


class MessageRestoredPayload(TypedDict):
    """Payload for :attr:`ChainEvent.MESSAGE_RESTORED`."""

    session_id: str | None
    message_id: str | None
    index: int


class MessagesStrippedPayload(TypedDict):
    """Payload for :attr:`ChainEvent.MESSAGES_STRIPPED`."""

    session_id: str | None
    reason: Literal["unwanted_progress", "invalid_api_key"]
    removed_count: int


# ── Split ─────────────────────────────────────────────────────────────────────


class TranscriptSplitPayload(TypedDict):
    """Payload for :attr:`ChainEvent.TRANSCRIPT_SPLIT`."""

    session_id: str | None
    new_session_id: str
    split_at: str
    moved_message_count: int
