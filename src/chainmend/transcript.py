"""Transcript: the primary public API entry point."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Literal

import structlog

from chainmend.chain.deletion import delete_message_with_chain_repair
from chainmend.chain.maintenance import (
    restore_message,
    split_transcript,
    strip_invalid_api_key_messages,
    strip_unwanted_progress,
)
from chainmend.chain.progress import validate_progress_messages
from chainmend.chain.repair import auto_repair_chain
from chainmend.chain.tools import validate_tool_use_result
from chainmend.chain.validator import validate_chain
from chainmend.events.bus import ChainEvent, EventBus
from chainmend.models.config import ChainmendConfig
from chainmend.models.message import Message
from chainmend.models.report import DeletionResult, SplitResult, TranscriptReport


class Transcript:
    """
    One conversation transcript held in memory.

    Wraps the ordered message list read from a single JSONL file and exposes
    the validation and maintenance operations over it. Every mutating call
    changes the list in place, logs, and publishes a :class:`ChainEvent`.

    Usage::

        records = [json.loads(line) for line in path.read_text().splitlines() if line]
        transcript = Transcript.from_records(records)

        report = transcript.validate()
        if not report.chain.valid:
            transcript.repair()

        transcript.delete("3f2c...")
        path.write_text("".join(json.dumps(r) + "\\n" for r in transcript.to_records()))

    Reading and writing the file belong to the caller.
    """

    def __init__(
        self,
        messages: list[Message],
        config: ChainmendConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._messages = messages
        self._config = config or ChainmendConfig.default()
        self._event_bus = event_bus or EventBus()
        self._logger = structlog.get_logger("chainmend.transcript").bind(
            session_id=self.session_id
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict[str, Any]],
        *,
        config: ChainmendConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> Transcript:
        """
        Build a transcript from raw JSONL records.

        Args:
            records: Parsed JSON objects in file order.
            config: Operation settings. Defaults to :meth:`ChainmendConfig.default`.
            event_bus: Bus to publish on. A private one is created if omitted.

        Raises:
            InvalidRecordError: If a record is not a valid transcript record.
                ``line`` is its 1-based position.
        """
        messages = [
            Message.from_record(record, line=line) for line, record in enumerate(records, 1)
        ]
        return cls(messages, config=config, event_bus=event_bus)

    def to_records(self) -> list[dict[str, Any]]:
        """Serialize every message back to its JSONL record form."""
        return [msg.to_record() for msg in self._messages]

    # ── Checks ─────────────────────────────────────────────────────────────────

    def validate(self) -> TranscriptReport:
        """
        Run chain, tool-use and progress checks.

        Publishes :attr:`ChainEvent.TRANSCRIPT_VALIDATED`.
        """
        report = TranscriptReport(
            chain=validate_chain(self._messages, self._config.chain),
            tool_use=validate_tool_use_result(self._messages),
            progress=validate_progress_messages(
                self._messages, self._config.progress, self._config.chain
            ),
        )
        self._logger.info(
            "transcript_validated", valid=report.valid, error_count=report.error_count
        )
        self._event_bus.publish(
            ChainEvent.TRANSCRIPT_VALIDATED,
            {
                "session_id": self.session_id,
                "valid": report.valid,
                "error_count": report.error_count,
            },
        )
        return report

    # ── Mutations ──────────────────────────────────────────────────────────────

    def repair(self) -> int:
        """Re-link every broken or orphaned message. Returns the repair count."""
        count = auto_repair_chain(self._messages, self._config.chain)
        self._event_bus.publish(
            ChainEvent.CHAIN_REPAIRED,
            {"session_id": self.session_id, "repair_count": count},
        )
        return count

    def delete(
        self,
        target_id: str,
        target_kind: Literal["file-history-snapshot", "summary"] | None = None,
    ) -> DeletionResult:
        """
        Delete a message and relink its children.

        Publishes :attr:`ChainEvent.MESSAGE_DELETED` only when something was
        removed; an unknown *target_id* is a no-op.
        """
        result = delete_message_with_chain_repair(
            self._messages,
            target_id,
            target_kind,
            config=self._config.deletion,
            chain_config=self._config.chain,
        )
        if result.deleted is not None:
            self._event_bus.publish(
                ChainEvent.MESSAGE_DELETED,
                {
                    "session_id": self.session_id,
                    "target_id": target_id,
                    "deleted": result.deleted.id,
                    "also_deleted": [m.id for m in result.also_deleted if m.id],
                    "relinked_count": result.relinked_count,
                },
            )
        return result

    def restore(self, message: Message, index: int) -> int:
        """Re-insert a previously deleted message. Returns its final position."""
        position = restore_message(self._messages, message, index, self._config.chain)
        self._event_bus.publish(
            ChainEvent.MESSAGE_RESTORED,
            {"session_id": self.session_id, "message_id": message.id, "index": position},
        )
        return position

    def strip_progress(self) -> list[Message]:
        """Remove progress records from unwanted hooks."""
        removed = strip_unwanted_progress(
            self._messages, self._config.progress, self._config.chain
        )
        self._publish_stripped("unwanted_progress", removed)
        return removed

    def strip_invalid_api_key_messages(self) -> list[Message]:
        """Remove turns that only record an invalid API key failure."""
        removed = strip_invalid_api_key_messages(self._messages, self._config.chain)
        self._publish_stripped("invalid_api_key", removed)
        return removed

    def split(
        self, split_at_id: str, new_session_id: str | None = None
    ) -> tuple[Transcript, Transcript]:
        """
        Split into ``(kept, moved)`` transcripts at *split_at_id*.

        This transcript is left unchanged. Both halves share its config and
        event bus.

        Raises:
            MessageNotFoundError: If no message has *split_at_id*.
            SplitError: If *split_at_id* is the first record.
        """
        result: SplitResult = split_transcript(self._messages, split_at_id, new_session_id)
        self._event_bus.publish(
            ChainEvent.TRANSCRIPT_SPLIT,
            {
                "session_id": self.session_id,
                "new_session_id": result.new_session_id,
                "split_at": split_at_id,
                "moved_message_count": result.moved_message_count,
            },
        )
        kept = Transcript(result.kept, config=self._config, event_bus=self._event_bus)
        moved = Transcript(result.moved, config=self._config, event_bus=self._event_bus)
        return kept, moved

    def _publish_stripped(self, reason: str, removed: list[Message]) -> None:
        if not removed:
            return
        self._logger.info("messages_stripped", reason=reason, removed_count=len(removed))
        self._event_bus.publish(
            ChainEvent.MESSAGES_STRIPPED,
            {"session_id": self.session_id, "reason": reason, "removed_count": len(removed)},
        )

    # ── Accessors ──────────────────────────────────────────────────────────────

    @property
    def messages(self) -> list[Message]:
        """The live message list. Mutations through it bypass events."""
        return self._messages

    @property
    def session_id(self) -> str | None:
        """The session ID of the first record that carries one."""
        return next((m.session_id for m in self._messages if m.session_id), None)

    @property
    def config(self) -> ChainmendConfig:
        return self._config

    @property
    def event_bus(self) -> EventBus:
        """The event bus for this transcript. Subscribe to monitor events."""
        return self._event_bus

    def subscribe(self, event: ChainEvent, handler: Any) -> None:
        """Convenience wrapper for ``transcript.event_bus.subscribe()``."""
        self._event_bus.subscribe(event, handler)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)
