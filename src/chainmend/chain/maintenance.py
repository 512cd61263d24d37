"""Transcript maintenance: restore, bulk removal and splitting.

Every operation here keeps the parent chain intact:

- :func:`restore_message` re-inserts a deleted message and re-adopts its child.
- :func:`remove_messages` drops every record matching a predicate and relinks
  survivors through :func:`~chainmend.chain.repair.repair_parent_chain`.
  :func:`strip_unwanted_progress` and :func:`strip_invalid_api_key_messages`
  are the two stock predicates.
- :func:`split_transcript` cuts a transcript in two at a message, producing a
  self-consistent chain on each side.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable

import structlog

from chainmend.chain.progress import is_unwanted_progress
from chainmend.chain.repair import repair_parent_chain
from chainmend.chain.validator import is_addressable
from chainmend.errors import InvalidRecordError, MessageNotFoundError, SplitError
from chainmend.models.config import ChainConfig, ProgressConfig
from chainmend.models.message import Message, MessageKind
from chainmend.models.report import SplitResult

_logger = structlog.get_logger("chainmend.maintenance")

# Marker Claude Code writes into ``toolUseResult`` when the user rejects a tool call.
_REJECTION_MARKER = "The user provided the following reason for the rejection:"
_CONTINUATION_PREFIX = "This session is being continued from"
_INVALID_API_KEY = "Invalid API key"


def restore_message(
    messages: list[Message],
    message: Message,
    index: int,
    config: ChainConfig | None = None,
) -> int:
    """
    Re-insert a previously deleted message at *index*.

    Deletion pointed the message's child at the message's parent; the first
    addressable message at or after the insertion point that still points at
    that parent is re-adopted by the restored message.

    Args:
        messages: The transcript in file order. Mutated in place.
        message: The message to restore.
        index: Target position. Clamped to ``[0, len(messages)]``.
        config: Chain settings.

    Returns:
        The position the message was inserted at.

    Raises:
        InvalidRecordError: If the message has neither a uuid nor a secondary ID.
    """
    if not message.id and not message.secondary_id:
        raise InvalidRecordError("message has no uuid, messageId or leafUuid")

    insert_at = max(0, min(index, len(messages)))
    if message.id is not None and is_addressable(message, config):
        for candidate in messages[insert_at:]:
            if is_addressable(candidate, config) and candidate.parent_id == message.parent_id:
                candidate.parent_id = message.id
                break
    messages.insert(insert_at, message)

    _logger.info(
        "message_restored",
        message_id=message.id or message.secondary_id,
        index=insert_at,
    )
    return insert_at


def remove_messages(
    messages: list[Message],
    predicate: Callable[[Message], bool],
    config: ChainConfig | None = None,
) -> list[Message]:
    """
    Remove every message matching *predicate* and relink the survivors.

    Args:
        messages: The transcript in file order. Mutated in place.
        predicate: Returns True for messages to drop.
        config: Chain settings.

    Returns:
        The removed messages in their original order.
    """
    removed = [msg for msg in messages if predicate(msg)]
    if not removed:
        return []

    dropped = {id(msg) for msg in removed}
    messages[:] = [msg for msg in messages if id(msg) not in dropped]
    relinked = repair_parent_chain(messages, removed, config)
    _logger.info("messages_removed", removed_count=len(removed), relinked=relinked)
    return removed


def strip_unwanted_progress(
    messages: list[Message],
    config: ProgressConfig | None = None,
    chain_config: ChainConfig | None = None,
) -> list[Message]:
    """Remove progress records from unwanted hooks (``Stop`` by default)."""
    return remove_messages(messages, lambda m: is_unwanted_progress(m, config), chain_config)


def strip_invalid_api_key_messages(
    messages: list[Message], config: ChainConfig | None = None
) -> list[Message]:
    """Remove turns that only record a failed call due to an invalid API key."""
    return remove_messages(messages, lambda m: _INVALID_API_KEY in m.text_content(), config)


def is_continuation_summary(message: Message) -> bool:
    """Return True for the synthetic user turn that opens a compacted session."""
    if message.is_compact_summary is True:
        return True
    if message.kind != MessageKind.USER:
        return False
    return message.text_content().startswith(_CONTINUATION_PREFIX)


def clean_split_head(message: Message) -> Message:
    """
    Replace a tool rejection with the user's stated reason.

    When a transcript is split at a message that rejected a tool call, the
    message's content is the ``tool_result`` for an invocation left behind in
    the other half. The user's own words live in ``toolUseResult``; lift them
    into a plain text block and drop ``toolUseResult``.
    """
    raw = message.tool_use_result
    if not isinstance(raw, str):
        return message
    marker_at = raw.find(_REJECTION_MARKER)
    if marker_at == -1:
        return message
    reason = raw[marker_at + len(_REJECTION_MARKER) :].strip()
    if not reason:
        return message

    record = message.to_record()
    record.pop("toolUseResult", None)
    record["message"] = {
        **(record.get("message") or {}),
        "content": [{"type": "text", "text": reason}],
    }
    return Message.from_record(record)


def split_transcript(
    messages: list[Message],
    split_at_id: str,
    new_session_id: str | None = None,
) -> SplitResult:
    """
    Split a transcript into the part before *split_at_id* and the rest.

    The original session keeps the newer half (from the split message on).
    Its first message loses its parent link so it opens a fresh chain. The
    older half moves to a new session: every moved record is re-tagged with
    the new session ID, the latest summary marker is cloned to its head
    (pointing at the first moved message with a uuid), and if the split message is a
    continuation summary a copy of it with a fresh uuid closes the older half.

    The input list is not modified; both halves are deep copies.

    Args:
        messages: The transcript in file order.
        split_at_id: uuid of the first message to keep.
        new_session_id: Session ID for the older half. A UUID4 by default.

    Returns:
        SplitResult with both halves.

    Raises:
        MessageNotFoundError: If no message has *split_at_id*.
        SplitError: If *split_at_id* is the very first record.
    """
    split_index = next((i for i, m in enumerate(messages) if m.id == split_at_id), None)
    if split_index is None:
        raise MessageNotFoundError(split_at_id)
    if split_index == 0:
        raise SplitError("Cannot split at first message")

    new_session_id = new_session_id or str(uuid.uuid4())
    split_message = messages[split_index]
    duplicate = is_continuation_summary(split_message)
    summaries = [m for m in messages if m.kind == MessageKind.SUMMARY]

    moved = [
        m.model_copy(deep=True, update={"session_id": new_session_id})
        for m in messages[:split_index]
    ]
    if duplicate:
        moved.append(
            split_message.model_copy(
                deep=True,
                update={"id": str(uuid.uuid4()), "session_id": new_session_id},
            )
        )
    moved_count = len(moved)

    if summaries:
        leaf_id = next((m.id for m in moved if m.id), None)
        moved.insert(
            0,
            summaries[-1].model_copy(
                deep=True,
                update={"session_id": new_session_id, "leaf_id": leaf_id},
            ),
        )

    kept = [m.model_copy(deep=True) for m in messages[split_index:]]
    kept[0] = clean_split_head(kept[0].model_copy(update={"parent_id": None}))

    _logger.info(
        "transcript_split",
        split_at=split_at_id,
        new_session_id=new_session_id,
        kept=len(kept),
        moved=moved_count,
        duplicated_summary=duplicate,
    )
    return SplitResult(
        kept=kept,
        moved=moved,
        new_session_id=new_session_id,
        moved_message_count=moved_count,
        duplicated_summary=duplicate,
    )
