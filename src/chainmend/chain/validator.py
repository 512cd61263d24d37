"""Parent-chain validation over an ordered transcript."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from chainmend.models.config import ChainConfig
from chainmend.models.message import Message
from chainmend.models.report import ChainError, ChainValidationResult

_logger = structlog.get_logger("chainmend.validator")

_DEFAULT_CHAIN_CONFIG = ChainConfig()


def is_addressable(message: Message, config: ChainConfig | None = None) -> bool:
    """
    Return True if *message* takes part in the parent chain.

    A record is addressable when it carries a ``uuid`` and its kind is not
    one of ``config.non_chain_kinds`` (snapshot and summary markers by default).
    """
    cfg = config or _DEFAULT_CHAIN_CONFIG
    return bool(message.id) and message.kind not in cfg.non_chain_kinds


def first_addressable(
    messages: Sequence[Message], config: ChainConfig | None = None
) -> Message | None:
    """Return the first addressable message in file order, or None."""
    for msg in messages:
        if is_addressable(msg, config):
            return msg
    return None


def scan_chain(
    messages: Sequence[Message], config: ChainConfig | None = None
) -> list[tuple[Message, ChainError]]:
    """
    Walk *messages* in file order and pair each defective message with its error.

    Algorithm:
    1. Skip non-addressable records; they never reset the previous link.
    2. The first addressable message is exempt: a transcript may continue a
       compacted session, so any ``parent_id`` is accepted there.
    3. A later message with no ``parent_id`` is ``broken_chain``.
    4. A later message whose ``parent_id`` is neither the previous addressable
       ID nor any ID seen so far is ``orphan_parent``.
    5. A ``parent_id`` naming an earlier, non-immediate message is accepted
       (branches left behind by edits and retries).

    Args:
        messages: The transcript in file order.
        config: Chain settings. Defaults to :class:`ChainConfig`.

    Returns:
        ``(message, error)`` pairs in file order.
    """
    findings: list[tuple[Message, ChainError]] = []
    seen_ids: set[str] = set()
    previous_id: str | None = None

    for index, msg in enumerate(messages):
        if msg.id is None or not is_addressable(msg, config):
            continue

        if previous_id is not None:
            error = _check_link(msg, previous_id, seen_ids, line=index + 1)
            if error is not None:
                findings.append((msg, error))

        seen_ids.add(msg.id)
        previous_id = msg.id

    return findings


def _check_link(
    msg: Message, previous_id: str, seen_ids: set[str], line: int
) -> ChainError | None:
    msg_id = msg.id or ""
    if msg.parent_id is None:
        return ChainError(
            type="broken_chain",
            id=msg_id,
            line=line,
            parent_id=None,
            expected_parent=previous_id,
        )
    if msg.parent_id == previous_id or msg.parent_id in seen_ids:
        return None
    return ChainError(
        type="orphan_parent",
        id=msg_id,
        line=line,
        parent_id=msg.parent_id,
        expected_parent=previous_id,
    )


def validate_chain(
    messages: Sequence[Message], config: ChainConfig | None = None
) -> ChainValidationResult:
    """
    Report every parent-linkage defect in *messages*.

    Never raises on a malformed chain; defects are returned as data.

    Example::

        result = validate_chain(messages)
        for error in result.errors:
            print(f"line {error.line}: {error.type} on {error.id}")
    """
    errors = [error for _, error in scan_chain(messages, config)]
    _logger.debug("chain_validated", message_count=len(messages), error_count=len(errors))
    return ChainValidationResult(valid=not errors, errors=errors)
