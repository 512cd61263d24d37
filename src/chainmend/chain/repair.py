"""Chain repair: relinks defective parent references in place."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from chainmend.chain.validator import is_addressable, scan_chain
from chainmend.models.config import ChainConfig
from chainmend.models.message import Message

_logger = structlog.get_logger("chainmend.repair")


def auto_repair_chain(messages: list[Message], config: ChainConfig | None = None) -> int:
    """
    Relink every ``broken_chain`` and ``orphan_parent`` message to its predecessor.

    Each defective message gets ``parent_id`` set to the ID of the nearest
    preceding addressable message; non-addressable records in between are
    skipped. The first addressable message is never touched. Only
    ``parent_id`` changes, so repairs do not interact with each other and
    the scan results stay correct while they are applied.

    Idempotent: a second call returns 0 and changes nothing.

    Args:
        messages: The transcript in file order. Mutated in place.
        config: Chain settings. Defaults to :class:`ChainConfig`.

    Returns:
        The number of messages whose ``parent_id`` was changed.
    """
    findings = scan_chain(messages, config)
    for msg, error in findings:
        msg.parent_id = error.expected_parent

    if findings:
        _logger.info(
            "chain_repaired",
            repair_count=len(findings),
            broken=sum(1 for _, e in findings if e.type == "broken_chain"),
            orphaned=sum(1 for _, e in findings if e.type == "orphan_parent"),
        )
    return len(findings)


def repair_parent_chain(
    messages: Iterable[Message],
    removed: Iterable[Message],
    config: ChainConfig | None = None,
) -> int:
    """
    Relink the children of removed messages to their nearest surviving ancestor.

    A message pointing at a removed message is pointed at that message's
    own parent instead, following runs of removed messages so that removing
    ``p1`` and ``p2`` from ``a -> p1 -> p2 -> b`` leaves ``a -> b``.

    Args:
        messages: The remaining messages. Mutated in place.
        removed: The messages that were taken out of the transcript.
        config: Chain settings. Non-chain kinds among *removed* are ignored.

    Returns:
        The number of messages whose ``parent_id`` was rewritten.
    """
    removed_parents: dict[str, str | None] = {
        msg.id: msg.parent_id
        for msg in removed
        if msg.id is not None and is_addressable(msg, config)
    }
    if not removed_parents:
        return 0

    relinked = 0
    for msg in messages:
        if msg.parent_id is not None and msg.parent_id in removed_parents:
            msg.parent_id = _resolve_parent(msg.parent_id, removed_parents)
            relinked += 1
    return relinked


def _resolve_parent(parent_id: str | None, removed_parents: dict[str, str | None]) -> str | None:
    visited: set[str] = set()
    current = parent_id
    while current is not None and current in removed_parents and current not in visited:
        visited.add(current)
        current = removed_parents[current]
    return current
