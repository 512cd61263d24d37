"""Message deletion with parent-chain repair."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Literal

import structlog

from chainmend.chain.repair import repair_parent_chain
from chainmend.chain.tools import tool_result_carriers
from chainmend.models.config import ChainConfig, DeletionConfig
from chainmend.models.message import Message, MessageKind
from chainmend.models.report import DeletionResult, DeletionTarget

_logger = structlog.get_logger("chainmend.deletion")

_DEFAULT_DELETION_CONFIG = DeletionConfig()


def find_target(messages: Sequence[Message], target: DeletionTarget) -> int | None:
    """
    Return the index of the message *target* selects, or None.

    With ``target.kind`` set, only that namespace is searched: snapshot
    ``messageId`` or summary ``leafUuid``. Without it the lookup prefers
    ``uuid``, then ``leafUuid``, then snapshot ``messageId``, so a uuid that
    happens to equal a marker's secondary ID resolves to the real message.
    """
    if target.kind == MessageKind.SNAPSHOT:
        matchers: list[Callable[[Message], bool]] = [_snapshot_matcher(target.identifier)]
    elif target.kind == MessageKind.SUMMARY:
        matchers = [_leaf_matcher(target.identifier)]
    else:
        matchers = [
            lambda m: m.id == target.identifier,
            _leaf_matcher(target.identifier),
            _snapshot_matcher(target.identifier),
        ]

    for matches in matchers:
        for index, msg in enumerate(messages):
            if matches(msg):
                return index
    return None


def _snapshot_matcher(identifier: str) -> Callable[[Message], bool]:
    return lambda m: m.kind == MessageKind.SNAPSHOT and m.message_id == identifier


def _leaf_matcher(identifier: str) -> Callable[[Message], bool]:
    return lambda m: m.leaf_id == identifier


def delete_message_with_chain_repair(
    messages: list[Message],
    target_id: str,
    target_kind: Literal["file-history-snapshot", "summary"] | None = None,
    config: DeletionConfig | None = None,
    chain_config: ChainConfig | None = None,
) -> DeletionResult:
    """
    Remove one message and relink its children to its former parent.

    Every remaining message whose ``parent_id`` named the removed message is
    pointed at the removed message's own ``parent_id``. If the removed
    message opened the chain, its children open it now and inherit the same
    exemption from chain checks.

    When the removed message is an assistant turn with ``tool_use`` blocks and
    ``config.cascade_tool_results`` is on, user messages carrying the matching
    ``tool_result`` blocks are removed too; links are resolved through every
    removed message.

    A target that matches nothing is a silent no-op, so repeated calls are safe.

    Args:
        messages: The transcript in file order. Mutated in place.
        target_id: ``uuid``, summary ``leafUuid`` or snapshot ``messageId``.
        target_kind: Restricts the lookup to one marker namespace when a
            secondary ID could collide with another record's identifier.
        config: Deletion settings. Defaults to :class:`DeletionConfig`.
        chain_config: Chain settings used when relinking.

    Returns:
        DeletionResult with the removed message (None if not found).
    """
    cfg = config or _DEFAULT_DELETION_CONFIG
    target = DeletionTarget(identifier=target_id, kind=target_kind)
    index = find_target(messages, target)
    if index is None:
        _logger.debug("message_not_found", target_id=target_id, target_kind=target_kind)
        return DeletionResult()

    deleted = messages[index]
    cascade: list[int] = []
    if cfg.cascade_tool_results and deleted.kind == MessageKind.ASSISTANT:
        tool_use_ids = set(deleted.tool_use_ids())
        if tool_use_ids:
            cascade = [i for i in tool_result_carriers(messages, tool_use_ids) if i != index]

    doomed = sorted({index, *cascade})
    removed = [messages[i] for i in doomed]
    for i in reversed(doomed):
        del messages[i]
    relinked = repair_parent_chain(messages, removed, chain_config)

    _logger.info(
        "message_deleted",
        target_id=target_id,
        kind=deleted.kind,
        also_deleted=len(cascade),
        relinked=relinked,
    )
    return DeletionResult(
        deleted=deleted,
        also_deleted=[msg for msg in removed if msg is not deleted],
        relinked_count=relinked,
    )
