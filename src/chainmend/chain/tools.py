"""Tool invocation / result pairing checks."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from chainmend.models.message import Message, MessageKind
from chainmend.models.report import ToolUseResultError, ToolUseValidationResult

_logger = structlog.get_logger("chainmend.tools")


def validate_tool_use_result(messages: Sequence[Message]) -> ToolUseValidationResult:
    """
    Report every ``tool_result`` block with no earlier matching ``tool_use``.

    Invocations are the ``tool_use`` blocks of assistant messages. A result
    must reference an invocation from an earlier message in file order; a
    result for a later or missing invocation is an ``orphan_tool_result``.
    The parent chain is not consulted.

    Args:
        messages: The transcript in file order.

    Returns:
        ToolUseValidationResult with one error per orphaned result block.
    """
    errors: list[ToolUseResultError] = []
    invoked: set[str] = set()

    for index, msg in enumerate(messages):
        for tool_use_id in msg.tool_result_ids():
            if tool_use_id not in invoked:
                errors.append(
                    ToolUseResultError(id=msg.id, line=index + 1, tool_use_id=tool_use_id)
                )
        if msg.kind == MessageKind.ASSISTANT:
            invoked.update(msg.tool_use_ids())

    _logger.debug(
        "tool_use_validated",
        invocation_count=len(invoked),
        error_count=len(errors),
    )
    return ToolUseValidationResult(valid=not errors, errors=errors)


def tool_result_carriers(messages: Sequence[Message], tool_use_ids: set[str]) -> list[int]:
    """
    Return indices of user messages carrying a result for any of *tool_use_ids*.

    Only user turns count as carriers here, unlike
    :func:`validate_tool_use_result`, which checks result blocks on any record.
    Claude Code writes tool results as user turns, and the deletion cascade
    removes whole carrier messages, so it is restricted to those.
    """
    return [
        index
        for index, msg in enumerate(messages)
        if msg.kind == MessageKind.USER
        and any(ref in tool_use_ids for ref in msg.tool_result_ids())
    ]
