"""Progress record checks."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from chainmend.chain.validator import first_addressable
from chainmend.models.config import ChainConfig, ProgressConfig
from chainmend.models.message import Message, MessageKind
from chainmend.models.report import ProgressError, ProgressValidationResult

_logger = structlog.get_logger("chainmend.progress")

_DEFAULT_PROGRESS_CONFIG = ProgressConfig()


def is_unwanted_progress(message: Message, config: ProgressConfig | None = None) -> bool:
    """Return True for progress records produced by hooks that should not be kept."""
    if message.kind != MessageKind.PROGRESS:
        return False
    cfg = config or _DEFAULT_PROGRESS_CONFIG
    return (
        message.progress_hook_event in cfg.unwanted_hook_events
        or message.progress_hook_name in cfg.unwanted_hook_names
    )


def validate_progress_messages(
    messages: Sequence[Message],
    config: ProgressConfig | None = None,
    chain_config: ChainConfig | None = None,
) -> ProgressValidationResult:
    """
    Check that progress records still belong to something in the transcript.

    A progress record is ``orphan_progress`` when its ``parent_id`` names a
    message that is no longer present, or its ``parentToolUseID`` names a
    tool invocation that is no longer present. A progress record opening the
    chain is exempt from the ``parent_id`` check, as in chain validation.
    Records from unwanted hooks (see :class:`ProgressConfig`) are reported as
    ``unwanted_progress``.

    Args:
        messages: The transcript in file order.
        config: Progress settings. Defaults to :class:`ProgressConfig`.
        chain_config: Chain settings used to find the first chain message.

    Returns:
        ProgressValidationResult with errors in file order.
    """
    present_ids = {msg.id for msg in messages if msg.id}
    invocation_ids = {tid for msg in messages for tid in msg.tool_use_ids()}
    chain_head = first_addressable(messages, chain_config)
    errors: list[ProgressError] = []

    for index, msg in enumerate(messages):
        if msg.kind != MessageKind.PROGRESS:
            continue
        line = index + 1

        if is_unwanted_progress(msg, config):
            errors.append(
                ProgressError(
                    type="unwanted_progress",
                    id=msg.id,
                    line=line,
                    hook_event=msg.progress_hook_event,
                    hook_name=msg.progress_hook_name,
                )
            )

        missing_owner: str | None = None
        if msg.parent_id and msg is not chain_head and msg.parent_id not in present_ids:
            missing_owner = msg.parent_id
        elif msg.parent_tool_use_id and msg.parent_tool_use_id not in invocation_ids:
            missing_owner = msg.parent_tool_use_id
        if missing_owner is not None:
            errors.append(
                ProgressError(
                    type="orphan_progress",
                    id=msg.id,
                    line=line,
                    owner_id=missing_owner,
                    hook_event=msg.progress_hook_event,
                    hook_name=msg.progress_hook_name,
                )
            )

    _logger.debug("progress_validated", error_count=len(errors))
    return ProgressValidationResult(valid=not errors, errors=errors)
