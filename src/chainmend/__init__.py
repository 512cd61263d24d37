"""
chainmend: parent-chain integrity for Claude Code conversation transcripts.

Primary entry point::

    from chainmend import Transcript

    transcript = Transcript.from_records(records)
    report = transcript.validate()
    if not report.valid:
        transcript.repair()
"""

from chainmend.transcript import Transcript
from chainmend.errors import (
    ChainmendError,
    InvalidRecordError,
    MessageNotFoundError,
    SplitError,
)
from chainmend.models import (
    ChainmendConfig,
    ChainConfig,
    ProgressConfig,
    DeletionConfig,
    ContentBlock,
    Message,
    MessageKind,
    MessagePayload,
    ChainError,
    ChainValidationResult,
    ToolUseResultError,
    ToolUseValidationResult,
    ProgressError,
    ProgressValidationResult,
    TranscriptReport,
    DeletionTarget,
    DeletionResult,
    SplitResult,
)
from chainmend.chain import (
    validate_chain,
    auto_repair_chain,
    repair_parent_chain,
    validate_tool_use_result,
    validate_progress_messages,
    delete_message_with_chain_repair,
    restore_message,
    remove_messages,
    strip_unwanted_progress,
    strip_invalid_api_key_messages,
    split_transcript,
)
from chainmend.events.bus import ChainEvent, EventBus

__version__ = "0.1.0"

__all__ = [
    # Core
    "Transcript",
    # Errors
    "ChainmendError",
    "InvalidRecordError",
    "MessageNotFoundError",
    "SplitError",
    # Config
    "ChainmendConfig",
    "ChainConfig",
    "ProgressConfig",
    "DeletionConfig",
    # Models
    "ContentBlock",
    "Message",
    "MessageKind",
    "MessagePayload",
    "ChainError",
    "ChainValidationResult",
    "ToolUseResultError",
    "ToolUseValidationResult",
    "ProgressError",
    "ProgressValidationResult",
    "TranscriptReport",
    "DeletionTarget",
    "DeletionResult",
    "SplitResult",
    # Operations
    "validate_chain",
    "auto_repair_chain",
    "repair_parent_chain",
    "validate_tool_use_result",
    "validate_progress_messages",
    "delete_message_with_chain_repair",
    "restore_message",
    "remove_messages",
    "strip_unwanted_progress",
    "strip_invalid_api_key_messages",
    "split_transcript",
    # Events
    "EventBus",
    "ChainEvent",
]
