"""chainmend data models."""

from chainmend.models.config import (
    ChainConfig,
    ChainmendConfig,
    DeletionConfig,
    ProgressConfig,
)
from chainmend.models.message import ContentBlock, Message, MessageKind, MessagePayload
from chainmend.models.report import (
    ChainError,
    ChainValidationResult,
    DeletionResult,
    DeletionTarget,
    ProgressError,
    ProgressValidationResult,
    SplitResult,
    ToolUseResultError,
    ToolUseValidationResult,
    TranscriptReport,
)

__all__ = [
    # Config
    "ChainConfig",
    "ChainmendConfig",
    "DeletionConfig",
    "ProgressConfig",
    # Records
    "ContentBlock",
    "Message",
    "MessageKind",
    "MessagePayload",
    # Validation
    "ChainError",
    "ChainValidationResult",
    "ToolUseResultError",
    "ToolUseValidationResult",
    "ProgressError",
    "ProgressValidationResult",
    "TranscriptReport",
    # Operations
    "DeletionTarget",
    "DeletionResult",
    "SplitResult",
]
