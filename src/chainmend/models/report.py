"""Validation reports and operation results."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from chainmend.models.message import Message

# ── Validation Errors ──────────────────────────────────────────────────────────


class ChainError(BaseModel):
    """A parent-linkage defect on one addressable message."""

    type: Literal["broken_chain", "orphan_parent"]
    id: str
    line: int
    """1-based position of the message in the sequence (its JSONL line number)."""
    parent_id: str | None = None
    expected_parent: str | None = None
    """ID of the nearest preceding addressable message. Repair links to this."""


class ToolUseResultError(BaseModel):
    """A ``tool_result`` block with no matching earlier ``tool_use`` block."""

    type: Literal["orphan_tool_result"] = "orphan_tool_result"
    id: str | None
    """ID of the message carrying the result, if it has one."""
    line: int
    tool_use_id: str


class ProgressError(BaseModel):
    """A structural problem with a ``progress`` record."""

    type: Literal["orphan_progress", "unwanted_progress"]
    id: str | None
    line: int
    owner_id: str | None = None
    """The missing reference, for ``orphan_progress``."""
    hook_event: str | None = None
    hook_name: str | None = None


# ── Validation Results ─────────────────────────────────────────────────────────


class ChainValidationResult(BaseModel):
    valid: bool
    errors: list[ChainError] = Field(default_factory=list)


class ToolUseValidationResult(BaseModel):
    valid: bool
    errors: list[ToolUseResultError] = Field(default_factory=list)


class ProgressValidationResult(BaseModel):
    valid: bool
    errors: list[ProgressError] = Field(default_factory=list)


class TranscriptReport(BaseModel):
    """
    Combined result of every read-only check over one transcript.

    Produced by :meth:`chainmend.transcript.Transcript.validate`.
    """

    chain: ChainValidationResult
    tool_use: ToolUseValidationResult
    progress: ProgressValidationResult

    @property
    def valid(self) -> bool:
        return self.chain.valid and self.tool_use.valid and self.progress.valid

    @property
    def error_count(self) -> int:
        return len(self.chain.errors) + len(self.tool_use.errors) + len(self.progress.errors)


# ── Operation Results ──────────────────────────────────────────────────────────


class DeletionTarget(BaseModel):
    """
    Lookup key for a deletion.

    ``kind`` selects which identifier namespace ``identifier`` lives in.
    ``None`` means "any": ``uuid`` first, then summary ``leafUuid``, then
    snapshot ``messageId``.
    """

    identifier: str
    kind: Literal["file-history-snapshot", "summary"] | None = None


class DeletionResult(BaseModel):
    """The outcome of a deletion. ``deleted`` is None when nothing matched."""

    deleted: Message | None = None
    also_deleted: list[Message] = Field(default_factory=list)
    """Tool-result carriers removed along with a deleted tool-calling message."""
    relinked_count: int = 0


class SplitResult(BaseModel):
    """The two halves of a transcript split at a message."""

    kept: list[Message]
    """Messages from the split point onward. They keep the original session ID."""
    moved: list[Message]
    """Messages before the split point, re-tagged with ``new_session_id``."""
    new_session_id: str
    moved_message_count: int
    """Messages moved out of the original, excluding the cloned summary marker."""
    duplicated_summary: bool = False
