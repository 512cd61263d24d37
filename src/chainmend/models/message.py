"""Transcript record models for chainmend."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chainmend.errors import InvalidRecordError

# ── Record Kinds ───────────────────────────────────────────────────────────────


class MessageKind(StrEnum):
    """Well-known values of the record ``type`` field.

    ``Message.kind`` is a plain string so unknown record types pass through
    untouched; compare against these members.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    PROGRESS = "progress"
    SNAPSHOT = "file-history-snapshot"
    SUMMARY = "summary"
    CUSTOM_TITLE = "custom-title"


# ── Content Blocks ─────────────────────────────────────────────────────────────


class ContentBlock(BaseModel):
    """One block of a message payload's ``content`` list.

    Only the fields needed for tool pairing and text extraction are modelled;
    everything else (``input``, ``name``, ``is_error``, images...) is kept as
    extra data and written back verbatim.
    """

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    id: str | None = None
    """Invocation identifier on ``tool_use`` blocks."""
    tool_use_id: str | None = None
    """Referenced invocation identifier on ``tool_result`` blocks."""
    text: str | None = None


class MessagePayload(BaseModel):
    """The nested ``message`` object of a user or assistant record."""

    model_config = ConfigDict(extra="allow")

    role: str | None = None
    content: str | list[ContentBlock] | None = None

    def blocks(self) -> list[ContentBlock]:
        """Return the content blocks, or an empty list for string content."""
        if isinstance(self.content, list):
            return self.content
        return []


# ── Message ────────────────────────────────────────────────────────────────────


class Message(BaseModel):
    """
    A single record of a JSON-lines transcript.

    Field names are Pythonic; the JSON names used on disk are the aliases
    (``uuid``, ``parentUuid``, ``messageId``...). Unknown fields are retained
    as extra data so that :meth:`to_record` reproduces the input exactly,
    apart from fields an operation assigned.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    kind: str | None = Field(default=None, alias="type")
    id: str | None = Field(default=None, alias="uuid")
    parent_id: str | None = Field(default=None, alias="parentUuid")
    message_id: str | None = Field(default=None, alias="messageId")
    """Secondary identifier carried by file-history snapshot markers."""
    leaf_id: str | None = Field(default=None, alias="leafUuid")
    """Secondary identifier carried by summary markers."""
    session_id: str | None = Field(default=None, alias="sessionId")
    timestamp: str | None = None
    message: MessagePayload | None = None

    is_compact_summary: bool | None = Field(default=None, alias="isCompactSummary")
    tool_use_result: Any = Field(default=None, alias="toolUseResult")

    # Progress-only fields. Hook metadata appears either flat or under ``data``.
    hook_event: str | None = Field(default=None, alias="hookEvent")
    hook_name: str | None = Field(default=None, alias="hookName")
    tool_use_ref: str | None = Field(default=None, alias="toolUseID")
    parent_tool_use_id: str | None = Field(default=None, alias="parentToolUseID")
    data: Any = None

    @classmethod
    def from_record(cls, record: dict[str, Any], *, line: int | None = None) -> Message:
        """
        Build a Message from one parsed JSON record.

        Only on-disk names are recognised. A key that happens to match a
        Python field name (``id``, ``kind``...) is kept as extra data.

        Args:
            record: The decoded JSON object of one transcript line.
            line: Optional 1-based line number, reported if validation fails.

        Raises:
            InvalidRecordError: If the record does not fit the model.
        """
        try:
            return cls.model_validate(record, by_alias=True, by_name=False)
        except ValidationError as exc:
            raise InvalidRecordError(str(exc), line=line) from exc

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready record using on-disk field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    @property
    def secondary_id(self) -> str | None:
        """Alternate identifier for markers that have no ``uuid``."""
        if self.kind == MessageKind.SNAPSHOT:
            return self.message_id
        if self.kind == MessageKind.SUMMARY:
            return self.leaf_id
        return None

    @property
    def progress_hook_event(self) -> str | None:
        if self.hook_event is not None:
            return self.hook_event
        return self.data.get("hookEvent") if isinstance(self.data, dict) else None

    @property
    def progress_hook_name(self) -> str | None:
        if self.hook_name is not None:
            return self.hook_name
        return self.data.get("hookName") if isinstance(self.data, dict) else None

    def tool_use_ids(self) -> list[str]:
        """IDs of every ``tool_use`` block in this message's content."""
        if self.message is None:
            return []
        return [b.id for b in self.message.blocks() if b.type == "tool_use" and b.id]

    def tool_result_ids(self) -> list[str]:
        """Invocation IDs referenced by every ``tool_result`` block in this message."""
        if self.message is None:
            return []
        return [
            b.tool_use_id
            for b in self.message.blocks()
            if b.type == "tool_result" and b.tool_use_id
        ]

    def text_content(self) -> str:
        """Concatenate the text of this message's payload."""
        if self.message is None or self.message.content is None:
            return ""
        if isinstance(self.message.content, str):
            return self.message.content
        return "".join(b.text or "" for b in self.message.content if b.type == "text")
