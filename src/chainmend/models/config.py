"""Configuration models for chainmend operations."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from chainmend.models.message import MessageKind


class ChainConfig(BaseModel):
    """Configuration for chain validation and repair."""

    non_chain_kinds: frozenset[str] = Field(
        default=frozenset({MessageKind.SNAPSHOT.value, MessageKind.SUMMARY.value}),
        description=(
            "Record kinds that never take part in the parent chain, even when "
            "they carry a uuid."
        ),
    )

    @model_validator(mode="after")
    def validate_turn_kinds(self) -> ChainConfig:
        turns = {MessageKind.USER.value, MessageKind.ASSISTANT.value}
        if self.non_chain_kinds & turns:
            raise ValueError("user and assistant turns cannot be excluded from the chain")
        return self


class ProgressConfig(BaseModel):
    """Configuration for progress record checks."""

    unwanted_hook_events: frozenset[str] = Field(
        default=frozenset({"Stop"}),
        description="Hook events whose progress records should not be kept.",
    )

    unwanted_hook_names: frozenset[str] = Field(
        default=frozenset({"SessionStart:resume"}),
        description="Hook names whose progress records should not be kept.",
    )


class DeletionConfig(BaseModel):
    """Configuration for message deletion."""

    cascade_tool_results: bool = Field(
        default=True,
        description=(
            "Also delete user messages carrying results for a deleted "
            "assistant message's tool calls."
        ),
    )


class ChainmendConfig(BaseModel):
    """
    Top-level configuration for a :class:`~chainmend.transcript.Transcript`.

    All sub-configs have sensible defaults and can be overridden individually.

    Example::

        config = ChainmendConfig(
            progress=ProgressConfig(unwanted_hook_events=frozenset({"Stop", "SubagentStop"})),
            deletion=DeletionConfig(cascade_tool_results=False),
        )
    """

    chain: ChainConfig = Field(default_factory=ChainConfig)
    progress: ProgressConfig = Field(default_factory=ProgressConfig)
    deletion: DeletionConfig = Field(default_factory=DeletionConfig)

    @classmethod
    def default(cls) -> ChainmendConfig:
        """Return a config instance with all defaults."""
        return cls()
