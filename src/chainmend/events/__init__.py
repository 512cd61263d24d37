"""chainmend event bus."""

from chainmend.events.bus import ChainEvent, EventBus, Handler
from chainmend.events.payloads import (
    ChainRepairedPayload,
    MessageDeletedPayload,
    MessageRestoredPayload,
    MessagesStrippedPayload,
    TranscriptSplitPayload,
    TranscriptValidatedPayload,
)

__all__ = [
    "ChainEvent",
    "ChainRepairedPayload",
    "EventBus",
    "Handler",
    "MessageDeletedPayload",
    "MessageRestoredPayload",
    "MessagesStrippedPayload",
    "TranscriptSplitPayload",
    "TranscriptValidatedPayload",
]
