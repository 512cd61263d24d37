"""chainmend chain integrity engine."""

from chainmend.chain.deletion import delete_message_with_chain_repair, find_target
from chainmend.chain.maintenance import (
    clean_split_head,
    is_continuation_summary,
    remove_messages,
    restore_message,
    split_transcript,
    strip_invalid_api_key_messages,
    strip_unwanted_progress,
)
from chainmend.chain.progress import is_unwanted_progress, validate_progress_messages
from chainmend.chain.repair import auto_repair_chain, repair_parent_chain
from chainmend.chain.tools import validate_tool_use_result
from chainmend.chain.validator import (
    first_addressable,
    is_addressable,
    scan_chain,
    validate_chain,
)

__all__ = [
    # Validation
    "validate_chain",
    "scan_chain",
    "is_addressable",
    "first_addressable",
    "validate_tool_use_result",
    "validate_progress_messages",
    "is_unwanted_progress",
    # Repair
    "auto_repair_chain",
    "repair_parent_chain",
    # Deletion
    "delete_message_with_chain_repair",
    "find_target",
    # Maintenance
    "restore_message",
    "remove_messages",
    "strip_unwanted_progress",
    "strip_invalid_api_key_messages",
    "split_transcript",
    "is_continuation_summary",
    "clean_split_head",
]
