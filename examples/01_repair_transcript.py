"""
Example 01: Repair a Transcript
===============================

Demonstrates the end-to-end maintenance flow on a Claude Code transcript:
- Loading JSONL records into a Transcript
- Validating the parent chain, tool pairing and progress records
- Repairing broken links and deleting a message
- Monitoring changes via the event bus

Run on the built-in sample:
    uv run python examples/01_repair_transcript.py

Run on a real session file (written to <file>.repaired.jsonl):
    uv run python examples/01_repair_transcript.py ~/.claude/projects/<project>/<session>.jsonl
"""

import json
import sys
from pathlib import Path

# Add project root to path when running directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

SAMPLE = [
    {"type": "file-history-snapshot", "messageId": "snap-1", "snapshot": {}},
    {"type": "user", "uuid": "u1", "parentUuid": None, "sessionId": "demo",
     "message": {"role": "user", "content": "List the files"}},
    {"type": "assistant", "uuid": "a1", "parentUuid": "u1", "sessionId": "demo",
     "message": {"role": "assistant", "content": [
         {"type": "tool_use", "id": "toolu_1", "name": "Bash", "input": {"command": "ls"}}]}},
    {"type": "user", "uuid": "u2", "parentUuid": "a1", "sessionId": "demo",
     "message": {"role": "user", "content": [
         {"type": "tool_result", "tool_use_id": "toolu_1", "content": "README.md"}]}},
    {"type": "progress", "uuid": "p1", "parentUuid": "u2", "sessionId": "demo",
     "data": {"type": "hook_progress", "hookEvent": "Stop", "hookName": "Stop"}},
    {"type": "assistant", "uuid": "a2", "parentUuid": None, "sessionId": "demo",
     "message": {"role": "assistant", "content": "Just README.md."}},
]


def main() -> None:
    from chainmend import ChainEvent, Transcript

    print("=== chainmend Repair Example ===\n")

    source = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    if source is not None:
        lines = source.read_text().splitlines()
        records = [json.loads(line) for line in lines if line.strip()]
    else:
        records = SAMPLE

    transcript = Transcript.from_records(records)
    print(f"Loaded {len(transcript)} records for session {transcript.session_id}")

    def on_event(event, payload):
        print(f"  [event] {event}: {payload}")

    transcript.event_bus.subscribe_all(on_event)

    report = transcript.validate()
    print(f"\nValid: {report.valid} ({report.error_count} errors)")
    for error in report.chain.errors:
        print(f"  line {error.line}: {error.type} on {error.id}")
    for error in report.progress.errors:
        print(f"  line {error.line}: {error.type} ({error.hook_event})")

    print("\nStripping unwanted progress and repairing the chain...")
    transcript.strip_progress()
    transcript.repair()

    if source is None:
        print("\nDeleting the tool call (its result goes with it)...")
        transcript.delete("a1")

    final = transcript.validate()
    print(f"\nValid after maintenance: {final.valid}")

    if source is not None:
        target = source.with_suffix(".repaired.jsonl")
        target.write_text("".join(json.dumps(r) + "\n" for r in transcript.to_records()))
        print(f"Wrote {target}")
    else:
        print(f"Final chain: {[m.id for m in transcript if m.id]}")

    # Event types published along the way
    print(f"\nEvents available: {[e.value for e in ChainEvent]}")


if __name__ == "__main__":
    main()
