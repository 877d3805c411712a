"""Prompt assembly helpers used by the orchestration engine.

This module only builds prompt strings and provider-ready history from already
validated inputs. Registry access, model invocation, and delegation matching
happen in `taskrouter.core.engine`.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of prompt components.
    - No hidden side effects (no I/O, no global state mutation).

Prompt safety model:
    - Task parameters and context metadata are interpolated as JSON text.
    - Safety is instruction-led; upstream layers own trust boundaries.
"""

import json
from typing import Any, Iterable

from taskrouter.core.types import CapabilityDescriptor, ConversationTurn


# =========================================================
# SYSTEM PROMPT
# =========================================================
# Prompt component order:
#   1) `SYSTEM_PREAMBLE`
#   2) One line per descriptor, in registry listing order
#   3) `DELEGATION_INSTRUCTION`

SYSTEM_PREAMBLE = (
    "You are a Master Agent orchestrating multiple specialized AI agents. Your role is to:\n"
    "1. Understand and analyze incoming requests\n"
    "2. Determine if a task should be delegated to a child agent\n"
    "3. Coordinate responses and ensure quality\n\n"
    "Available child agents:\n"
)

DELEGATION_INSTRUCTION = (
    "When you identify a task that matches a child agent's capabilities, "
    "indicate in your response that the task should be delegated."
)


def format_descriptor_line(descriptor: CapabilityDescriptor) -> str:
    return (
        f"- {descriptor.name}: {descriptor.description} "
        f"(Capabilities: {', '.join(descriptor.capabilities)})"
    )


def build_system_prompt(descriptors: Iterable[CapabilityDescriptor]) -> str:
    """Render the orchestrator system prompt for the current registry state.

    Args:
        descriptors: Registered descriptors in listing order.

    Returns:
        Preamble, descriptor lines, and the closing delegation instruction.

    Edge cases:
        An empty registry yields an empty agent list between preamble and
        instruction.
    """
    agent_lines = "\n".join(format_descriptor_line(d) for d in descriptors)

    return SYSTEM_PREAMBLE + agent_lines + "\n\n" + DELEGATION_INSTRUCTION


# =========================================================
# USER PROMPT
# =========================================================
# Prompt component order:
#   1) Task type
#   2) Parameters as indented JSON (caller key order)
#   3) Optional context metadata as indented JSON

def dump_payload(value: Any) -> str:
    """Serialize a payload as readable JSON without reordering keys.

    Values JSON cannot encode natively (datetimes, sets, ...) fall back to `str`.
    """
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def build_user_prompt(kind: str, parameters: dict, metadata: dict | None = None) -> str:
    """Build the outbound user prompt for one task.

    Args:
        kind: Task type label supplied by the caller.
        parameters: Task parameters; key order is kept exactly.
        metadata: Optional context metadata; omitted when empty or `None`.

    Returns:
        Newline-terminated prompt text.
    """
    prompt = f"Task Type: {kind}\n"
    prompt += f"Parameters: {dump_payload(parameters)}\n"

    if metadata:
        prompt += f"Additional Context: {dump_payload(metadata)}\n"

    return prompt


# =========================================================
# HISTORY TRANSLATION
# =========================================================
# Provider role vocabulary: the model speaks as "model"; user and system turns
# keep their labels. Unknown roles are sent as "user" so no turn is dropped.

PROVIDER_ROLES = {
    "assistant": "model",
    "user": "user",
    "system": "system",
}

FALLBACK_ROLE = "user"


def translate_role(role: str) -> str:
    return PROVIDER_ROLES.get(role, FALLBACK_ROLE)


def translate_history(turns: Iterable[ConversationTurn]) -> list[dict[str, str]]:
    """Map prior turns to `{role, content}` dicts in the provider vocabulary.

    Order is preserved and every turn is emitted, including empty ones; the
    transport decides what to send on the wire.
    """
    return [
        {"role": translate_role(turn.role), "content": turn.content}
        for turn in turns
    ]
