"""Data contracts for `taskrouter.core.engine`.

Architectural role:
    Defines the request, context, descriptor, and result records exchanged between
    the adapters (`taskrouter.api`) and the orchestration engine.

Wire mapping:
    Adapters speak the camelCase JSON vocabulary of the public service
    (`taskType`, `conversationHistory`, `sessionId`, `success`, ...). The
    `from_payload` / `to_dict` helpers are the only place that vocabulary is
    translated, so the core itself only sees Python field names.

Ordering:
    Parameter and metadata mappings keep the caller's key order. Nothing here
    sorts, aliases, or re-keys payload fields.

Determinism:
    All records are plain data with no hidden state; conversions are deterministic.
"""

from dataclasses import dataclass, field
from typing import Any

from taskrouter.core.errors import ValidationError


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Static description of a notional child agent.

    Attributes:
        name: Unique registry key.
        description: Human-readable summary rendered into the system prompt.
        capabilities: Lowercase tags used by delegation matching, in rendering order.
        seed_instructions: Persona instructions for the child agent.
    """

    name: str
    description: str
    capabilities: tuple[str, ...] = ()
    seed_instructions: str = ""

    def __post_init__(self):
        tags = []
        for tag in self.capabilities:
            tag = str(tag).lower()
            # An empty tag is a substring of every text.
            if tag and tag not in tags:
                tags.append(tag)
        object.__setattr__(self, "capabilities", tuple(tags))

    @classmethod
    def from_payload(cls, payload: dict) -> "CapabilityDescriptor":
        """Build a descriptor from its JSON form (`systemPrompt` carries the persona)."""
        if not isinstance(payload, dict):
            raise ValidationError("Agent descriptor must be an object.")

        capabilities = payload.get("capabilities") or []
        if isinstance(capabilities, str) or not isinstance(capabilities, (list, tuple)):
            raise ValidationError("Agent capabilities must be a list of strings.")

        return cls(
            name=str(payload.get("name") or ""),
            description=str(payload.get("description") or ""),
            capabilities=tuple(capabilities),
            seed_instructions=str(payload.get("systemPrompt") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "systemPrompt": self.seed_instructions,
        }


@dataclass
class ConversationTurn:
    """One prior message of a conversation.

    `role` is normally `user`, `assistant`, or `system`; other values are kept
    as-is and mapped during history translation.
    """

    role: str
    content: str
    timestamp: str | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "ConversationTurn":
        if not isinstance(payload, dict):
            raise ValidationError("Conversation turns must be objects.")

        metadata = payload.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("Turn metadata must be an object.")

        timestamp = payload.get("timestamp")
        return cls(
            role=str(payload.get("role") or "user"),
            content=str(payload.get("content") or ""),
            timestamp=str(timestamp) if timestamp is not None else None,
            metadata=metadata,
        )


@dataclass
class TaskContext:
    """Session-scoped context that travels with a task."""

    session_id: str
    history: list[ConversationTurn] = field(default_factory=list)
    user_id: str | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "TaskContext":
        if not isinstance(payload, dict):
            raise ValidationError("Request context must be an object.")

        history = payload.get("conversationHistory") or []
        if not isinstance(history, list):
            raise ValidationError("conversationHistory must be a list.")

        metadata = payload.get("metadata")
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("Context metadata must be an object.")

        user_id = payload.get("userId")
        return cls(
            session_id=str(payload.get("sessionId") or ""),
            history=[ConversationTurn.from_payload(turn) for turn in history],
            user_id=str(user_id) if user_id is not None else None,
            metadata=metadata,
        )


@dataclass
class TaskRequest:
    """Unit of work handed to `PromptOrchestrator.handle`."""

    kind: str
    parameters: dict[str, Any]
    context: TaskContext | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TaskRequest":
        """Parse the public JSON request body.

        Args:
            payload: Decoded request body.

        Returns:
            Parsed `TaskRequest` with parameter order preserved.

        Raises:
            ValidationError: When `taskType` or `parameters` is absent or of the
                wrong shape, or when the optional context is malformed.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object.")

        kind = payload.get("taskType")
        parameters = payload.get("parameters")

        # An empty parameters object is a valid request.
        if not kind or not isinstance(kind, str) or parameters is None:
            raise ValidationError("Invalid request. taskType and parameters are required.")
        if not isinstance(parameters, dict):
            raise ValidationError("parameters must be an object.")

        context = payload.get("context")
        return cls(
            kind=kind,
            parameters=parameters,
            context=TaskContext.from_payload(context) if context is not None else None,
        )


@dataclass
class DelegationDecision:
    """Outcome of keyword-based delegation matching."""

    should_delegate: bool = False
    target: str | None = None
    reason: str | None = None


@dataclass
class OrchestrationResult:
    """Terminal outcome of one `handle` call.

    `message` and `data` are only meaningful when `succeeded` is true; failed
    results carry `error` instead.
    """

    succeeded: bool
    message: str | None = None
    data: Any = None
    error: str | None = None

    def to_dict(self) -> dict:
        body = {"success": self.succeeded}
        if self.message is not None:
            body["message"] = self.message
        if self.data is not None:
            body["data"] = self.data
        if self.error is not None:
            body["error"] = self.error
        return body
