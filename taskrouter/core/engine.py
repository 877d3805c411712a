"""Core request orchestration: prompting, completion, and delegation labeling.

Architectural role:
    Turns one `TaskRequest` into an `OrchestrationResult`. API and CLI adapters
    own a `PromptOrchestrator` instance and call `handle` per request.

Control-flow model:
    1. Render the system prompt from the current registry listing.
    2. Render the user prompt from task kind, parameters, and context metadata.
    3. Translate prior conversation turns to provider roles.
    4. Await the completion collaborator once.
    5. Classify the reply for delegation and assemble the result.

Delegation behavior:
    Matching is literal substring search over lower-cased text. A descriptor
    matches when any of its tags occurs in the task kind or the reply, or when its
    lower-cased name occurs in the reply. The first matching descriptor in
    registry order wins. Common-word tags over-match; this is known and kept.

Error handling strategy:
    Every failure of the completion step is logged and converted into a failed
    result. `handle` never raises.

Determinism:
    Prompt assembly and classification are deterministic for a fixed registry,
    request, and reply. Only the remote model output varies.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from taskrouter.core.errors import UpstreamFailure
from taskrouter.core.registry import Registry, default_registry
from taskrouter.core.types import (
    CapabilityDescriptor,
    DelegationDecision,
    OrchestrationResult,
    TaskRequest,
)
from taskrouter.prompting.prompt_builder import (
    build_system_prompt,
    build_user_prompt,
    translate_history,
)


logger = logging.getLogger(__name__)

ORCHESTRATOR_ID = "MasterAgent"
UNKNOWN_ERROR = "Unknown error occurred"

CompletionFn = Callable[[str, list[dict], str], Awaitable[str]]


def classify_delegation(
    descriptors: Iterable[CapabilityDescriptor],
    reply: str,
    kind: str,
) -> DelegationDecision:
    """Decide whether a reply/task pair is delegated to a registered descriptor.

    Args:
        descriptors: Candidates in registry listing order.
        reply: Raw model reply text.
        kind: Task type label from the request.

    Returns:
        Decision naming the first matching descriptor, or a non-delegating
        decision when nothing matches.
    """
    lower_reply = reply.lower()
    lower_kind = kind.lower()

    for descriptor in descriptors:
        has_capability = any(
            tag in lower_kind or tag in lower_reply
            for tag in descriptor.capabilities
        )

        if has_capability or descriptor.name.lower() in lower_reply:
            return DelegationDecision(
                should_delegate=True,
                target=descriptor.name,
                reason=f"Task matches {descriptor.name} capabilities",
            )

    return DelegationDecision()


def _error_text(err: BaseException) -> str:
    return str(err).strip() or UNKNOWN_ERROR


class PromptOrchestrator:
    """Builds prompts, calls the model once, and labels the reply for delegation."""

    def __init__(self, complete: CompletionFn, registry: Registry | None = None):
        self.complete = complete
        self.registry = registry if registry is not None else default_registry()

    def descriptors(self) -> list[CapabilityDescriptor]:
        return self.registry.list()

    def register(self, descriptor: CapabilityDescriptor) -> None:
        self.registry.register(descriptor)

    async def handle(self, request: TaskRequest) -> OrchestrationResult:
        """Process one task request end to end.

        Args:
            request: Validated task request.

        Returns:
            Successful result (delegated or direct reply) or a failed result with
            a human-readable `error`.

        Edge cases:
            - Missing context means no history and no metadata block.
            - Parameters or metadata that cannot be serialized yield a failed result.
            - A non-string reply is treated as an upstream failure; an empty
              string is a normal reply.
            - External cancellation of the completion call yields a failed result.
        """
        # One snapshot serves both prompt rendering and classification.
        descriptors = self.registry.list()
        context = request.context

        try:
            system_prompt = build_system_prompt(descriptors)
            user_prompt = build_user_prompt(
                request.kind,
                request.parameters,
                context.metadata if context else None,
            )
            history = translate_history(context.history if context else [])

            reply = await self.complete(system_prompt, history, user_prompt)
            if not isinstance(reply, str):
                raise UpstreamFailure("Model returned a non-text reply")
        except asyncio.CancelledError:
            # External aborts end as a failed result; a surrounding
            # asyncio.timeout() sees a normal return, not TimeoutError.
            logger.warning("Completion call cancelled for task_type=%r", request.kind)
            return OrchestrationResult(succeeded=False, error="Request was cancelled")
        except Exception as err:
            logger.exception("Error processing request for task_type=%r", request.kind)
            return OrchestrationResult(succeeded=False, error=_error_text(err))

        decision = classify_delegation(descriptors, reply, request.kind)

        if decision.should_delegate:
            logger.info(
                "Delegation: task_type=%r -> %s",
                request.kind,
                decision.target,
            )
            return OrchestrationResult(
                succeeded=True,
                message=f"Task delegated to {decision.target}",
                data={
                    "delegatedTo": decision.target,
                    "reason": decision.reason,
                    "originalResponse": reply,
                },
            )

        logger.info("No delegation: task_type=%r handled by %s", request.kind, ORCHESTRATOR_ID)
        return OrchestrationResult(
            succeeded=True,
            message=reply,
            data={
                "taskType": request.kind,
                "processedBy": ORCHESTRATOR_ID,
            },
        )
