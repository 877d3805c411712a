"""Async completion collaborator for the orchestration engine.

Architectural role:
    Provides the canonical `(system, history, prompt) -> reply` entrypoint that
    `PromptOrchestrator` awaits. It bridges the async core to the blocking
    `requests` transport in `taskrouter.llm.client`.

Concurrency:
    The transport call runs in a worker thread (`asyncio.to_thread`) so concurrent
    invocations on the same event loop are not blocked while waiting on the model.
"""

import asyncio

from taskrouter.llm.client import send_request


async def generate_reply(system_instructions: str, history: list[dict], prompt: str) -> str:
    """Invoke the configured model once and return its text reply.

    Failures surface as `UpstreamFailure` from the transport; callers decide how
    to report them.
    """
    return await asyncio.to_thread(send_request, system_instructions, history, prompt)
