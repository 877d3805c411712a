"""
Interactive CLI adapter for taskrouter.

Architectural role:
- Provides a terminal interface over `PromptOrchestrator`.
- Keeps the session's conversation history in memory and sends it with each turn.

Request lifecycle (per user turn, CLI):
1. Read a single line from stdin.
2. Handle local control commands (`exit`/`quit`, `empty chat`/`clear chat`, `/agents`).
3. Send regular input as a `chat` task with the accumulated history.
4. Print the reply (and delegation target, if any) and extend the history.

Input validation behavior:
- Empty input is ignored and does not call the model.

Error handling strategy:
- EOF and keyboard interrupts end the session without traceback output.
- Failed results are printed as errors and are not added to the history.
"""

from dotenv import load_dotenv

load_dotenv()

import os
import sys
import time
import asyncio
import logging

from taskrouter.core.engine import PromptOrchestrator
from taskrouter.core.types import ConversationTurn, TaskContext, TaskRequest
from taskrouter.llm.service import generate_reply


# =========================================================
# UTF-8 SAFE STDOUT
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except (AttributeError, ValueError, OSError):
        pass


def print_agents(orchestrator: PromptOrchestrator) -> None:
    for descriptor in orchestrator.descriptors():
        print(f"- {descriptor.name}: {descriptor.description}")
        print(f"    capabilities: {', '.join(descriptor.capabilities)}")


async def run_turn(
    orchestrator: PromptOrchestrator,
    session_id: str,
    history: list[ConversationTurn],
    message: str,
):
    """Send one chat message and record it in `history` on success."""
    request = TaskRequest(
        kind="chat",
        parameters={"message": message},
        context=TaskContext(session_id=session_id, history=list(history)),
    )

    result = await orchestrator.handle(request)

    if result.succeeded:
        history.append(ConversationTurn(role="user", content=message))
        reply = result.data.get("originalResponse", result.message) if result.data else result.message
        history.append(ConversationTurn(role="assistant", content=reply or ""))

    return result


# =========================================================
# MAIN APPLICATION LOOP
# =========================================================

def main():
    """Run the interactive terminal session."""
    logging.basicConfig(
        level=logging.INFO if os.getenv("DEBUG") == "true" else logging.WARNING
    )

    orchestrator = PromptOrchestrator(complete=generate_reply)
    session_id = f"session_{int(time.time() * 1000)}"
    history: list[ConversationTurn] = []

    print("Master Agent started. (Type 'exit' to quit, '/agents' to list child agents)\n")
    print("-" * 60)

    while True:

        try:
            message = input("Task: ").strip()

        except EOFError:
            print("\nSession ended.")
            break

        except KeyboardInterrupt:
            print("\nInterrupted.")
            break

        if not message:
            continue

        if message.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        if message.lower() in ("empty chat", "clear chat"):
            history.clear()
            print("Chat cleared.")
            continue

        if message.lower() == "/agents":
            print_agents(orchestrator)
            continue

        result = asyncio.run(run_turn(orchestrator, session_id, history, message))

        print("\nResponse:\n")
        if not result.succeeded:
            print(f"Error: {result.error}")
        elif result.data and "delegatedTo" in result.data:
            print(result.message)
            print(f"Reason: {result.data['reason']}\n")
            print(result.data["originalResponse"])
        else:
            print(result.message)

        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
