"""Pytest configuration and shared helpers for all tests.

Ensures the project root is importable and provides a stubbed completion
collaborator for orchestrator tests.
"""

import sys
from pathlib import Path

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


class StubCompletion:
    """Async completion stand-in that records calls and returns a fixed reply."""

    def __init__(self, reply="ok", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def __call__(self, system_instructions, history, prompt):
        self.calls.append((system_instructions, history, prompt))
        if self.error is not None:
            raise self.error
        return self.reply
