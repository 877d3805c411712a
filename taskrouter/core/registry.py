"""In-memory registry of child-agent capability descriptors.

Architectural role:
    Holds the descriptors the orchestrator renders into its system prompt and
    matches replies against. One instance is created per orchestrator; there is
    no module-global registry.

Ordering:
    Listing follows insertion order. Re-registering an existing name replaces the
    descriptor in place and keeps its position.

Concurrency:
    Writes build a new mapping and swap it in under a lock (copy-on-write).
    Readers take the current mapping reference without locking and therefore
    always see a complete snapshot.
"""

import logging
import threading
from typing import Iterable, Iterator

from taskrouter.core.errors import ValidationError
from taskrouter.core.types import CapabilityDescriptor


logger = logging.getLogger(__name__)


DEFAULT_DESCRIPTORS = (
    CapabilityDescriptor(
        name="DataAnalysisAgent",
        description="Handles data analysis and processing tasks",
        capabilities=("data_analysis", "statistics", "visualization"),
        seed_instructions=(
            "You are a data analysis specialist. "
            "Focus on providing insights and statistical analysis."
        ),
    ),
    CapabilityDescriptor(
        name="ContentGenerationAgent",
        description="Handles content creation and text generation",
        capabilities=("content_creation", "summarization", "translation"),
        seed_instructions=(
            "You are a content creation specialist. "
            "Focus on generating high-quality text content."
        ),
    ),
    CapabilityDescriptor(
        name="CodeAssistantAgent",
        description="Handles coding and technical tasks",
        capabilities=("code_generation", "debugging", "optimization"),
        seed_instructions=(
            "You are a coding assistant. "
            "Focus on providing clean, efficient code solutions."
        ),
    ),
)


class Registry:
    """Name-keyed descriptor store with last-write-wins registration."""

    def __init__(self, descriptors: Iterable[CapabilityDescriptor] = ()):
        self._lock = threading.Lock()
        self._descriptors: dict[str, CapabilityDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: CapabilityDescriptor) -> None:
        """Insert or overwrite a descriptor by name.

        Raises:
            ValidationError: If the descriptor name is empty or blank.
        """
        if not descriptor.name or not descriptor.name.strip():
            raise ValidationError("Agent name must not be empty.")

        with self._lock:
            updated = dict(self._descriptors)
            replaced = descriptor.name in updated
            updated[descriptor.name] = descriptor
            self._descriptors = updated

        logger.info(
            "%s child agent %s (capabilities=%s)",
            "Replaced" if replaced else "Registered",
            descriptor.name,
            ", ".join(descriptor.capabilities),
        )

    def list(self) -> list[CapabilityDescriptor]:
        return list(self._descriptors.values())

    def lookup(self, name: str) -> CapabilityDescriptor | None:
        return self._descriptors.get(name)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __iter__(self) -> Iterator[CapabilityDescriptor]:
        return iter(self.list())


def default_registry() -> Registry:
    """Return a fresh registry seeded with the analysis, content, and code agents."""
    return Registry(DEFAULT_DESCRIPTORS)
