"""Request-routing layer in front of a hosted language model.

Subpackages:
    - `api`: HTTP and CLI adapters.
    - `core`: orchestrator, descriptor registry, data contracts.
    - `prompting`: prompt and history construction.
    - `llm`: provider configuration and transport.
"""

__version__ = "1.0.0"
