"""Core orchestration package.

Architectural role:
    Exposes the request-orchestration layer that sits between the API/CLI
    entrypoints and the LLM adapter.

Composition:
    - `engine`: `PromptOrchestrator` and delegation classification.
    - `registry`: child-agent descriptor registry and default seed set.
    - `types`: request, context, descriptor, and result records.
    - `errors`: `ValidationError` and `UpstreamFailure`.

Determinism and side effects:
    Package import itself is deterministic and side-effect free.
"""
