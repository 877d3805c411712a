"""Error taxonomy shared by the orchestration core and its adapters.

Failure handling model:
    - `ValidationError` is raised for malformed caller input before any model call.
      Adapters map it to HTTP 400 / CLI messages.
    - `UpstreamFailure` is raised by the LLM transport and is always caught at the
      `PromptOrchestrator.handle` boundary, where it becomes a failed result.
"""


class ValidationError(ValueError):
    """Caller-side input is missing or malformed."""


class UpstreamFailure(RuntimeError):
    """The completion provider failed, timed out, or returned an unusable reply."""
