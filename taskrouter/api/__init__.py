"""taskrouter API adapter package.

Architectural role:
- Defines the external interaction boundary for HTTP and CLI interfaces.
- Performs transport-level validation and response shaping.
- Delegates prompting and delegation labeling to the core layer.
"""
