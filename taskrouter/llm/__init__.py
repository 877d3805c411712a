"""LLM access package.

Architectural role:
    Provides provider configuration, request-payload construction, and transport
    used by the orchestration engine to invoke the text-generation backend.

Module split:
    - `provider_config`: environment-driven model configuration and key lookup.
    - `service`: async completion entrypoint awaited by the engine.
    - `client`: Gemini HTTP transport and response parsing.
"""
