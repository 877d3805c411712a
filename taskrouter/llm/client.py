"""Gemini transport client for completion requests.

Architectural role:
    Executes `generateContent` HTTP requests and extracts the reply text.

Model invocation flow:
    `service.generate_reply` -> `send_request(system, history, prompt)` ->
    payload mapping -> `requests.post` -> first candidate text.

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with the
    configured `LLM_TIMEOUT`.

Failure handling model:
    Failures raise `UpstreamFailure` carrying a sanitized, provider-labeled message
    so raw response bodies and keys never reach callers.
"""

import requests

from taskrouter.core.errors import UpstreamFailure
from taskrouter.llm.provider_config import (
    PROVIDER,
    MODEL_NAME,
    GEMINI_KEY_FILE,
    GEMINI_URL_TEMPLATE,
    GENERATION_CONFIG,
    LLM_TIMEOUT,
    load_key,
)


def _build_sanitized_http_error(provider_name: str, err: requests.exceptions.RequestException) -> str:
    """Build provider-labeled HTTP error text without exposing raw internals."""
    status_code = None
    if getattr(err, "response", None) is not None:
        status_code = getattr(err.response, "status_code", None)

    label = str(provider_name or "provider").upper()
    if status_code:
        return f"{label} HTTP ERROR ({status_code})"
    if isinstance(err, requests.exceptions.Timeout):
        return f"{label} REQUEST TIMED OUT"
    return f"{label} HTTP ERROR"


def build_contents(history: list[dict], prompt: str) -> list[dict]:
    """Map translated history plus the new prompt to Gemini `contents`.

    Gemini only accepts `user` and `model` inside `contents`, so `system` turns
    are sent as `user`. Empty turns are skipped.
    """
    contents = []

    for msg in history:
        content = msg.get("content", "")
        if not content:
            continue

        role = "model" if msg.get("role") == "model" else "user"
        contents.append({
            "role": role,
            "parts": [{"text": str(content)}],
        })

    contents.append({
        "role": "user",
        "parts": [{"text": prompt}],
    })
    return contents


def build_payload(system_instructions: str, history: list[dict], prompt: str) -> dict:
    payload = {
        "contents": build_contents(history, prompt),
        "generationConfig": dict(GENERATION_CONFIG),
    }

    if system_instructions and system_instructions.strip():
        payload["systemInstruction"] = {
            "parts": [{"text": system_instructions}],
        }

    return payload


def extract_text(data) -> str:
    """Return the concatenated text parts of the first candidate.

    Raises:
        UpstreamFailure: If the body has no candidate text.
    """
    try:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError):
        raise UpstreamFailure(f"{PROVIDER.upper()} RESPONSE MALFORMED") from None

    return text.strip()


def send_request(system_instructions: str, history: list[dict], prompt: str) -> str:
    """Send one completion request and return the reply text.

    Args:
        system_instructions: Rendered system prompt.
        history: Prior turns already mapped to provider roles.
        prompt: User prompt for this task.

    Returns:
        Stripped reply text.

    Failure scenarios:
        - Missing key -> `UpstreamFailure("GEMINI KEY FILE NOT FOUND")`.
        - HTTP/timeouts -> `UpstreamFailure` with sanitized status label.
        - Non-JSON or candidate-less body -> `UpstreamFailure("... MALFORMED")`.
    """
    api_key = load_key(GEMINI_KEY_FILE)
    if not api_key:
        raise UpstreamFailure(f"{PROVIDER.upper()} KEY FILE NOT FOUND")

    url = GEMINI_URL_TEMPLATE.format(model=MODEL_NAME)

    headers = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            url,
            headers=headers,
            json=build_payload(system_instructions, history, prompt),
            timeout=LLM_TIMEOUT,
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as err:
        raise UpstreamFailure(_build_sanitized_http_error(PROVIDER, err)) from err
    except ValueError as err:
        raise UpstreamFailure(f"{PROVIDER.upper()} RESPONSE MALFORMED") from err

    return extract_text(data)
