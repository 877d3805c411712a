"""Provider/runtime configuration for the LLM layer.

Architectural role:
    Centralizes model selection, generation defaults, and credential lookup for
    `taskrouter.llm.client`.

Determinism:
    Deterministic for a fixed process environment and key file. Values are
    resolved at import time (plus runtime key reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None`; `client` turns it into an
    `UpstreamFailure` per request instead of failing at startup.
"""

import os
from dotenv import load_dotenv

load_dotenv()

PROVIDER = "gemini"
MODEL_NAME = os.getenv("MODEL_NAME", "gemini-2.0-flash-exp")

GEMINI_KEY_FILE = "config/gemini.key"

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)

# Sampling defaults forwarded as `generationConfig`.
GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}

# Seconds; applied to every provider HTTP call.
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Raw file contents at `path`.

    Edge cases:
        - `None` path returns `None`.
        - Missing or empty file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
