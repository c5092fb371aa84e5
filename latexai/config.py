"""
LatexAI — Shared Configuration
==============================
Centralised settings used across the assistant, compiler and server.
Every value can be overridden from the environment or a ``.env`` file.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# ──────────────────────────────────────────────
# MODEL SETTINGS
# ──────────────────────────────────────────────
DEFAULT_FALLBACK_MODEL = "groq/llama-3.3-70b-versatile"
LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", "60"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))
PROMPT_VERSION = os.getenv("PROMPT_VERSION", "v2")

SUGGESTION_MAX_TOKENS = int(os.getenv("SUGGESTION_MAX_TOKENS", "300"))
EDIT_MAX_TOKENS = int(os.getenv("EDIT_MAX_TOKENS", "500"))
QUERY_MAX_TOKENS = int(os.getenv("QUERY_MAX_TOKENS", "1000"))

# ──────────────────────────────────────────────
# AUTOCOMPLETE SETTINGS
# ──────────────────────────────────────────────
SUGGESTION_DEBOUNCE_MS = int(os.getenv("SUGGESTION_DEBOUNCE_MS", "400"))
SUGGESTION_CONTEXT_BEFORE = int(os.getenv("SUGGESTION_CONTEXT_BEFORE", "400"))
SUGGESTION_CONTEXT_AFTER = int(os.getenv("SUGGESTION_CONTEXT_AFTER", "250"))
DUPLICATE_LOOKAHEAD = 50

# ──────────────────────────────────────────────
# COMPILER SETTINGS
# ──────────────────────────────────────────────
LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
COMPILE_TIMEOUT = int(os.getenv("COMPILE_TIMEOUT", "60"))

# ──────────────────────────────────────────────
# SERVER SETTINGS
# ──────────────────────────────────────────────
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
CORS_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]


def get_api_key() -> str | None:
    """Return an explicit API key, if one is configured.

    When unset, litellm falls back to the vendor-specific variable
    (``GROQ_API_KEY``, ``OPENAI_API_KEY``, ...).
    """
    return os.getenv("LLM_API_KEY") or None


def get_model() -> str:
    """Return the model identifier from the environment."""
    model = os.getenv("DEFAULT_MODEL", DEFAULT_FALLBACK_MODEL)
    if not model:
        print("[Config] ⚠️ WARNING: DEFAULT_MODEL not set, using fallback")
        return DEFAULT_FALLBACK_MODEL
    return model
