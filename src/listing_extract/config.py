"""Shared configuration for the listing extraction pipeline.

Values come from environment variables, with ``.env`` at the project root
loaded first.  Everything here is read once at import time.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")


# ─── Model Endpoint ───────────────────────────────────────────────────────────

AZURE_OPENAI_ENDPOINT = os.getenv("AZURE_OPENAI_ENDPOINT", "").rstrip("/")
AZURE_OPENAI_API_KEY = os.getenv("AZURE_OPENAI_API_KEY", "")
VISION_DEPLOYMENT = os.getenv("AZURE_OPENAI_VISION_DEPLOYMENT", "gpt-4.1")


# ─── Retry Policy ─────────────────────────────────────────────────────────────

MAX_ATTEMPTS = int(os.getenv("EXTRACTION_MAX_ATTEMPTS", "3"))
INITIAL_DELAY_SECONDS = float(os.getenv("EXTRACTION_INITIAL_DELAY_SECONDS", "1.0"))


# ─── Parsing ──────────────────────────────────────────────────────────────────

# "json" or "pipe"; both are parsed by the same strategy chain
PROMPT_DIALECT = os.getenv("EXTRACTION_PROMPT_DIALECT", "pipe")

# Raw text longer than this is cut (with a trailing "...") in the fallback table
FALLBACK_MAX_CHARS = int(os.getenv("EXTRACTION_FALLBACK_MAX_CHARS", "1000"))

# Prompt characters kept in the human-readable request summary
REQUEST_SUMMARY_PROMPT_CHARS = 200


def check_config() -> dict:
    """Report whether the model credentials are configured.  Never raises."""
    missing = [
        name
        for name, value in (
            ("AZURE_OPENAI_ENDPOINT", AZURE_OPENAI_ENDPOINT),
            ("AZURE_OPENAI_API_KEY", AZURE_OPENAI_API_KEY),
        )
        if not value
    ]
    if missing:
        return {"configured": False, "message": f"Model credentials are not configured (missing {', '.join(missing)})"}
    return {"configured": True, "message": f"Model credentials are configured (deployment={VISION_DEPLOYMENT})"}
