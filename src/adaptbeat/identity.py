"""Canonical agent identities.

Every agent's heartbeat state is isolated under a canonical key. Keys are
embedded in file names, so they are restricted to a small safe alphabet.
"""

import re

DEFAULT_AGENT_ID = "default"
MAX_AGENT_ID_LENGTH = 64

_INVALID_CHARS = re.compile(r"[^a-z0-9_-]+")


def normalize_agent_id(raw: str | None) -> str:
    """Map a raw agent identifier to its canonical key.

    "  Main Agent " -> "main-agent"; empty or unusable input -> "default".
    """
    if not raw:
        return DEFAULT_AGENT_ID

    key = _INVALID_CHARS.sub("-", raw.strip().lower())
    key = key.strip("-")[:MAX_AGENT_ID_LENGTH].strip("-")
    return key or DEFAULT_AGENT_ID
