"""Utilities for safe structured logging fields."""

from __future__ import annotations

import hashlib
from typing import Any


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a deterministic non-reversible token for log correlation fields.

    Conversation ids identify real chat users, so log lines carry only the
    hashed token (``conv-<12 hex chars>``).
    """
    text = str(value if value is not None else "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def conversation_token(conversation_id: int | None) -> str:
    return safe_log_identifier(conversation_id, prefix="conv")
