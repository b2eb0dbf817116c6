"""Failure diagnostics shaping for stored and displayed error messages."""

import re

ERROR_MESSAGE_LIMIT = 500
UNKNOWN_ERROR = "Unknown error"
_TRUNCATION_MARKER = "..."
_WHITESPACE_RUN = re.compile(r"\s+")


def truncate_error_message(message: str | None, limit: int = ERROR_MESSAGE_LIMIT) -> str:
    """Cut to ``limit`` characters (plus a ``...`` marker) and collapse whitespace runs.

    Collapsing happens after the cut, so the result never exceeds
    ``limit + 3`` characters and never contains a newline.
    """
    if message is None:
        return UNKNOWN_ERROR

    text = message if len(message) <= limit else message[:limit] + _TRUNCATION_MARKER
    return _WHITESPACE_RUN.sub(" ", text)
