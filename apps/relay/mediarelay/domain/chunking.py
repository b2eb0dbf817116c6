"""Sentence-aware splitting of long text into bounded-size message segments."""

from __future__ import annotations

import re

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_text(text: str, max_length: int) -> list[str]:
    """Split ``text`` into segments no longer than ``max_length``.

    Text that already fits is returned unchanged as a single segment.
    Otherwise sentences are packed greedily (joined by a single space); a
    sentence that alone exceeds the limit is packed word by word, and a word
    that alone exceeds the limit becomes its own segment. Segments are
    stripped and never empty, and their whitespace-separated tokens, read in
    order, are exactly the tokens of ``text``. Whitespace-only text longer
    than the limit has no tokens and yields no segments.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return [text]

    segments: list[str] = []
    current = ""
    for sentence in _SENTENCE_BOUNDARY.split(text.strip()):
        sentence = sentence.strip()
        if not sentence:
            continue

        if len(sentence) > max_length:
            if current:
                segments.append(current)
                current = ""
            segments.extend(_pack_words(sentence, max_length))
            continue

        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) <= max_length:
            current = candidate
        else:
            segments.append(current)
            current = sentence

    if current:
        segments.append(current)
    return segments


def _pack_words(sentence: str, max_length: int) -> list[str]:
    packed: list[str] = []
    current = ""
    for word in sentence.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_length:
            current = candidate
            continue
        if current:
            packed.append(current)
        current = word
    if current:
        packed.append(current)
    return packed
