"""
Text processing utilities for prompts.

Truncation helpers that keep feedback text readable when it is embedded in
refinement and summary prompts.
"""

import re


_SENTENCE_END = re.compile(r'[.!?](?:\s|$)')


def truncate_at_sentence_boundary(text: str, max_chars: int) -> str:
    """
    Truncate text at the nearest sentence boundary before max_chars.

    Looks for sentence-ending punctuation (. ! ?) followed by whitespace or end.
    Falls back to the last word boundary when it is reasonably close to the
    limit, and to a hard cut otherwise.

    Examples:
        >>> truncate_at_sentence_boundary("Hello. World. Test.", 15)
        'Hello. World.'
        >>> truncate_at_sentence_boundary("No period here", 10)
        'No period'
    """
    if len(text) <= max_chars:
        return text

    segment = text[:max_chars]
    matches = list(_SENTENCE_END.finditer(segment))

    if matches:
        cutoff = matches[-1].end()
        if segment[cutoff - 1:cutoff].isspace():
            cutoff -= 1
        return text[:cutoff]

    last_space = segment.rfind(' ')
    if last_space > max_chars * 0.8:
        return text[:last_space]

    return text[:max_chars]


def snippet(text: str, max_chars: int = 100) -> str:
    """
    First max_chars characters of text followed by an ellipsis.

    Summary prompts list critical items in this form regardless of length,
    so the ellipsis is always appended.

    >>> snippet("Deploys are failing", 7)
    'Deploys...'
    """
    return f"{text[:max_chars]}..."
