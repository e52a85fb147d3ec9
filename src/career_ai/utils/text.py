"""Text helpers for building prompts from user-supplied content."""

from __future__ import annotations

import re

# Chat-template markers and override phrases stripped from user content
_INJECTION_PATTERNS = [
    re.compile(r"\[INST\]", re.IGNORECASE),
    re.compile(r"\[/INST\]", re.IGNORECASE),
    re.compile(r"<\|im_start\|>", re.IGNORECASE),
    re.compile(r"<\|im_end\|>", re.IGNORECASE),
    re.compile(r"ignore (all )?previous instructions", re.IGNORECASE),
    re.compile(r"disregard above", re.IGNORECASE),
]


def sanitize_prompt_input(text: str | None, max_chars: int) -> str:
    """Strip prompt-injection markers and cap length."""
    if not text:
        return ""
    for pattern in _INJECTION_PATTERNS:
        text = pattern.sub("", text)
    return text[:max_chars].strip()


def truncate(text: str, max_chars: int, suffix: str = "") -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + suffix
