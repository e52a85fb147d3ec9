"""Validators that clamp model output to fixed sizes at parse time."""

from __future__ import annotations

from typing import Any, Callable


def clip(max_chars: int) -> Callable[[Any], Any]:
    """Truncate a string to max_chars; None passes through."""

    def _clip(value: Any) -> Any:
        if isinstance(value, str):
            return value[:max_chars]
        return value

    return _clip


def head(max_items: int) -> Callable[[Any], Any]:
    """Keep the first max_items of a list; non-lists are left for type validation."""

    def _head(value: Any) -> Any:
        if isinstance(value, list):
            return value[:max_items]
        return value

    return _head
