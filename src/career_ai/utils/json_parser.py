"""Utility to extract JSON from LLM responses."""

from __future__ import annotations

import json
import re

_CONTROL_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

_PLUS_NUMBER = re.compile(r":\s*\+(\d)")


def extract_json(text: str) -> dict:
    """Extract a JSON object from an LLM response.

    Tries in order:
    1. Strip fenced code block markers
    2. Direct json.loads
    3. Repair raw control characters inside strings (and `+5` numbers), parse
    4. Take first '{' to last '}' and repeat 2-3 on that slice

    Raises ValueError if no JSON object can be recovered.
    """
    cleaned = _strip_code_fences(text or "")

    result = _parse_or_repair(cleaned)
    if result is None:
        sliced = _extract_braces(cleaned)
        if sliced is not None:
            result = _parse_or_repair(sliced)

    if result is None:
        raise ValueError(f"Could not extract JSON from text: {cleaned[:200]}...")
    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
    return result


def _parse_or_repair(text: str) -> object | None:
    result = _try_parse(text)
    if result is None:
        result = _try_parse(_repair(text))
    return result


def _try_parse(text: str) -> object | None:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def _strip_code_fences(text: str) -> str:
    """Remove leading/trailing markdown code fence markers."""
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r"^```[a-zA-Z]*\s*", "", text)
        text = re.sub(r"\s*```\s*$", "", text)
    return text.strip()


def _extract_braces(text: str) -> str | None:
    """Slice from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        return text[start : end + 1]
    return None


def _repair(text: str) -> str:
    return _PLUS_NUMBER.sub(r": \1", escape_control_chars(text))


def escape_control_chars(text: str) -> str:
    """Escape raw control characters that appear inside JSON string literals.

    Models sometimes emit a literal line break instead of `\\n` within a
    string value. Characters outside string literals are left untouched.
    """
    out: list[str] = []
    in_string = False
    escaped = False

    for char in text:
        if not in_string:
            if char == '"':
                in_string = True
            out.append(char)
            continue

        if escaped:
            out.append(char)
            escaped = False
        elif char == "\\":
            out.append(char)
            escaped = True
        elif char == '"':
            out.append(char)
            in_string = False
        elif char in _CONTROL_ESCAPES:
            out.append(_CONTROL_ESCAPES[char])
        elif ord(char) < 0x20:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)

    return "".join(out)
