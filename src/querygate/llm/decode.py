"""Lenient JSON decoding for generative backend output.

Some backends wrap their JSON in markdown fences or emit literal control
characters inside string values. ``lenient_json_loads`` strips fences, tries a
strict parse and, failing that, escapes control characters found inside
quoted spans and parses exactly once more.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_QUOTED_SPAN = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)
_OTHER_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class LenientDecodeError(ValueError):
    """Raised when output is not JSON even after the repair pass."""


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def _escape_span(match: re.Match[str]) -> str:
    span = match.group(0)
    span = span.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return _OTHER_CONTROL.sub("", span)


def escape_control_characters(text: str) -> str:
    """Escape raw newlines/tabs and drop other control chars inside strings."""
    return _QUOTED_SPAN.sub(_escape_span, text)


def lenient_json_loads(text: str) -> Any:
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    repaired = escape_control_characters(cleaned)
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise LenientDecodeError(f"Response content is not valid JSON: {exc}") from exc
