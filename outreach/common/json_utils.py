"""
JSON utilities for provider response parsing.

Chat-completion providers frequently wrap JSON in markdown fences, prepend
prose, or emit slightly malformed JSON (single quotes, trailing commas).
Parsing tries the strict decoder first and falls back to json-repair.
"""

import json
import re
from typing import Any, Dict

from json_repair import repair_json

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_llm_json(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object from a provider response.

    Args:
        text: Raw response text that may contain a JSON object

    Returns:
        Parsed dictionary

    Raises:
        ValueError: If no JSON object can be extracted or repaired

    Example:
        >>> parse_llm_json('```json\\n{"email": "Subject: Hi"}\\n```')
        {'email': 'Subject: Hi'}
    """
    if not text or not text.strip():
        raise ValueError("Empty input: no JSON content to parse")

    candidate = _extract_json_object(_strip_markdown_blocks(text.strip()))

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        parsed = repair_json(candidate, return_objects=True)

    return _coerce_to_dict(parsed, text)


def _coerce_to_dict(parsed: Any, original: str) -> Dict[str, Any]:
    if isinstance(parsed, dict):
        return parsed
    if isinstance(parsed, list):
        dicts = [item for item in parsed if isinstance(item, dict)]
        if dicts:
            # Providers sometimes emit [{...}] or several objects in a row
            merged: Dict[str, Any] = {}
            for item in dicts:
                merged.update(item)
            return merged
    raise ValueError(
        f"Could not parse a JSON object (got {type(parsed).__name__}). "
        f"Original text (first 200 chars): {original[:200]}"
    )


def _strip_markdown_blocks(text: str) -> str:
    """Remove ```json ... ``` or ``` ... ``` wrappers."""
    return _FENCE_RE.sub("", text).strip()


def _extract_json_object(text: str) -> str:
    """
    Extract the outermost {...} span from text with surrounding prose.

    Raises:
        ValueError: If no JSON object pattern is found
    """
    text = text.strip()
    if text.startswith("{"):
        return text

    match = _OBJECT_RE.search(text)
    if match:
        return match.group(0)

    raise ValueError(f"No JSON object found in text: {text[:200]}")
