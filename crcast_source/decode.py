"""Tolerant decoding of CrCast payloads.

CrCast sometimes serves documents that are not strict JSON (trailing
commas, unquoted keys). Text bodies are therefore parsed as JSON5.
"""

from __future__ import annotations

from typing import Any, Dict, List

import json5

from crcast_source.errors import DeckFormatError


def decode_payload(raw: Any, what: str = "payload") -> Any:
    """Normalize a body that is either already structured or still text."""
    if isinstance(raw, (dict, list)):
        return raw
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeckFormatError(f"{what} is not valid UTF-8") from exc
    if isinstance(raw, str):
        try:
            return json5.loads(raw)
        except ValueError as exc:
            raise DeckFormatError(f"{what} could not be parsed: {exc}") from exc
    raise DeckFormatError(f"{what} has unexpected type {type(raw).__name__}")


def require_mapping(doc: Any, what: str = "payload") -> Dict[str, Any]:
    if not isinstance(doc, dict):
        raise DeckFormatError(f"{what} must be an object, got {type(doc).__name__}")
    return doc


def require_list(doc: Dict[str, Any], key: str, what: str = "payload") -> List[Any]:
    value = doc.get(key)
    if not isinstance(value, list):
        raise DeckFormatError(f"{what} is missing a '{key}' list")
    return value
