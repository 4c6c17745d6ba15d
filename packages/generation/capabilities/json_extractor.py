"""Pull a JSON object out of a free-form model reply."""

import json
import re
from typing import Any, Dict

_FENCED = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


def extract_json_object(raw: str) -> Dict[str, Any]:
    """
    Parse the first JSON object in ``raw``.

    Tries a fenced ```json block first, then the text between the outermost
    braces.

    Raises:
        ValueError: no JSON object could be parsed
    """
    if not raw or not raw.strip():
        raise ValueError("Empty model response")

    candidates = [m.group(1) for m in _FENCED.finditer(raw)]

    start, end = raw.find("{"), raw.rfind("}")
    if start != -1 and end > start:
        candidates.append(raw[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    raise ValueError("No JSON object found in model response")
