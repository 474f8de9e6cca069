# app/utils.py
import json
import math
from typing import Any, Dict, Optional

# base64 is ~33% larger than binary; this keeps originals at ~10MB
MAX_IMAGE_BASE64_CHARS = 15 * 1024 * 1024


def is_valid_base64_image(data: str) -> bool:
    """Data URL of the form data:image/<type>;base64,<payload>."""
    return data.startswith("data:image/") and ";base64," in data


def _is_finite_number(value: Any) -> bool:
    # JSON true/false arrive as bool, which is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range; JSON clients read these as Infinity
        return False


def is_valid_latitude(lat: Any) -> bool:
    return _is_finite_number(lat) and -90 <= lat <= 90


def is_valid_longitude(lng: Any) -> bool:
    return _is_finite_number(lng) and -180 <= lng <= 180


def format_coordinate(value: float) -> str:
    """Coordinate rounded to 4 decimal places (~11 m), as embedded in the prompt."""
    return f"{value:.4f}"


def _balanced_object_span(text: str) -> Optional[str]:
    """
    Substring from the first '{' to its matching '}'.
    Braces inside JSON string literals are ignored. Returns None when there is
    no '{' or the braces never balance.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Pull the first JSON object out of free-form model output
    (prose, ```json fences, trailing commentary).
    Any failure, including a non-object payload, yields None.
    """
    if not isinstance(text, str) or not text:
        return None
    candidate = _balanced_object_span(text)
    if candidate is None:
        return None
    try:
        parsed = json.loads(candidate)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None
