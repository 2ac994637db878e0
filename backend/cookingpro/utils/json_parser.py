"""
JSON extraction utilities for LLM responses.
The model is asked to end every answer with a fenced JSON block; these helpers
find that block inside free-form text and separate it from the prose.
"""
import json
import re
from typing import Dict, Any, Optional

from cookingpro.core.logging import get_logger

logger = get_logger("utils.json_parser")

JSON_FENCE_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
ANY_FENCE_PATTERN = re.compile(r"```\s*([\s\S]*?)\s*```")
CONTROL_CHARS_PATTERN = re.compile(r"[\u0000-\u001F\u007F-\u009F]")


def extract_json_from_llm_response(response: str) -> Optional[Dict[str, Any]]:
    """
    Extract the embedded JSON object from an LLM response.

    Tries, in order:
    1. The inner text of a ```json fenced block
    2. The inner text of any fenced block
    3. The slice between the first '{' and the last '}' of that candidate
       (or of the whole response when nothing is fenced)
    4. A strict parse, then one retry with control characters stripped

    Spurious braces outside the real object can produce a bad slice; the
    result is then None like any other parse failure.

    Args:
        response: Raw LLM response string

    Returns:
        Parsed JSON object, or None when the response carries no usable
        object. Never raises.
    """
    if not response or not isinstance(response, str):
        return None

    candidate = _fenced_candidate(response)
    json_str = _slice_braces(candidate if candidate is not None else response)

    try:
        parsed = json.loads(json_str)
    except (ValueError, RecursionError) as e:
        logger.debug(f"Strict JSON parse failed: {e}, stripping control characters...")
        try:
            parsed = json.loads(CONTROL_CHARS_PATTERN.sub("", json_str))
        except (ValueError, RecursionError) as retry_error:
            logger.warning(f"JSON parse failed even after cleanup: {retry_error}")
            return None

    if not isinstance(parsed, dict):
        logger.debug(f"Extracted JSON is a {type(parsed).__name__}, not an object")
        return None
    return parsed


def strip_json_blocks(response: str) -> str:
    """Remove every ```json fenced block, leaving only the conversational prose."""
    if not response:
        return ""
    return JSON_FENCE_PATTERN.sub("", response).strip()


def _fenced_candidate(response: str) -> Optional[str]:
    """Inner text of the first ```json block, else of the first fenced block."""
    match = JSON_FENCE_PATTERN.search(response) or ANY_FENCE_PATTERN.search(response)
    if match and match.group(1):
        return match.group(1)
    return None


def _slice_braces(text: str) -> str:
    """Slice from the first '{' to the last '}' inclusive, when both exist in order."""
    json_start = text.find('{')
    json_end = text.rfind('}')
    if json_start != -1 and json_end > json_start:
        return text[json_start:json_end + 1]
    return text
