"""Pull a JSON object out of free-form completion text"""

import copy
import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 70
FALLBACK_CONFIDENCE = 50

_FENCE = re.compile(r"```(?:json|html)?", re.IGNORECASE)


@dataclass(frozen=True)
class Extraction:
    success: bool
    data: Dict[str, Any]
    confidence: int


def strip_code_fences(text: str) -> str:
    """Remove markdown ``` / ```json / ```html fences"""
    return _FENCE.sub("", text or "").strip()


def _confidence_of(data: Dict[str, Any]) -> int:
    value = data.get("confidence")
    # NaN and Infinity decode as floats but have no confidence meaning
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return DEFAULT_CONFIDENCE
    return int(round(min(max(value, 0), 100)))


def _decode(text: str) -> Any:
    """Whole text first, else the first complete object starting at the first '{'"""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    start = text.find("{")
    if start == -1:
        raise ValueError("no JSON object in response")
    obj, _ = json.JSONDecoder().raw_decode(text, start)
    return obj


def extract_json(text: str, fallback: Dict[str, Any], *, fallback_confidence: int = FALLBACK_CONFIDENCE) -> Extraction:
    """
    Parse a model response into a dict.

    Returns the parsed object with success=True, or a fresh copy of `fallback`
    with success=False when no JSON object can be decoded. Never raises.
    """
    cleaned = strip_code_fences(text)
    try:
        data = _decode(cleaned)
    except (ValueError, RecursionError) as e:
        # json.JSONDecodeError is a ValueError; deep nesting raises RecursionError
        logger.warning(f"[Extractor] Falling back: {e} | response_preview: {cleaned[:120]!r}")
        return Extraction(success=False, data=copy.deepcopy(fallback), confidence=fallback_confidence)

    if not isinstance(data, dict):
        logger.warning(f"[Extractor] Falling back: expected an object, got {type(data).__name__}")
        return Extraction(success=False, data=copy.deepcopy(fallback), confidence=fallback_confidence)

    return Extraction(success=True, data=data, confidence=_confidence_of(data))
