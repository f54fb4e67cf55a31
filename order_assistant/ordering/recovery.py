# order_assistant/ordering/recovery.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

GENERIC_APOLOGY = (
    "I'm having trouble understanding your request right now. Could you please try "
    "rephrasing it or being more specific about which products you're looking for?"
)

# Raw generator text shorter than this is shown as-is when nothing else parses.
RAW_TEXT_LIMIT = 300

# A JSON object with at most two levels of nested braces.
_BALANCED_OBJECT_RE = re.compile(r"\{(?:[^{}]|\{(?:[^{}]|\{[^{}]*\})*\})*\}")

_AI_RESPONSE_FIELD_RE = re.compile(r'"aiResponse"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)


@dataclass(frozen=True)
class ParseAttempt:
    tier: str
    ok: bool
    value: Optional[Dict[str, Any]] = None


def _as_result(tier: str, candidate: str) -> ParseAttempt:
    # Deeply nested text exhausts the decoder's recursion limit.
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError):
        return ParseAttempt(tier, False)
    if not isinstance(data, dict):
        return ParseAttempt(tier, False)

    ai_response = data.get("aiResponse")
    if not isinstance(ai_response, str) or not ai_response.strip():
        return ParseAttempt(tier, False)

    suggestions = data.get("suggestedProducts")
    if suggestions is None:
        data = {**data, "suggestedProducts": []}
    elif not isinstance(suggestions, list):
        return ParseAttempt(tier, False)
    return ParseAttempt(tier, True, data)


def parse_direct(text: str) -> ParseAttempt:
    return _as_result("direct", text.strip())


def parse_balanced_regex(text: str) -> ParseAttempt:
    for m in _BALANCED_OBJECT_RE.finditer(text):
        attempt = _as_result("balanced_regex", m.group(0))
        if attempt.ok:
            return attempt
    return ParseAttempt("balanced_regex", False)


def _scan_object(text: str, start: int) -> Optional[str]:
    """Slice from ``start`` (a '{') to its matching '}', skipping braces in string literals."""
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


def parse_brace_scan(text: str) -> ParseAttempt:
    start = text.find("{")
    if start == -1:
        return ParseAttempt("brace_scan", False)
    block = _scan_object(text, start)
    if block is None:
        return ParseAttempt("brace_scan", False)
    return _as_result("brace_scan", block)


def _unescape(raw: str) -> str:
    try:
        return json.loads(f'"{raw}"')
    except (ValueError, RecursionError):
        return raw.replace('\\"', '"')


def salvage_fields(text: str) -> Dict[str, Any]:
    """Last tier: keep whatever reply text can be found, never any suggestions."""
    m = _AI_RESPONSE_FIELD_RE.search(text)
    if m:
        ai_response = _unescape(m.group(1)).strip()
        if ai_response:
            return {"aiResponse": ai_response, "suggestedProducts": []}

    stripped = text.strip()
    if 0 < len(stripped) < RAW_TEXT_LIMIT:
        return {"aiResponse": stripped, "suggestedProducts": []}
    return {"aiResponse": GENERIC_APOLOGY, "suggestedProducts": []}


PARSE_TIERS: Tuple[Callable[[str], ParseAttempt], ...] = (
    parse_direct,
    parse_balanced_regex,
    parse_brace_scan,
)


def recover_result(text: str, request_id: str = "-") -> Dict[str, Any]:
    """
    Turn generator text into ``{"aiResponse", "suggestedProducts"}``.

    Tiers run in PARSE_TIERS order and the first success wins; when all of
    them fail the field salvage tier produces a reply with no suggestions.
    Never raises.
    """
    text = text or ""
    for attempt_fn in PARSE_TIERS:
        attempt = attempt_fn(text)
        if attempt.ok:
            logger.info("request_id=%s stage=recover outcome=ok tier=%s", request_id, attempt.tier)
            return attempt.value
        logger.debug("request_id=%s stage=recover outcome=miss tier=%s", request_id, attempt.tier)

    logger.warning("request_id=%s stage=recover outcome=salvage chars=%d", request_id, len(text))
    return salvage_fields(text)
