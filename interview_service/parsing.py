# interview_service/parsing.py
import json
import re
from typing import Any, Optional

from .errors import ParseError

JSON_FENCE_RE = re.compile(r"```json", re.IGNORECASE)
FENCE = "```"

_decoder = json.JSONDecoder()
_OPENERS = {dict: "{", list: "["}


def extract_fenced_payload(body: str) -> str:
    """
    Return the text between the first ```json fence and the next closing
    fence, else between the first pair of generic fences, else ``body``.
    Anything after the first closing fence is ignored.
    """
    match = JSON_FENCE_RE.search(body)
    if match:
        return body[match.end():].split(FENCE, 1)[0]
    if FENCE in body:
        return body.split(FENCE)[1]
    return body


def _scan_for_json(text: str, openers: str = "{[") -> Any:
    # First value starting with one of `openers` that decodes cleanly
    for i, ch in enumerate(text):
        if ch not in openers:
            continue
        try:
            value, _ = _decoder.raw_decode(text, i)
            return value
        except json.JSONDecodeError:
            continue
    raise ParseError("LLM response did not contain valid JSON")


def parse_llm_json(raw: str, expect: Optional[type] = None) -> Any:
    """
    Parse the single JSON payload out of an accumulated LLM response.

    ``expect`` (dict or list) narrows the prose scan to objects or arrays so an
    incidental bracketed token in the text is not picked up instead.
    """
    body = (raw or "").strip()
    if not body:
        raise ParseError("LLM returned an empty response")

    payload = extract_fenced_payload(body).strip()
    if not payload:
        raise ParseError("LLM response contained an empty code block")

    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        return _scan_for_json(payload, _OPENERS.get(expect, "{["))
