from __future__ import annotations

import json
import re
from typing import Any

import httpx

from expensi.core.categories import CATEGORIES, coerce_category
from expensi.core.config import settings
from expensi.core.logging import get_logger, log_event

logger = get_logger(__name__)

_CATEGORIZE_SYSTEM_PROMPT = (
    "You are a financial expense categorizer. Classify each expense into exactly one of "
    "these categories: " + ", ".join(CATEGORIES) + ".\n\n"
    "Respond with valid JSON only. Format:\n"
    "{\n"
    '  "categorizations": [\n'
    '    { "index": 0, "category": "food", "confidence": 0.95 }\n'
    "  ]\n"
    "}\n\n"
    "Rules:\n"
    '- "index" matches the position of the expense in the input list (0-based)\n'
    '- "confidence" is between 0 and 1\n'
    '- If unsure, use "other" with low confidence\n'
    "- Consider both the description text and the amount for context"
)

_PDF_SYSTEM_PROMPT = (
    "You extract expenses from the text of bank statements, credit card statements and "
    "receipts. Only include money going out (purchases, fees, bills); skip deposits, "
    "refunds, payments to the card and running balances.\n\n"
    "Respond with valid JSON only. Format:\n"
    "{\n"
    '  "expenses": [\n'
    '    { "description": "Merchant name", "amount": 12.5, "date": "YYYY-MM-DD", '
    '"category": "food", "notes": null }\n'
    "  ]\n"
    "}\n\n"
    "Rules:\n"
    "- amount is a positive number without currency symbols\n"
    "- date is YYYY-MM-DD, or null when the text has no date for the line\n"
    "- category is one of: " + ", ".join(CATEGORIES) + "\n"
    "- Do not invent transactions that are not in the text"
)


class AICapabilityError(RuntimeError):
    """The AI endpoint could not be reached or returned something unusable."""


def ai_available() -> bool:
    return bool(settings.ai_enabled and settings.openai_api_key)


def categorize_expenses(expenses: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Categorize one batch of ``{description, amount}`` items.

    Returns ``{index, category, confidence}`` entries; categories outside the
    closed set are coerced to ``other`` and confidence is clamped to [0, 1].
    """
    if not expenses:
        return []
    lines = []
    for idx, e in enumerate(expenses):
        amount = float(e.get("amount") or 0)
        lines.append(f'{idx}. "{e.get("description", "")}" - ${amount:.2f}')
    user = "Categorize these expenses:\n" + "\n".join(lines)

    obj = _chat_json(system=_CATEGORIZE_SYSTEM_PROMPT, user=user, purpose="categorize")
    raw = obj.get("categorizations")
    if not isinstance(raw, list):
        raise AICapabilityError("Categorization response did not include a list")

    out: list[dict[str, Any]] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            index = int(item.get("index"))
        except (TypeError, ValueError):
            continue
        out.append(
            {
                "index": index,
                "category": coerce_category(item.get("category")),
                "confidence": _confidence(item.get("confidence")),
            }
        )
    return out


def structure_pdf_text(text: str) -> list[dict[str, Any]]:
    """Ask the model to turn statement text into a list of raw expense objects."""
    cleaned = _truncate_text(text, max_chars=int(settings.pdf_max_chars or 0) or 8000)
    if not cleaned:
        return []
    user = "Extract the expenses from this document text:\n\n" + cleaned
    obj = _chat_json(system=_PDF_SYSTEM_PROMPT, user=user, purpose="pdf")
    raw = obj.get("expenses")
    if not isinstance(raw, list):
        raise AICapabilityError("AI response did not include an expenses list")
    limit = int(settings.pdf_ai_max_expenses or 0) or len(raw)
    return [item for item in raw[:limit] if isinstance(item, dict)]


def _chat_json(*, system: str, user: str, purpose: str) -> dict[str, Any]:
    if not ai_available():
        raise AICapabilityError("AI is not configured. Set OPENAI_API_KEY to enable it.")

    payload = {
        "model": settings.openai_model,
        "temperature": 0.1,
        "response_format": {"type": "json_object"},
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
    }
    headers = {
        "Authorization": f"Bearer {settings.openai_api_key}",
        "Content-Type": "application/json",
    }
    url = settings.openai_base_url.rstrip("/") + "/chat/completions"
    try:
        resp = httpx.post(
            url,
            headers=headers,
            json=payload,
            timeout=float(settings.ai_timeout_seconds or 30.0),
            follow_redirects=True,
        )
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        log_event(logger, "ai.request_failed", purpose=purpose, status_code=e.response.status_code)
        raise AICapabilityError(f"AI request failed with status {e.response.status_code}") from e
    except httpx.HTTPError as e:
        log_event(logger, "ai.request_failed", purpose=purpose, error=type(e).__name__)
        raise AICapabilityError(f"AI request failed: {e}") from e

    try:
        raw = resp.json()
        content = raw["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise AICapabilityError("No response from AI") from e

    obj = _parse_json_object(content if isinstance(content, str) else "")
    if not isinstance(obj, dict):
        raise AICapabilityError("AI response was not a JSON object")
    return obj


def _confidence(raw: object) -> float:
    try:
        conf = float(raw) if raw is not None else 0.5
    except (TypeError, ValueError):
        return 0.5
    if conf != conf:  # NaN
        return 0.5
    return min(1.0, max(0.0, conf))


def _truncate_text(text: str, *, max_chars: int) -> str:
    t = (text or "").replace("\u202f", " ").replace("\xa0", " ").strip()
    if not t:
        return ""
    if max_chars <= 0 or len(t) <= max_chars:
        return t
    return t[:max_chars]


def _parse_json_object(content: str) -> Any:
    c = (content or "").strip()
    if not c:
        return None
    try:
        return json.loads(c)
    except ValueError:
        pass

    # Fallback: extract the first {...} block.
    m = re.search(r"\{.*\}", c, re.S)
    if not m:
        return None
    try:
        return json.loads(m.group(0))
    except ValueError:
        return None
