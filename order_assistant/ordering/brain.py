# order_assistant/ordering/brain.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import anthropic

from ..config import Settings
from ..schemas import ChatMessage
from .context import OrderContext
from .gateway import GenerationStatus, generate
from .matcher import MAX_SUGGESTIONS, find_matching_products
from .prompts import build_messages, build_system_instructions
from .recovery import GENERIC_APOLOGY, recover_result

logger = logging.getLogger(__name__)

UNAVAILABLE_APOLOGY = (
    "I'm temporarily unable to process your request. Our team has been notified of this issue. "
    "In the meantime, please try describing the specific products you need, or browse the products page."
)

_CONFIDENCES = {"high", "medium", "low"}


def _fallback_reply(count: int) -> str:
    return f"I found {count} products that might match your request."


def _coerce_quantity(raw: Any) -> int:
    try:
        qty = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return 1
    return max(1, qty)


def normalize_suggestions(raw: Any, products: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Bring generator suggestions in line with the local matcher's output.

    Entries that are not objects or carry no id are dropped, quantities are
    whole numbers >= 1, confidence is one of high/medium/low, category and
    customerNote come from the catalog when the generator left them out.
    """
    if not isinstance(raw, list):
        return []

    by_id = {str(p.get("id")): p for p in products}
    out: List[Dict[str, Any]] = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        pid = str(entry["id"])
        catalog = by_id.get(pid, {})
        confidence = str(entry.get("confidence") or "").strip().lower()
        out.append(
            {
                "id": pid,
                "item_number": str(entry.get("item_number") or catalog.get("item_number") or ""),
                "description": str(entry.get("description") or catalog.get("description") or ""),
                "quantity": _coerce_quantity(entry.get("quantity", 1)),
                "category": entry.get("category") or catalog.get("category"),
                "confidence": confidence if confidence in _CONFIDENCES else "medium",
                "customerNote": entry.get("customerNote") or catalog.get("customerNote") or "",
            }
        )
        if len(out) == MAX_SUGGESTIONS:
            break
    return out


def resolve_locally(message: str, context: OrderContext, request_id: str = "-") -> Dict[str, Any]:
    suggestions = find_matching_products(message, context.products)
    logger.info(
        "request_id=%s stage=fallback outcome=ok matches=%d",
        request_id,
        len(suggestions),
    )
    return {"aiResponse": _fallback_reply(len(suggestions)), "suggestedProducts": suggestions}


async def resolve_order_intent(
    message: str,
    chat_history: Sequence[ChatMessage],
    context: OrderContext,
    *,
    settings: Settings,
    client: anthropic.AsyncAnthropic,
    request_id: str = "-",
) -> Dict[str, Any]:
    """
    Message + history + catalog context -> {"aiResponse", "suggestedProducts"}.

    Without a generation credential the local matcher answers. A failed call
    yields an apology with no suggestions; unparseable output goes through
    the recovery tiers. Always returns a reply.
    """
    system = build_system_instructions(context.products, context.order_history)
    messages = build_messages(chat_history, message)

    outcome = await generate(system, messages, settings=settings, client=client, request_id=request_id)
    if outcome.status is GenerationStatus.NOT_CONFIGURED:
        return resolve_locally(message, context, request_id=request_id)
    if not outcome.ok:
        return {"aiResponse": UNAVAILABLE_APOLOGY, "suggestedProducts": []}

    recovered = recover_result(outcome.text, request_id=request_id)
    ai_response = str(recovered.get("aiResponse") or "").strip() or GENERIC_APOLOGY
    return {
        "aiResponse": ai_response,
        "suggestedProducts": normalize_suggestions(recovered.get("suggestedProducts"), context.products),
    }
