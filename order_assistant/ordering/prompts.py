# order_assistant/ordering/prompts.py
from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from ..schemas import ChatMessage, ChatRole

HISTORY_WINDOW = 10

PREAMBLE = (
    "You are an ordering assistant for a wholesale supplier, helping business customers "
    "order paper goods and restaurant supplies from their own product catalog."
)

RULES = """Special Instructions:
- Read the customerNote field of every product. These are notes the customer wrote to remember their preferences for that product (packaging, usage, delivery, substitutions).
- When the customer is vague ("the usual napkins setup", "my special cups"), check whether a product note explains what they mean.
- If the customer asks for "the same as last time" or "my usual order", build suggestedProducts from the most recent order in their order history.
- If they reorder with changes ("same as last time but double the napkins"), adjust the quantities accordingly.
- If the customer names a category rather than an item, suggest the most relevant products from that category.
- Respect quantity expressions such as "5 boxes of napkins" or "napkins x5".
- If the customer asks for something that is not in the catalog, say you could not find it and suggest alternatives when there are sensible ones.
- If the customer asks about their order history, answer completely from the history above in the same reply.

CRITICAL: Always give the complete answer in a single reply. Never reply with only an acknowledgement such as "Let me check" or "One moment please"."""

RESPONSE_CONTRACT = """Always respond with valid JSON in exactly this format:
{
  "aiResponse": "Your complete and helpful reply to the customer",
  "suggestedProducts": [
    {
      "id": "product-id-from-catalog",
      "item_number": "product-item-number",
      "description": "product description",
      "quantity": 1,
      "confidence": "high"
    }
  ]
}

IMPORTANT:
- The JSON object must have exactly two keys: "aiResponse" and "suggestedProducts".
- Do not write any text before or after the JSON, and do not wrap it in markdown code fences.
- "confidence" is one of "high", "medium" or "low"; "quantity" is a whole number of at least 1.
- Only suggest products that appear in the PRODUCT CATALOG, using their exact id and item_number.
- If no products are relevant, use an empty array for suggestedProducts.
- Escape any double quotes inside the aiResponse string."""


def build_system_instructions(
    products: Sequence[Dict[str, Any]],
    order_history: Sequence[Dict[str, Any]],
) -> str:
    """System prompt: catalog, optional order history, rules and the JSON reply contract."""
    catalog = [
        {
            "id": p.get("id"),
            "item_number": p.get("item_number"),
            "description": p.get("description"),
            "category": p.get("category"),
            "customerNote": p.get("customerNote") or "",
        }
        for p in products
    ]

    sections = [PREAMBLE, "PRODUCT CATALOG:\n" + json.dumps(catalog, indent=2, ensure_ascii=False)]
    if order_history:
        sections.append(
            "CUSTOMER'S RECENT ORDER HISTORY:\n" + json.dumps(list(order_history), indent=2, ensure_ascii=False)
        )
    sections.append(RULES)
    sections.append(RESPONSE_CONTRACT)
    return "\n\n".join(sections)


def build_messages(chat_history: Sequence[ChatMessage], message: str) -> List[Dict[str, str]]:
    # Blank turns are rejected by the Messages API, so they never reach it.
    recent = [m for m in chat_history if (m.content or "").strip()][-HISTORY_WINDOW:]
    out = [{"role": ChatRole(m.role).value, "content": m.content} for m in recent]
    out.append({"role": ChatRole.USER.value, "content": message})
    return out
