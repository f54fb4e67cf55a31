# order_assistant/ordering/matcher.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from .nlp import QuantityPhrase, parse_quantity_phrase, query_words

MAX_SUGGESTIONS = 8

# Share of qualifying query words that must hit a product.
WORD_OVERLAP_RATIO = 0.4

_CONFIDENCE_RANK = {"high": 0, "medium": 1, "low": 2}


def _field(product: Dict[str, Any], key: str) -> str:
    return str(product.get(key) or "").lower()


def _is_candidate(
    product: Dict[str, Any],
    query: str,
    words: List[str],
    phrase: Optional[QuantityPhrase],
) -> bool:
    desc = _field(product, "description")
    item_number = _field(product, "item_number")
    category = _field(product, "category")
    note = _field(product, "customerNote")

    if phrase and any(phrase.item_fragment in f for f in (desc, item_number, category, note)):
        return True

    if query and any(query in f for f in (desc, item_number, category, note)):
        return True

    if not words:
        return False

    hits = sum(1 for w in words if w in desc or w in category or w in note)
    return hits >= math.ceil(len(words) * WORD_OVERLAP_RATIO)


def _confidence(
    product: Dict[str, Any],
    query: str,
    words: List[str],
    phrase: Optional[QuantityPhrase],
) -> str:
    desc = _field(product, "description")
    category = _field(product, "category")
    note = _field(product, "customerNote")

    # A customer's own note is the strongest signal.
    if note and any(w in note for w in query.split()):
        return "high"
    if phrase and any(phrase.item_fragment in f for f in (desc, category, note)):
        return "high"
    if query and any(query in f for f in (desc, category, note)):
        return "high"
    if any(w in desc or w in note for w in words):
        return "medium"
    return "low"


def find_matching_products(text: str, products: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Deterministic catalog search used when the generation service is not in play.

    ``products`` are catalog dicts (id, item_number, description, category,
    customerNote). Matches come back high -> medium -> low, catalog order kept
    within each tier, capped at MAX_SUGGESTIONS.
    """
    query = (text or "").strip().lower()
    words = query_words(query)
    phrase = parse_quantity_phrase(text or "")
    quantity = phrase.quantity if phrase else 1

    out: List[Dict[str, Any]] = []
    for product in products:
        if not _is_candidate(product, query, words, phrase):
            continue
        out.append(
            {
                "id": str(product.get("id", "")),
                "item_number": str(product.get("item_number") or ""),
                "description": str(product.get("description") or ""),
                "quantity": quantity,
                "category": product.get("category"),
                "confidence": _confidence(product, query, words, phrase),
                "customerNote": product.get("customerNote") or "",
            }
        )

    # sorted() is stable, so catalog order survives inside each tier.
    out = sorted(out, key=lambda s: _CONFIDENCE_RANK[s["confidence"]])
    return out[:MAX_SUGGESTIONS]
