# order_assistant/ordering/nlp.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

# ----------------------------
# Regex helpers
# ----------------------------
_UNIT_NOUNS = (
    r"box(?:es)?|cases?|packs?|packages?|bundles?|items?|pieces?|sets?|units?|pairs?|"
    r"dozens?|rolls?|sheets?|bottles?|jars?|cans?|bags?|cartons?|containers?"
)

# "5 boxes of napkins", "12 rolls paper towels"
_UNIT_QTY_RE = re.compile(
    rf"(\d+)\s+(?:{_UNIT_NOUNS})\s+(?:of\s+)?(.+)",
    re.IGNORECASE,
)

# "napkins x 5", "napkins x5", "napkins × 5"
_TRAILING_QTY_RE = re.compile(r"(.+?)\s*[x×]\s*(\d+)\b", re.IGNORECASE)

# Leading order filler, stripped from "<item> x <n>" fragments
_LEADING_FILLER_RE = re.compile(
    r"^\s*(?:"
    r"hi|hello|hey|"
    r"pls|plz|please|"
    r"i\s*need|we\s*need|i\s*want|we\s*want|"
    r"i\s*would\s*like|i'?d\s*like|can\s*i\s*get|could\s*i\s*get|may\s*i\s*have|"
    r"can\s*i\s*have|send\s*me|give\s*me|get\s*me|order"
    r")\b[,\s]*",
    re.IGNORECASE,
)

_ARTICLES_RE = re.compile(r"^\s*(?:some|a|an|the)\b\s*", re.IGNORECASE)

_TRAILING_NOISE_RE = re.compile(r"(?:\s+(?:please|pls|plz))?[\s.,!?;:]*$", re.IGNORECASE)


@dataclass(frozen=True)
class QuantityPhrase:
    quantity: int
    item_fragment: str


def strip_filler_prefix(raw: str) -> str:
    """
    Removes greetings + ordering filler + leading articles.
    Example:
      "hey I need the napkins please" -> "napkins"
    """
    s = (raw or "").strip()

    while True:
        s2 = _LEADING_FILLER_RE.sub("", s).strip()
        if s2 == s:
            break
        s = s2

    s = _ARTICLES_RE.sub("", s).strip()
    return _clean_fragment(s)


def _clean_fragment(s: str) -> str:
    return _TRAILING_NOISE_RE.sub("", (s or "").strip()).strip().lower()


def parse_quantity_phrase(text: str) -> Optional[QuantityPhrase]:
    """
    Extract one explicit quantity from an order message.

    Two phrasings, first match wins:
      "5 boxes of napkins" -> QuantityPhrase(5, "napkins")
      "napkins x 5"        -> QuantityPhrase(5, "napkins")

    Returns None when neither applies; callers then default quantities to 1.
    Only the first phrase is read, so "3 bags of cups and 5 cases of lids"
    yields a single pair.
    """
    text = text or ""

    m = _UNIT_QTY_RE.search(text)
    if m:
        fragment = _clean_fragment(m.group(2))
        if fragment:
            return QuantityPhrase(quantity=max(1, int(m.group(1))), item_fragment=fragment)

    m = _TRAILING_QTY_RE.search(text)
    if m:
        fragment = strip_filler_prefix(m.group(1))
        if fragment:
            return QuantityPhrase(quantity=max(1, int(m.group(2))), item_fragment=fragment)

    return None


def query_words(text: str, min_length: int = 4) -> List[str]:
    """Lower-cased whitespace tokens at least ``min_length`` characters long."""
    return [w for w in (text or "").lower().split() if len(w) >= min_length]
