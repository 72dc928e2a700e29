"""Separates translatable prose from prices, quantities and codes.

Menu and sign photos mix item names with numbers that a translation engine
tends to mangle ("$12.50" becoming "12,50 $"). Anything classified
non-linguistic is kept verbatim and re-attached to its row after translation.
"""

import re
from typing import List, Optional, Tuple

from models.data_models import ContentKind

CURRENCY_SYMBOLS = "$€£¥₹₩₱฿"
ISO_CURRENCY_CODES = (
    "MXN", "USD", "EUR", "GBP", "JPY", "KRW", "THB", "PHP", "CAD", "AUD", "COP", "PEN",
    "ARS", "BRL", "CLP", "VND", "IDR", "MYR", "SGD", "HKD", "TWD", "CNY", "INR", "NZD",
)

NUMERIC_PUNCTUATION = set(".,;:/-+()%#~*xX×" + CURRENCY_SYMBOLS)

_CUR = f"[{re.escape(CURRENCY_SYMBOLS)}]"

NON_LINGUISTIC_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(rf"^{_CUR}?\s*\d[\d,.\s]*\d?\s*{_CUR}?$", re.IGNORECASE),
     "number with optional currency symbol"),
    (re.compile(rf"^\d[\d,.\s]*\s*({'|'.join(ISO_CURRENCY_CODES)})$", re.IGNORECASE),
     "number followed by currency code"),
    (re.compile(r"^\d[\d,.\s]*\s*[円元₫]", re.IGNORECASE),
     "number followed by CJK currency glyph"),
    (re.compile(rf"^{_CUR}\s*\d[\d,.\s]*\s*[-–~]\s*{_CUR}?\s*\d[\d,.\s]*$", re.IGNORECASE),
     "currency range"),
    (re.compile(r"^\d[\d,.\s]*\s*[-–~/]\s*\d[\d,.\s]*$", re.IGNORECASE),
     "numeric range or ratio"),
]


def _only_numeric_characters(text: str) -> bool:
    return all(ch.isdigit() or ch.isspace() or ch in NUMERIC_PUNCTUATION for ch in text)


def matching_rule(text: str) -> Optional[str]:
    """Description of the first rule ``text`` matches, or None."""
    stripped = (text or "").strip()
    for pattern, description in NON_LINGUISTIC_RULES:
        if pattern.search(stripped):
            return description
    return None


def is_non_linguistic(text: str) -> bool:
    stripped = (text or "").strip()
    if not stripped:
        return True
    if _only_numeric_characters(stripped):
        return True
    return matching_rule(stripped) is not None


def classify(text: str) -> ContentKind:
    if is_non_linguistic(text):
        return ContentKind.NON_LINGUISTIC
    return ContentKind.TRANSLATABLE
