import logging
from statistics import median_high
from typing import List

from config.settings import ROW_THRESHOLD_FACTOR, ROW_THRESHOLD_FLOOR
from models.data_models import Row, TextFragment
from services.content_classifier import is_non_linguistic

logger = logging.getLogger(__name__)


def _vertical_order(fragment: TextFragment):
    box = fragment.bounding_box
    return (box.mid_y, box.mid_x, fragment.text, box.height, box.width)


def row_threshold(fragments: List[TextFragment], factor: float = ROW_THRESHOLD_FACTOR,
                  floor: float = ROW_THRESHOLD_FLOOR) -> float:
    """Maximum vertical-center distance from a row's anchor to stay in that row."""
    if not fragments:
        return floor
    median_height = median_high(f.bounding_box.height for f in fragments)
    return max(median_height * factor, floor)


def cluster_rows(fragments: List[TextFragment], factor: float = ROW_THRESHOLD_FACTOR,
                 floor: float = ROW_THRESHOLD_FLOOR) -> List[List[TextFragment]]:
    """Cluster fragments into visual lines, top to bottom, each left to right.

    A fragment joins the current row while its vertical center stays within
    the threshold of the row's first fragment (the anchor), never a running
    average, so a row cannot drift down a column of loosely spaced text.
    """
    if not fragments:
        return []

    ordered = sorted(fragments, key=_vertical_order)
    threshold = row_threshold(ordered, factor, floor)

    rows = []
    current = [ordered[0]]
    anchor = ordered[0].bounding_box.mid_y
    for fragment in ordered[1:]:
        if abs(fragment.bounding_box.mid_y - anchor) <= threshold:
            current.append(fragment)
        else:
            rows.append(current)
            current = [fragment]
            anchor = fragment.bounding_box.mid_y
    rows.append(current)

    return [sorted(row, key=lambda f: (f.bounding_box.mid_x, f.bounding_box.mid_y, f.text)) for row in rows]


def build_row(fragments: List[TextFragment]) -> Row:
    """Split a clustered line into its translatable text and its price part."""
    parts = [fragment.text.strip() for fragment in fragments]
    full_text = " ".join(p for p in parts if p)
    # Split values such as "12" + "USD" only read as a price when joined
    if full_text and is_non_linguistic(full_text):
        return Row(fragments=list(fragments), text=full_text, price=None, non_linguistic=True)

    text_parts = []
    price_parts = []
    for part in parts:
        if is_non_linguistic(part):
            if part:
                price_parts.append(part)
        else:
            text_parts.append(part)

    text = " ".join(text_parts)
    price = " ".join(price_parts) if price_parts else None

    # A row that is only a price keeps it as its text and is never translated
    if not text:
        return Row(fragments=list(fragments), text=price or "", price=None, non_linguistic=True)
    return Row(fragments=list(fragments), text=text, price=price)


def group_fragments(fragments: List[TextFragment], factor: float = ROW_THRESHOLD_FACTOR,
                    floor: float = ROW_THRESHOLD_FLOOR) -> List[Row]:
    rows = [build_row(line) for line in cluster_rows(fragments, factor, floor)]
    logger.info(f"Grouped {len(fragments)} fragment(s) into {len(rows)} row(s)")
    return rows
