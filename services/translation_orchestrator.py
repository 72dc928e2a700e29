import logging
from typing import Dict, List

from models.data_models import DisplayRow, Row, TranslatedOverlay, TranslationOutcome
from models.errors import TranslationFailed
from services.engines import TranslationEngine

logger = logging.getLogger(__name__)


def collect_requests(rows: List[Row]) -> List[str]:
    """Distinct non-empty translatable strings, in first-seen order."""
    seen = []
    for row in rows:
        text = row.translatable_text
        if text and text not in seen:
            seen.append(text)
    return seen


def _with_price(translated: str, row: Row) -> str:
    if row.price:
        return f"{translated}  {row.price}"
    return translated


def reassemble(rows: List[Row], lookup: Dict[str, str]) -> List[DisplayRow]:
    display_rows = []
    for row in rows:
        original = row.display_text
        key = row.translatable_text
        if not key:
            display_rows.append(DisplayRow(row=row, original=original, translated=original, skipped=True))
            continue
        translated = lookup.get(key)
        if translated is None:
            logger.warning(f"No translation returned for {key!r}, showing original")
            display_rows.append(DisplayRow(row=row, original=original, translated=original))
            continue
        display_rows.append(DisplayRow(row=row, original=original, translated=_with_price(translated, row)))
    return display_rows


def translate_all(rows: List[Row], engine: TranslationEngine, target_language: str) -> TranslationOutcome:
    """Translate every row with a single batch call, preserving row order."""
    requested = collect_requests(rows)
    if not requested:
        logger.info("Nothing to translate, passing all rows through")
        return TranslationOutcome(display_rows=reassemble(rows, {}), requested=[])

    logger.info(f"Translating {len(requested)} unique string(s) to {target_language}")
    try:
        results = engine.translate_batch(requested, target_language)
    except Exception as e:
        error = e if isinstance(e, TranslationFailed) else TranslationFailed(e)
        logger.error(f"❌ Batch translation failed: {error.cause}")
        display_rows = [DisplayRow(row=row, original=row.display_text, translated="") for row in rows]
        return TranslationOutcome(display_rows=display_rows, requested=requested, error=error)

    wanted = set(requested)
    lookup = {}
    for result in results:
        if result.source not in wanted:
            logger.debug(f"Ignoring translation for unrequested source {result.source!r}")
            continue
        lookup.setdefault(result.source, result.translated)

    return TranslationOutcome(display_rows=reassemble(rows, lookup), requested=requested)


def build_overlays(display_rows: List[DisplayRow]) -> List[TranslatedOverlay]:
    """One label per row, positioned over the row's combined bounding box."""
    overlays = []
    for display_row in display_rows:
        if not display_row.row.fragments:
            continue
        overlays.append(TranslatedOverlay(
            translated=display_row.translated or display_row.original,
            bounding_box=display_row.row.bounding_box,
        ))
    return overlays
