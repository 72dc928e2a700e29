import re
import logging
from typing import Optional
from urllib.parse import urlparse

from config.settings import get_target_language
from models.data_models import PipelineResult
from models.errors import NoReferenceReceived, NoTextFound, PipelineError, RecognitionFailed
from services.engines import OCREngine, TranslationEngine
from services.image_loader import ImageLoader
from services.row_grouping import group_fragments
from services.translation_orchestrator import translate_all

logger = logging.getLogger(__name__)

URL_IN_TEXT_RE = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
TRAILING_PUNCTUATION = ".,;:!?)]}>"


def is_http_url(url: str) -> bool:
    """True for an http(s) URL that parses and names a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_reference(shared: Optional[str]) -> str:
    """Pull the http(s) URL out of whatever the share sheet handed over.

    Maps shares either a bare link or a sentence such as
    "Look at this place https://maps.app.goo.gl/abc".
    """
    text = (shared or "").strip()
    if not text:
        raise NoReferenceReceived()
    if not any(c.isspace() for c in text) and is_http_url(text):
        return text
    for m in URL_IN_TEXT_RE.finditer(text):
        url = m.group(0).rstrip(TRAILING_PUNCTUATION)
        if is_http_url(url):
            return url
    raise NoReferenceReceived()


class PhotoTranslator:
    """Runs one shared reference through loading, OCR, grouping and translation."""

    def __init__(self, ocr_engine: OCREngine, translation_engine: TranslationEngine,
                 loader: Optional[ImageLoader] = None, target_language: Optional[str] = None):
        self.ocr_engine = ocr_engine
        self.translation_engine = translation_engine
        self.loader = loader or ImageLoader()
        self.target_language = target_language

    def recognize(self, image):
        try:
            fragments = self.ocr_engine.recognize(image)
        except PipelineError:
            raise
        except Exception as e:
            raise RecognitionFailed(e) from e
        if not fragments:
            raise NoTextFound()
        return fragments

    def run(self, shared: Optional[str]) -> PipelineResult:
        reference = extract_reference(shared)
        target_language = self.target_language or get_target_language()
        debug = [f"Shared URL: {reference}"]

        resolved = self.loader.resolve_target(reference)
        debug.append(f"Resolved URL: {resolved}")
        image = self.loader.load_resolved(resolved)
        debug.append(f"Image URL: {image.source_url} ({image.width}x{image.height}, scale {image.scale:.3f})")

        fragments = self.recognize(image)
        rows = group_fragments(fragments)
        debug.append(f"Recognized {len(fragments)} fragment(s) in {len(rows)} row(s)")

        outcome = translate_all(rows, self.translation_engine, target_language)
        debug.append(f"Requested {len(outcome.requested)} translation(s) to {target_language}")
        if outcome.error:
            debug.append(f"Error detail: {outcome.error}")

        return PipelineResult(
            reference=reference,
            resolved_url=resolved,
            image=image,
            fragments=fragments,
            rows=rows,
            outcome=outcome,
            target_language=target_language,
            debug=debug,
        )
