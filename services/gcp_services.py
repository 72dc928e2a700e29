import logging
from typing import List

from google.cloud import vision

from config.auth import GCPAuth
from models.data_models import NormalizedImage, TextFragment, TranslationResult
from models.errors import NoTextFound, RecognitionFailed, TranslationFailed
from services.engines import OCREngine, TranslationEngine
from utils.geometry_utils import pixel_polygon_to_box
from utils.image_utils import encode_png

logger = logging.getLogger(__name__)


class GCPServices(OCREngine, TranslationEngine):
    """Google Cloud Vision for OCR and Cloud Translation (v2) for batches."""

    def __init__(self, auth=None):
        self.auth = auth or GCPAuth()
        self.vision_client = None
        self.translate_client = None
        self.initialization_error = None

    def initialize(self):
        """Initialize GCP services - returns True/False"""
        success = self.auth.initialize_clients()

        if success:
            self.vision_client = self.auth.vision_client
            self.translate_client = self.auth.translate_client
            return True
        else:
            self.initialization_error = self.auth.initialization_error
            return False

    def recognize(self, image: NormalizedImage) -> List[TextFragment]:
        """Paragraph-level OCR, boxes converted to normalized bottom-left coordinates."""
        if not self.vision_client:
            raise RecognitionFailed(RuntimeError("Vision client not initialized"))

        try:
            response = self.vision_client.document_text_detection(
                image=vision.Image(content=encode_png(image.image)))
        except Exception as e:
            raise RecognitionFailed(e) from e
        if response.error.message:
            raise RecognitionFailed(RuntimeError(response.error.message))

        size = (image.width, image.height)
        fragments = []
        for page in response.full_text_annotation.pages:
            for block in page.blocks:
                for para in block.paragraphs:
                    words = []
                    for word in para.words:
                        symbols = "".join([s.text for s in word.symbols])
                        words.append(symbols)
                    text = " ".join(words).strip()

                    if not text:
                        continue

                    vertices = [{"x": v.x, "y": v.y} for v in para.bounding_box.vertices]
                    fragments.append(TextFragment(text=text, bounding_box=pixel_polygon_to_box(vertices, size)))

        if not fragments:
            raise NoTextFound()
        logger.info(f"Vision recognized {len(fragments)} paragraph(s)")
        return fragments

    def translate_batch(self, texts: List[str], target_language: str) -> List[TranslationResult]:
        """Translate unique strings; results are keyed by the echoed ``input``."""
        if not self.translate_client:
            raise TranslationFailed(RuntimeError("Translate client not initialized"))

        if not texts:
            return []

        try:
            resp = self.translate_client.translate(texts, target_language=target_language, format_="text")
        except Exception as e:
            raise TranslationFailed(e) from e

        if isinstance(resp, dict):
            resp = [resp]

        out = []
        for it in resp:
            if not isinstance(it, dict) or "input" not in it:
                logger.warning(f"Skipping translation result without source: {it!r}")
                continue
            out.append(TranslationResult(
                source=it["input"],
                translated=it.get("translatedText", ""),
            ))
        return out
