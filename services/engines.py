from abc import ABC, abstractmethod
from typing import List

from models.data_models import NormalizedImage, TextFragment, TranslationResult


class OCREngine(ABC):
    @abstractmethod
    def recognize(self, image: NormalizedImage) -> List[TextFragment]:
        """Recognize text spans in ``image``.

        Bounding boxes are normalized to the unit square with the origin at the
        bottom-left corner and y increasing upward. Raises NoTextFound when
        nothing is recognized and RecognitionFailed for engine errors.
        """


class TranslationEngine(ABC):
    @abstractmethod
    def translate_batch(self, texts: List[str], target_language: str) -> List[TranslationResult]:
        """Translate unique strings in one call.

        Every result carries back the exact source string it was produced
        from; results may come back in any order and may omit entries.
        """
