from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

from PIL import Image


class DiscoveryMethod(str, Enum):
    EMBEDDED = "embedded"
    DIRECT = "direct"
    PAGE = "page"
    SCRAPED = "scraped"


class ContentKind(str, Enum):
    TRANSLATABLE = "translatable"
    NON_LINGUISTIC = "nonlinguistic"


@dataclass(frozen=True)
class BoundingBox:
    """Normalized rectangle in the unit square.

    Origin is the bottom-left corner and y grows upward, the convention OCR
    engines such as Apple Vision report. Use ``mid_y``/``top``/``bottom`` for
    top-down (screen) coordinates where 0 is the top edge.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2

    @property
    def mid_y(self) -> float:
        return 1.0 - (self.y + self.height / 2)

    @property
    def top(self) -> float:
        return 1.0 - (self.y + self.height)

    @property
    def bottom(self) -> float:
        return 1.0 - self.y

    @classmethod
    def union(cls, boxes: List["BoundingBox"]) -> "BoundingBox":
        x_min = min(b.x for b in boxes)
        y_min = min(b.y for b in boxes)
        x_max = max(b.x + b.width for b in boxes)
        y_max = max(b.y + b.height for b in boxes)
        return cls(x_min, y_min, x_max - x_min, y_max - y_min)


@dataclass(frozen=True)
class TextFragment:
    text: str
    bounding_box: BoundingBox


@dataclass(frozen=True)
class ImageCandidate:
    url: str
    source: DiscoveryMethod


@dataclass
class NormalizedImage:
    image: Image.Image
    source_url: str
    scale: float = 1.0

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass
class Row:
    """Fragments sharing one visual line, left to right.

    ``text`` is the translatable part and ``price`` the non-linguistic part.
    A row made only of non-linguistic fragments keeps them in ``text`` with
    ``non_linguistic`` set, so it displays verbatim and is never translated.
    """

    fragments: List[TextFragment]
    text: str
    price: Optional[str] = None
    non_linguistic: bool = False

    @property
    def display_text(self) -> str:
        """Combined display: "Item name  $price" or just "Item name"."""
        if self.price:
            return f"{self.text}  {self.price}"
        return self.text

    @property
    def translatable_text(self) -> str:
        if self.non_linguistic:
            return ""
        return self.text.strip()

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.union([f.bounding_box for f in self.fragments])


@dataclass(frozen=True)
class TranslationResult:
    source: str
    translated: str


@dataclass
class DisplayRow:
    row: Row
    original: str
    translated: str
    skipped: bool = False


@dataclass
class TranslatedOverlay:
    translated: str
    bounding_box: BoundingBox


@dataclass
class TranslationOutcome:
    display_rows: List[DisplayRow]
    requested: List[str] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass
class PipelineResult:
    reference: str
    resolved_url: str
    image: NormalizedImage
    fragments: List[TextFragment]
    rows: List[Row]
    outcome: TranslationOutcome
    target_language: str
    debug: List[str] = field(default_factory=list)
