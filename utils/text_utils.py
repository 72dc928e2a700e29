import logging
import textwrap
from typing import List

from PIL import Image, ImageDraw, ImageFont

from config.settings import (
    FONT_PATH,
    MIN_FONT_SIZE,
    OVERLAY_FILL,
    OVERLAY_FONT_RATIO,
    OVERLAY_TEXT_COLOR,
)
from models.data_models import NormalizedImage, TranslatedOverlay
from .geometry_utils import box_to_pixel_rect

logger = logging.getLogger(__name__)


class TextOverlay:
    def __init__(self, font_path: str = FONT_PATH, min_font_size: int = MIN_FONT_SIZE):
        self.font_path = font_path
        self.min_font_size = min_font_size
        self._warned_missing_font = False

    def load_font(self, size: int):
        try:
            return ImageFont.truetype(self.font_path, size)
        except OSError:
            if not self._warned_missing_font:
                logger.warning(f"Font {self.font_path} not found, using Pillow default")
                self._warned_missing_font = True
            return ImageFont.load_default(size=size)

    def pick_font_for_size(self, w_limit, h_limit, text):
        """Largest font, down to half the preferred size, that fits in two lines."""
        preferred = max(int(h_limit * OVERLAY_FONT_RATIO), self.min_font_size)
        smallest = max(preferred // 2, self.min_font_size)
        d = ImageDraw.Draw(Image.new("RGBA", (1, 1)))

        for fs in range(preferred, smallest - 1, -1):
            f = self.load_font(fs)
            wrapped = textwrap.wrap(
                text, width=max(1, int(w_limit / max(1, fs * 0.6))),
                break_on_hyphens=False, break_long_words=False
            )[:2]
            joined = "\n".join(wrapped)
            bbox = d.multiline_textbbox((0, 0), joined, font=f)
            if bbox[2] - bbox[0] <= w_limit:
                return f, joined

        f = self.load_font(smallest)
        return f, "\n".join(textwrap.wrap(text, width=max(1, int(w_limit / max(1, smallest * 0.6))))[:2])

    def render(self, image: NormalizedImage, overlays: List[TranslatedOverlay]) -> Image.Image:
        """Draw each translation over its original text position."""
        out = image.image.convert("RGBA")
        layer = Image.new("RGBA", out.size, (0, 0, 0, 0))
        d = ImageDraw.Draw(layer)

        for overlay in overlays:
            text = (overlay.translated or "").strip()
            if not text:
                continue
            x1, y1, x2, y2 = box_to_pixel_rect(overlay.bounding_box, out.size)
            box_w = max(3, x2 - x1)
            box_h = max(3, y2 - y1)

            font, wrapped = self.pick_font_for_size(box_w - 6, box_h, text)
            d.rounded_rectangle([x1, y1, x1 + box_w, y1 + box_h], radius=3, fill=OVERLAY_FILL)
            d.multiline_text((x1 + 3, y1 + 1), wrapped, font=font, fill=OVERLAY_TEXT_COLOR, spacing=1)

        return Image.alpha_composite(out, layer).convert("RGB")
