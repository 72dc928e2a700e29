import logging
from typing import Optional

import requests

from config.settings import BODY_PREVIEW_CHARS, HEADERS, IMAGE_TIMEOUT, MAX_DIMENSION
from models.data_models import DiscoveryMethod, ImageCandidate, NormalizedImage
from models.errors import DownloadFailed, InvalidImageData, NetworkError, NoImageFound
from services.maps_scraper import (
    MapsScraper,
    extract_embedded_image_url,
    is_image_host,
)
from services.redirect_resolver import RedirectResolver, is_short_link
from utils.image_utils import decode_image, downscale_image

logger = logging.getLogger(__name__)


class ImageLoader:
    """Turns a shared Maps reference into one downscaled image.

    Strategies, in order: embedded image URL in the (resolved) Maps URL,
    direct image host, then the page itself (an image body, or HTML whose
    image candidates are tried one by one).
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 resolver: Optional[RedirectResolver] = None,
                 scraper: Optional[MapsScraper] = None,
                 max_dimension: int = MAX_DIMENSION, timeout: int = IMAGE_TIMEOUT):
        self.session = session or requests.Session()
        self.resolver = resolver or RedirectResolver(session=self.session)
        self.scraper = scraper or MapsScraper(session=self.session)
        self.max_dimension = max_dimension
        self.timeout = timeout

    def normalize(self, data: bytes, source_url: str) -> NormalizedImage:
        img = decode_image(data)
        img, scale = downscale_image(img, self.max_dimension)
        return NormalizedImage(image=img, source_url=source_url, scale=scale)

    def fetch(self, candidate: ImageCandidate) -> NormalizedImage:
        """Download and normalize one candidate."""
        try:
            r = self.session.get(candidate.url, headers=HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(e) from e
        if not 200 <= r.status_code < 400:
            raise DownloadFailed(r.status_code, candidate.url)
        logger.info(f"Downloaded {candidate.source.value} image {candidate.url}")
        return self.normalize(r.content, candidate.url)

    def resolve_target(self, reference: str) -> str:
        if is_short_link(reference):
            resolved = self.resolver.resolve(reference)
            logger.info(f"Resolved {reference} -> {resolved}")
            return resolved
        return reference

    def load(self, reference: str) -> NormalizedImage:
        return self.load_resolved(self.resolve_target(reference))

    def load_resolved(self, target: str) -> NormalizedImage:
        embedded = extract_embedded_image_url(target)
        if embedded:
            return self.fetch(embedded)

        if is_image_host(target):
            return self.fetch(ImageCandidate(url=target, source=DiscoveryMethod.DIRECT))

        page = self.scraper.fetch_page(target)
        content_type = page.headers.get("Content-Type", "")

        if content_type.startswith("image/"):
            logger.info(f"Downloaded {DiscoveryMethod.PAGE.value} image {target}")
            return self.normalize(page.content, target)
        try:
            image = self.normalize(page.content, target)
            logger.info(f"Downloaded {DiscoveryMethod.PAGE.value} image {target} ({content_type or 'no content type'})")
            return image
        except InvalidImageData:
            logger.debug(f"Body of {target} is not an image ({content_type or 'no content type'})")

        if content_type and "text" not in content_type and "html" not in content_type:
            raise NoImageFound(f"Not HTML or image. Content-Type: {content_type}", resolved_url=target)

        html = page.text
        candidates = self.scraper.candidates_from_page(page, target)
        for candidate in candidates:
            try:
                return self.fetch(candidate)
            except (DownloadFailed, InvalidImageData, NetworkError) as e:
                logger.debug(f"Skipping candidate {candidate.url}: {e}")

        preview = html[:BODY_PREVIEW_CHARS]
        raise NoImageFound(
            f"Resolved: {target}\nFound {len(candidates)} candidate URLs\nHTML: {preview}",
            resolved_url=target,
            candidate_count=len(candidates),
            body_preview=preview,
        )
