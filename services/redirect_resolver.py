import re
import logging
from enum import Enum
from typing import List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from config.settings import (
    HEADERS,
    MAX_REDIRECTS,
    REDIRECT_TIMEOUT,
    SHORT_LINK_HOSTS,
    CANONICAL_MARKER,
)

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = (301, 302, 303, 307, 308)
RAW_MAPS_URL_RE = re.compile(r"(https://www\.google\.com/maps/[^\s\"'<>\\]+)", re.IGNORECASE)
REFRESH_URL_RE = re.compile(r"url\s*=\s*['\"]?([^'\">\s]+)", re.IGNORECASE)


class HopDecision(Enum):
    CONTINUE = "continue"
    STOP = "stop"
    ABORT = "abort"


def is_canonical(url: str) -> bool:
    """True when the URL has the shape of a Maps place/photo page."""
    return CANONICAL_MARKER in url


def is_short_link(url: str) -> bool:
    try:
        host = urlparse(url).netloc.lower()
    except ValueError:
        return False
    return any(h in host for h in SHORT_LINK_HOSTS)


def scan_body_for_target(html: str, base_url: str) -> Optional[str]:
    """Find a client-side redirect target in a page body.

    Checked in order: meta refresh, a canonical link that points at Maps,
    then any raw Maps URL in the markup or inline scripts.
    """
    soup = BeautifulSoup(html, "html.parser")

    for meta in soup.find_all("meta"):
        if (meta.get("http-equiv") or "").strip().lower() != "refresh":
            continue
        m = REFRESH_URL_RE.search(meta.get("content") or "")
        if m:
            return urljoin(base_url, m.group(1))

    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if "canonical" in [r.lower() for r in rel] and is_canonical(link["href"]):
            return link["href"]

    m = RAW_MAPS_URL_RE.search(html)
    if m:
        return m.group(1)
    return None


class RedirectResolver:
    """Follows redirects of a shared link until it reaches a Maps page."""

    def __init__(self, session: Optional[requests.Session] = None,
                 max_redirects: int = MAX_REDIRECTS, timeout: int = REDIRECT_TIMEOUT):
        self.session = session or requests.Session()
        self.max_redirects = max_redirects
        self.timeout = timeout

    def decide(self, url: str, hop_count: int) -> HopDecision:
        """Decide what to do with the destination of redirect number ``hop_count``."""
        try:
            scheme = urlparse(url).scheme
        except ValueError:
            return HopDecision.ABORT
        if scheme not in ("http", "https"):
            return HopDecision.ABORT
        if is_canonical(url):
            return HopDecision.STOP
        if hop_count > self.max_redirects:
            return HopDecision.ABORT
        return HopDecision.CONTINUE

    def resolve(self, reference: str) -> str:
        """Resolve ``reference`` to the best URL observed. Never raises."""
        hops: List[str] = []
        try:
            return self._follow(reference, hops)
        except (requests.RequestException, ValueError) as e:
            best = self._best_observed(hops)
            logger.warning(f"Redirect resolution of {reference} failed after {len(hops)} hop(s): {e}")
            return best or reference

    def _follow(self, reference: str, hops: List[str]) -> str:
        current = reference
        while True:
            response = self.session.get(
                current, headers=HEADERS, timeout=self.timeout, allow_redirects=False)
            location = response.headers.get("Location")
            if response.status_code not in REDIRECT_STATUSES or not location:
                break

            response.close()
            try:
                next_url = urljoin(current, location)
            except ValueError:
                logger.warning(f"Unparsable redirect target from {current}: {location}")
                return self._best_observed(hops) or reference
            decision = self.decide(next_url, len(hops) + 1)
            if decision is HopDecision.ABORT:
                logger.info(f"Stopped following redirects at {next_url}")
                return self._best_observed(hops) or reference

            hops.append(next_url)
            if decision is HopDecision.STOP:
                logger.info(f"Redirect reached Maps page after {len(hops)} hop(s): {next_url}")
                return next_url
            current = next_url

        if is_canonical(current):
            return current

        content_type = response.headers.get("Content-Type", "")
        if not content_type or "text" in content_type or "html" in content_type:
            found = scan_body_for_target(response.text, current)
            if found:
                logger.info(f"Found client-side redirect target in body of {current}")
                return found
        return current

    @staticmethod
    def _best_observed(hops: List[str]) -> Optional[str]:
        for url in hops:
            if is_canonical(url):
                return url
        return hops[-1] if hops else None
