import re
import logging
from typing import List, Optional
from urllib.parse import unquote, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from config.settings import HEADERS, IMAGE_HOSTS, PAGE_TIMEOUT
from models.data_models import DiscoveryMethod, ImageCandidate
from models.errors import DownloadFailed, NetworkError

logger = logging.getLogger(__name__)

# Maps photo URLs carry the image URL in the data parameter, e.g.
#   !6shttps:%2F%2Fgz0.googleusercontent.com%2F...!7i3024!8i4032
EMBEDDED_IMAGE_PATTERNS = [
    re.compile(r"6shttps://(gz[0-9]+\.googleusercontent\.com/[^!&\s]+)", re.IGNORECASE),
    re.compile(r"6shttps://(lh[0-9]+\.googleusercontent\.com/[^!&\s]+)", re.IGNORECASE),
    re.compile(r"6shttps://([a-z0-9-]+\.googleusercontent\.com/[^!&\s]+)", re.IGNORECASE),
    re.compile(r"6shttps://([a-z0-9-]+\.ggpht\.com/[^!&\s]+)", re.IGNORECASE),
]

SIZE_CONSTRAINT_RE = re.compile(r"=w\d+.*$|=s\d+.*$")

CDN_URL_PATTERNS = [
    re.compile(r"(https?://[a-z0-9-]+\.googleusercontent\.com/[^\s\"'<>\\]+)", re.IGNORECASE),
    re.compile(r"(https?://[a-z0-9-]+\.ggpht\.com/[^\s\"'<>\\]+)", re.IGNORECASE),
]

JS_ESCAPES = [
    ("\\u003d", "="),
    ("\\u0026", "&"),
    ("\\x3d", "="),
    ("\\x26", "&"),
    ("\\/", "/"),
]
TRIM_CHARS = "\"'>;, \\"


def remove_size_constraints(url: str) -> str:
    """Drop a trailing size directive such as ``=w430-h372-k-no`` or ``=s1000``."""
    return SIZE_CONSTRAINT_RE.sub("", url)


def is_image_host(url: str) -> bool:
    host = urlparse(url).netloc.lower()
    return any(host.endswith(h) for h in IMAGE_HOSTS)


def extract_embedded_image_url(resolved_url: str) -> Optional[ImageCandidate]:
    """Pull the image CDN URL embedded in a Maps photo URL, at full resolution."""
    decoded = unquote(resolved_url)
    for pattern in EMBEDDED_IMAGE_PATTERNS:
        m = pattern.search(decoded)
        if not m:
            continue
        url = remove_size_constraints("https://" + m.group(1))
        return ImageCandidate(url=url, source=DiscoveryMethod.EMBEDDED)
    return None


def unescape_js(value: str) -> str:
    for escaped, plain in JS_ESCAPES:
        value = value.replace(escaped, plain)
    return value


def clean_candidate_url(value: str) -> str:
    cleaned = unescape_js(value).strip(TRIM_CHARS)
    while cleaned.endswith("\\"):
        cleaned = cleaned[:-1]
    return cleaned


def extract_image_candidates_from_html(html: str, base_url: str) -> List[ImageCandidate]:
    """Collect image URLs from a page, image CDN hosts first."""
    soup = BeautifulSoup(html, "html.parser")
    found = []

    def add(u):
        if not u:
            return
        u = clean_candidate_url(u)
        if u.startswith("//"):
            u = "https:" + u
        elif u.startswith("/"):
            u = urljoin(base_url, u)
        if urlparse(u).scheme not in ("http", "https"):
            return
        if u not in found:
            found.append(u)

    # og:image
    for meta in soup.find_all("meta", attrs={"property": "og:image"}):
        add(meta.get("content"))

    # image CDN URLs anywhere, including JSON-escaped script payloads
    body = unescape_js(html)
    for pattern in CDN_URL_PATTERNS:
        for match in pattern.findall(body):
            add(match)

    # img src
    for img in soup.find_all("img", src=True):
        add(img["src"])

    preferred = [u for u in found if is_image_host(u)]
    others = [u for u in found if not is_image_host(u)]
    return [ImageCandidate(url=u, source=DiscoveryMethod.SCRAPED) for u in preferred + others]


class MapsScraper:
    def __init__(self, session: Optional[requests.Session] = None, timeout: int = PAGE_TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_page(self, url: str) -> requests.Response:
        """Fetch a resolved target, following ordinary redirects."""
        try:
            r = self.session.get(url, headers=HEADERS, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise NetworkError(e) from e
        if not 200 <= r.status_code < 400:
            raise DownloadFailed(r.status_code, url)
        return r

    def scrape_candidates(self, resolved_url: str) -> List[ImageCandidate]:
        """Fetch a page and return its image candidates in preference order."""
        return self.candidates_from_page(self.fetch_page(resolved_url), resolved_url)

    def candidates_from_page(self, page: requests.Response, resolved_url: str) -> List[ImageCandidate]:
        candidates = extract_image_candidates_from_html(page.text, page.url or resolved_url)
        logger.info(f"Found {len(candidates)} candidate image URL(s) on {resolved_url}")
        return candidates
