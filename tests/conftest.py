from io import BytesIO

import pytest
import requests
from PIL import Image
from requests.structures import CaseInsensitiveDict

from models.data_models import BoundingBox, TextFragment


class FakeResponse:
    def __init__(self, status_code=200, headers=None, content=b"", url=None):
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        self.content = content.encode("utf-8") if isinstance(content, str) else content
        self.url = url
        self.closed = False

    @property
    def text(self):
        return self.content.decode("utf-8", errors="replace")

    def close(self):
        self.closed = True


class FakeSession:
    """Serves canned responses by URL and records every request made."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(url)
        if url not in self.routes:
            raise requests.ConnectionError(f"no route for {url}")
        resp = self.routes[url]
        if isinstance(resp, Exception):
            raise resp
        if resp.url is None:
            resp.url = url
        return resp


def _png_bytes(size=(10, 10), color=(255, 0, 0)):
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def redirect():
    def _redirect(location, status=302):
        return FakeResponse(status_code=status, headers={"Location": location})
    return _redirect


@pytest.fixture
def frag():
    """Fragment placed with top-down coordinates: ``top`` is distance from the top edge."""
    def _frag(text, x=0.1, top=0.1, w=0.2, h=0.03):
        return TextFragment(text=text, bounding_box=BoundingBox(x=x, y=1.0 - top - h, width=w, height=h))
    return _frag
