import os
import locale
import logging
import streamlit as st

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _env_float(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={value!r}, using {default}")
        return default


# Constants
MAX_DIMENSION = 2048
MAX_REDIRECTS = 10
REDIRECT_TIMEOUT = 15
PAGE_TIMEOUT = 15
IMAGE_TIMEOUT = 20
BODY_PREVIEW_CHARS = 300

HEADERS = {
    "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 18_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.0 Mobile/15E148 Safari/604.1",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

SHORT_LINK_HOSTS = ("goo.gl", "maps.app")
CANONICAL_MARKER = "google.com/maps"
IMAGE_HOSTS = ("googleusercontent.com", "ggpht.com")

# Row grouping (normalized unit-square coordinates)
ROW_THRESHOLD_FACTOR = _env_float("ROW_THRESHOLD_FACTOR", 0.6)
ROW_THRESHOLD_FLOOR = _env_float("ROW_THRESHOLD_FLOOR", 0.008)

DEFAULT_LANGUAGE = "en"

# Overlay rendering
OVERLAY_FILL = (0, 0, 0, 191)
OVERLAY_TEXT_COLOR = (255, 255, 255, 255)
OVERLAY_FONT_RATIO = 0.65
MIN_FONT_SIZE = 8
FONT_PATH = os.environ.get("OVERLAY_FONT_PATH", "assets/fonts/NotoSans-Regular.ttf")


class AppConfig:
    PAGE_TITLE = "Maps Photo Translator"
    PAGE_ICON = "🌐"
    LAYOUT = "wide"


def setup_page_config():
    """Configure Streamlit page settings."""
    st.set_page_config(
        layout=AppConfig.LAYOUT,
        page_title=AppConfig.PAGE_TITLE,
        page_icon=AppConfig.PAGE_ICON
    )


def get_target_language() -> str:
    """Resolve the single target language code for a run.

    ``TARGET_LANGUAGE`` wins, then the process locale, then English.
    """
    configured = os.environ.get("TARGET_LANGUAGE", "").strip()
    if configured:
        return configured.lower()
    try:
        code = locale.getlocale()[0]
    except ValueError:
        code = None
    if not code or code in ("C", "POSIX"):
        return DEFAULT_LANGUAGE
    return code.replace("-", "_").split("_")[0].lower()
