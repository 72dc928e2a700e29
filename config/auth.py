import os
import json
import logging
import streamlit as st
from google.cloud import vision
from google.cloud import translate_v2 as translate
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


def _streamlit_secret(name):
    """Return a Streamlit secret section, or None when no secrets are configured."""
    try:
        if name in st.secrets:
            return st.secrets[name]
    except Exception as e:  # secrets.toml missing or unreadable
        logger.debug(f"Streamlit secrets unavailable: {e}")
    return None


class GCPAuth:
    def __init__(self):
        self.vision_client = None
        self.translate_client = None
        self.initialization_error = None

    def initialize_clients(self):
        """Initialize GCP clients from the environment or Streamlit secrets."""
        # Method 1: service account JSON in the environment
        if "GCP_SERVICE_ACCOUNT_JSON" in os.environ:
            logger.info("Found GCP_SERVICE_ACCOUNT_JSON in environment")
            try:
                creds_dict = json.loads(os.environ["GCP_SERVICE_ACCOUNT_JSON"])
            except json.JSONDecodeError as e:
                self.initialization_error = f"Invalid JSON in GCP_SERVICE_ACCOUNT_JSON: {e}"
                logger.error(self.initialization_error)
                return False
            return self._create_clients(creds_dict, "environment variable")

        # Method 2: Streamlit secrets (for local development)
        secret = _streamlit_secret("gcp_service_account")
        if secret is not None:
            logger.info("Found gcp_service_account in Streamlit secrets")
            return self._create_clients(dict(secret), "Streamlit secrets")

        self.initialization_error = (
            "No GCP credentials found. Set GCP_SERVICE_ACCOUNT_JSON or add "
            "[gcp_service_account] to .streamlit/secrets.toml. The account needs "
            "the Vision API and the Cloud Translation API."
        )
        logger.error(self.initialization_error)
        return False

    def _create_clients(self, creds_dict, method):
        try:
            credentials = service_account.Credentials.from_service_account_info(creds_dict)
            self.vision_client = vision.ImageAnnotatorClient(credentials=credentials)
            self.translate_client = translate.Client(credentials=credentials)
            logger.info(f"✅ GCP clients initialized using {method}")
            return True
        except Exception as e:
            self.initialization_error = f"Failed to create GCP clients: {e}"
            logger.error(f"❌ {self.initialization_error}")
            return False
