import logging
import os

import streamlit as st

from config.settings import setup_page_config, get_target_language
from models.errors import NoImageFound, NoTextFound, PipelineError
from services.gcp_services import GCPServices
from services.photo_translator import PhotoTranslator
from services.translation_orchestrator import build_overlays
from utils.text_utils import TextOverlay

logging.basicConfig(level=logging.INFO)


def reset_run():
    for key in ("result", "error", "debug"):
        st.session_state.pop(key, None)


def show_debug(lines):
    if lines:
        with st.expander("🐞 Debug"):
            st.code("\n".join(lines))


def main():
    setup_page_config()
    st.title("Maps Photo Translator")
    st.caption("Translate text from Google Maps place photos")

    st.sidebar.markdown("### 🔧 Debug Info")
    st.sidebar.write(f"GCP Env Var: {'GCP_SERVICE_ACCOUNT_JSON' in os.environ}")
    st.sidebar.write(f"Target language: {get_target_language()}")

    if "services" not in st.session_state:
        services = GCPServices()
        with st.spinner("🔐 Initializing GCP services..."):
            services.initialize()
        st.session_state.services = services

    services = st.session_state.services
    if not services.vision_client:
        st.error(f"🔐 **GCP Services Not Available**\n\n{services.initialization_error}")
        return

    st.markdown(
        "1. Open Google Maps and view a place\n"
        "2. Tap a photo, then **Share**\n"
        "3. Paste the shared link below"
    )
    shared = st.text_input("Shared link", placeholder="https://maps.app.goo.gl/...")
    col1, col2 = st.columns([1, 1])
    with col1:
        run = st.button("Translate")
    with col2:
        st.button("Done", on_click=reset_run)

    if run:
        reset_run()
        translator = PhotoTranslator(ocr_engine=services, translation_engine=services)
        with st.spinner("Downloading image, recognizing and translating text..."):
            try:
                st.session_state.result = translator.run(shared)
            except PipelineError as e:
                logging.error(f"❌ Run failed: {e!r}")
                st.session_state.error = e
                st.session_state.debug = [f"Shared text: {shared}", f"Error detail: {e!r}"]
                if isinstance(e, NoImageFound) and e.resolved_url:
                    st.session_state.debug.append(f"Resolved URL: {e.resolved_url}")

    if "error" in st.session_state:
        error = st.session_state.error
        if isinstance(error, NoTextFound):
            st.warning(error.user_message)
        else:
            st.error(error.user_message)
        show_debug(st.session_state.get("debug"))
        return

    result = st.session_state.get("result")
    if not result:
        return

    outcome = result.outcome
    if outcome.error:
        st.warning(f"{outcome.error.user_message}. Showing the original text.")

    table_tab, overlay_tab = st.tabs(["Table", "Overlay"])
    with table_tab:
        st.image(result.image.image, use_container_width=True)
        st.dataframe(
            [{"Original": r.original, "Translation": r.translated or r.original} for r in outcome.display_rows],
            use_container_width=True,
            hide_index=True,
        )
    with overlay_tab:
        show_overlay = st.toggle("Show translation overlay", value=True)
        if show_overlay:
            overlaid = TextOverlay().render(result.image, build_overlays(outcome.display_rows))
            st.image(overlaid, use_container_width=True)
        else:
            st.image(result.image.image, use_container_width=True)

    show_debug(result.debug)


if __name__ == "__main__":
    main()
