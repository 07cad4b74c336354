"""Main Streamlit application for MV Director."""

import logging
import streamlit as st

# Configure logging to show INFO level for our services
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
# Reduce noise from other loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)

from mvdirector.config import config
from mvdirector.models.localization import Locale
from mvdirector.models.schemas import WorkflowStep
from mvdirector.ui.components.state import (
    get_session,
    init_session_state,
    reset_state,
    tr,
)
from mvdirector.ui.components.wizard import get_step_description, render_wizard_progress
from mvdirector.ui.page_modules._lyrics import render_lyrics_page
from mvdirector.ui.page_modules._stories import render_stories_page
from mvdirector.ui.page_modules._characters import render_characters_page
from mvdirector.ui.page_modules._storyboard import render_storyboard_page
from mvdirector.ui.page_modules._detailed import render_detailed_page
from mvdirector.ui.page_modules._image_prompts import render_image_prompts_page
from mvdirector.ui.page_modules._video_prompts import render_video_prompts_page

PAGES = {
    WorkflowStep.LYRICS: render_lyrics_page,
    WorkflowStep.STORIES: render_stories_page,
    WorkflowStep.CHARACTERS: render_characters_page,
    WorkflowStep.STORYBOARD: render_storyboard_page,
    WorkflowStep.DETAILED_STORYBOARD: render_detailed_page,
    WorkflowStep.IMAGE_PROMPTS: render_image_prompts_page,
    WorkflowStep.VIDEO_PROMPTS: render_video_prompts_page,
}


def render_sidebar() -> None:
    """Locale toggle and project controls."""
    session = get_session()
    with st.sidebar:
        st.subheader("🌐 Language")
        labels = {Locale.KO: "한국어", Locale.EN: "English"}
        choice = st.radio(
            "Language",
            list(labels),
            index=list(labels).index(session.state.locale),
            format_func=labels.get,
            horizontal=True,
            label_visibility="collapsed",
        )
        if choice is not session.state.locale:
            session.set_locale(choice)
            st.rerun()

        st.markdown("---")
        st.caption(f"Text: {config.text_backend} · Image: {config.image.model}")
        if st.button(tr("🆕 새 프로젝트", "🆕 New Project")):
            reset_state()
            st.rerun()


def render_credential_gate() -> None:
    """Block the app until an API key is available."""
    session = get_session()
    if session.credentials.has_credential():
        return

    backend = "Anthropic" if config.text_backend == "claude" else "Google Gemini"
    st.warning(tr(
        f"{backend} API 키가 필요합니다. .env 파일에 설정하거나 아래에 입력하세요.",
        f"A {backend} API key is required. Set it in your .env file or enter it below.",
    ))
    with st.form("api_key_form"):
        api_key = st.text_input("API Key", type="password")
        if st.form_submit_button(tr("키 사용", "Use Key")):
            try:
                session.credentials.select_credential(api_key)
            except ValueError as e:
                st.error(str(e))
            else:
                st.rerun()
    st.stop()


def main():
    """Main application entry point."""
    # Page config
    st.set_page_config(
        page_title="MV Director AI",
        page_icon="🎬",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    # Initialize session state
    init_session_state()

    # Header
    st.title("🎬 MV Director AI")
    st.markdown(tr(
        "*가사로 뮤직비디오 컨셉, 스토리보드, AI 프롬프트를 만드세요*",
        "*Turn lyrics into a music video concept, storyboard and AI prompts*",
    ))

    render_sidebar()

    # Validate configuration
    errors = config.validate()
    if errors:
        st.error("Configuration errors:")
        for error in errors:
            st.error(f"- {error}")
        st.info("Please fix the environment variables in your .env file")
        st.stop()

    render_credential_gate()

    state = get_session().state

    # Render wizard progress
    render_wizard_progress(state.current_step)
    st.caption(get_step_description(state.current_step))

    # Render current page
    PAGES[state.current_step]()


if __name__ == "__main__":
    main()
