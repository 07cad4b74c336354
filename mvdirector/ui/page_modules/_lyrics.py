"""Lyrics page - Step 1 of the workflow."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.ui.components.state import get_session, render_navigation, tr


def render_lyrics_page() -> None:
    """Render the lyrics input page."""
    session = get_session()
    state = session.state

    st.header(tr("가사 입력", "Enter Lyrics"))
    st.markdown(tr(
        "뮤직비디오로 만들 노래의 가사를 붙여넣으세요.",
        "Paste the lyrics of the song you want to turn into a music video.",
    ))

    lyrics = st.text_area(
        tr("가사", "Lyrics"),
        value=state.lyrics,
        height=400,
        placeholder=tr("가사를 입력하세요...", "Enter lyrics here..."),
    )
    if lyrics != state.lyrics:
        session.set_lyrics(lyrics)

    minimum = session.config.pipeline.min_lyrics_chars
    if len(lyrics.strip()) < minimum:
        st.caption(tr(
            f"최소 {minimum}자 이상 입력해주세요.",
            f"Enter at least {minimum} characters.",
        ))

    st.markdown("---")
    render_navigation(WorkflowStep.LYRICS, tr("스토리 생성 →", "Generate Stories →"))
