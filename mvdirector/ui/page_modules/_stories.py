"""Story selection page - Step 2 of the workflow."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.services.markdown_exporter import export_stories
from mvdirector.ui.components.state import (
    get_session,
    render_download_buttons,
    render_navigation,
    show_stage_error,
    tr,
)


def render_stories_page() -> None:
    """Render the story concept page."""
    session = get_session()
    stage = session.stories
    state = session.state
    locale = state.locale

    st.header(tr("스토리 컨셉 선택", "Choose a Story Concept"))
    show_stage_error(stage)

    if not state.stories:
        st.info(tr("아직 생성된 스토리가 없습니다.", "No stories yet."))

    for index, story in enumerate(state.stories):
        selected = index == state.selected_story_index
        with st.container(border=True):
            col1, col2 = st.columns([5, 1])
            with col1:
                marker = "✅ " if selected else ""
                st.subheader(f"{marker}{story.text('title', locale)}")
                st.markdown(
                    f"**{tr('장르', 'Genre')}:** {story.text('genre', locale)} · "
                    f"**{tr('분위기', 'Mood')}:** {story.text('mood', locale)}"
                )
                st.write(story.text("synopsis", locale))
            with col2:
                if st.button(
                    tr("선택됨", "Selected") if selected else tr("선택", "Select"),
                    key=f"select_story_{index}",
                    disabled=selected,
                ):
                    stage.select(index)
                    st.rerun()

    if st.button(tr("🔄 스토리 더 생성", "🔄 Generate More Stories")):
        with st.spinner(tr("스토리 생성 중...", "Generating stories...")):
            stage.regenerate()
        st.rerun()

    if state.stories:
        render_download_buttons(
            tr("스토리 다운로드", "Download Stories"),
            export_stories(state.stories, state.lyrics, locale),
            "stories.md",
            key="stories",
        )

    _render_custom_story(stage)

    st.markdown("---")
    render_navigation(WorkflowStep.STORIES, tr("인물 생성 →", "Generate Characters →"))


def _render_custom_story(stage) -> None:
    with st.expander(tr("✏️ 직접 스토리 작성", "✏️ Write Your Own Story")):
        tab1, tab2 = st.tabs([tr("직접 입력", "Manual"), tr("AI 확장", "AI Expand")])

        with tab1:
            with st.form("custom_story_form", clear_on_submit=True):
                title = st.text_input(tr("제목", "Title"))
                genre = st.text_input(tr("장르", "Genre"))
                mood = st.text_input(tr("분위기", "Mood"))
                synopsis = st.text_area(tr("시놉시스", "Synopsis"))
                if st.form_submit_button(tr("추가", "Add")):
                    if not title.strip() or not synopsis.strip():
                        st.warning(tr(
                            "제목과 시놉시스는 필수입니다.",
                            "Title and synopsis are required.",
                        ))
                    else:
                        stage.add_custom_story(title, synopsis, genre, mood)
                        st.rerun()

        with tab2:
            keywords = st.text_area(
                tr("키워드 / 아이디어", "Keywords / idea"),
                placeholder=tr("예: 비 오는 도시, 재회, 네온", "e.g. rainy city, reunion, neon"),
            )
            if st.button(tr("AI로 스토리 만들기", "Expand with AI"), disabled=not keywords.strip()):
                with st.spinner(tr("스토리 확장 중...", "Expanding story...")):
                    stage.expand_custom_story(keywords)
                st.rerun()
