"""Storyboard page - Step 4 of the workflow."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.services.markdown_exporter import export_storyboard
from mvdirector.ui.components.scenes import render_scene_card
from mvdirector.ui.components.state import (
    get_session,
    render_download_buttons,
    render_navigation,
    show_stage_error,
    tr,
)


def render_storyboard_page() -> None:
    """Render the base storyboard page."""
    session = get_session()
    stage = session.storyboard
    state = session.state

    st.header(tr("스토리보드", "Storyboard"))
    show_stage_error(stage)

    for scene in state.base_scenes:
        render_scene_card(scene, state.locale, tr("장면", "Scene"))

    if st.button(tr("🔄 스토리보드 다시 생성", "🔄 Regenerate Storyboard")):
        with st.spinner(tr("스토리보드 생성 중...", "Generating storyboard...")):
            stage.regenerate()
        st.rerun()

    if state.base_scenes:
        render_download_buttons(
            tr("스토리보드 다운로드", "Download Storyboard"),
            export_storyboard(state.base_scenes, state.selected_story, state.locale),
            "storyboard.md",
            key="storyboard",
        )

    st.markdown("---")
    render_navigation(
        WorkflowStep.STORYBOARD,
        tr("촬영 대본 생성 (5초 컷) →", "Generate Shooting Script (5s cuts) →"),
    )
