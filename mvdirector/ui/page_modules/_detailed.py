"""Detailed storyboard page - Step 5 of the workflow."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.services.markdown_exporter import export_detailed_storyboard
from mvdirector.ui.components.scenes import render_scene_card
from mvdirector.ui.components.state import (
    get_session,
    render_download_buttons,
    render_navigation,
    show_stage_error,
    tr,
)


def render_detailed_page() -> None:
    """Render the shooting script (duration-bounded shots)."""
    session = get_session()
    stage = session.detailed
    state = session.state
    limit = f"{session.config.pipeline.max_shot_duration:g}"

    st.header(tr("촬영 대본", "Shooting Script"))
    st.caption(tr(
        f"각 컷은 {limit}초 이하입니다. 기본 장면 {len(state.base_scenes)}개 → 컷 {len(state.detailed_scenes)}개",
        f"Every cut is {limit}s or less. {len(state.base_scenes)} base scenes → {len(state.detailed_scenes)} cuts",
    ))
    show_stage_error(stage)

    for shot in state.detailed_scenes:
        render_scene_card(shot, state.locale, "Cut")

    if st.button(tr("🔄 촬영 대본 다시 생성", "🔄 Regenerate Shooting Script")):
        with st.spinner(tr("컷 분할 중...", "Splitting into cuts...")):
            stage.regenerate()
        st.rerun()

    if state.detailed_scenes:
        render_download_buttons(
            tr("촬영 대본 다운로드", "Download Shooting Script"),
            export_detailed_storyboard(state.detailed_scenes, state.selected_story, state.locale),
            "detailed_storyboard.md",
            key="detailed",
        )

    st.markdown("---")
    render_navigation(
        WorkflowStep.DETAILED_STORYBOARD,
        tr("이미지 프롬프트 생성 →", "Generate Image Prompts →"),
    )
