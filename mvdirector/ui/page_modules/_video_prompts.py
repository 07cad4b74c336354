"""Video prompt page - Step 7 (final) of the workflow."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.services.markdown_exporter import export_project, export_video_prompt_list
from mvdirector.ui.components.state import (
    get_session,
    go_to_step,
    render_prompt_editor,
    reset_state,
    show_stage_error,
    tr,
)


def render_video_prompts_page() -> None:
    """Render per-shot video prompts and the final exports."""
    session = get_session()
    stage = session.video_prompts
    state = session.state

    st.header(tr("영상 프롬프트", "Video Prompts"))
    show_stage_error(stage)
    if stage.last_warning:
        st.warning(stage.last_warning)

    for index, shot in enumerate(state.detailed_scenes):
        with st.container(border=True):
            st.markdown(f"**Cut {shot.scene_number}** ({shot.estimated_duration}) - "
                        f"{shot.text('camera_movement', state.locale)}")
            if shot.generated_images:
                st.image(shot.generated_images[0].to_bytes(), width=240)
            render_prompt_editor(
                stage,
                index,
                tr("영상 프롬프트", "Video prompt"),
                shot.video_prompt,
                key=f"video_prompt_{index}",
            )

    if st.button(tr("🔄 프롬프트 다시 생성", "🔄 Regenerate Prompts"), key="regenerate_prompts"):
        with st.spinner(tr("프롬프트 생성 중...", "Generating prompts...")):
            stage.regenerate()
        st.rerun()

    st.markdown("---")
    st.subheader(tr("내보내기", "Export"))

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            tr("📥 전체 프로젝트 (Markdown)", "📥 Full Project (Markdown)"),
            data=export_project(state),
            file_name="mv_director_project.md",
            mime="text/markdown",
            type="primary",
            use_container_width=True,
        )
    with col2:
        st.download_button(
            tr("📥 영상 프롬프트 목록 (TXT)", "📥 Video Prompt List (TXT)"),
            data=export_video_prompt_list(state.detailed_scenes),
            file_name="video_prompts.txt",
            mime="text/plain",
            use_container_width=True,
        )

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button(tr("← 이전", "← Back")):
            go_to_step(WorkflowStep.IMAGE_PROMPTS)
            st.rerun()
    with col2:
        if st.button(tr("🆕 새 프로젝트", "🆕 New Project")):
            reset_state()
            st.rerun()
