"""Session state management for Streamlit."""

from typing import Optional

import streamlit as st

from mvdirector.models.localization import Locale
from mvdirector.models.schemas import ProjectState, WorkflowStep
from mvdirector.pipeline.session import PipelineSession
from mvdirector.services.markdown_exporter import export_project


def init_session_state() -> None:
    """Initialize session state with defaults."""
    if "pipeline_session" not in st.session_state:
        st.session_state.pipeline_session = PipelineSession.create()


def get_session() -> PipelineSession:
    """Get the pipeline session (controllers + project state)."""
    init_session_state()
    return st.session_state.pipeline_session


def get_state() -> ProjectState:
    """Get the current project state."""
    return get_session().state


def tr(ko: str, en: str) -> str:
    """Pick the UI string for the active locale."""
    return ko if get_state().locale is Locale.KO else en


def advance_step() -> bool:
    """Advance to the next workflow step (auto-generates there if empty)."""
    return get_session().advance()


def go_to_step(step: WorkflowStep) -> None:
    """Go to a previously reached workflow step."""
    get_session().go_to(step)


def reset_state() -> None:
    """Start a fresh project, keeping the selected API key."""
    session = get_session()
    st.session_state.pipeline_session = PipelineSession(
        gateway=session.gateway,
        credentials=session.credentials,
        image_credentials=session.image_credentials,
        config=session.config,
    )


def show_stage_error(controller) -> None:
    """Show the controller's last error, if any."""
    if controller.last_error:
        st.error(controller.last_error)


def render_navigation(step: WorkflowStep, next_label: str) -> None:
    """Back / next buttons shared by every stage page."""
    session = get_session()
    col1, col2 = st.columns(2)

    with col1:
        if step.previous is not None and st.button(
            tr("← 이전", "← Back"), key=f"back_{step.name}"
        ):
            go_to_step(step.previous)
            st.rerun()

    with col2:
        if step.next is not None:
            clicked = st.button(
                next_label,
                type="primary",
                use_container_width=True,
                disabled=not session.can_advance_from(step),
                key=f"next_{step.name}",
            )
            if clicked:
                with st.spinner(tr("생성 중...", "Generating...")):
                    advance_step()
                st.rerun()


def render_download_buttons(label: str, data: str, file_name: str, key: str) -> None:
    """Step-only markdown download next to the full-project download."""
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            f"📥 {label}",
            data=data,
            file_name=file_name,
            mime="text/markdown",
            key=f"download_{key}",
        )
    with col2:
        st.download_button(
            tr("📄 전체 프로젝트 다운로드", "📄 Download Full Project"),
            data=export_project(get_state()),
            file_name="mv_director_project.md",
            mime="text/markdown",
            key=f"download_full_{key}",
        )


def _save_prompt(stage, index: int, key: str) -> None:
    stage.edit_prompt(index, st.session_state[key])


def render_prompt_editor(stage, index: int, label: str, current: Optional[str], key: str) -> None:
    """Prompt text area bound to one shot.

    The widget value is resynced from the shot before every render, so a
    regenerated prompt replaces whatever the box held. Typed edits reach the
    shot only through the change callback.
    """
    if st.session_state.get(key) != (current or ""):
        st.session_state[key] = current or ""
    st.text_area(label, key=key, on_change=_save_prompt, args=(stage, index, key))
