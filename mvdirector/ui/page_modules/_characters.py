"""Character page - Step 3 of the workflow."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.services.image_generator import load_reference_image
from mvdirector.services.markdown_exporter import export_characters
from mvdirector.ui.components.state import (
    get_session,
    render_download_buttons,
    render_navigation,
    show_stage_error,
    tr,
)

FIELD_LABELS = [
    ("name", ("이름", "Name")),
    ("role", ("역할", "Role")),
    ("visual_description", ("외모", "Visual Description")),
    ("personality", ("성격", "Personality")),
    ("outfit", ("의상", "Outfit")),
]


def render_characters_page() -> None:
    """Render the cast page."""
    session = get_session()
    stage = session.characters
    state = session.state
    locale = state.locale

    st.header(tr("등장인물", "Characters"))
    show_stage_error(stage)

    story = state.selected_story
    if story is not None:
        st.caption(f"{tr('스토리', 'Story')}: {story.text('title', locale)}")

    for index, character in enumerate(state.characters):
        with st.expander(
            f"{index + 1}. {character.text('name', locale)} - {character.text('role', locale)}",
            expanded=True,
        ):
            with st.form(f"character_form_{index}"):
                edits = {}
                for field_name, label in FIELD_LABELS:
                    current = character.text(field_name, locale)
                    if field_name in ("visual_description", "personality", "outfit"):
                        value = st.text_area(tr(*label), value=current)
                    else:
                        value = st.text_input(tr(*label), value=current)
                    if value != current:
                        edits[field_name] = value
                keywords = st.text_input(
                    tr("키워드 (쉼표 구분)", "Keywords (comma separated)"),
                    value=", ".join(character.keywords),
                )
                if keywords != ", ".join(character.keywords):
                    edits["keywords"] = keywords
                if st.form_submit_button(tr("저장", "Save")) and edits:
                    stage.edit_character(index, **edits)
                    st.rerun()

            instruction = st.text_input(
                tr("AI 수정 지시", "AI edit instruction"),
                key=f"character_instruction_{index}",
                placeholder=tr("예: 더 어둡고 신비롭게", "e.g. make them darker and more mysterious"),
            )
            upload = st.file_uploader(
                tr("참고 이미지 (선택)", "Reference image (optional)"),
                type=["png", "jpg", "jpeg", "webp"],
                key=f"character_reference_{index}",
            )

            col1, col2 = st.columns(2)
            with col1:
                if st.button(tr("🔄 AI로 다시 생성", "🔄 Regenerate with AI"), key=f"regen_character_{index}"):
                    reference = load_reference_image(upload.getvalue()) if upload else None
                    with st.spinner(tr("인물 수정 중...", "Revising character...")):
                        stage.regenerate_character(index, instruction, reference_image=reference)
                    st.rerun()
            with col2:
                if st.button(tr("🗑️ 삭제", "🗑️ Delete"), key=f"delete_character_{index}"):
                    stage.delete_character(index)
                    st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button(tr("➕ 인물 추가", "➕ Add Character")):
            stage.add_character()
            st.rerun()
    with col2:
        if st.button(tr("🔄 전체 다시 생성", "🔄 Regenerate Cast")):
            with st.spinner(tr("인물 생성 중...", "Generating characters...")):
                stage.regenerate()
            st.rerun()

    if state.characters:
        render_download_buttons(
            tr("인물 다운로드", "Download Characters"),
            export_characters(state.characters, story, locale),
            "characters.md",
            key="characters",
        )

    st.markdown("---")
    render_navigation(WorkflowStep.CHARACTERS, tr("스토리보드 생성 →", "Generate Storyboard →"))
