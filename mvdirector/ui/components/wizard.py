"""Wizard progress indicator component."""

import streamlit as st

from mvdirector.models.schemas import WorkflowStep
from mvdirector.ui.components.state import get_session, go_to_step, tr


STEPS = [
    (WorkflowStep.LYRICS, ("가사", "Lyrics"), ("가사 입력", "Enter your lyrics")),
    (WorkflowStep.STORIES, ("스토리", "Story"), ("뮤비 컨셉 선택", "Pick a story concept")),
    (WorkflowStep.CHARACTERS, ("인물", "Cast"), ("등장인물 설정", "Define the cast")),
    (WorkflowStep.STORYBOARD, ("스토리보드", "Storyboard"), ("장면 구성", "Plan the scenes")),
    (WorkflowStep.DETAILED_STORYBOARD, ("촬영 대본", "Shots"), ("5초 이하 컷 분할", "Split into cuts")),
    (WorkflowStep.IMAGE_PROMPTS, ("이미지", "Images"), ("이미지 프롬프트", "Image prompts")),
    (WorkflowStep.VIDEO_PROMPTS, ("영상", "Video"), ("영상 프롬프트", "Video prompts")),
]


def render_wizard_progress(current_step: WorkflowStep) -> None:
    """
    Render the wizard progress indicator.

    Steps up to the furthest reached one are clickable.

    Args:
        current_step: The current workflow step
    """
    max_reached = get_session().state.max_reached_step

    st.markdown("---")

    cols = st.columns(len(STEPS))

    for col, (step, label, _) in zip(cols, STEPS):
        text = tr(*label)
        with col:
            if step == current_step:
                st.markdown(f"#### :large_blue_circle: **{text}**")
            elif step <= max_reached:
                if st.button(f"✅ {text}", key=f"wizard_{step.name}"):
                    go_to_step(step)
                    st.rerun()
            else:
                st.markdown(f"#### :white_circle: {text}")

    st.markdown("---")


def get_step_description(step: WorkflowStep) -> str:
    """Get the description for a workflow step."""
    for s, _, desc in STEPS:
        if s == step:
            return tr(*desc)
    return ""
