"""Image prompt page - Step 6 of the workflow."""

import streamlit as st

from mvdirector.models.schemas import AspectRatio, WorkflowStep
from mvdirector.services.image_generator import load_reference_image
from mvdirector.services.markdown_exporter import export_image_prompt_list, export_project
from mvdirector.ui.components.state import (
    get_session,
    render_navigation,
    render_prompt_editor,
    show_stage_error,
    tr,
)


def render_image_prompts_page() -> None:
    """Render per-shot image prompts and the image renderer."""
    session = get_session()
    stage = session.image_prompts
    state = session.state
    image_config = session.config.image

    st.header(tr("이미지 프롬프트", "Image Prompts"))
    show_stage_error(stage)
    if stage.last_warning:
        st.warning(stage.last_warning)

    # Render settings shared by every shot
    with st.expander(tr("⚙️ 이미지 생성 설정", "⚙️ Image Settings")):
        col1, col2, col3 = st.columns(3)
        with col1:
            ratios = [ratio.value for ratio in AspectRatio]
            default_ratio = image_config.aspect_ratio
            aspect_ratio = st.selectbox(
                tr("화면 비율", "Aspect ratio"),
                ratios,
                index=ratios.index(default_ratio) if default_ratio in ratios else 1,
            )
        with col2:
            count = st.number_input(
                tr("생성 개수", "Images per shot"),
                min_value=1,
                max_value=image_config.max_images_per_request,
                value=1,
            )
        with col3:
            models = image_config.available_models
            model = st.selectbox(
                tr("모델", "Model"),
                models,
                index=models.index(image_config.model) if image_config.model in models else 0,
            )
        uploads = st.file_uploader(
            tr("참고 이미지 (Gemini 모델 전용)", "Reference images (Gemini models only)"),
            type=["png", "jpg", "jpeg", "webp"],
            accept_multiple_files=True,
        )

    for index, shot in enumerate(state.detailed_scenes):
        with st.container(border=True):
            st.markdown(f"**Cut {shot.scene_number}** ({shot.estimated_duration}) - "
                        f"{shot.text('visual_action', state.locale)}")
            render_prompt_editor(
                stage,
                index,
                tr("이미지 프롬프트", "Image prompt"),
                shot.image_prompt,
                key=f"image_prompt_{index}",
            )

            if st.button(tr("🖼️ 이미지 생성", "🖼️ Render Images"), key=f"render_{index}"):
                references = [load_reference_image(upload.getvalue()) for upload in uploads or []]
                with st.spinner(tr("이미지 생성 중...", "Rendering images...")):
                    stage.render_images(
                        index,
                        aspect_ratio=aspect_ratio,
                        count=int(count),
                        model=model,
                        reference_images=references or None,
                    )
                st.rerun()

            if index in stage.render_errors:
                st.error(stage.render_errors[index])

            if shot.generated_images:
                cols = st.columns(min(len(shot.generated_images), 4))
                for i, image in enumerate(shot.generated_images):
                    with cols[i % len(cols)]:
                        st.image(image.to_bytes(), use_container_width=True)
                        st.download_button(
                            "📥",
                            data=image.to_bytes(),
                            file_name=f"cut_{shot.scene_number}_{i + 1}.png",
                            mime=image.mime_type,
                            key=f"download_image_{index}_{i}",
                        )

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button(tr("🔄 프롬프트 다시 생성", "🔄 Regenerate Prompts"), key="regenerate_prompts"):
            with st.spinner(tr("프롬프트 생성 중...", "Generating prompts...")):
                stage.regenerate()
            st.rerun()
    with col2:
        if stage.has_output:
            st.download_button(
                tr("📥 프롬프트 목록 (TXT)", "📥 Prompt List (TXT)"),
                data=export_image_prompt_list(state.detailed_scenes),
                file_name="image_prompts.txt",
                mime="text/plain",
            )
    with col3:
        st.download_button(
            tr("📄 전체 프로젝트 다운로드", "📄 Download Full Project"),
            data=export_project(state),
            file_name="mv_director_project.md",
            mime="text/markdown",
        )

    st.markdown("---")
    render_navigation(WorkflowStep.IMAGE_PROMPTS, tr("영상 프롬프트 생성 →", "Generate Video Prompts →"))
