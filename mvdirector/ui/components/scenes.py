"""Scene card component shared by the storyboard pages."""

import streamlit as st

from mvdirector.models.localization import Locale
from mvdirector.models.schemas import Scene
from mvdirector.ui.components.state import tr


def render_scene_card(scene: Scene, locale: Locale, label: str) -> None:
    """Render one scene or shot with its localized fields."""
    with st.container(border=True):
        col1, col2 = st.columns([1, 4])
        with col1:
            st.markdown(f"**{label} {scene.scene_number}**")
            st.caption(scene.estimated_duration)
        with col2:
            if scene.lyrics_segment:
                st.markdown(f"> {scene.lyrics_segment}")
            st.markdown(f"**{tr('장면', 'Action')}:** {scene.text('visual_action', locale)}")
            st.markdown(f"**{tr('카메라', 'Camera')}:** {scene.text('camera_movement', locale)}")
            st.markdown(f"**{tr('조명/분위기', 'Lighting/Mood')}:** {scene.text('mood_and_lighting', locale)}")
