"""Streamlit UI for MV Director."""
