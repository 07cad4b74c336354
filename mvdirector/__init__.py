"""MV Director - lyrics to shot-level music video prompts."""

__version__ = "0.1.0"
