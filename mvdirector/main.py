"""Main entry point for MV Director CLI."""

import argparse
import logging
import sys
from pathlib import Path


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="MV Director - lyrics to music video storyboards and AI prompts"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # UI command
    subparsers.add_parser("ui", help="Launch the Streamlit UI")

    # Run command
    run_parser = subparsers.add_parser(
        "run", help="Run every stage headlessly and write the project markdown"
    )
    run_parser.add_argument("--lyrics", type=Path, required=True, help="Path to lyrics file")
    run_parser.add_argument("--output", type=Path, help="Output markdown path")
    run_parser.add_argument(
        "--locale", choices=["ko", "en"], default=None, help="Locale of the exported text"
    )
    run_parser.add_argument(
        "--story", type=int, default=1, help="Which generated story to use (1-based)"
    )

    args = parser.parse_args()

    if args.command == "ui":
        run_ui()
    elif args.command == "run":
        sys.exit(run_pipeline(args.lyrics, args.output, args.locale, args.story))
    else:
        parser.print_help()


def run_ui():
    """Launch the Streamlit UI."""
    import subprocess

    app_path = Path(__file__).parent / "ui" / "app.py"
    subprocess.run([sys.executable, "-m", "streamlit", "run", str(app_path)])


def run_pipeline(lyrics_path: Path, output_path: Path, locale: str, story: int) -> int:
    """Generate stories through video prompts and export the project."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    from mvdirector.config import config
    from mvdirector.errors import GenerationError
    from mvdirector.models.localization import Locale
    from mvdirector.pipeline.session import PipelineSession
    from mvdirector.services.markdown_exporter import export_project

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Configuration error: {error}")
        return 1

    session = PipelineSession.create(config)
    if locale:
        session.set_locale(locale)
    if not session.credentials.has_credential():
        print("No API key configured. Set GEMINI_API_KEY (or ANTHROPIC_API_KEY for TEXT_BACKEND=claude).")
        return 1

    print(f"Reading lyrics: {lyrics_path}")
    session.set_lyrics(lyrics_path.read_text(encoding="utf-8"))

    try:
        state = session.run_all(story_index=story - 1)
    except (GenerationError, IndexError) as e:
        print(f"Pipeline failed: {e}")
        return 1

    print(f"Story: {state.selected_story.text('title', session.state.locale)}")
    print(f"Characters: {len(state.characters)}")
    print(f"Base scenes: {len(state.base_scenes)}")
    print(f"Shots: {len(state.detailed_scenes)}")

    if output_path is None:
        config.ensure_directories()
        output_path = config.exports_dir / f"{lyrics_path.stem}_mv_project.md"
    output_path.write_text(export_project(state, Locale(session.state.locale)), encoding="utf-8")
    print(f"Project written to: {output_path}")
    return 0


if __name__ == "__main__":
    main()
