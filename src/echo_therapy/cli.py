"""
EchoTherapy Command Line
========================

Runs one reflection session end-to-end from a recorded file.

Usage:
    echo-therapy analyze recording.webm --out flower.svg
    echo-therapy analyze clip.mp4 --video --play

Backends come from config.yaml / ECHO_* environment variables; the default
mock backends need no API key.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from echo_therapy import __version__
from echo_therapy.capture import FileCaptureAdapter, MediaKind
from echo_therapy.config import load_config, setup_logging
from echo_therapy.models.analysis import CRISIS_HEADLINE, CRISIS_MESSAGE
from echo_therapy.models.state import SessionStatus
from echo_therapy.services.analysis import MockAnalysisClient
from echo_therapy.session import SessionController
from echo_therapy.visualization import render_svg


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="echo-therapy",
        description="Emotional reflection from a short voice or video recording.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to config.yaml")

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Reflect on a recorded file")
    analyze.add_argument("file", type=Path, help="Recorded audio or video file")
    analyze.add_argument("--video", action="store_true", help="Treat the file as video")
    analyze.add_argument("--mime", help="Override the detected mime type")
    analyze.add_argument("--out", type=Path, default=Path("flower.svg"), help="SVG output path")
    analyze.add_argument("--elapsed", type=float, default=None,
                         help="Animation time to render (defaults to fully bloomed)")
    analyze.add_argument("--seed", type=int, default=0, help="Seed for tremble and particles")
    analyze.add_argument("--style", help="Force a mock preset by flower style")
    analyze.add_argument("--play", action="store_true",
                         help="Wait for the affirmation to finish playing")

    return parser


async def run_analyze(args: argparse.Namespace, settings) -> int:
    """Run one session and report it. Returns the process exit code."""
    kind = MediaKind.VIDEO if args.video else MediaKind.AUDIO
    adapter = FileCaptureAdapter(args.file, mime_type=args.mime)

    analysis_client = MockAnalysisClient(style=args.style) if args.style else None
    controller = SessionController.from_settings(
        settings, capture_adapter=adapter, analysis_client=analysis_client
    )

    await controller.start_session(kind)

    if controller.state.status != SessionStatus.COMPLETED:
        print(controller.state.error_message, file=sys.stderr)
        return 1

    result = controller.result
    print(f"Emotion: {result.emotion}")
    print()
    print(result.empathy_summary)
    print()
    print("Coping plan:")
    for number, step in enumerate(result.coping_plan, start=1):
        print(f"  {number}. {step}")
    print()
    print(f'"{result.affirmation_text}"')

    if controller.needs_crisis_support:
        print()
        print(CRISIS_HEADLINE)
        print(CRISIS_MESSAGE)
        for resource in controller.crisis_resources:
            print(f"  {resource.label}: {resource.contact}")

    elapsed = args.elapsed
    if elapsed is None:
        elapsed = controller.timing.base_bloom_seconds * 2
    scene = controller.scene(elapsed=elapsed, seed=args.seed)
    args.out.write_text(render_svg(scene), encoding="utf-8")
    logger.info(f"Wrote {args.out}")
    print()
    print(f"Mood flower: {args.out}")

    if args.play:
        await controller.player.wait()
    else:
        controller.stop()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point."""
    args = build_parser().parse_args(argv)

    settings = load_config(args.config)
    setup_logging(settings)
    logger.info(f"Starting {settings.app.name} v{settings.app.version}")

    if args.command == "analyze":
        return asyncio.run(run_analyze(args, settings))
    return 2


if __name__ == "__main__":
    sys.exit(main())
