"""Command-line interface for VisionForge."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from visionforge.credentials import InteractiveKeySelector, ensure_key_selected
from visionforge.exceptions import ErrorKind
from visionforge.history import HistoryStore
from visionforge.models import (
    ASPECT_RATIOS,
    IMAGE_SIZES,
    MODELS,
    GenerationOutcome,
    GenerationSettings,
    HistoryEntry,
)
from visionforge.settings import get_settings
from visionforge.studio import Studio
from visionforge.utils import load_image_as_base64


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI output.

    Args:
        verbose: Enable debug logging.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def list_models() -> None:
    """Print available models."""
    print("Available models:\n")
    for key, config in MODELS.items():
        print(f"  {key}:")
        print(f"    Name: {config['name']}")
        print(f"    ID: {config['id']}")
        print(f"    Description: {config['description']}")
        print()


def _print_entry(entry: HistoryEntry, verbose: bool = False) -> None:
    created = datetime.fromtimestamp(entry.timestamp / 1000, tz=UTC)
    size = f" {entry.config.size}" if entry.config.size else ""
    print(
        f"{entry.id}  {created:%Y-%m-%d %H:%M:%S}  "
        f"{entry.config.model}{size} {entry.config.aspect_ratio}"
    )
    prompt = entry.prompt if verbose else entry.prompt[:100]
    print(f"    {prompt}{'' if verbose or len(entry.prompt) <= 100 else '...'}")
    for source in entry.sources:
        print(f"    source: {source.title or source.uri} <{source.uri}>")


def _run_generation(studio: Studio, settings: GenerationSettings) -> GenerationOutcome:
    outcome = studio.generate(settings)
    if outcome.error_kind is not ErrorKind.CREDENTIAL_MISSING:
        return outcome

    print("API key selection required.")
    if studio.selector is not None and ensure_key_selected(studio.selector):
        return studio.generate(settings)
    return outcome


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate one image and record it in history.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success).
    """
    settings = get_settings()

    reference_image = mime_type = None
    if args.reference:
        reference_image, mime_type = load_image_as_base64(args.reference)

    generation = GenerationSettings(
        prompt=args.prompt,
        aspect_ratio=args.aspect or settings.default_aspect_ratio,
        model=args.model or settings.default_model,
        image_size=args.size or settings.default_image_size,
        reference_image=reference_image,
        mime_type=mime_type,
    )

    enhance = settings.enhance_by_default if args.enhance is None else args.enhance
    studio = Studio(
        HistoryStore.from_settings(settings),
        selector=InteractiveKeySelector(),
        enhance=enhance,
    )

    try:
        outcome = _run_generation(studio, generation)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if not outcome.ok or outcome.entry is None:
        print(f"Error ({outcome.error_kind.value if outcome.error_kind else '?'}): {outcome.message}")
        return 1

    _print_entry(outcome.entry, verbose=True)

    if args.output_dir:
        path = studio.export(outcome.entry.id, args.output_dir)
        print(f"Image saved to: {path}")

    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """List, show, delete, clear or export history entries.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code.
    """
    store = HistoryStore.from_settings(get_settings())

    if args.action == "list":
        if not len(store):
            print("History is empty.")
        for entry in store:
            _print_entry(entry)
        return 0

    if args.action == "clear":
        store.clear()
        print("History cleared.")
        return 0

    if not args.entry_id:
        print(f"Error: 'history {args.action}' needs an entry id")
        return 1

    entry = store.get(args.entry_id)
    if entry is None:
        print(f"Error: no history entry with id {args.entry_id!r}")
        return 1

    if args.action == "show":
        _print_entry(entry, verbose=True)
    elif args.action == "delete":
        store.delete(entry.id)
        print(f"Deleted {entry.id}.")
    elif args.action == "export":
        studio = Studio(store)
        path = studio.export(entry.id, args.output_dir or Path.cwd())
        print(f"Image saved to: {path}")
    return 0


def cmd_models(_args: argparse.Namespace) -> int:
    """List model variants."""
    list_models()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="visionforge",
        description="Generate images with Google Gemini and keep a local history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate "A serene mountain landscape at dawn"
  %(prog)s generate "A neon city at night" -m pro --size 2K --aspect 16:9 -o out
  %(prog)s generate "Make it snow" -r photo.png --no-enhance

  %(prog)s history list
  %(prog)s history export 3f9a2c1b -o exports
  %(prog)s history clear
        """,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate an image")
    generate.add_argument("prompt", help="Text prompt describing the image")
    generate.add_argument(
        "-m",
        "--model",
        choices=list(MODELS.keys()),
        help="Model to use (default from settings)",
    )
    generate.add_argument(
        "--aspect",
        choices=ASPECT_RATIOS,
        help="Aspect ratio: 1:1, 3:4, 4:3, 9:16, 16:9",
    )
    generate.add_argument(
        "--size",
        choices=IMAGE_SIZES,
        help="Image size (pro model only): 1K, 2K, 4K",
    )
    generate.add_argument(
        "-r",
        "--reference",
        type=Path,
        help="Reference image to edit or draw style from",
    )
    generate.add_argument(
        "--enhance",
        dest="enhance",
        action="store_true",
        default=None,
        help="Rewrite the prompt with a text model first",
    )
    generate.add_argument(
        "--no-enhance",
        dest="enhance",
        action="store_false",
        help="Send the prompt as written",
    )
    generate.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Also save the image into this directory",
    )
    generate.set_defaults(func=cmd_generate)

    history = subparsers.add_parser("history", help="Manage generated images")
    history.add_argument(
        "action",
        choices=["list", "show", "delete", "clear", "export"],
    )
    history.add_argument("entry_id", nargs="?", help="History entry id")
    history.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Export directory (default: current directory)",
    )
    history.set_defaults(func=cmd_history)

    models = subparsers.add_parser("models", help="List available models")
    models.set_defaults(func=cmd_models)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except (FileNotFoundError, ImportError, ValidationError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
