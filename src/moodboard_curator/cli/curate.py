"""
Interactive terminal curation loop.

Usage:
    # Default seed vibe
    moodboard-curate

    # Custom seed
    moodboard-curate "stormy sea, small boat, dramatic"

    # Start from a preset, with an LLM enrichment provider
    moodboard-curate --preset 2 --provider ollama

Commands inside the loop:
    a N      accept the candidate in slot N
    r N      reject the candidate in slot N
    s TEXT   analyze TEXT and search (optimistic + enrichment)
    n TEXT   manual re-search: full reset onto TEXT
    q        quit
"""

import argparse
import asyncio
import sys
from typing import Optional, TextIO

import structlog

from moodboard_curator.config import Settings, settings
from moodboard_curator.curation.orchestrator import CurationOrchestrator
from moodboard_curator.logging_config import setup_logging
from moodboard_curator.models.api_models import SessionView
from moodboard_curator.providers.enrichment import create_enrichment_client
from moodboard_curator.providers.image_search import OpenverseClient


# Setup logging
setup_logging()
logger = structlog.get_logger(__name__)


HELP_TEXT = "Commands: a N (accept), r N (reject), s TEXT (search), n TEXT (reset), q (quit)"


def render(view: SessionView, out: TextIO = sys.stdout) -> None:
    """Print the visible slots, kept list and status line."""
    print("", file=out)
    print(f"Vibe: {view.visible_text}", file=out)
    for index, item in enumerate(view.visible):
        print(f"  [{index}] {item.title or 'Untitled'} - {item.attribution()}", file=out)
        print(f"      {item.thumbnail_ref}", file=out)
    if not view.visible:
        print("  (no candidates)", file=out)
    if view.kept:
        print(f"Kept ({len(view.kept)}):", file=out)
        for item in view.kept:
            print(f"  * {item.title or 'Untitled'} <{item.full_ref}>", file=out)
    if view.loading:
        print("Searching…", file=out)
    if view.error:
        print(f"Error: {view.error}", file=out)


async def run_command(orchestrator: CurationOrchestrator, line: str) -> bool:
    """
    Execute one loop command.

    Returns:
        False when the loop should stop
    """
    command, _, argument = line.strip().partition(" ")
    argument = argument.strip()

    if command in ("q", "quit", "exit"):
        return False
    if command in ("a", "r"):
        try:
            slot = int(argument)
        except ValueError:
            print(f"Expected a slot number, got {argument!r}", file=sys.stderr)
            return True
        action = orchestrator.accept if command == "a" else orchestrator.reject
        try:
            await action(slot)
        except IndexError as e:
            print(f"Error: {e}", file=sys.stderr)
        return True
    if command == "s" and argument:
        await orchestrator.analyze_and_search(argument)
        return True
    if command == "n" and argument:
        try:
            await orchestrator.manual_research(argument)
        except PermissionError as e:
            print(f"Error: {e}", file=sys.stderr)
        return True

    print(HELP_TEXT, file=sys.stderr)
    return True


def resolve_config(no_research: bool = False) -> Settings:
    """Per-run settings; the process-wide ``settings`` object is left untouched."""
    if no_research:
        return settings.model_copy(update={"enable_manual_research": False})
    return settings


async def curate(seed: str, provider: Optional[str] = None, config: Optional[Settings] = None) -> None:
    """Run the interactive loop until the user quits or stdin closes."""
    config = config or settings
    image_search = OpenverseClient()
    enrichment = create_enrichment_client(provider=provider)
    orchestrator = CurationOrchestrator.create(
        image_search, enrichment, seed_query=seed, config=config
    )

    try:
        await orchestrator.start()
        render(orchestrator.snapshot())
        print(HELP_TEXT)

        loop = asyncio.get_running_loop()
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            if not line.strip():
                continue
            if not await run_command(orchestrator, line):
                break
            render(orchestrator.snapshot())
    finally:
        await image_search.close()
        await enrichment.close()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Moodboard Curator - curate openly licensed images for a vibe",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Presets:
{chr(10).join(f"  {i}: {p}" for i, p in enumerate(settings.presets))}

Enrichment providers:
  heuristic (default), ollama, openai, deepseek, openrouter
        """,
    )

    parser.add_argument(
        "seed",
        nargs="?",
        default=None,
        help="Seed vibe text (default: configured seed)",
    )

    parser.add_argument(
        "--preset",
        type=int,
        default=None,
        help="Start from preset N instead of a seed text",
    )

    parser.add_argument(
        "--provider",
        "-p",
        type=str,
        default=None,
        help="Override the enrichment provider",
    )

    parser.add_argument(
        "--no-research",
        action="store_true",
        help="Disable the manual re-search command",
    )

    args = parser.parse_args()

    seed = args.seed or settings.default_seed_query
    if args.preset is not None:
        if not 0 <= args.preset < len(settings.presets):
            print(f"Error: preset must be between 0 and {len(settings.presets) - 1}", file=sys.stderr)
            sys.exit(1)
        seed = settings.presets[args.preset]

    config = resolve_config(no_research=args.no_research)

    try:
        asyncio.run(curate(seed, provider=args.provider, config=config))
    except KeyboardInterrupt:
        pass
    except ValueError as e:
        logger.error("cli_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
