"""
Generate a deck guide from the command line.

The terminal skin over the guide pipeline. Reads a decklist from a file
(or stdin), resolves it against Scryfall, and prints the generated guide.

Usage:
    python -m deckguide.jobs.generate_guide my_deck.txt
    cat my_deck.txt | python -m deckguide.jobs.generate_guide --show-cards
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from deckguide.models.decklist import GuideResult
from deckguide.models.failure import KnownError
from deckguide.services.guide_generator import GuideGenerator
from deckguide.services.guide_pipeline import GuidePipeline

logger = logging.getLogger(__name__)


def read_decklist(path: Path | None) -> str:
    """Read decklist text from a file, or stdin when no path is given."""
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def format_card_table(result: GuideResult) -> str:
    """One line per resolved card: quantity, name, mana cost, type line."""
    rows = []
    for card in result.cards:
        row = f"{card.quantity:>3} {card.name}  {card.mana_cost or ''}  {card.type_line or ''}"
        rows.append(row.rstrip())
    return "\n".join(rows)


async def run_generate(text: str, model: str | None = None) -> GuideResult:
    """Run the pipeline once for a decklist."""
    pipeline = GuidePipeline(generator=GuideGenerator(model=model))
    return await pipeline.run(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deckguide",
        description="Generate a Magic: The Gathering deck strategy guide.",
    )
    parser.add_argument(
        "decklist",
        nargs="?",
        type=Path,
        help="Decklist file ('<quantity> <card name>' per line). Reads stdin if omitted.",
    )
    parser.add_argument("--model", default=None, help="Gemini model name")
    parser.add_argument(
        "--show-cards",
        action="store_true",
        help="Print the resolved card list before the guide",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        text = read_decklist(args.decklist)
    except OSError as e:
        print(f"Error: could not read decklist: {e}", file=sys.stderr)
        return 1

    try:
        result = asyncio.run(run_generate(text, model=args.model))
    except KnownError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130

    if args.show_cards:
        print(format_card_table(result))
        print()

    print(result.guide)
    return 0


if __name__ == "__main__":
    sys.exit(main())
