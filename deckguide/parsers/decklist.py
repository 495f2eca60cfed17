"""
Parser for pasted decklist text.

Decklist format:
    <quantity> <card name>

Example:
    Creatures
    4 Goblin Guide
    1 Sol Ring (Commander)

    18 Mountain

Anything that does not start with a digit (section headers, comments,
blank lines) is ignored. Annotations after the name are kept as part of
the name and sent to Scryfall as typed.
"""

import re
import string
import uuid

from deckguide.models.decklist import DecklistLine

# Pattern: "4 Goblin Guide"
# Groups: (quantity, card_name)
# ASCII digits only; str.isdigit() would also accept superscripts
DECKLIST_LINE_PATTERN = re.compile(r"^([0-9]+)\s+(.*)$")

DIGITS = frozenset(string.digits)


def _make_identity(name: str, quantity: int, position: int) -> str:
    return f"{name}-{quantity}-{position}-{uuid.uuid4()}"


def parse_decklist(text: str) -> list[DecklistLine]:
    """
    Parse decklist text into DecklistLine objects.

    Args:
        text: Raw multi-line decklist text

    Returns:
        List of DecklistLine in input order. Empty list if nothing looks
        like a card line.
    """
    if not text or not text.strip():
        return []

    # Keep only lines that start with a digit once trimmed
    candidates = [
        line.strip()
        for line in text.strip().split("\n")
        if line.strip()[:1] in DIGITS
    ]

    lines: list[DecklistLine] = []

    for position, line in enumerate(candidates):
        match = DECKLIST_LINE_PATTERN.match(line)
        if not match:
            # Digit-prefixed but no name (e.g. "4" or "4x Bolt") - skip silently
            continue

        quantity_text, name = match.groups()
        quantity = int(quantity_text, 10)
        name = name.strip()
        lines.append(
            DecklistLine(
                quantity=quantity,
                name=name,
                identity=_make_identity(name, quantity, position),
            )
        )

    return lines
