from typing import Any

import pytest

from deckguide.models.decklist import ResolvedCard


@pytest.fixture
def sample_decklist() -> str:
    """Sample pasted decklist with section headers and blank lines."""
    return """Creatures
4 Goblin Guide

Instants
4 Lightning Bolt

Lands
18 Mountain"""


@pytest.fixture
def goblin_guide_data() -> dict[str, Any]:
    return {
        "object": "card",
        "name": "Goblin Guide",
        "mana_cost": "{R}",
        "type_line": "Creature — Goblin Scout",
        "oracle_text": "Haste\nWhenever Goblin Guide attacks, defending player reveals "
        "the top card of their library.",
        "set_name": "Zendikar",
        "image_uris": {"normal": "https://cards.scryfall.io/normal/goblin-guide.jpg"},
    }


@pytest.fixture
def lightning_bolt_data() -> dict[str, Any]:
    return {
        "object": "card",
        "name": "Lightning Bolt",
        "mana_cost": "{R}",
        "type_line": "Instant",
        "oracle_text": "Lightning Bolt deals 3 damage to any target.",
        "set_name": "Magic 2011",
        "image_uris": {"normal": "https://cards.scryfall.io/normal/lightning-bolt.jpg"},
    }


@pytest.fixture
def mountain_data() -> dict[str, Any]:
    return {
        "object": "card",
        "name": "Mountain",
        "mana_cost": "",
        "type_line": "Basic Land — Mountain",
        "oracle_text": "({T}: Add {R}.)",
        "set_name": "Unfinity",
    }


@pytest.fixture
def resolved_cards(
    mountain_data: dict[str, Any],
    lightning_bolt_data: dict[str, Any],
) -> list[ResolvedCard]:
    return [
        ResolvedCard(data=mountain_data, quantity=18, display_identity="mountain-id"),
        ResolvedCard(data=lightning_bolt_data, quantity=4, display_identity="bolt-id"),
    ]
