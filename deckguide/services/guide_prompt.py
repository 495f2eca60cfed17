"""
Guide prompt builder.

Formats resolved cards into the fixed instructional prompt sent to the
text generator. The template wording is the contract with the model:
section headings below are what the presentation layer expects back.
"""

from deckguide.models.decklist import ResolvedCard
from deckguide.models.failure import FailureKind, KnownError

# Section headings the generated guide must contain, in order
GUIDE_SECTIONS = (
    "Deck Archetype and Core Strategy",
    "Key Cards and Synergies",
    "Mana Curve Analysis",
    "Strengths",
    "Weaknesses",
    "Mulligan Guide",
    "General Matchup Considerations",
)

GUIDE_PROMPT_TEMPLATE = """
    You are an expert Magic: The Gathering deckbuilder and strategist.
    Based on the following decklist, generate a comprehensive deck guide.
    The guide should be detailed, insightful, and helpful for a player looking to understand and improve their deck.

    The guide must include the following sections, clearly marked with Markdown headings:
    # Deck Archetype and Core Strategy
    * Identify the primary archetype (e.g., Aggro, Control, Midrange, Combo, Tempo, Prison, Voltron, etc.).
    * Explain the deck's main game plan, how it aims to win, and its key phases (early, mid, late game).

    # Key Cards and Synergies
    * Highlight 3-5 of the most crucial cards in the deck.
    * Explain why these cards are important and how they contribute to the deck's strategy.
    * Describe significant card synergies and powerful interactions between cards.

    # Mana Curve Analysis
    * Provide a brief analysis of the deck's mana curve.
    * Comment on whether it supports the deck's strategy (e.g., low curve for aggro, higher curve for control).
    * Suggest any potential improvements or observations regarding mana efficiency.

    # Strengths
    * List the main advantages of this deck. What does it do well?
    * Against what types of decks or strategies does it typically perform strongly?

    # Weaknesses
    * Identify the deck's vulnerabilities and potential pain points.
    * Against what types of decks or strategies does it typically struggle?
    * Suggest common answers or disruption that opponents might use against it.

    # Mulligan Guide
    * Offer general advice on what to look for in an opening hand (e.g., lands, early plays, key pieces).
    * Provide examples of good vs. bad opening hands.

    # General Matchup Considerations
    * Briefly discuss how the deck might approach common matchups (e.g., playing against other aggro decks, control decks, or combo decks).
    * Suggest general sideboarding considerations if applicable (even if no sideboard is provided).

    ---
    **Decklist:**
    {decklist}
    ---
    """


class EmptyDeckError(KnownError):
    """Raised when a prompt is requested for zero cards."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.EMPTY_RESULT,
            message="No card data provided to generate a deck guide.",
            suggestion="Enter at least one card line, e.g. '4 Lightning Bolt'.",
            status_code=400,
        )


def format_card(card: ResolvedCard) -> str:
    """
    Format one card as a two-line block.

    Example:
        4 Lightning Bolt (MAGIC 2011) - Mana: {R} - Type: Instant
        Oracle Text: Lightning Bolt deals 3 damage to any target.
    """
    set_name = f"({card.set_name.upper()})" if card.set_name else ""
    mana_cost = card.mana_cost or "N/A"
    type_line = card.type_line or "N/A"
    oracle_text = card.oracle_text or "No Oracle Text"

    return (
        f"{card.quantity} {card.name} {set_name} - Mana: {mana_cost} - Type: {type_line}\n"
        f"Oracle Text: {oracle_text}"
    )


def format_decklist(cards: list[ResolvedCard]) -> str:
    """Card blocks separated by a blank line, in decklist order."""
    return "\n\n".join(format_card(card) for card in cards)


def build_guide_prompt(cards: list[ResolvedCard]) -> str:
    """
    Build the full guide prompt.

    Raises:
        EmptyDeckError: If cards is empty
    """
    if not cards:
        raise EmptyDeckError()

    return GUIDE_PROMPT_TEMPLATE.format(decklist=format_decklist(cards))
