from deckguide.parsers.decklist import parse_decklist

__all__ = [
    "parse_decklist",
]
