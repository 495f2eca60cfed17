"""
Decklist Models.

Types that flow through one guide generation, in pipeline order:
parsed DecklistLine, then ResolvedCard (or ResolutionFailure), then
GuideResult.

INVARIANTS:
- DecklistLine.name is kept as typed apart from surrounding whitespace
- ResolvedCard.data is the Scryfall record, never edited locally
- All models are frozen (immutable after construction)
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class DecklistLine:
    """
    One parsed line of a user decklist.

    Attributes:
        quantity: Number of copies
        name: Card name exactly as typed, including annotations like "(Commander)"
        identity: Unique within one parse call, used only to key display lists
    """

    quantity: int
    name: str
    identity: str


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """
    A Scryfall card record paired with the decklist line it came from.

    The card record is kept opaque; Scryfall decides which fields exist.
    """

    data: dict[str, Any]
    quantity: int
    display_identity: str

    @property
    def name(self) -> str:
        return str(self.data.get("name", ""))

    @property
    def mana_cost(self) -> str | None:
        return self.data.get("mana_cost") or None

    @property
    def type_line(self) -> str | None:
        return self.data.get("type_line") or None

    @property
    def oracle_text(self) -> str | None:
        return self.data.get("oracle_text") or None

    @property
    def set_name(self) -> str | None:
        return self.data.get("set_name") or None

    @property
    def image_uri(self) -> str | None:
        """
        Normal-size image URL.

        Double-faced cards carry images per face, so fall back to the front face.
        """
        images = self.data.get("image_uris")
        if isinstance(images, dict) and images.get("normal"):
            return str(images["normal"])

        faces = self.data.get("card_faces")
        if isinstance(faces, list) and faces:
            face_images = faces[0].get("image_uris") if isinstance(faces[0], dict) else None
            if isinstance(face_images, dict) and face_images.get("normal"):
                return str(face_images["normal"])

        return None

    def as_record(self) -> dict[str, Any]:
        """External fields merged with local annotations."""
        return {
            **self.data,
            "quantity": self.quantity,
            "display_identity": self.display_identity,
        }


@dataclass(frozen=True, slots=True)
class ResolutionFailure:
    """A decklist line that could not be matched to a card."""

    line: DecklistLine
    reason: str

    @property
    def message(self) -> str:
        """User-facing message for this line."""
        return f'Could not find card: "{self.line.name}". {self.reason}'


@dataclass(frozen=True)
class GuideResult:
    """Output of one successful pipeline run."""

    cards: list[ResolvedCard] = field(default_factory=list)
    guide: str = ""
