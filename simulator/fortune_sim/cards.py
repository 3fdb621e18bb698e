"""Card and Deck data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .enums import Suit, Rank

# Retrigger enhancements are clamped to this many extra triggers
MAX_RETRIGGER_COUNT = 10

ENHANCEMENT_KINDS = ("mult", "chips", "gold", "retrigger")


@dataclass(frozen=True)
class Enhancement:
    """A permanent card upgrade: kind is one of mult, chips, gold, retrigger."""
    kind: str
    value: int

    def __post_init__(self):
        if self.kind not in ENHANCEMENT_KINDS:
            raise ValueError(f"Unknown enhancement kind: {self.kind!r}")


@dataclass(frozen=True)
class Card:
    """A playing card. Identity is the id; cards are never mutated."""
    rank: Rank
    suit: Suit
    id: str = ""
    is_wild: bool = False
    is_gold: bool = False
    is_glass: bool = False
    trigger_slot: bool = False
    trigger_roulette: bool = False
    enhancement: Optional[Enhancement] = None

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, "id", f"{self.rank.display}_{self.suit.value}")

    @property
    def chip_value(self) -> int:
        """Chip value of this card for a single trigger."""
        if self.is_gold:
            return 0  # gold cards pay out gold instead
        chips = self.rank.chip_value
        if self.enhancement is not None and self.enhancement.kind == "chips":
            chips += self.enhancement.value
        return chips

    @property
    def trigger_count(self) -> int:
        if self.enhancement is not None and self.enhancement.kind == "retrigger":
            return 1 + max(0, min(self.enhancement.value, MAX_RETRIGGER_COUNT))
        return 1

    @property
    def is_special(self) -> bool:
        return bool(
            self.is_wild or self.is_gold or self.is_glass
            or self.trigger_slot or self.trigger_roulette
        )

    def display(self) -> str:
        s = f"{self.rank.display}{self.suit.symbol}"
        if self.is_wild:
            s += "[Wild]"
        if self.is_gold:
            s += "[Gold]"
        if self.enhancement is not None:
            s += f"({self.enhancement.kind}+{self.enhancement.value})"
        return s

    def __repr__(self) -> str:
        return self.display()


def standard_deck() -> list[Card]:
    """Create an ordered 52-card deck."""
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


@dataclass
class CardTriggers:
    slot_cards: list[Card] = field(default_factory=list)
    roulette_cards: list[Card] = field(default_factory=list)

    @property
    def has_slot_trigger(self) -> bool:
        return bool(self.slot_cards)

    @property
    def has_roulette_trigger(self) -> bool:
        return bool(self.roulette_cards)


def detect_card_triggers(cards: list[Card]) -> CardTriggers:
    """Collect played cards that carry slot or wheel triggers."""
    triggers = CardTriggers()
    for card in cards:
        if card.trigger_slot:
            triggers.slot_cards.append(card)
        if card.trigger_roulette:
            triggers.roulette_cards.append(card)
    return triggers


class Deck:
    """Draw pile plus discard pile.

    Every card lives in exactly one of the two piles. Drawing takes from the
    front of the draw pile; discarding appends to the discard pile.
    """

    def __init__(self, cards: Optional[list[Card]] = None, discard_pile: Optional[list[Card]] = None):
        self.cards = list(cards) if cards is not None else standard_deck()
        self.discard_pile = list(discard_pile) if discard_pile is not None else []

    def draw(self, count: int) -> list[Card]:
        """Remove up to `count` cards from the top of the draw pile."""
        count = max(0, min(count, len(self.cards)))
        drawn = self.cards[:count]
        del self.cards[:count]
        return drawn

    def discard(self, cards: list[Card]) -> None:
        self.discard_pile.extend(cards)

    def add(self, cards: list[Card]) -> None:
        """Add new cards to the bottom of the draw pile."""
        self.cards.extend(cards)

    def reshuffle(self, rng, extra: Optional[list[Card]] = None) -> None:
        """Fold the discard pile (and any extra cards) back in and shuffle."""
        pool = self.cards + self.discard_pile + list(extra or [])
        self.cards = rng.shuffle("shuffle", pool) if rng is not None else pool
        self.discard_pile = []

    @property
    def total(self) -> int:
        return len(self.cards) + len(self.discard_pile)

    def copy(self) -> "Deck":
        return Deck(self.cards, self.discard_pile)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self):
        return iter(self.cards)
