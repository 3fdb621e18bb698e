"""Enumerations and constants for the Fortune's Hand engine."""

from __future__ import annotations
from enum import Enum, IntEnum


class Suit(str, Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOL[self]


_SUIT_SYMBOL: dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


class Rank(IntEnum):
    """Card ranks with numeric values for comparison. Ace = 14."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def chip_value(self) -> int:
        """Chip value of this rank when scored."""
        if self.value <= 10:
            return self.value
        if self.value in (11, 12, 13):  # J, Q, K
            return 10
        return 11  # Ace

    @property
    def display(self) -> str:
        _map = {11: "J", 12: "Q", 13: "K", 14: "A"}
        return _map.get(self.value, str(self.value))

    @classmethod
    def from_display(cls, text: str) -> "Rank":
        for rank in cls:
            if rank.display == text.upper():
                return rank
        raise ValueError(f"Unknown rank: {text!r}")


class Phase(str, Enum):
    IDLE = "IDLE"
    SLOT_PHASE = "SLOT_PHASE"
    DRAW_PHASE = "DRAW_PHASE"
    PLAY_PHASE = "PLAY_PHASE"
    SCORE_PHASE = "SCORE_PHASE"
    ROULETTE_PHASE = "ROULETTE_PHASE"
    REWARD_PHASE = "REWARD_PHASE"
    SHOP_PHASE = "SHOP_PHASE"
    GAME_OVER = "GAME_OVER"


class HandType(str, Enum):
    """Poker hand categories, ordered by rank."""
    HIGH_CARD = "high_card"
    PAIR = "pair"
    TWO_PAIR = "two_pair"
    THREE_OF_A_KIND = "three_of_a_kind"
    STRAIGHT = "straight"
    FLUSH = "flush"
    FULL_HOUSE = "full_house"
    FOUR_OF_A_KIND = "four_of_a_kind"
    STRAIGHT_FLUSH = "straight_flush"
    ROYAL_FLUSH = "royal_flush"

    @property
    def rank(self) -> int:
        return _HAND_RANK[self]


# Hand type rank (higher = better)
_HAND_RANK: dict[HandType, int] = {
    HandType.HIGH_CARD: 0,
    HandType.PAIR: 1,
    HandType.TWO_PAIR: 2,
    HandType.THREE_OF_A_KIND: 3,
    HandType.STRAIGHT: 4,
    HandType.FLUSH: 5,
    HandType.FULL_HOUSE: 6,
    HandType.FOUR_OF_A_KIND: 7,
    HandType.STRAIGHT_FLUSH: 8,
    HandType.ROYAL_FLUSH: 9,
}

# Base chips and mult for each hand type
HAND_BASE: dict[HandType, tuple[int, int]] = {
    HandType.ROYAL_FLUSH:      (100, 8),
    HandType.STRAIGHT_FLUSH:   (100, 8),
    HandType.FOUR_OF_A_KIND:   ( 60, 7),
    HandType.FULL_HOUSE:       ( 40, 4),
    HandType.FLUSH:            ( 35, 4),
    HandType.STRAIGHT:         ( 30, 4),
    HandType.THREE_OF_A_KIND:  ( 30, 3),
    HandType.TWO_PAIR:         ( 20, 2),
    HandType.PAIR:             ( 10, 2),
    HandType.HIGH_CARD:        (  5, 1),
}


class SlotSymbol(str, Enum):
    CARD = "card"
    TARGET = "target"
    GOLD = "gold"
    CHIP = "chip"
    STAR = "star"
    SKULL = "skull"
    WILD = "wild"


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class ItemType(str, Enum):
    JOKER = "joker"
    CARD = "card"
    PACK = "pack"
    VOUCHER = "voucher"


class BonusType(str, Enum):
    CHIPS = "chips"
    MULT = "mult"
    XMULT = "xmult"
