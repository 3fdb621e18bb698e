"""Hand type identification.

Identifies the best poker hand in a set of played cards. Wild cards stand in
for whichever rank and suit produce the strongest hand.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from itertools import combinations_with_replacement
from typing import Optional

from .enums import Suit, Rank, HandType, HAND_BASE
from .cards import Card

# Candidate substitutions considered per wild card when several wilds are played
MAX_WILD_CANDIDATES = 20


@dataclass(frozen=True)
class HandResult:
    """Evaluated hand: category, tiebreak rank, the cards that scored and base values."""
    hand_type: HandType
    rank: int
    scoring_cards: tuple[Card, ...]
    base_chips: int
    base_mult: int

    def __repr__(self) -> str:
        cards = " ".join(c.display() for c in self.scoring_cards)
        return f"{self.hand_type.value} [{cards}] ({self.base_chips} x {self.base_mult})"


def evaluate_hand(cards: list[Card]) -> HandResult:
    """Evaluate played cards and return the best HandResult.

    Args:
        cards: The played cards (normally 1-5).

    Returns:
        HandResult whose scoring_cards are exactly the cards that make the hand.
    """
    if not cards:
        return _result(HandType.HIGH_CARD, 0, [])

    wild_idxs = [i for i, c in enumerate(cards) if c.is_wild]
    if not wild_idxs:
        hand_type, rank, idxs = _evaluate_natural(cards)
        return _result(hand_type, rank, [cards[i] for i in idxs])

    best: Optional[tuple[HandType, int, list[int]]] = None
    for substitutes in _wild_substitutions(cards, wild_idxs):
        trial = list(cards)
        for i, sub in zip(wild_idxs, substitutes):
            trial[i] = sub
        candidate = _evaluate_natural(trial)
        if best is None or (candidate[0].rank, candidate[1]) > (best[0].rank, best[1]):
            best = candidate

    hand_type, rank, idxs = best
    return _result(hand_type, rank, [cards[i] for i in idxs])


def compare_hands(a: HandResult, b: HandResult) -> int:
    """Positive if a beats b, negative if b beats a, 0 if equal."""
    diff = a.hand_type.rank - b.hand_type.rank
    if diff != 0:
        return diff
    return a.rank - b.rank


def _result(hand_type: HandType, rank: int, scoring: list[Card]) -> HandResult:
    base_chips, base_mult = HAND_BASE[hand_type]
    return HandResult(
        hand_type=hand_type,
        rank=rank,
        scoring_cards=tuple(scoring),
        base_chips=base_chips,
        base_mult=base_mult,
    )


# ---------------------------------------------------------------------------
# Natural evaluation (no wilds)
# ---------------------------------------------------------------------------

def _evaluate_natural(cards: list[Card]) -> tuple[HandType, int, list[int]]:
    """Return (hand_type, tiebreak_rank, scoring_indices)."""
    rank_counts = Counter(c.rank for c in cards)
    # Groups ordered by size then rank, largest first
    groups = sorted(rank_counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)

    flush_idxs = _find_flush(cards)
    straight = _find_straight(cards)

    if flush_idxs is not None:
        flush_cards = [cards[i] for i in flush_idxs]
        sf = _find_straight(flush_cards)
        if sf is not None:
            top, sub_idxs = sf
            idxs = [flush_idxs[i] for i in sub_idxs]
            if top == Rank.ACE:
                return HandType.ROYAL_FLUSH, _encode([top]), idxs
            return HandType.STRAIGHT_FLUSH, _encode([top]), idxs

    if groups[0][1] >= 4:
        quad = groups[0][0]
        kickers = [r for r, _ in groups[1:]]
        idxs = _indices_of_rank(cards, quad)[:4]
        return HandType.FOUR_OF_A_KIND, _encode([quad] + kickers[:1]), idxs

    if groups[0][1] >= 3 and len(groups) >= 2 and groups[1][1] >= 2:
        # A second triple also counts as the pair
        trips, pair = groups[0][0], groups[1][0]
        idxs = _indices_of_rank(cards, trips)[:3] + _indices_of_rank(cards, pair)[:2]
        return HandType.FULL_HOUSE, _encode([trips, pair]), sorted(idxs)

    if flush_idxs is not None:
        values = sorted((cards[i].rank for i in flush_idxs), reverse=True)
        return HandType.FLUSH, _encode(values), flush_idxs

    if straight is not None:
        top, idxs = straight
        return HandType.STRAIGHT, _encode([top]), idxs

    if groups[0][1] == 3:
        trips = groups[0][0]
        kickers = sorted((r for r, _ in groups[1:]), reverse=True)
        return HandType.THREE_OF_A_KIND, _encode([trips] + kickers[:2]), _indices_of_rank(cards, trips)[:3]

    pairs = [r for r, c in groups if c == 2]
    if len(pairs) >= 2:
        high, low = pairs[0], pairs[1]
        kickers = sorted((r for r in rank_counts if r not in (high, low)), reverse=True)
        idxs = _indices_of_rank(cards, high)[:2] + _indices_of_rank(cards, low)[:2]
        return HandType.TWO_PAIR, _encode([high, low] + kickers[:1]), sorted(idxs)

    if len(pairs) == 1:
        pair = pairs[0]
        kickers = sorted((r for r in rank_counts if r != pair), reverse=True)
        return HandType.PAIR, _encode([pair] + kickers[:3]), _indices_of_rank(cards, pair)[:2]

    # High card: only the highest card scores
    best_idx = max(range(len(cards)), key=lambda i: cards[i].rank)
    values = sorted((c.rank for c in cards), reverse=True)
    return HandType.HIGH_CARD, _encode(values[:5]), [best_idx]


def _find_flush(cards: list[Card]) -> Optional[list[int]]:
    """Indices of the five highest cards of a suit held five or more times."""
    if len(cards) < 5:
        return None
    by_suit: dict[Suit, list[int]] = {}
    for i, c in enumerate(cards):
        by_suit.setdefault(c.suit, []).append(i)
    best: Optional[list[int]] = None
    for idxs in by_suit.values():
        if len(idxs) < 5:
            continue
        top5 = sorted(idxs, key=lambda i: cards[i].rank, reverse=True)[:5]
        if best is None or [cards[i].rank for i in top5] > [cards[i].rank for i in best]:
            best = top5
    return sorted(best) if best is not None else None


def _find_straight(cards: list[Card]) -> Optional[tuple[int, list[int]]]:
    """Highest five-rank run, as (top rank value, indices). Ace-low counts with top 5."""
    if len(cards) < 5:
        return None
    first_idx: dict[int, int] = {}
    for i, c in enumerate(cards):
        first_idx.setdefault(int(c.rank), i)
    for top in range(14, 5, -1):
        run = list(range(top - 4, top + 1))
        if all(v in first_idx for v in run):
            return top, sorted(first_idx[v] for v in run)
    # Wheel: A-2-3-4-5
    wheel = [14, 2, 3, 4, 5]
    if all(v in first_idx for v in wheel):
        return 5, sorted(first_idx[v] for v in wheel)
    return None


def _indices_of_rank(cards: list[Card], rank: Rank) -> list[int]:
    """Get indices of cards matching a specific rank."""
    return [i for i, c in enumerate(cards) if c.rank == rank]


def _encode(values: list[int]) -> int:
    """Pack rank values (most significant first) into one comparable integer."""
    rank = 0
    for v in list(values)[:5]:
        rank = rank * 15 + int(v)
    return rank * 15 ** (5 - min(len(values), 5))


# ---------------------------------------------------------------------------
# Wild card substitution
# ---------------------------------------------------------------------------

def _wild_substitutions(cards: list[Card], wild_idxs: list[int]):
    """Yield tuples of stand-in cards, one per wild."""
    natural = [c for i, c in enumerate(cards) if i not in set(wild_idxs)]
    n_wild = len(wild_idxs)

    if not natural:
        yield tuple(_all_wild_shape(n_wild))
        return

    if n_wild == 1:
        for suit in Suit:
            for rank in Rank:
                yield (Card(rank=rank, suit=suit),)
        return

    for combo in combinations_with_replacement(_wild_candidates(natural), n_wild):
        yield combo


def _all_wild_shape(n: int) -> list[Card]:
    """Best shape for a selection made only of wilds."""
    if n >= 5:
        tops = [Rank.ACE, Rank.KING, Rank.QUEEN, Rank.JACK, Rank.TEN]
        return [Card(rank=tops[i % 5], suit=Suit.SPADES) for i in range(n)]
    suits = list(Suit)
    return [Card(rank=Rank.ACE, suit=suits[i % 4]) for i in range(n)]


def _wild_candidates(natural: list[Card]) -> list[Card]:
    """Stand-ins near the natural cards: matching ranks, straight neighbours, natural suits."""
    ranks: set[int] = {Rank.ACE}
    for c in natural:
        for delta in range(-4, 5):
            v = int(c.rank) + delta
            if 2 <= v <= 14:
                ranks.add(v)
    suits = list(dict.fromkeys(c.suit for c in natural))
    natural_ranks = {c.rank for c in natural}

    candidates = [Card(rank=Rank(v), suit=s) for v in ranks for s in suits]
    # Ranks already held first (pairs and sets), then high to low
    candidates.sort(key=lambda c: (c.rank in natural_ranks, c.rank), reverse=True)
    return candidates[:MAX_WILD_CANDIDATES]
