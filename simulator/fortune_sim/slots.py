"""Slot resolver — three weighted reels and their effect bundles.

A spin draws three independent symbols. Three of a kind (wilds join any
triple) resolves to that symbol's bundle, with star as the jackpot; otherwise
gold, chip and star each contribute a small fixed reward.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .enums import SlotSymbol
from .rng import RNGState

logger = logging.getLogger(__name__)

REELS = 3

# Base reel weights, in reel-strip order
SYMBOL_WEIGHTS: dict[SlotSymbol, float] = {
    SlotSymbol.CARD: 25,
    SlotSymbol.TARGET: 20,
    SlotSymbol.GOLD: 20,
    SlotSymbol.CHIP: 15,
    SlotSymbol.STAR: 5,
    SlotSymbol.SKULL: 10,
    SlotSymbol.WILD: 5,
}


# ---------------------------------------------------------------------------
# Effect bundles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CardBonus:
    extra_draw: int = 0
    hand_size: int = 0
    score_multiplier: float = 1.0


@dataclass(frozen=True)
class RouletteBonus:
    safe_zone_bonus: float = 0
    max_multiplier: float = 0
    free_spins: int = 0

    def merge(self, other: "RouletteBonus") -> "RouletteBonus":
        return RouletteBonus(
            safe_zone_bonus=self.safe_zone_bonus + other.safe_zone_bonus,
            max_multiplier=self.max_multiplier + other.max_multiplier,
            free_spins=self.free_spins + other.free_spins,
        )


@dataclass(frozen=True)
class InstantReward:
    gold: int = 0
    chips: int = 0


@dataclass(frozen=True)
class Penalty:
    discard_cards: int = 0
    skip_roulette: bool = False
    lose_gold: int = 0


@dataclass(frozen=True)
class SlotEffects:
    card_bonus: CardBonus = field(default_factory=CardBonus)
    roulette_bonus: RouletteBonus = field(default_factory=RouletteBonus)
    instant: InstantReward = field(default_factory=InstantReward)
    penalty: Penalty = field(default_factory=Penalty)

    def merge(self, other: "SlotEffects") -> "SlotEffects":
        """Additive merge; score multipliers multiply, skip flags OR together."""
        return SlotEffects(
            card_bonus=CardBonus(
                extra_draw=self.card_bonus.extra_draw + other.card_bonus.extra_draw,
                hand_size=self.card_bonus.hand_size + other.card_bonus.hand_size,
                score_multiplier=self.card_bonus.score_multiplier * other.card_bonus.score_multiplier,
            ),
            roulette_bonus=self.roulette_bonus.merge(other.roulette_bonus),
            instant=InstantReward(
                gold=self.instant.gold + other.instant.gold,
                chips=self.instant.chips + other.instant.chips,
            ),
            penalty=Penalty(
                discard_cards=self.penalty.discard_cards + other.penalty.discard_cards,
                skip_roulette=self.penalty.skip_roulette or other.penalty.skip_roulette,
                lose_gold=self.penalty.lose_gold + other.penalty.lose_gold,
            ),
        )


@dataclass(frozen=True)
class SlotModifiers:
    """Reel adjustments contributed by jokers."""
    symbol_weights: dict = field(default_factory=dict)
    guaranteed_symbol: Optional[SlotSymbol] = None
    reroll_count: int = 0

    def merge(self, other: "SlotModifiers") -> "SlotModifiers":
        """Weights are overwritten per symbol, rerolls summed, last guarantee wins."""
        return SlotModifiers(
            symbol_weights={**self.symbol_weights, **other.symbol_weights},
            guaranteed_symbol=other.guaranteed_symbol or self.guaranteed_symbol,
            reroll_count=self.reroll_count + other.reroll_count,
        )


@dataclass(frozen=True)
class SlotResult:
    symbols: tuple[SlotSymbol, ...]
    is_jackpot: bool
    effects: SlotEffects
    combination: Optional[str] = None


# Three-of-a-kind bundles
TRIPLE_EFFECTS: dict[SlotSymbol, SlotEffects] = {
    SlotSymbol.CARD: SlotEffects(card_bonus=CardBonus(extra_draw=2, hand_size=1)),
    SlotSymbol.TARGET: SlotEffects(roulette_bonus=RouletteBonus(safe_zone_bonus=15)),
    SlotSymbol.GOLD: SlotEffects(instant=InstantReward(gold=30)),
    SlotSymbol.CHIP: SlotEffects(instant=InstantReward(chips=50)),
    SlotSymbol.STAR: SlotEffects(
        card_bonus=CardBonus(extra_draw=2, hand_size=2, score_multiplier=2.0),
        roulette_bonus=RouletteBonus(safe_zone_bonus=20, max_multiplier=5, free_spins=1),
        instant=InstantReward(gold=50, chips=100),
    ),
    SlotSymbol.SKULL: SlotEffects(
        penalty=Penalty(discard_cards=2, skip_roulette=True, lose_gold=10),
    ),
}

JACKPOT_SYMBOL = SlotSymbol.STAR

# Per-symbol contributions outside a triple
SINGLE_EFFECTS: dict[SlotSymbol, SlotEffects] = {
    SlotSymbol.GOLD: SlotEffects(instant=InstantReward(gold=3)),
    SlotSymbol.CHIP: SlotEffects(instant=InstantReward(chips=10)),
    SlotSymbol.STAR: SlotEffects(instant=InstantReward(gold=5, chips=5)),
}


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def symbol_probabilities(modifiers: Optional[SlotModifiers] = None) -> dict[SlotSymbol, float]:
    """Reel weights after overrides, normalized to sum to 1."""
    weights = dict(SYMBOL_WEIGHTS)
    if modifiers is not None:
        for key, weight in modifiers.symbol_weights.items():
            symbol = SlotSymbol(key)
            if weight < 0:
                raise ValueError(f"Negative weight for slot symbol {symbol.value}")
            weights[symbol] = weight
    total = sum(weights.values())
    return {s: (w / total if total > 0 else 0.0) for s, w in weights.items()}


def select_symbol(random_value: float, modifiers: Optional[SlotModifiers] = None) -> SlotSymbol:
    """Map a uniform value in [0, 1) onto a symbol."""
    if modifiers is not None and modifiers.guaranteed_symbol is not None:
        return modifiers.guaranteed_symbol
    cumulative = 0.0
    for symbol, probability in symbol_probabilities(modifiers).items():
        cumulative += probability
        if random_value < cumulative:
            return symbol
    return SlotSymbol.CARD  # float rounding fallback


def find_triple(symbols: Sequence[SlotSymbol]) -> Optional[SlotSymbol]:
    """Symbol of a three-of-a-kind, treating wilds as matching anything."""
    natural = {s for s in symbols if s != SlotSymbol.WILD}
    if not natural:
        return JACKPOT_SYMBOL
    if len(natural) == 1:
        return natural.pop()
    return None


def resolve_effects(symbols: Sequence[SlotSymbol]) -> tuple[SlotEffects, bool, Optional[str]]:
    """Return (effects, is_jackpot, combination_name) for a set of reels."""
    triple = find_triple(symbols)
    if triple is not None and triple in TRIPLE_EFFECTS:
        return TRIPLE_EFFECTS[triple], triple == JACKPOT_SYMBOL, f"{triple.value}_triple"

    effects = SlotEffects()
    for symbol in symbols:
        single = SINGLE_EFFECTS.get(symbol)
        if single is not None:
            effects = effects.merge(single)
    return effects, False, None


def spin(
    rng: Optional[RNGState] = None,
    modifiers: Optional[SlotModifiers] = None,
    random_values: Optional[Sequence[float]] = None,
) -> SlotResult:
    """Spin the three reels.

    Args:
        rng: Source of reel draws when no override is given.
        modifiers: Joker reel adjustments.
        random_values: Explicit draws consumed in order (reels, then rerolls).
    """
    values = list(random_values or [])
    if rng is None and not values:
        rng = RNGState()

    def draw() -> float:
        if values:
            return values.pop(0)
        return rng.random("slot")

    symbols = [select_symbol(draw(), modifiers) for _ in range(REELS)]

    rerolls = modifiers.reroll_count if modifiers is not None else 0
    for _ in range(max(0, rerolls)):
        if SlotSymbol.SKULL not in symbols:
            break
        symbols[symbols.index(SlotSymbol.SKULL)] = select_symbol(draw(), modifiers)

    effects, is_jackpot, combination = resolve_effects(symbols)
    if is_jackpot:
        logger.info("Slot jackpot: %s", "/".join(s.value for s in symbols))
    return SlotResult(
        symbols=tuple(symbols),
        is_jackpot=is_jackpot,
        effects=effects,
        combination=combination,
    )


def spin_with_symbols(symbols: Sequence[SlotSymbol]) -> SlotResult:
    """Build the result for a fixed set of reels."""
    effects, is_jackpot, combination = resolve_effects(symbols)
    return SlotResult(tuple(symbols), is_jackpot, effects, combination)


def summarize_effects(effects: SlotEffects) -> list[str]:
    summary: list[str] = []
    cb, rb, inst, pen = effects.card_bonus, effects.roulette_bonus, effects.instant, effects.penalty
    if cb.extra_draw > 0:
        summary.append(f"+{cb.extra_draw} Extra Draw")
    if cb.hand_size > 0:
        summary.append(f"+{cb.hand_size} Hand Size")
    if cb.score_multiplier > 1:
        summary.append(f"x{cb.score_multiplier:g} Score Multiplier")
    if rb.safe_zone_bonus > 0:
        summary.append(f"+{rb.safe_zone_bonus:g}% Safe Zone")
    if rb.max_multiplier > 0:
        summary.append(f"+{rb.max_multiplier:g}x Max Multiplier")
    if rb.free_spins > 0:
        summary.append(f"+{rb.free_spins} Free Spins")
    if inst.gold > 0:
        summary.append(f"+{inst.gold} Gold")
    if inst.chips > 0:
        summary.append(f"+{inst.chips} Chips")
    if pen.discard_cards > 0:
        summary.append(f"-{pen.discard_cards} Cards (Discard)")
    if pen.skip_roulette:
        summary.append("Skip Roulette")
    if pen.lose_gold > 0:
        summary.append(f"-{pen.lose_gold} Gold")
    return summary

