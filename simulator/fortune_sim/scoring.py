"""Scoring engine — folds ordered bonuses into chips, mult and a final score.

Pipeline:
1. Base chips & mult from the hand category
2. Per scoring card: chip value x trigger count
3. Card mult enhancements (x trigger count) onto the starting mult
4. Extra retriggers from jokers re-add the scoring cards' chips
5. Bonuses strictly in list order: chips add, mult adds, xmult multiplies
6. final_score = max(0, floor(chips x mult))
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from .enums import BonusType
from .cards import Card
from .hands import HandResult


@dataclass(frozen=True)
class AppliedBonus:
    """One ordered contribution to a score."""
    source: str
    type: BonusType
    value: float


@dataclass(frozen=True)
class ScoreCalculation:
    """Result of scoring a hand."""
    hand_result: HandResult
    chip_total: float
    mult_total: float
    applied_bonuses: tuple[AppliedBonus, ...]
    final_score: int

    def __repr__(self) -> str:
        return (
            f"{self.hand_result.hand_type.value}: {int(self.chip_total)} x "
            f"{self.mult_total:.1f} = {self.final_score}"
        )


# ---------------------------------------------------------------------------
# Scoring Context — accumulates chips/mult through the pipeline
# ---------------------------------------------------------------------------

class _ScoringContext:
    __slots__ = ("chips", "mult", "applied")

    def __init__(self, base_chips: float, base_mult: float):
        self.chips = float(base_chips)
        self.mult = float(base_mult)
        self.applied: list[AppliedBonus] = []

    def add_chips(self, n: float):
        self.chips += n

    def add_mult(self, n: float):
        self.mult += n

    def x_mult(self, n: float):
        self.mult *= n

    def apply(self, bonus: AppliedBonus):
        if bonus.type == BonusType.CHIPS:
            self.add_chips(bonus.value)
        elif bonus.type == BonusType.MULT:
            self.add_mult(bonus.value)
        elif bonus.type == BonusType.XMULT:
            self.x_mult(bonus.value)
        else:
            raise ValueError(f"Unknown bonus type: {bonus.type!r}")
        self.applied.append(bonus)


def card_chips(card: Card) -> int:
    """Total chips a scoring card contributes, retriggers included."""
    return card.chip_value * card.trigger_count


def calculate_score(
    hand_result: HandResult,
    bonuses: Iterable[AppliedBonus] = (),
    retriggers: int = 0,
) -> ScoreCalculation:
    """Score a hand.

    Args:
        hand_result: Output of evaluate_hand.
        bonuses: Ordered bonuses; order matters for xmult.
        retriggers: Extra times every scoring card's chips are counted.

    Returns:
        ScoreCalculation with the bonuses actually applied, in order.
    """
    card_sum = sum(card_chips(c) for c in hand_result.scoring_cards)
    ctx = _ScoringContext(hand_result.base_chips + card_sum, hand_result.base_mult)

    for card in hand_result.scoring_cards:
        if card.enhancement is not None and card.enhancement.kind == "mult":
            value = card.enhancement.value * card.trigger_count
            ctx.apply(AppliedBonus(f"Enhancement: {card.display()}", BonusType.MULT, value))

    if retriggers > 0 and card_sum > 0:
        ctx.apply(AppliedBonus(f"Retrigger x{retriggers}", BonusType.CHIPS, card_sum * retriggers))

    for bonus in bonuses:
        ctx.apply(bonus)

    final = max(0, math.floor(ctx.chips * ctx.mult))
    return ScoreCalculation(
        hand_result=hand_result,
        chip_total=ctx.chips,
        mult_total=ctx.mult,
        applied_bonuses=tuple(ctx.applied),
        final_score=final,
    )


def gold_from_enhancements(scoring_cards: Iterable[Card]) -> int:
    """Gold paid by gold-enhanced scoring cards."""
    total = 0
    for card in scoring_cards:
        if card.enhancement is not None and card.enhancement.kind == "gold":
            total += card.enhancement.value * card.trigger_count
    return total


def format_score_breakdown(calc: ScoreCalculation) -> str:
    hr = calc.hand_result
    lines = [
        f"Hand: {hr.hand_type.value}",
        f"Base: {hr.base_chips} chips x {hr.base_mult} mult",
        "",
        "Bonuses:",
    ]
    for bonus in calc.applied_bonuses:
        if bonus.type == BonusType.CHIPS:
            lines.append(f"  +{bonus.value:g} chips ({bonus.source})")
        elif bonus.type == BonusType.MULT:
            lines.append(f"  +{bonus.value:g} mult ({bonus.source})")
        else:
            lines.append(f"  x{bonus.value:g} mult ({bonus.source})")
    lines.append("")
    lines.append(f"Total: {calc.chip_total:g} chips x {calc.mult_total:g} mult = {calc.final_score}")
    return "\n".join(lines)
