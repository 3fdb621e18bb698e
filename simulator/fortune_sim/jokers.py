"""Joker effect composer.

A joker is a catalog record pairing a trigger (when it participates) with an
effect (what it contributes). Triggered jokers are processed left to right,
which matters for xmult stacking, and every effect kind feeds exactly one
output channel of a JokerEvaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from .enums import Phase, Rank, Suit, Rarity, BonusType, SlotSymbol
from .cards import Card
from .scoring import AppliedBonus
from .slots import SlotModifiers, SlotResult, RouletteBonus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CardCondition:
    """Played-card predicate; unset fields match anything."""
    suit: Optional[Suit] = None
    rank: Optional[Rank] = None
    min_rank: Optional[int] = None
    max_rank: Optional[int] = None

    def matches(self, card: Card) -> bool:
        if self.suit is not None and card.suit != self.suit:
            return False
        if self.rank is not None and card.rank != self.rank:
            return False
        if self.min_rank is not None and card.rank < self.min_rank:
            return False
        if self.max_rank is not None and card.rank > self.max_rank:
            return False
        return True


@dataclass(frozen=True)
class OnScore:
    pass


@dataclass(frozen=True)
class OnPlay:
    card_condition: Optional[CardCondition] = None


@dataclass(frozen=True)
class OnSlot:
    symbol_condition: Optional[SlotSymbol] = None


@dataclass(frozen=True)
class OnRoulette:
    pass


@dataclass(frozen=True)
class Passive:
    pass


Trigger = Union[OnScore, OnPlay, OnSlot, OnRoulette, Passive]


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AddChips:
    value: float


@dataclass(frozen=True)
class AddMult:
    value: float


@dataclass(frozen=True)
class Multiply:
    value: float


@dataclass(frozen=True)
class AddGold:
    value: int


@dataclass(frozen=True)
class ModifySlot:
    modification: SlotModifiers


@dataclass(frozen=True)
class ModifyRoulette:
    modification: RouletteBonus


@dataclass(frozen=True)
class Retrigger:
    count: int


@dataclass(frozen=True)
class Custom:
    handler: str


Effect = Union[AddChips, AddMult, Multiply, AddGold, ModifySlot, ModifyRoulette, Retrigger, Custom]


@dataclass(frozen=True)
class Joker:
    """Static definition of a Joker. Owned copies are the same immutable record."""
    id: str
    name: str
    rarity: Rarity
    cost: int
    trigger: Trigger
    effect: Effect
    description: str = ""


@dataclass
class JokerContext:
    phase: Phase
    played_cards: list[Card] = field(default_factory=list)
    slot_result: Optional[SlotResult] = None


@dataclass
class JokerEvaluation:
    """Merged outputs of every triggered joker."""
    bonuses: list[AppliedBonus] = field(default_factory=list)
    gold: int = 0
    slot_modifiers: SlotModifiers = field(default_factory=SlotModifiers)
    roulette_bonus: RouletteBonus = field(default_factory=RouletteBonus)
    retrigger_count: int = 0
    custom_handlers: list[str] = field(default_factory=list)
    triggered: list[str] = field(default_factory=list)


CustomEffect = Callable[[Joker, JokerContext], Optional[Iterable[AppliedBonus]]]


class CustomEffectRegistry:
    """Named callbacks a host supplies for `custom` joker effects."""

    def __init__(self):
        self._handlers: dict[str, CustomEffect] = {}

    def register(self, name: str, handler: CustomEffect) -> None:
        self._handlers[name] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def get(self, name: str) -> Optional[CustomEffect]:
        return self._handlers.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def matches_card_condition(cards: Iterable[Card], condition: Optional[CardCondition]) -> bool:
    """True if there is no condition or any card satisfies it."""
    if condition is None:
        return True
    return any(condition.matches(c) for c in cards)


def should_trigger(joker: Joker, ctx: JokerContext) -> bool:
    trigger = joker.trigger
    if isinstance(trigger, OnScore):
        return ctx.phase == Phase.SCORE_PHASE
    if isinstance(trigger, OnPlay):
        return (
            ctx.phase in (Phase.PLAY_PHASE, Phase.SCORE_PHASE)
            and matches_card_condition(ctx.played_cards, trigger.card_condition)
        )
    if isinstance(trigger, OnSlot):
        if ctx.phase != Phase.SLOT_PHASE or ctx.slot_result is None:
            return False
        return trigger.symbol_condition is None or trigger.symbol_condition in ctx.slot_result.symbols
    if isinstance(trigger, OnRoulette):
        return ctx.phase == Phase.ROULETTE_PHASE
    if isinstance(trigger, Passive):
        return True
    raise TypeError(f"Unknown joker trigger: {trigger!r}")


def apply_effect(
    joker: Joker,
    ctx: JokerContext,
    out: JokerEvaluation,
    registry: Optional[CustomEffectRegistry] = None,
) -> None:
    """Fold one triggered joker's effect into `out`."""
    effect = joker.effect
    if isinstance(effect, AddChips):
        out.bonuses.append(AppliedBonus(joker.name, BonusType.CHIPS, effect.value))
    elif isinstance(effect, AddMult):
        out.bonuses.append(AppliedBonus(joker.name, BonusType.MULT, effect.value))
    elif isinstance(effect, Multiply):
        out.bonuses.append(AppliedBonus(joker.name, BonusType.XMULT, effect.value))
    elif isinstance(effect, AddGold):
        out.gold += effect.value
    elif isinstance(effect, ModifySlot):
        out.slot_modifiers = out.slot_modifiers.merge(effect.modification)
    elif isinstance(effect, ModifyRoulette):
        out.roulette_bonus = out.roulette_bonus.merge(effect.modification)
    elif isinstance(effect, Retrigger):
        out.retrigger_count += effect.count
    elif isinstance(effect, Custom):
        out.custom_handlers.append(effect.handler)
        handler = registry.get(effect.handler) if registry is not None else None
        if handler is None:
            logger.debug("No custom handler registered for %s (%s)", effect.handler, joker.id)
            return
        out.bonuses.extend(handler(joker, ctx) or ())
    else:
        raise TypeError(f"Unknown joker effect: {effect!r}")


def evaluate_jokers(
    jokers: Iterable[Joker],
    ctx: JokerContext,
    registry: Optional[CustomEffectRegistry] = None,
) -> JokerEvaluation:
    """Evaluate owned jokers in order against a context."""
    out = JokerEvaluation()
    for joker in jokers:
        if not should_trigger(joker, ctx):
            continue
        out.triggered.append(joker.id)
        apply_effect(joker, ctx, out, registry)
    return out
