"""Game state — configuration and the mutable per-run Session.

Session is owned and written only by the GameEngine; everything else reads
snapshots of it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Union

from .enums import Phase
from .cards import Card, Deck
from .hands import HandResult
from .scoring import AppliedBonus, ScoreCalculation
from .slots import SlotResult, RouletteBonus
from .roulette import RouletteResult
from .jokers import Joker
from .vouchers import VoucherModifiers
from .shop import ShopState
from .data import VOUCHER_BY_ID


@dataclass(frozen=True)
class GameConfig:
    """Starting resources a host may override per run.

    `vouchers` lists voucher ids owned from the first round on.
    """
    starting_gold: int = 100
    starting_hands: int = 4
    starting_discards: int = 3
    starting_slot_spins: int = 4
    hand_size: int = 8
    max_select: int = 5
    max_jokers: int = 5
    round_scores: Optional[tuple[int, ...]] = None
    vouchers: tuple[str, ...] = ()

    def __post_init__(self):
        for name in ("starting_hands", "hand_size", "max_select", "starting_slot_spins"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("starting_gold", "starting_discards", "max_jokers"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.round_scores is not None:
            scores = tuple(int(s) for s in self.round_scores)
            if not scores or any(s <= 0 for s in scores):
                raise ValueError("round_scores must be a non-empty list of positive scores")
            object.__setattr__(self, "round_scores", scores)
        object.__setattr__(self, "vouchers", tuple(self.vouchers))
        for voucher_id in self.vouchers:
            if voucher_id not in VOUCHER_BY_ID:
                raise ValueError(f"Unknown voucher: {voucher_id}")


_CONFIG_FIELDS = {f.name for f in fields(GameConfig)}


def merge_config(overrides: Union[None, GameConfig, Mapping[str, Any]] = None) -> GameConfig:
    """Defaults with partial overrides applied. Unknown keys raise ValueError."""
    if overrides is None:
        return GameConfig()
    if isinstance(overrides, GameConfig):
        return overrides
    unknown = set(overrides) - _CONFIG_FIELDS
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")
    return replace(GameConfig(), **dict(overrides))


@dataclass
class Session:
    """Complete state of one run."""

    config: GameConfig = field(default_factory=GameConfig)
    seed: str = ""

    # Phase
    phase: Phase = Phase.IDLE
    round: int = 1
    turn: int = 1

    # Score
    current_score: int = 0
    target_score: int = 0

    # Economy
    gold: int = 0

    # Cards
    deck: Deck = field(default_factory=lambda: Deck([]))
    hand: list[Card] = field(default_factory=list)
    selected_cards: list[str] = field(default_factory=list)

    # Per-turn results
    slot_result: Optional[SlotResult] = None
    hand_result: Optional[HandResult] = None
    score_calculation: Optional[ScoreCalculation] = None
    roulette_result: Optional[RouletteResult] = None
    played_cards: list[Card] = field(default_factory=list)
    free_spins: int = 0
    roulette_bonus: RouletteBonus = field(default_factory=RouletteBonus)
    slot_bonuses: list[AppliedBonus] = field(default_factory=list)
    slot_retriggers: int = 0

    # Collections
    jokers: list[Joker] = field(default_factory=list)
    vouchers: list[str] = field(default_factory=list)
    voucher_modifiers: VoucherModifiers = field(default_factory=VoucherModifiers)

    # Resources
    hands_remaining: int = 4
    discards_remaining: int = 3
    slot_spins_remaining: int = 4

    # Shop
    shop: Optional[ShopState] = None

    # Stats
    rounds_won: int = 0
    hands_played: int = 0
    cards_created: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def max_jokers(self) -> int:
        return self.config.max_jokers + self.voucher_modifiers.max_jokers_bonus

    @property
    def hand_size(self) -> int:
        return self.config.hand_size + self.voucher_modifiers.hand_size_bonus

    def selected(self) -> list[Card]:
        """Selected cards in selection order."""
        by_id = {c.id: c for c in self.hand}
        return [by_id[i] for i in self.selected_cards if i in by_id]

    def reset_turn(self) -> None:
        self.slot_result = None
        self.hand_result = None
        self.score_calculation = None
        self.roulette_result = None
        self.played_cards = []
        self.selected_cards = []
        self.free_spins = 0
        self.roulette_bonus = RouletteBonus()
        self.slot_bonuses = []
        self.slot_retriggers = 0

    def copy(self) -> "Session":
        return copy.deepcopy(self)
