"""Voucher modifiers — permanent upgrades summed across every purchase."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .enums import Rarity

VOUCHER_EFFECT_KINDS = (
    "hands_bonus",
    "discards_bonus",
    "hand_size_bonus",
    "max_jokers_bonus",
    "slot_spins_bonus",
    "starting_gold_bonus",
    "reroll_discount",
    "luck_bonus",
    "interest",
)


@dataclass(frozen=True)
class VoucherEffect:
    """One declared bonus. `interest` uses value as the rate and cap as its maximum."""
    kind: str
    value: float
    cap: int = 0

    def __post_init__(self):
        if self.kind not in VOUCHER_EFFECT_KINDS:
            raise ValueError(f"Unknown voucher effect: {self.kind!r}")


@dataclass(frozen=True)
class Voucher:
    id: str
    name: str
    rarity: Rarity
    cost: int
    effects: tuple[VoucherEffect, ...]
    description: str = ""


@dataclass
class VoucherModifiers:
    hands_bonus: int = 0
    discards_bonus: int = 0
    hand_size_bonus: int = 0
    max_jokers_bonus: int = 0
    slot_spins_bonus: int = 0
    starting_gold_bonus: int = 0
    reroll_discount: int = 0
    luck_bonus: float = 0
    interest_rate: float = 0
    interest_max: int = 0


def calculate_voucher_modifiers(voucher_ids: Iterable[str], catalog: dict[str, Voucher]) -> VoucherModifiers:
    """Sum the bonuses of every purchased voucher id.

    Repeat purchases of one id stack. Interest rates add up; the cap is the
    highest declared cap.
    """
    mods = VoucherModifiers()
    for voucher_id in voucher_ids:
        voucher = catalog.get(voucher_id)
        if voucher is None:
            raise ValueError(f"Unknown voucher: {voucher_id}")
        for effect in voucher.effects:
            if effect.kind == "interest":
                mods.interest_rate += effect.value
                mods.interest_max = max(mods.interest_max, effect.cap)
            elif effect.kind == "luck_bonus":
                mods.luck_bonus += effect.value
            else:
                setattr(mods, effect.kind, getattr(mods, effect.kind) + int(effect.value))
    return mods
