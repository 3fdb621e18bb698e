"""Game data catalog — rounds, jokers, vouchers, special cards, packs, consumables, balance.

All static game data for shop generation and game simulation. Catalog
entries are immutable; lookups of unknown ids raise ValueError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .enums import Rank, Suit, Rarity, ItemType, SlotSymbol
from .cards import Card, Enhancement
from .jokers import (
    Joker, CardCondition,
    OnScore, OnPlay, OnSlot, OnRoulette, Passive,
    AddChips, AddMult, Multiply, AddGold, ModifySlot, ModifyRoulette, Retrigger, Custom,
)
from .slots import SlotModifiers, RouletteBonus
from .vouchers import Voucher, VoucherEffect
from .roulette import RouletteSegment, RouletteConfig


# ---------------------------------------------------------------------------
# Rounds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RoundDef:
    round: int
    target_score: int
    hands_bonus: int = 0
    discards_bonus: int = 0


ROUNDS: list[RoundDef] = [
    RoundDef(1, 300),
    RoundDef(2, 800),
    RoundDef(3, 1500, hands_bonus=1),
    RoundDef(4, 2500),
    RoundDef(5, 4000, discards_bonus=1),
    RoundDef(6, 6000),
    RoundDef(7, 9000, hands_bonus=1),
    RoundDef(8, 13000, hands_bonus=1, discards_bonus=1),
]

# Endless mode: added per round past the end of the table
ENDLESS_SCORE_INCREMENT = 5000
FALLBACK_TARGET_SCORE = 300


def get_target_score(round_num: int, round_scores: Optional[Sequence[int]] = None) -> int:
    """Target for a round, from an explicit score list or the round table."""
    if round_scores:
        if round_num <= len(round_scores):
            return round_scores[round_num - 1]
        return round_scores[-1] + (round_num - len(round_scores)) * ENDLESS_SCORE_INCREMENT
    for rd in ROUNDS:
        if rd.round == round_num:
            return rd.target_score
    if not ROUNDS:
        return FALLBACK_TARGET_SCORE
    last = ROUNDS[-1]
    return last.target_score + (round_num - last.round) * ENDLESS_SCORE_INCREMENT


def get_round_bonuses(round_num: int) -> tuple[int, int]:
    """(extra hands, extra discards) scheduled for a round."""
    for rd in ROUNDS:
        if rd.round == round_num:
            return rd.hands_bonus, rd.discards_bonus
    return 0, 0


# ---------------------------------------------------------------------------
# Round rewards
# ---------------------------------------------------------------------------

GOLD_PER_SCORE = 0.02
MIN_GOLD_REWARD = 10
MAX_GOLD_REWARD = 100
ROUND_BONUS_GOLD: list[int] = [0, 5, 10, 15, 20, 25, 30, 40]


# ---------------------------------------------------------------------------
# Wheel
# ---------------------------------------------------------------------------

DEFAULT_SEGMENTS: tuple[RouletteSegment, ...] = (
    RouletteSegment("bust", 0, 15, "#ef4444"),
    RouletteSegment("half", 0.5, 15, "#f97316"),
    RouletteSegment("even", 1, 30, "#6b7280"),
    RouletteSegment("double", 2, 25, "#22c55e"),
    RouletteSegment("triple", 3, 10, "#3b82f6"),
    RouletteSegment("quintuple", 5, 5, "#a855f7"),
)

DEFAULT_SPIN_DURATION = 3.0


def default_roulette_config() -> RouletteConfig:
    return RouletteConfig(segments=DEFAULT_SEGMENTS, spin_duration=DEFAULT_SPIN_DURATION)


# ---------------------------------------------------------------------------
# Shop balance
# ---------------------------------------------------------------------------

SHOP_ITEM_COUNT = 4
REROLL_BASE_COST = 5
REROLL_COST_INCREASE = 2

ITEM_TYPE_WEIGHTS: dict[ItemType, float] = {
    ItemType.JOKER: 50,
    ItemType.CARD: 25,
    ItemType.PACK: 15,
    ItemType.VOUCHER: 10,
}

RARITY_WEIGHTS: dict[Rarity, float] = {
    Rarity.COMMON: 60,
    Rarity.UNCOMMON: 28,
    Rarity.RARE: 10,
    Rarity.LEGENDARY: 2,
}

BASE_PRICES: dict[ItemType, int] = {
    ItemType.JOKER: 40,
    ItemType.CARD: 20,
    ItemType.PACK: 30,
    ItemType.VOUCHER: 50,
}

RARITY_PRICE_MULTIPLIERS: dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.5,
    Rarity.RARE: 2.5,
    Rarity.LEGENDARY: 5.0,
}


# ---------------------------------------------------------------------------
# Joker catalog
# ---------------------------------------------------------------------------

C, U, R, L = Rarity.COMMON, Rarity.UNCOMMON, Rarity.RARE, Rarity.LEGENDARY

JOKERS: list[Joker] = [
    Joker("joker", "Joker", C, 20, OnScore(), AddMult(4), "+4 Mult"),
    Joker("chip_stack", "Chip Stack", C, 20, OnScore(), AddChips(30), "+30 Chips"),
    Joker("heart_throb", "Heart Throb", C, 25,
          OnPlay(CardCondition(suit=Suit.HEARTS)), AddMult(3), "+3 Mult if a Heart is played"),
    Joker("spade_edge", "Spade Edge", C, 25,
          OnPlay(CardCondition(suit=Suit.SPADES)), AddChips(40), "+40 Chips if a Spade is played"),
    Joker("face_value", "Face Value", C, 25,
          OnPlay(CardCondition(min_rank=11, max_rank=13)), AddChips(25), "+25 Chips if a face card is played"),
    Joker("small_fry", "Small Fry", C, 20,
          OnPlay(CardCondition(max_rank=5)), AddMult(5), "+5 Mult if a 5 or lower is played"),
    Joker("piggy_bank", "Piggy Bank", C, 30, OnScore(), AddGold(3), "Earn 3 gold per scored hand"),
    Joker("lucky_charm", "Lucky Charm", U, 35,
          Passive(), ModifySlot(SlotModifiers(symbol_weights={SlotSymbol.STAR: 10})),
          "Star symbols appear twice as often"),
    Joker("skull_ward", "Skull Ward", U, 35,
          Passive(), ModifySlot(SlotModifiers(reroll_count=1)), "Re-roll one skull per spin"),
    Joker("gold_rush", "Gold Rush", U, 30,
          OnSlot(SlotSymbol.GOLD), AddGold(5), "Earn 5 gold when a Gold symbol lands"),
    Joker("safety_net", "Safety Net", U, 40,
          OnRoulette(), ModifyRoulette(RouletteBonus(safe_zone_bonus=10)), "Bust chance -10%"),
    Joker("echo", "Echo", U, 45, OnScore(), Retrigger(1), "Scoring cards count twice"),
    Joker("ace_high", "Ace High", U, 40,
          OnPlay(CardCondition(rank=Rank.ACE)), Multiply(1.5), "x1.5 Mult if an Ace is played"),
    Joker("high_roller", "High Roller", R, 60,
          OnRoulette(), ModifyRoulette(RouletteBonus(max_multiplier=5)), "Adds a +5x wheel segment"),
    Joker("double_down", "Double Down", R, 70, OnScore(), Multiply(2), "x2 Mult"),
    Joker("fortune_teller", "Fortune Teller", L, 100,
          Passive(), ModifySlot(SlotModifiers(guaranteed_symbol=SlotSymbol.WILD)),
          "Every reel lands on Wild"),
    Joker("trickster", "Trickster", L, 90, OnScore(), Custom("trickster"), "Host-defined effect"),
]

JOKER_BY_ID: dict[str, Joker] = {j.id: j for j in JOKERS}


def get_joker(joker_id: str) -> Joker:
    try:
        return JOKER_BY_ID[joker_id]
    except KeyError:
        raise ValueError(f"Unknown joker: {joker_id}") from None


# ---------------------------------------------------------------------------
# Voucher catalog
# ---------------------------------------------------------------------------

VOUCHERS: list[Voucher] = [
    Voucher("extra_hand", "Extra Hand", C, 50, (VoucherEffect("hands_bonus", 1),), "+1 hand per round"),
    Voucher("extra_discard", "Extra Discard", C, 50, (VoucherEffect("discards_bonus", 1),), "+1 discard per round"),
    Voucher("big_hands", "Big Hands", U, 60, (VoucherEffect("hand_size_bonus", 1),), "+1 hand size"),
    Voucher("joker_slot", "Joker Slot", R, 80, (VoucherEffect("max_jokers_bonus", 1),), "+1 joker slot"),
    Voucher("extra_spin", "Extra Spin", C, 45, (VoucherEffect("slot_spins_bonus", 1),), "+1 slot spin per round"),
    Voucher("seed_money", "Seed Money", C, 40, (VoucherEffect("starting_gold_bonus", 25),), "+25 starting gold"),
    Voucher("shop_discount", "Shop Discount", C, 40, (VoucherEffect("reroll_discount", 2),), "Rerolls cost 2 less"),
    Voucher("luck_boost", "Luck Boost", U, 55, (VoucherEffect("luck_bonus", 10),), "Rarer shop items"),
    Voucher("savings", "Savings Account", U, 60,
            (VoucherEffect("interest", 0.1, cap=10),), "10% interest per round, up to 10"),
    Voucher("high_roller_kit", "High Roller Kit", R, 90,
            (VoucherEffect("luck_bonus", 15), VoucherEffect("reroll_discount", 1)),
            "Rarer items and cheaper rerolls"),
]

VOUCHER_BY_ID: dict[str, Voucher] = {v.id: v for v in VOUCHERS}


def get_voucher(voucher_id: str) -> Voucher:
    try:
        return VOUCHER_BY_ID[voucher_id]
    except KeyError:
        raise ValueError(f"Unknown voucher: {voucher_id}") from None


# ---------------------------------------------------------------------------
# Special cards — (id, rarity, shop cost, card template)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpecialCardDef:
    id: str
    name: str
    rarity: Rarity
    cost: int
    template: Card


SPECIAL_CARDS: list[SpecialCardDef] = [
    SpecialCardDef("wild_card", "Wild Card", U, 25,
                   Card(Rank.ACE, Suit.SPADES, id="wild_card", is_wild=True)),
    SpecialCardDef("gold_king", "Gold King", C, 20,
                   Card(Rank.KING, Suit.DIAMONDS, id="gold_king", is_gold=True,
                        enhancement=Enhancement("gold", 3))),
    SpecialCardDef("glass_queen", "Glass Queen", C, 20,
                   Card(Rank.QUEEN, Suit.HEARTS, id="glass_queen", is_glass=True,
                        enhancement=Enhancement("mult", 4))),
    SpecialCardDef("chip_ten", "Bonus Ten", C, 15,
                   Card(Rank.TEN, Suit.CLUBS, id="chip_ten", enhancement=Enhancement("chips", 30))),
    SpecialCardDef("echo_seven", "Echo Seven", U, 25,
                   Card(Rank.SEVEN, Suit.SPADES, id="echo_seven", enhancement=Enhancement("retrigger", 1))),
    SpecialCardDef("slot_jack", "Slot Jack", R, 35,
                   Card(Rank.JACK, Suit.HEARTS, id="slot_jack", trigger_slot=True)),
    SpecialCardDef("wheel_ace", "Wheel Ace", R, 35,
                   Card(Rank.ACE, Suit.DIAMONDS, id="wheel_ace", trigger_roulette=True)),
]

SPECIAL_CARD_BY_ID: dict[str, SpecialCardDef] = {c.id: c for c in SPECIAL_CARDS}


def get_special_card(card_id: str) -> SpecialCardDef:
    try:
        return SPECIAL_CARD_BY_ID[card_id]
    except KeyError:
        raise ValueError(f"Unknown special card: {card_id}") from None


# ---------------------------------------------------------------------------
# Packs — (id, name, cards, special chance)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PackDef:
    id: str
    name: str
    card_count: int
    special_chance: float


PACKS: list[PackDef] = [
    PackDef("standard_pack", "Standard Pack", 3, 0.1),
    PackDef("jumbo_pack", "Jumbo Pack", 5, 0.2),
    PackDef("mega_pack", "Mega Pack", 5, 0.5),
]

PACK_BY_ID: dict[str, PackDef] = {p.id: p for p in PACKS}


def get_pack(pack_id: str) -> PackDef:
    try:
        return PACK_BY_ID[pack_id]
    except KeyError:
        raise ValueError(f"Unknown pack: {pack_id}") from None


# ---------------------------------------------------------------------------
# Consumables — deck-editing items, listed but not sold by the shop
# ---------------------------------------------------------------------------

CONSUMABLE_TYPES = ("card_remover", "card_transformer", "card_duplicator")


@dataclass(frozen=True)
class ConsumableDef:
    id: str
    name: str
    rarity: Rarity
    cost: int
    type: str
    select_limit: int = 1
    description: str = ""

    def __post_init__(self):
        if self.type not in CONSUMABLE_TYPES:
            raise ValueError(f"Unknown consumable type: {self.type!r}")


CONSUMABLES: list[ConsumableDef] = [
    ConsumableDef("eraser", "Eraser", C, 15, "card_remover", 1, "Remove a card from the deck"),
    ConsumableDef("shredder", "Shredder", U, 30, "card_remover", 3, "Remove up to 3 cards from the deck"),
    ConsumableDef("alchemy", "Alchemy", U, 25, "card_transformer", 1,
                  "Turn a card into a random card with an enhancement"),
    ConsumableDef("chaos_orb", "Chaos Orb", R, 40, "card_transformer", 2,
                  "Turn up to 2 cards into random enhanced cards"),
    ConsumableDef("mirror", "Mirror", U, 30, "card_duplicator", 1, "Copy a card with all its properties"),
    ConsumableDef("cloning_vat", "Cloning Vat", L, 60, "card_duplicator", 2, "Copy up to 2 cards"),
]

CONSUMABLE_BY_ID: dict[str, ConsumableDef] = {c.id: c for c in CONSUMABLES}


def get_consumable(consumable_id: str) -> ConsumableDef:
    try:
        return CONSUMABLE_BY_ID[consumable_id]
    except KeyError:
        raise ValueError(f"Unknown consumable: {consumable_id}") from None


def get_consumables_by_type(kind: str) -> list[ConsumableDef]:
    if kind not in CONSUMABLE_TYPES:
        raise ValueError(f"Unknown consumable type: {kind!r}")
    return [c for c in CONSUMABLES if c.type == kind]


def get_consumables_by_rarity(rarity: Rarity) -> list[ConsumableDef]:
    return [c for c in CONSUMABLES if c.rarity == rarity]
