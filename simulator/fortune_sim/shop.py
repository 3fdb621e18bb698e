"""Shop economy — generation, pricing, purchases, rerolls and interest.

Every function here is pure: a purchase or reroll returns a result record
and the engine applies it to the session. Shop items are marked sold, never
removed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from .enums import Rank, Suit, Rarity, ItemType
from .cards import Card
from .rng import RNGState
from .data import (
    JOKERS, VOUCHERS, SPECIAL_CARDS, PACKS, PackDef,
    ITEM_TYPE_WEIGHTS, RARITY_WEIGHTS, BASE_PRICES, RARITY_PRICE_MULTIPLIERS,
    SHOP_ITEM_COUNT, REROLL_BASE_COST, REROLL_COST_INCREASE,
    GOLD_PER_SCORE, MIN_GOLD_REWARD, MAX_GOLD_REWARD, ROUND_BONUS_GOLD,
)

logger = logging.getLogger(__name__)

# Luck gained per round past the first when picking rarities
ROUND_LUCK_BONUS = 2.0
# Round-based price scaling: +5% per round, at most +50%
ROUND_PRICE_STEP = 0.05
ROUND_PRICE_CAP = 0.5


@dataclass
class ShopItem:
    id: str
    type: ItemType
    item_id: str
    cost: int
    sold: bool = False


@dataclass
class ShopState:
    items: list[ShopItem] = field(default_factory=list)
    reroll_cost: int = REROLL_BASE_COST
    rerolls_used: int = 0

    def find(self, item_id: str) -> Optional[ShopItem]:
        return next((i for i in self.items if i.id == item_id), None)

    @property
    def available(self) -> list[ShopItem]:
        return [i for i in self.items if not i.sold]


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def calculate_price(base_price: int, rarity: Rarity, round_num: int = 1) -> int:
    """Base price x rarity multiplier, then the mild per-round scaling."""
    price = _round_half_up(base_price * RARITY_PRICE_MULTIPLIERS.get(rarity, 1.0))
    scale = 1 + min(max(0, round_num - 1) * ROUND_PRICE_STEP, ROUND_PRICE_CAP)
    return _round_half_up(price * scale)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def _weighted_pick(weights: dict, random_value: float):
    total = sum(weights.values())
    point = random_value * total
    cumulative = 0.0
    for key, weight in weights.items():
        cumulative += weight
        if point < cumulative:
            return key
    return next(iter(weights))


def select_item_type(random_value: float) -> ItemType:
    return _weighted_pick(ITEM_TYPE_WEIGHTS, random_value)


def rarity_weights(luck: float = 0, round_num: int = 1) -> dict[Rarity, float]:
    """Rarity weights shifted toward rarer tiers by luck and round."""
    luck = luck + max(0, round_num - 1) * ROUND_LUCK_BONUS
    return {
        Rarity.COMMON: max(RARITY_WEIGHTS[Rarity.COMMON] - luck * 0.5, 20),
        Rarity.UNCOMMON: RARITY_WEIGHTS[Rarity.UNCOMMON] + luck * 0.2,
        Rarity.RARE: RARITY_WEIGHTS[Rarity.RARE] + luck * 0.2,
        Rarity.LEGENDARY: RARITY_WEIGHTS[Rarity.LEGENDARY] + luck * 0.1,
    }


def select_rarity(random_value: float, luck: float = 0, round_num: int = 1) -> Rarity:
    return _weighted_pick(rarity_weights(luck, round_num), random_value)


def _pool(item_type: ItemType) -> list:
    if item_type == ItemType.JOKER:
        return JOKERS
    if item_type == ItemType.CARD:
        return SPECIAL_CARDS
    if item_type == ItemType.VOUCHER:
        return VOUCHERS
    return []


def _make_item(rng: RNGState, item_type: ItemType, rarity: Rarity, round_num: int, item_id: str) -> Optional[ShopItem]:
    if item_type == ItemType.PACK:
        pack = rng.random_element("shop", PACKS)
        cost = calculate_price(BASE_PRICES[ItemType.PACK], rarity, round_num)
        return ShopItem(item_id, ItemType.PACK, pack.id, cost)

    pool = _pool(item_type)
    if not pool:
        return None
    # Fall back to the whole pool when a rarity tier is empty
    candidates = [e for e in pool if e.rarity == rarity] or pool
    entry = rng.random_element("shop", candidates)
    base = entry.cost if item_type in (ItemType.JOKER, ItemType.CARD) else BASE_PRICES[item_type]
    return ShopItem(item_id, item_type, entry.id, calculate_price(base, entry.rarity, round_num))


def generate_shop(
    rng: RNGState,
    round_num: int = 1,
    luck: float = 0,
    item_count: int = SHOP_ITEM_COUNT,
    reroll_cost: int = REROLL_BASE_COST,
    rerolls_used: int = 0,
) -> ShopState:
    """Generate a shop for the given round."""
    items: list[ShopItem] = []
    for i in range(item_count):
        item_type = select_item_type(rng.random("shop"))
        rarity = select_rarity(rng.random("shop"), luck, round_num)
        item_id = f"shop_{round_num}_{rerolls_used}_{i}"
        item = _make_item(rng, item_type, rarity, round_num, item_id)
        if item is None:
            fallback = ItemType.PACK if item_type == ItemType.JOKER else ItemType.JOKER
            item = _make_item(rng, fallback, rarity, round_num, item_id)
        if item is not None:
            items.append(item)
    logger.debug("Generated shop for round %d: %s", round_num, [i.item_id for i in items])
    return ShopState(items=items, reroll_cost=reroll_cost, rerolls_used=rerolls_used)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Transaction:
    success: bool
    new_gold: int
    item: Optional[ShopItem] = None
    error: Optional[str] = None


def buy_item(
    shop: ShopState,
    item_id: str,
    gold: int,
    owned_jokers: int = 0,
    max_jokers: int = 5,
) -> Transaction:
    """Validate a purchase. The shop itself is left untouched."""
    item = shop.find(item_id)
    if item is None:
        return Transaction(False, gold, error="Item not found")
    if item.sold:
        return Transaction(False, gold, error="Already sold")
    if item.type == ItemType.JOKER and owned_jokers >= max_jokers:
        return Transaction(False, gold, error="Maximum jokers reached")
    if gold < item.cost:
        return Transaction(False, gold, error="Not enough gold")
    return Transaction(True, gold - item.cost, item=item)


def mark_item_sold(shop: ShopState, item_id: str) -> ShopState:
    return ShopState(
        items=[replace(i, sold=True) if i.id == item_id else replace(i) for i in shop.items],
        reroll_cost=shop.reroll_cost,
        rerolls_used=shop.rerolls_used,
    )


@dataclass(frozen=True)
class RerollResult:
    success: bool
    cost: int = 0
    shop: Optional[ShopState] = None
    error: Optional[str] = None


def calculate_reroll_cost(shop: ShopState, discount: int = 0) -> int:
    return max(0, shop.reroll_cost - discount)


def reroll_shop(
    rng: RNGState,
    shop: ShopState,
    gold: int,
    round_num: int = 1,
    luck: float = 0,
    discount: int = 0,
) -> RerollResult:
    """Regenerate the item list; the running reroll cost goes up each time."""
    cost = calculate_reroll_cost(shop, discount)
    if gold < cost:
        return RerollResult(False, cost, error="Not enough gold")
    new_shop = generate_shop(
        rng,
        round_num,
        luck,
        item_count=len(shop.items) or SHOP_ITEM_COUNT,
        reroll_cost=shop.reroll_cost + REROLL_COST_INCREASE,
        rerolls_used=shop.rerolls_used + 1,
    )
    return RerollResult(True, cost, shop=new_shop)


# ---------------------------------------------------------------------------
# Packs
# ---------------------------------------------------------------------------

def open_pack(
    rng: RNGState,
    pack: PackDef,
    id_prefix: str,
    random_values: Optional[Sequence[float]] = None,
) -> list[Card]:
    """Roll the cards inside a pack.

    Each card is special with the pack's probability, otherwise a random
    standard card. Ids are `{id_prefix}_{n}` so they never collide with the
    standard deck.
    """
    values = list(random_values or [])
    cards: list[Card] = []
    for n in range(pack.card_count):
        roll = values.pop(0) if values else rng.random("pack")
        card_id = f"{id_prefix}_{n}"
        if roll < pack.special_chance and SPECIAL_CARDS:
            special = rng.random_element("pack", SPECIAL_CARDS)
            cards.append(replace(special.template, id=card_id))
        else:
            rank = rng.random_element("pack", list(Rank))
            suit = rng.random_element("pack", list(Suit))
            cards.append(Card(rank, suit, id=card_id))
    return cards


# ---------------------------------------------------------------------------
# Gold
# ---------------------------------------------------------------------------

def calculate_interest(gold: int, rate: float, cap: int) -> int:
    """Interest on current gold, at most `cap` per round."""
    if rate <= 0 or gold <= 0:
        return 0
    return min(math.floor(gold * rate), cap)


def calculate_gold_reward(score: int, round_num: int) -> int:
    """Round-clear payout: a share of the score, clamped, plus the round bonus."""
    reward = max(MIN_GOLD_REWARD, min(MAX_GOLD_REWARD, math.floor(score * GOLD_PER_SCORE)))
    if round_num >= 1:
        reward += ROUND_BONUS_GOLD[min(round_num, len(ROUND_BONUS_GOLD)) - 1]
    return reward
