"""Game engine — state machine that drives a Fortune's Hand run.

Each player action is legal in exactly one phase. Calling it elsewhere logs a
warning and returns a failed ActionResult without touching the session.
DRAW_PHASE and SCORE_PHASE run synchronously inside the action that enters
them, as does the branch out of REWARD_PHASE, so after any action returns
the session waits for player input or is over.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence, Union

from .enums import Phase, BonusType, ItemType
from .cards import Card, Deck, standard_deck, detect_card_triggers
from .rng import RNGState
from .state import GameConfig, Session, merge_config
from .hands import evaluate_hand
from .scoring import AppliedBonus, ScoreCalculation, calculate_score, gold_from_enhancements
from . import slots
from .slots import CardBonus
from . import roulette
from .jokers import (
    CustomEffectRegistry, JokerContext, JokerEvaluation, OnSlot, evaluate_jokers,
)
from .vouchers import calculate_voucher_modifiers
from . import shop as shop_mod
from .data import (
    VOUCHER_BY_ID, get_joker, get_special_card, get_pack,
    get_target_score, get_round_bonuses, default_roulette_config,
)
from .events import EventEmitter, GameEvent
from .actions import (
    Action, ActionResult, StartGame, SpinSlot, SelectCard, DeselectCard,
    PlayHand, DiscardSelected, SpinRoulette, SkipRoulette,
    BuyItem, RerollShop, LeaveShop,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Phase transitions
# ---------------------------------------------------------------------------

PHASE_TRANSITIONS: dict[Phase, Phase] = {
    Phase.IDLE: Phase.SLOT_PHASE,
    Phase.SLOT_PHASE: Phase.DRAW_PHASE,
    Phase.DRAW_PHASE: Phase.PLAY_PHASE,
    Phase.PLAY_PHASE: Phase.SCORE_PHASE,
    Phase.SCORE_PHASE: Phase.ROULETTE_PHASE,
    Phase.ROULETTE_PHASE: Phase.REWARD_PHASE,
    Phase.REWARD_PHASE: Phase.SHOP_PHASE,
    Phase.SHOP_PHASE: Phase.SLOT_PHASE,
    Phase.GAME_OVER: Phase.IDLE,
}

REWARD_EXITS = (Phase.SLOT_PHASE, Phase.SHOP_PHASE, Phase.GAME_OVER)


def get_next_phase(phase: Phase) -> Phase:
    return PHASE_TRANSITIONS[phase]


def is_valid_transition(from_phase: Phase, to_phase: Phase) -> bool:
    if from_phase == Phase.IDLE:
        return to_phase == Phase.SLOT_PHASE
    if from_phase == Phase.GAME_OVER:
        return to_phase == Phase.IDLE
    if from_phase == Phase.REWARD_PHASE:
        return to_phase in REWARD_EXITS
    return PHASE_TRANSITIONS.get(from_phase) == to_phase


class GameEngine:
    """Drives the Fortune's Hand state machine over one Session."""

    def __init__(
        self,
        config: Union[None, GameConfig, Mapping[str, Any]] = None,
        seed: Optional[str] = None,
        emitter: Optional[EventEmitter] = None,
        custom_effects: Optional[CustomEffectRegistry] = None,
    ):
        self.config = merge_config(config)
        self.rng = RNGState(seed)
        self.emitter = emitter if emitter is not None else EventEmitter()
        self.custom_effects = custom_effects if custom_effects is not None else CustomEffectRegistry()
        self.session = Session(config=self.config, seed=self.rng.seed)

    # --- Core Interface ---

    def snapshot(self) -> Session:
        """Deep copy of the session for hosts and strategies."""
        return self.session.copy()

    @property
    def phase(self) -> Phase:
        return self.session.phase

    def is_terminal(self) -> bool:
        return self.session.phase == Phase.GAME_OVER

    def step(self, action: Action) -> ActionResult:
        """Dispatch a typed action to the matching method."""
        if isinstance(action, StartGame):
            return self.start_game(action.config)
        elif isinstance(action, SpinSlot):
            return self.spin_slot()
        elif isinstance(action, SelectCard):
            return self.select_card(action.card_id)
        elif isinstance(action, DeselectCard):
            return self.deselect_card(action.card_id)
        elif isinstance(action, PlayHand):
            return self.play_hand()
        elif isinstance(action, DiscardSelected):
            return self.discard_selected()
        elif isinstance(action, SpinRoulette):
            return self.spin_roulette()
        elif isinstance(action, SkipRoulette):
            return self.skip_roulette()
        elif isinstance(action, BuyItem):
            return self.buy_item(action.item_id)
        elif isinstance(action, RerollShop):
            return self.reroll_shop()
        elif isinstance(action, LeaveShop):
            return self.leave_shop()
        raise TypeError(f"Unknown action: {type(action).__name__}")

    def get_legal_actions(self) -> list[Action]:
        """Every action that would succeed from the current state."""
        s = self.session
        if s.phase in (Phase.IDLE, Phase.GAME_OVER):
            return [StartGame()]
        if s.phase == Phase.SLOT_PHASE:
            return [SpinSlot()]
        if s.phase == Phase.PLAY_PHASE:
            return self._legal_play()
        if s.phase == Phase.ROULETTE_PHASE:
            return [SpinRoulette(), SkipRoulette()]
        if s.phase == Phase.SHOP_PHASE:
            return self._legal_shop()
        return []

    def _legal_play(self) -> list[Action]:
        s = self.session
        actions: list[Action] = []
        if len(s.selected_cards) < s.config.max_select:
            actions.extend(SelectCard(c.id) for c in s.hand if c.id not in s.selected_cards)
        actions.extend(DeselectCard(card_id) for card_id in s.selected_cards)
        if s.selected_cards:
            actions.append(PlayHand())
            if s.discards_remaining > 0:
                actions.append(DiscardSelected())
        return actions

    def _legal_shop(self) -> list[Action]:
        s = self.session
        actions: list[Action] = [LeaveShop()]
        if s.shop is None:
            return actions
        for item in s.shop.available:
            if item.cost > s.gold:
                continue
            if item.type == ItemType.JOKER and len(s.jokers) >= s.max_jokers:
                continue
            actions.append(BuyItem(item.id))
        if s.gold >= shop_mod.calculate_reroll_cost(s.shop, s.voucher_modifiers.reroll_discount):
            actions.append(RerollShop())
        return actions

    # --- Helpers ---

    def _invalid(self, name: str) -> ActionResult:
        phase = self.session.phase.value
        logger.warning("%s ignored in phase %s", name, phase)
        return ActionResult.fail(f"Invalid action {name} in phase {phase}")

    def _transition(self, to_phase: Phase) -> None:
        from_phase = self.session.phase
        if not is_valid_transition(from_phase, to_phase):
            raise RuntimeError(f"Illegal phase transition {from_phase.value} -> {to_phase.value}")
        self.session.phase = to_phase
        logger.debug("Phase %s -> %s", from_phase.value, to_phase.value)
        self.emitter.emit(GameEvent.PHASE_CHANGE, **{"from": from_phase, "to": to_phase})

    def _evaluate(self, phase: Phase, jokers=None, played: Sequence[Card] = ()) -> JokerEvaluation:
        s = self.session
        ctx = JokerContext(phase=phase, played_cards=list(played), slot_result=s.slot_result)
        return evaluate_jokers(s.jokers if jokers is None else jokers, ctx, self.custom_effects)

    def _card_bonus(self) -> CardBonus:
        s = self.session
        return s.slot_result.effects.card_bonus if s.slot_result is not None else CardBonus()

    def _draw(self, count: int) -> list[Card]:
        """Draw into the hand, folding the discard pile back in when short."""
        s = self.session
        if count <= 0:
            return []
        if len(s.deck) < count and s.deck.discard_pile:
            s.deck.reshuffle(self.rng)
        drawn = s.deck.draw(count)
        s.hand.extend(drawn)
        return drawn

    def _reset_round_resources(self) -> None:
        s = self.session
        mods = s.voucher_modifiers
        hands_bonus, discards_bonus = get_round_bonuses(s.round)
        s.hands_remaining = s.config.starting_hands + mods.hands_bonus + hands_bonus
        s.discards_remaining = s.config.starting_discards + mods.discards_bonus + discards_bonus
        s.slot_spins_remaining = s.config.starting_slot_spins + mods.slot_spins_bonus
        s.target_score = get_target_score(s.round, s.config.round_scores)
        s.current_score = 0

    # --- Game Creation ---

    def start_game(self, config: Union[None, GameConfig, Mapping[str, Any]] = None) -> ActionResult:
        """Start a run from IDLE (or from GAME_OVER by way of IDLE)."""
        if self.session.phase not in (Phase.IDLE, Phase.GAME_OVER):
            return self._invalid("start_game")
        cfg = merge_config(config) if config is not None else self.config
        if self.session.phase == Phase.GAME_OVER:
            self._transition(Phase.IDLE)
        self.config = cfg

        s = Session(config=cfg, seed=self.rng.seed)
        s.vouchers = list(cfg.vouchers)
        s.voucher_modifiers = calculate_voucher_modifiers(s.vouchers, VOUCHER_BY_ID)
        s.gold = cfg.starting_gold + s.voucher_modifiers.starting_gold_bonus
        s.deck = Deck(self.rng.shuffle("shuffle", standard_deck()))
        self.session = s
        self._reset_round_resources()

        logger.info("Game started (seed %s)", s.seed)
        self.emitter.emit(GameEvent.GAME_START, seed=s.seed, config=cfg)
        self._transition(Phase.SLOT_PHASE)
        return ActionResult.ok()

    # --- Slot Phase ---

    def spin_slot(self, random_values: Optional[Sequence[float]] = None) -> ActionResult:
        """Spin the reels, then draw. Out of spins, the turn advances without reels."""
        s = self.session
        if s.phase != Phase.SLOT_PHASE:
            return self._invalid("spin_slot")

        if s.slot_spins_remaining > 0:
            modifiers = self._evaluate(Phase.SLOT_PHASE).slot_modifiers
            result = slots.spin(self.rng, modifiers, random_values)
            s.slot_spins_remaining -= 1
            s.slot_result = result

            # Reels are already resolved here, so slot modifiers from these jokers
            # go unused; their score bonuses ride along into this turn's scoring.
            on_slot = [j for j in s.jokers if isinstance(j.trigger, OnSlot)]
            post = self._evaluate(Phase.SLOT_PHASE, jokers=on_slot)
            s.slot_bonuses = list(post.bonuses)
            s.slot_retriggers = post.retrigger_count
            effects = result.effects
            s.roulette_bonus = effects.roulette_bonus.merge(post.roulette_bonus)
            gold_delta = effects.instant.gold - effects.penalty.lose_gold + post.gold
            s.gold = max(0, s.gold + gold_delta)

            logger.debug("Slot spin %s (gold %+d)", [sym.value for sym in result.symbols], gold_delta)
            self.emitter.emit(
                GameEvent.SLOT_SPIN,
                symbols=result.symbols,
                is_jackpot=result.is_jackpot,
                combination=result.combination,
                effects=slots.summarize_effects(effects),
            )
        else:
            logger.debug("No slot spins left in round %d", s.round)

        self._transition(Phase.DRAW_PHASE)
        self._draw_phase()
        return ActionResult.ok()

    # --- Draw Phase ---

    def _draw_phase(self) -> None:
        s = self.session
        if s.slot_result is not None:
            penalty = s.slot_result.effects.penalty.discard_cards
            if penalty > 0 and s.hand:
                dropped = s.hand[:penalty]
                s.hand = s.hand[penalty:]
                s.deck.discard(dropped)
                self.emitter.emit(GameEvent.CARDS_DISCARDED, cards=dropped, reason="penalty")

        cb = self._card_bonus()
        count = min(s.hand_size + cb.hand_size - len(s.hand), s.hand_size + cb.extra_draw)
        drawn = self._draw(count)
        self.emitter.emit(GameEvent.CARDS_DRAWN, cards=drawn)
        self._transition(Phase.PLAY_PHASE)

    # --- Play Phase ---

    def select_card(self, card_id: str) -> ActionResult:
        s = self.session
        if s.phase != Phase.PLAY_PHASE:
            return self._invalid("select_card")
        if not any(c.id == card_id for c in s.hand):
            return ActionResult.fail("Card not found in hand")
        if card_id in s.selected_cards:
            return ActionResult.fail("Card already selected")
        if len(s.selected_cards) >= s.config.max_select:
            return ActionResult.fail("Maximum cards selected")
        s.selected_cards.append(card_id)
        return ActionResult.ok()

    def deselect_card(self, card_id: str) -> ActionResult:
        s = self.session
        if s.phase != Phase.PLAY_PHASE:
            return self._invalid("deselect_card")
        if card_id not in s.selected_cards:
            return ActionResult.fail("Card not selected")
        s.selected_cards.remove(card_id)
        return ActionResult.ok()

    def discard_selected(self) -> ActionResult:
        """Discard the selection and draw back up to hand size."""
        s = self.session
        if s.phase != Phase.PLAY_PHASE:
            return self._invalid("discard_selected")
        if not s.selected_cards:
            return ActionResult.fail("No cards selected")
        if s.discards_remaining <= 0:
            return ActionResult.fail("No discards remaining")

        discarded = s.selected()
        s.hand = [c for c in s.hand if c.id not in s.selected_cards]
        s.selected_cards = []
        s.deck.discard(discarded)
        s.discards_remaining -= 1
        self.emitter.emit(GameEvent.CARDS_DISCARDED, cards=discarded, reason="player")

        drawn = self._draw(s.hand_size + self._card_bonus().hand_size - len(s.hand))
        self.emitter.emit(GameEvent.CARDS_DRAWN, cards=drawn)
        return ActionResult.ok()

    def play_hand(self) -> ActionResult:
        """Play the selection; scoring runs immediately."""
        s = self.session
        if s.phase != Phase.PLAY_PHASE:
            return self._invalid("play_hand")
        if not s.selected_cards:
            return ActionResult.fail("No cards selected")

        played = s.selected()
        s.hand = [c for c in s.hand if c.id not in s.selected_cards]
        s.selected_cards = []
        s.played_cards = played
        s.hands_played += 1

        triggers = detect_card_triggers(played)
        s.free_spins += len(triggers.roulette_cards)
        s.slot_spins_remaining += len(triggers.slot_cards)

        self.emitter.emit(GameEvent.CARDS_PLAYED, cards=played)
        self._transition(Phase.SCORE_PHASE)
        self._score_phase()
        return ActionResult.ok()

    # --- Score Phase ---

    def preview_score(self, cards: Sequence[Card]) -> tuple[ScoreCalculation, int]:
        """Score cards against the current jokers and slot result.

        Returns (calculation, gold earned). The session is not modified.
        """
        hand_result = evaluate_hand(list(cards))
        ev = self._evaluate(Phase.SCORE_PHASE, played=cards)
        s = self.session
        bonuses = s.slot_bonuses + ev.bonuses
        score_mult = self._card_bonus().score_multiplier
        if score_mult != 1:
            bonuses.append(AppliedBonus("Slot Bonus", BonusType.XMULT, score_mult))
        calc = calculate_score(hand_result, bonuses, retriggers=ev.retrigger_count + s.slot_retriggers)
        gold = gold_from_enhancements(hand_result.scoring_cards) + ev.gold
        return calc, gold

    def _score_phase(self) -> None:
        s = self.session
        calc, gold = self.preview_score(s.played_cards)
        s.hand_result = calc.hand_result
        s.score_calculation = calc
        s.gold = max(0, s.gold + gold)

        logger.debug("Scored %r", calc)
        self.emitter.emit(
            GameEvent.SCORE_CALCULATED,
            hand_type=calc.hand_result.hand_type,
            chips=calc.chip_total,
            mult=calc.mult_total,
            final_score=calc.final_score,
            gold=gold,
        )
        self._transition(Phase.ROULETTE_PHASE)

    # --- Roulette Phase ---

    def _base_score(self) -> int:
        calc = self.session.score_calculation
        return calc.final_score if calc is not None else 0

    def spin_roulette(self, random_value: Optional[float] = None) -> ActionResult:
        """Spin the wheel. A skull penalty turns the spin into a skip."""
        s = self.session
        if s.phase != Phase.ROULETTE_PHASE:
            return self._invalid("spin_roulette")

        base = self._base_score()
        if s.slot_result is not None and s.slot_result.effects.penalty.skip_roulette:
            logger.debug("Wheel skipped by slot penalty")
            return self._finish_roulette(roulette.skip(base))

        ev = self._evaluate(Phase.ROULETTE_PHASE, played=s.played_cards)
        bonus = s.roulette_bonus.merge(ev.roulette_bonus)
        config = roulette.apply_bonuses(default_roulette_config(), bonus)
        result = roulette.spin(config, base, random_value=random_value, rng=self.rng)

        free_spins = bonus.free_spins + s.free_spins
        while result.segment.multiplier == 0 and free_spins > 0:
            free_spins -= 1
            logger.debug("Bust re-spun (%d free spins left)", free_spins)
            result = roulette.spin(config, base, rng=self.rng)
        return self._finish_roulette(result)

    def skip_roulette(self) -> ActionResult:
        if self.session.phase != Phase.ROULETTE_PHASE:
            return self._invalid("skip_roulette")
        return self._finish_roulette(roulette.skip(self._base_score()))

    def _finish_roulette(self, result: roulette.RouletteResult) -> ActionResult:
        s = self.session
        s.roulette_result = result
        self.emitter.emit(
            GameEvent.ROULETTE_SPIN,
            segment=result.segment.id,
            multiplier=result.segment.multiplier,
            final_score=result.final_score,
            was_skipped=result.was_skipped,
        )
        self._transition(Phase.REWARD_PHASE)
        self._reward_phase()
        return ActionResult.ok()

    # --- Reward Phase ---

    def _reward_phase(self) -> None:
        s = self.session
        turn_score = s.roulette_result.final_score if s.roulette_result is not None else self._base_score()
        if s.slot_result is not None:
            turn_score += s.slot_result.effects.instant.chips
        s.current_score += turn_score

        s.deck.discard(s.played_cards)
        s.hands_remaining -= 1

        success = s.current_score >= s.target_score
        if not (success or s.hands_remaining <= 0):
            s.turn += 1
            s.reset_turn()
            self._transition(Phase.SLOT_PHASE)
            return

        self.emitter.emit(GameEvent.ROUND_END, score=s.current_score, target=s.target_score, success=success)
        if success:
            self._round_won()
        else:
            logger.info("Game over in round %d (%d/%d)", s.round, s.current_score, s.target_score)
            self._transition(Phase.GAME_OVER)
            self.emitter.emit(GameEvent.GAME_OVER, final_round=s.round, final_score=s.current_score)

    def _round_won(self) -> None:
        s = self.session
        mods = s.voucher_modifiers
        reward = shop_mod.calculate_gold_reward(s.current_score, s.round)
        interest = shop_mod.calculate_interest(s.gold, mods.interest_rate, mods.interest_max)
        s.gold += reward + interest
        s.rounds_won += 1
        logger.info("Round %d cleared: +%d gold (+%d interest)", s.round, reward, interest)

        if s.shop is None:
            s.shop = shop_mod.generate_shop(self.rng, s.round, mods.luck_bonus)
        self._transition(Phase.SHOP_PHASE)

    # --- Shop Phase ---

    def buy_item(self, item_id: str) -> ActionResult:
        s = self.session
        if s.phase != Phase.SHOP_PHASE or s.shop is None:
            return self._invalid("buy_item")

        tx = shop_mod.buy_item(s.shop, item_id, s.gold, len(s.jokers), s.max_jokers)
        if not tx.success:
            return ActionResult.fail(tx.error)

        s.gold = tx.new_gold
        s.shop = shop_mod.mark_item_sold(s.shop, item_id)
        self._grant(tx.item)
        logger.debug("Bought %s %s for %d", tx.item.type.value, tx.item.item_id, tx.item.cost)
        self.emitter.emit(
            GameEvent.ITEM_BOUGHT,
            item_id=tx.item.id,
            item_type=tx.item.type,
            entity_id=tx.item.item_id,
            cost=tx.item.cost,
        )
        return ActionResult.ok()

    def _grant(self, item: shop_mod.ShopItem) -> None:
        """Add a purchased entity to the session."""
        s = self.session
        if item.type == ItemType.JOKER:
            s.jokers.append(get_joker(item.item_id))
        elif item.type == ItemType.VOUCHER:
            s.vouchers.append(item.item_id)
            s.voucher_modifiers = calculate_voucher_modifiers(s.vouchers, VOUCHER_BY_ID)
        elif item.type == ItemType.CARD:
            template = get_special_card(item.item_id).template
            s.deck.add([replace(template, id=f"{item.item_id}_{s.cards_created}")])
            s.cards_created += 1
        elif item.type == ItemType.PACK:
            cards = shop_mod.open_pack(self.rng, get_pack(item.item_id), f"{item.item_id}_{s.cards_created}")
            s.deck.add(cards)
            s.cards_created += 1
        else:
            raise ValueError(f"Unknown item type: {item.type!r}")

    def reroll_shop(self) -> ActionResult:
        s = self.session
        if s.phase != Phase.SHOP_PHASE or s.shop is None:
            return self._invalid("reroll_shop")
        mods = s.voucher_modifiers
        result = shop_mod.reroll_shop(
            self.rng, s.shop, s.gold, s.round, mods.luck_bonus, mods.reroll_discount,
        )
        if not result.success:
            return ActionResult.fail(result.error)
        s.gold -= result.cost
        s.shop = result.shop
        logger.debug("Shop rerolled for %d", result.cost)
        return ActionResult.ok()

    def leave_shop(self) -> ActionResult:
        """Advance to the next round with a fresh deck cycle."""
        s = self.session
        if s.phase != Phase.SHOP_PHASE:
            return self._invalid("leave_shop")

        s.round += 1
        s.turn = 1
        s.shop = None
        s.reset_turn()
        s.deck.reshuffle(self.rng, extra=s.hand)
        s.hand = []
        self._reset_round_resources()
        self._transition(Phase.SLOT_PHASE)
        return ActionResult.ok()
