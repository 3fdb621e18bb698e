"""Game runner — plays complete Fortune's Hand runs with pluggable strategies.

Provides:
- run_game(): single run with a strategy callback
- RandomStrategy: baseline random play
- GreedyStrategy: plays the highest-scoring selection, buys affordable jokers
- GameResult: structured result with stats
"""

from __future__ import annotations

import logging
import random as _random
from dataclasses import dataclass
from itertools import combinations
from typing import Any, Callable, Mapping, Optional, Protocol

from .engine import GameEngine
from .state import Session
from .actions import (
    Action, StartGame, SpinSlot, SelectCard, DeselectCard, PlayHand,
    SpinRoulette, BuyItem, LeaveShop,
)
from .enums import Phase, ItemType
from .hands import evaluate_hand
from .scoring import calculate_score

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 8


class Strategy(Protocol):
    """Protocol for game-playing strategies."""
    def choose_action(self, session: Session, legal_actions: list[Action]) -> Action:
        ...


@dataclass
class GameResult:
    """Result of a completed run."""
    seed: str
    won: bool
    round_reached: int
    rounds_won: int
    total_steps: int
    final_gold: int
    final_score: int
    jokers_collected: int
    hands_played: int
    max_rounds: int = DEFAULT_MAX_ROUNDS

    @property
    def score(self) -> float:
        """Normalized score: 1.0 = cleared every round, partial credit for progress."""
        if self.won:
            return 1.0
        return self.rounds_won / self.max_rounds * 0.5


class RandomStrategy:
    """Plays random legal actions."""

    def __init__(self, seed: int = 42):
        self._rng = _random.Random(seed)

    def choose_action(self, session: Session, legal_actions: list[Action]) -> Action:
        return self._rng.choice(legal_actions)


def best_selection(session: Session) -> tuple[str, ...]:
    """Card ids of the highest-scoring playable subset, ignoring jokers."""
    best: tuple[str, ...] = ()
    best_score = -1
    max_size = min(session.config.max_select, len(session.hand))
    for size in range(max_size, 0, -1):
        for combo in combinations(session.hand, size):
            score = calculate_score(evaluate_hand(list(combo))).final_score
            if score > best_score:
                best_score = score
                best = tuple(c.id for c in combo)
    return best


class GreedyStrategy:
    """Greedy strategy: plays the best-scoring selection, always spins, buys jokers."""

    def choose_action(self, session: Session, legal_actions: list[Action]) -> Action:
        if session.phase in (Phase.IDLE, Phase.GAME_OVER):
            return StartGame()

        if session.phase == Phase.SLOT_PHASE:
            return SpinSlot()

        if session.phase == Phase.PLAY_PHASE:
            target = best_selection(session)
            for card_id in session.selected_cards:
                if card_id not in target:
                    return DeselectCard(card_id)
            for card_id in target:
                if card_id not in session.selected_cards:
                    return SelectCard(card_id)
            return PlayHand()

        if session.phase == Phase.ROULETTE_PHASE:
            return SpinRoulette()

        if session.phase == Phase.SHOP_PHASE:
            for action in legal_actions:
                if not isinstance(action, BuyItem) or session.shop is None:
                    continue
                item = session.shop.find(action.item_id)
                if item is not None and item.type == ItemType.JOKER:
                    return action
            return LeaveShop()

        return legal_actions[0]


def run_game(
    seed: str,
    strategy: Strategy,
    config: Optional[Mapping[str, Any]] = None,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    max_steps: int = 5000,
    on_step: Optional[Callable[[Session, Action, int], None]] = None,
) -> GameResult:
    """Run a complete game with the given strategy.

    Args:
        seed: Game seed for deterministic RNG.
        strategy: Strategy that picks actions.
        config: Optional GameConfig overrides.
        max_rounds: Rounds to clear for a win.
        max_steps: Safety limit to prevent infinite loops.
        on_step: Optional callback(session, action, step_num) for logging.

    Returns:
        GameResult with final stats.
    """
    engine = GameEngine(config, seed=seed)
    engine.start_game()

    steps = 0
    while not engine.is_terminal() and engine.session.rounds_won < max_rounds and steps < max_steps:
        actions = engine.get_legal_actions()
        if not actions:
            break

        session = engine.snapshot()
        action = strategy.choose_action(session, actions)

        if on_step:
            on_step(session, action, steps)

        engine.step(action)
        steps += 1

    s = engine.session
    if steps >= max_steps:
        logger.warning("Run %s stopped after %d steps", seed, steps)
    return GameResult(
        seed=seed,
        won=s.rounds_won >= max_rounds,
        round_reached=s.round,
        rounds_won=s.rounds_won,
        total_steps=steps,
        final_gold=s.gold,
        final_score=s.current_score,
        jokers_collected=len(s.jokers),
        hands_played=s.hands_played,
        max_rounds=max_rounds,
    )


def run_batch(
    seeds: list[str],
    strategy: Strategy,
    config: Optional[Mapping[str, Any]] = None,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    max_steps: int = 5000,
) -> list[GameResult]:
    """Run multiple games and return results."""
    return [
        run_game(seed, strategy, config, max_rounds, max_steps)
        for seed in seeds
    ]
