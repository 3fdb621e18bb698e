"""Fortune's Hand pure-Python rules engine — core package."""

__version__ = "0.1.0"

from .engine import GameEngine, is_valid_transition, get_next_phase
from .state import GameConfig, Session, merge_config
from .events import EventEmitter, GameEvent
from .runner import run_game, run_batch, GameResult, RandomStrategy, GreedyStrategy
