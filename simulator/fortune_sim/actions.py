"""Action types for the Fortune's Hand engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Action:
    """Base action type."""
    pass


@dataclass(frozen=True)
class StartGame(Action):
    """Start (or restart) a run with optional config overrides."""
    config: Optional[dict] = None


@dataclass(frozen=True)
class SpinSlot(Action):
    pass


@dataclass(frozen=True)
class SelectCard(Action):
    card_id: str


@dataclass(frozen=True)
class DeselectCard(Action):
    card_id: str


@dataclass(frozen=True)
class PlayHand(Action):
    """Play the selected cards."""
    pass


@dataclass(frozen=True)
class DiscardSelected(Action):
    pass


@dataclass(frozen=True)
class SpinRoulette(Action):
    pass


@dataclass(frozen=True)
class SkipRoulette(Action):
    pass


@dataclass(frozen=True)
class BuyItem(Action):
    item_id: str


@dataclass(frozen=True)
class RerollShop(Action):
    pass


@dataclass(frozen=True)
class LeaveShop(Action):
    """Leave the shop, proceed to the next round."""
    pass


@dataclass(frozen=True)
class ActionResult:
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(True)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(False, error)


# Wire names used by hosts
ACTION_TYPES: dict[str, type[Action]] = {
    "start_game": StartGame,
    "spin_slot": SpinSlot,
    "select_card": SelectCard,
    "deselect_card": DeselectCard,
    "play_hand": PlayHand,
    "discard_selected": DiscardSelected,
    "spin_roulette": SpinRoulette,
    "skip_roulette": SkipRoulette,
    "buy_item": BuyItem,
    "reroll_shop": RerollShop,
    "leave_shop": LeaveShop,
}


def parse_action(data: dict[str, Any]) -> Action:
    """Build an action from `{"type": ..., **fields}`.

    Raises ValueError for an unknown type or missing/extra fields.
    """
    data = dict(data)
    kind = data.pop("type", None)
    cls = ACTION_TYPES.get(kind)
    if cls is None:
        raise ValueError(f"Unknown action type: {kind!r}")
    try:
        return cls(**data)
    except TypeError as e:
        raise ValueError(f"Bad fields for {kind}: {e}") from None


def action_name(action: Action) -> str:
    for name, cls in ACTION_TYPES.items():
        if type(action) is cls:
            return name
    return type(action).__name__
