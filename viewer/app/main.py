"""Fortune's Hand 🎰 - FastAPI host for the rules engine.

Sessions live in memory for the lifetime of the process. Each one owns its
engine and event emitter; the events it emits are recorded so clients can
poll them after every action.
"""

import logging
import uuid
from dataclasses import dataclass, field

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from fortune_sim import GameEngine, EventEmitter, __version__
from fortune_sim.actions import StartGame, action_name, parse_action
from fortune_sim.cards import Card
from fortune_sim.data import CONSUMABLES, JOKERS, VOUCHERS
from fortune_sim.events import Event
from fortune_sim.jokers import Joker
from fortune_sim.state import Session

logger = logging.getLogger(__name__)

MAX_EVENTS = 500


@dataclass
class HostedSession:
    engine: GameEngine
    events: list[dict] = field(default_factory=list)
    next_event: int = 0

    def record(self, event: Event) -> None:
        self.events.append({"seq": self.next_event, "type": event.type.value, "payload": jsonable_encoder(event.payload)})
        self.next_event += 1
        if len(self.events) > MAX_EVENTS:
            del self.events[: len(self.events) - MAX_EVENTS]


_sessions: dict[str, HostedSession] = {}

app = FastAPI(title="Fortune's Hand 🎰", version=__version__)


# ── Serialization ─────────────────────────────────────────────────────

def _card_dict(c: Card) -> dict:
    return {
        "id": c.id,
        "rank": c.rank.display,
        "suit": c.suit.value,
        "display": c.display(),
        "chip_value": c.chip_value,
        "is_wild": c.is_wild,
        "is_gold": c.is_gold,
        "is_glass": c.is_glass,
        "trigger_slot": c.trigger_slot,
        "trigger_roulette": c.trigger_roulette,
        "enhancement": jsonable_encoder(c.enhancement),
    }


def _joker_dict(j: Joker) -> dict:
    return {
        "id": j.id,
        "name": j.name,
        "rarity": j.rarity.value,
        "cost": j.cost,
        "description": j.description,
        "trigger": {"kind": type(j.trigger).__name__, **jsonable_encoder(j.trigger)},
        "effect": {"kind": type(j.effect).__name__, **jsonable_encoder(j.effect)},
    }


def _session_dict(s: Session) -> dict:
    calc = s.score_calculation
    return {
        "seed": s.seed,
        "phase": s.phase.value,
        "round": s.round,
        "turn": s.turn,
        "current_score": s.current_score,
        "target_score": s.target_score,
        "gold": s.gold,
        "hands_remaining": s.hands_remaining,
        "discards_remaining": s.discards_remaining,
        "slot_spins_remaining": s.slot_spins_remaining,
        "hand": [_card_dict(c) for c in s.hand],
        "selected_cards": list(s.selected_cards),
        "deck": {"cards": len(s.deck.cards), "discard_pile": len(s.deck.discard_pile)},
        "slot_result": jsonable_encoder(s.slot_result),
        "hand_result": None if s.hand_result is None else {
            "hand_type": s.hand_result.hand_type.value,
            "scoring_cards": [c.id for c in s.hand_result.scoring_cards],
            "base_chips": s.hand_result.base_chips,
            "base_mult": s.hand_result.base_mult,
        },
        "score_calculation": None if calc is None else {
            "chip_total": calc.chip_total,
            "mult_total": calc.mult_total,
            "applied_bonuses": jsonable_encoder(calc.applied_bonuses),
            "final_score": calc.final_score,
        },
        "roulette_result": jsonable_encoder(s.roulette_result),
        "jokers": [_joker_dict(j) for j in s.jokers],
        "max_jokers": s.max_jokers,
        "vouchers": list(s.vouchers),
        "shop": jsonable_encoder(s.shop),
        "rounds_won": s.rounds_won,
    }


def _get(session_id: str) -> HostedSession:
    hosted = _sessions.get(session_id)
    if hosted is None:
        raise HTTPException(404, "Session not found")
    return hosted


# ── Sessions ──────────────────────────────────────────────────────────

@app.post("/api/sessions")
async def create_session(body: dict | None = Body(None)):
    """Create a session and start its first run.

    Body: {"seed": str?, "config": {...}?}
    """
    body = body or {}
    emitter = EventEmitter()
    try:
        engine = GameEngine(body.get("config"), seed=body.get("seed"), emitter=emitter)
    except (TypeError, ValueError) as e:
        raise HTTPException(400, f"Invalid config: {e}")

    session_id = uuid.uuid4().hex
    hosted = HostedSession(engine=engine)
    emitter.on_any(hosted.record)
    _sessions[session_id] = hosted
    engine.start_game()
    logger.info("Created session %s (seed %s)", session_id, engine.session.seed)
    return {"id": session_id, "session": _session_dict(engine.session)}


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: str):
    hosted = _get(session_id)
    return {
        "id": session_id,
        "session": _session_dict(hosted.engine.session),
        "legal_actions": [
            {"type": action_name(a), **jsonable_encoder(a)} for a in hosted.engine.get_legal_actions()
        ],
    }


@app.delete("/api/sessions/{session_id}")
async def delete_session(session_id: str):
    _get(session_id)
    del _sessions[session_id]
    return {"deleted": session_id}


@app.post("/api/sessions/{session_id}/actions")
async def apply_action(session_id: str, body: dict):
    """Apply one action: {"type": "select_card", "card_id": "A_spades"}."""
    hosted = _get(session_id)
    try:
        action = parse_action(body)
    except ValueError as e:
        raise HTTPException(422, str(e))

    try:
        result = hosted.engine.step(action)
    except ValueError as e:
        if isinstance(action, StartGame):
            raise HTTPException(400, f"Invalid config: {e}")
        raise
    return {
        "result": {"success": result.success, "error": result.error},
        "session": _session_dict(hosted.engine.session),
    }


@app.get("/api/sessions/{session_id}/events")
async def get_events(session_id: str, since: int = Query(0, ge=0)):
    """Events recorded for a session, starting at sequence number `since`."""
    hosted = _get(session_id)
    return {
        "events": [e for e in hosted.events if e["seq"] >= since],
        "next": hosted.next_event,
    }


# ── Catalog ───────────────────────────────────────────────────────────

@app.get("/api/catalog/jokers")
async def joker_catalog():
    """Return the full joker catalog."""
    return {"jokers": [_joker_dict(j) for j in JOKERS]}


@app.get("/api/catalog/vouchers")
async def voucher_catalog():
    return {"vouchers": jsonable_encoder(VOUCHERS)}


@app.get("/api/catalog/consumables")
async def consumable_catalog():
    return {"consumables": jsonable_encoder(CONSUMABLES)}


# ── Health ────────────────────────────────────────────────────────────

@app.get("/api/health")
async def health():
    """Health check."""
    return {"status": "ok", "sessions": len(_sessions), "version": __version__}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
