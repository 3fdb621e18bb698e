"""Wheel resolver — weighted segments, bonus redistribution and spins.

All functions are pure: segment collections are never mutated, bonus
application returns a new config.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

from .rng import RNGState
from .slots import RouletteBonus

logger = logging.getLogger(__name__)

TOTAL_PROBABILITY = 100.0


@dataclass(frozen=True)
class RouletteSegment:
    id: str
    multiplier: float
    probability: float
    color: str = "#ffffff"


@dataclass(frozen=True)
class RouletteConfig:
    segments: tuple[RouletteSegment, ...]
    spin_duration: float = 3.0


@dataclass(frozen=True)
class RouletteResult:
    segment: RouletteSegment
    final_score: int
    was_skipped: bool = False


SKIP_SEGMENT = RouletteSegment(id="skip", multiplier=1, probability=100, color="#888888")


def validate_config(config: RouletteConfig) -> None:
    """Raise ValueError for malformed wheel data."""
    if not config.segments:
        raise ValueError("RouletteConfig must have at least one segment")
    if config.spin_duration <= 0:
        raise ValueError("spin_duration must be positive")
    for seg in config.segments:
        if not seg.id:
            raise ValueError("Each segment must have an id")
        if seg.multiplier < 0:
            raise ValueError(f"Segment {seg.id} multiplier cannot be negative")
        if seg.probability < 0:
            raise ValueError(f"Segment {seg.id} probability cannot be negative")


def normalize_segments(segments: tuple[RouletteSegment, ...] | list[RouletteSegment]) -> tuple[RouletteSegment, ...]:
    """Clamp weights at zero and rescale them to sum to 100.

    All-zero input is split evenly.
    """
    if not segments:
        return ()
    total = sum(max(0.0, s.probability) for s in segments)
    if total == 0:
        even = TOTAL_PROBABILITY / len(segments)
        return tuple(replace(s, probability=even) for s in segments)
    scale = TOTAL_PROBABILITY / total
    return tuple(replace(s, probability=max(0.0, s.probability) * scale) for s in segments)


def select_segment(segments, random_value: Optional[float] = None, rng: Optional[RNGState] = None) -> RouletteSegment:
    """Pick a segment by weight.

    Segments with weight <= 0 are never chosen; if none is positive the first
    segment is returned.
    """
    if not segments:
        raise ValueError("Cannot select from empty segments")
    valid = [s for s in segments if s.probability > 0]
    if not valid:
        return segments[0]

    total = sum(s.probability for s in valid)
    if random_value is None:
        random_value = (rng or RNGState()).random("roulette")
    point = random_value * total

    cumulative = 0.0
    for seg in valid:
        cumulative += seg.probability
        if point < cumulative:
            return seg
    return valid[-1]


def _distribute(segments: list[RouletteSegment], extra: float) -> list[RouletteSegment]:
    """Share `extra` among positive-multiplier segments in proportion to weight."""
    recipients = [s for s in segments if s.multiplier > 0 and s.probability > 0]
    pool = sum(s.probability for s in recipients)
    if not recipients or pool <= 0:
        return segments
    out = []
    for s in segments:
        if s.multiplier > 0 and s.probability > 0:
            s = replace(s, probability=s.probability + s.probability / pool * extra)
        out.append(s)
    return out


def apply_bonuses(config: RouletteConfig, bonus: RouletteBonus) -> RouletteConfig:
    """Return a new config with safe-zone and max-multiplier bonuses applied."""
    segments = list(config.segments)

    if bonus.safe_zone_bonus > 0:
        bust_idx = next((i for i, s in enumerate(segments) if s.multiplier == 0), None)
        if bust_idx is not None and segments[bust_idx].probability > 0:
            bust = segments[bust_idx]
            reduction = min(bonus.safe_zone_bonus, bust.probability)
            segments[bust_idx] = replace(bust, probability=bust.probability - reduction)
            segments = _distribute(segments, reduction)

    if bonus.max_multiplier > 0 and segments:
        top = max(s.multiplier for s in segments)
        top_idx = next(i for i, s in enumerate(segments) if s.multiplier == top)
        top_seg = segments[top_idx]
        if top_seg.probability > 0:
            taken = top_seg.probability / 2
            new_mult = top + bonus.max_multiplier
            segments[top_idx] = replace(top_seg, probability=top_seg.probability - taken)
            segments.append(RouletteSegment(
                id=f"bonus_{new_mult:g}x",
                multiplier=new_mult,
                probability=taken,
                color="#ffd700",
            ))

    return RouletteConfig(segments=normalize_segments(segments), spin_duration=config.spin_duration)


def spin(
    config: RouletteConfig,
    base_score: int,
    random_value: Optional[float] = None,
    rng: Optional[RNGState] = None,
) -> RouletteResult:
    segment = select_segment(config.segments, random_value=random_value, rng=rng)
    final = max(0, math.floor(base_score * segment.multiplier))
    logger.debug("Wheel landed on %s (x%g): %d -> %d", segment.id, segment.multiplier, base_score, final)
    return RouletteResult(segment=segment, final_score=final, was_skipped=False)


def skip(base_score: int) -> RouletteResult:
    return RouletteResult(segment=SKIP_SEGMENT, final_score=base_score, was_skipped=True)
