from __future__ import annotations

import unittest

from fortune_sim.enums import SlotSymbol
from fortune_sim.rng import RNGState
from fortune_sim.slots import (
    CardBonus,
    SlotEffects,
    SlotModifiers,
    select_symbol,
    spin,
    spin_with_symbols,
    summarize_effects,
    symbol_probabilities,
)

S = SlotSymbol


class SelectSymbolTest(unittest.TestCase):
    def test_fixed_values(self) -> None:
        self.assertEqual(select_symbol(0.0), S.CARD)
        self.assertEqual(select_symbol(0.26), S.TARGET)
        self.assertEqual(select_symbol(0.5), S.GOLD)
        self.assertEqual(select_symbol(0.7), S.CHIP)
        self.assertEqual(select_symbol(0.82), S.STAR)
        self.assertEqual(select_symbol(0.9), S.SKULL)
        self.assertEqual(select_symbol(0.99), S.WILD)

    def test_probabilities_sum_to_one(self) -> None:
        probs = symbol_probabilities()
        self.assertAlmostEqual(sum(probs.values()), 1.0)
        self.assertAlmostEqual(probs[S.CARD], 0.25)

    def test_weight_override(self) -> None:
        mods = SlotModifiers(symbol_weights={S.STAR: 0})
        self.assertEqual(symbol_probabilities(mods)[S.STAR], 0)
        self.assertNotEqual(select_symbol(0.82, mods), S.STAR)

    def test_negative_weight_rejected(self) -> None:
        with self.assertRaises(ValueError):
            symbol_probabilities(SlotModifiers(symbol_weights={S.GOLD: -1}))

    def test_guaranteed_symbol(self) -> None:
        mods = SlotModifiers(guaranteed_symbol=S.STAR)
        result = spin(modifiers=mods, random_values=[0.0, 0.5, 0.9])
        self.assertEqual(result.symbols, (S.STAR, S.STAR, S.STAR))
        self.assertTrue(result.is_jackpot)

    def test_sampled_shares(self) -> None:
        rng = RNGState("slot-share")
        n = 10_000
        counts = {s: 0 for s in S}
        for _ in range(n):
            counts[select_symbol(rng.random("slot"))] += 1
        for symbol, p in symbol_probabilities().items():
            self.assertAlmostEqual(counts[symbol] / n, p, delta=0.02)


class SpinTest(unittest.TestCase):
    def test_no_match_no_effects(self) -> None:
        result = spin(random_values=[0.1, 0.3, 0.9])
        self.assertEqual(result.symbols, (S.CARD, S.TARGET, S.SKULL))
        self.assertFalse(result.is_jackpot)
        self.assertIsNone(result.combination)
        self.assertEqual(result.effects, SlotEffects())

    def test_gold_triple(self) -> None:
        result = spin(random_values=[0.5, 0.5, 0.5])
        self.assertEqual(result.combination, "gold_triple")
        self.assertEqual(result.effects.instant.gold, 30)

    def test_star_triple_is_jackpot(self) -> None:
        result = spin(random_values=[0.82, 0.82, 0.82])
        self.assertTrue(result.is_jackpot)
        self.assertEqual(result.effects.card_bonus.score_multiplier, 2.0)
        self.assertEqual(result.effects.roulette_bonus.free_spins, 1)

    def test_skull_triple_penalty(self) -> None:
        pen = spin(random_values=[0.9, 0.9, 0.9]).effects.penalty
        self.assertTrue(pen.skip_roulette)
        self.assertEqual(pen.discard_cards, 2)
        self.assertEqual(pen.lose_gold, 10)

    def test_wild_joins_triple(self) -> None:
        result = spin_with_symbols([S.WILD, S.CHIP, S.CHIP])
        self.assertEqual(result.combination, "chip_triple")
        self.assertEqual(result.effects.instant.chips, 50)

    def test_all_wild_is_jackpot(self) -> None:
        self.assertTrue(spin_with_symbols([S.WILD] * 3).is_jackpot)

    def test_single_symbol_contributions(self) -> None:
        effects = spin_with_symbols([S.GOLD, S.CHIP, S.STAR]).effects
        self.assertEqual(effects.instant.gold, 8)
        self.assertEqual(effects.instant.chips, 15)

    def test_reroll_replaces_skull(self) -> None:
        mods = SlotModifiers(reroll_count=1)
        result = spin(modifiers=mods, random_values=[0.9, 0.1, 0.3, 0.5])
        self.assertEqual(result.symbols, (S.GOLD, S.CARD, S.TARGET))
        self.assertEqual(result.effects.instant.gold, 3)

    def test_seeded_spins_repeat(self) -> None:
        self.assertEqual(spin(RNGState("same")).symbols, spin(RNGState("same")).symbols)


class EffectsTest(unittest.TestCase):
    def test_merge(self) -> None:
        a = SlotEffects(card_bonus=CardBonus(extra_draw=1, score_multiplier=2.0))
        b = SlotEffects(card_bonus=CardBonus(extra_draw=2, score_multiplier=1.5))
        merged = a.merge(b)
        self.assertEqual(merged.card_bonus.extra_draw, 3)
        self.assertEqual(merged.card_bonus.score_multiplier, 3.0)

    def test_modifier_merge(self) -> None:
        a = SlotModifiers(symbol_weights={S.STAR: 10, S.GOLD: 5}, reroll_count=1)
        b = SlotModifiers(symbol_weights={S.STAR: 20}, reroll_count=2)
        merged = a.merge(b)
        self.assertEqual(merged.symbol_weights, {S.STAR: 20, S.GOLD: 5})
        self.assertEqual(merged.reroll_count, 3)

    def test_summary(self) -> None:
        summary = summarize_effects(spin_with_symbols([S.SKULL] * 3).effects)
        self.assertIn("Skip Roulette", summary)
        self.assertIn("-10 Gold", summary)


if __name__ == "__main__":
    unittest.main()
