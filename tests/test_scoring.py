from __future__ import annotations

import unittest

from fortune_sim.cards import Card, Enhancement
from fortune_sim.enums import BonusType, HandType, Rank, Suit
from fortune_sim.hands import HandResult, evaluate_hand
from fortune_sim.scoring import (
    AppliedBonus,
    calculate_score,
    format_score_breakdown,
    gold_from_enhancements,
)


def bare_hand(chips: int = 10, mult: int = 4) -> HandResult:
    return HandResult(HandType.PAIR, 0, (), chips, mult)


class BonusOrderTest(unittest.TestCase):
    def test_mult_then_xmult(self) -> None:
        calc = calculate_score(bare_hand(), [
            AppliedBonus("a", BonusType.MULT, 5),
            AppliedBonus("b", BonusType.XMULT, 2),
        ])
        self.assertEqual(calc.final_score, 180)

    def test_xmult_then_mult(self) -> None:
        calc = calculate_score(bare_hand(), [
            AppliedBonus("b", BonusType.XMULT, 2),
            AppliedBonus("a", BonusType.MULT, 5),
        ])
        self.assertEqual(calc.final_score, 130)

    def test_applied_bonuses_keep_order(self) -> None:
        bonuses = [
            AppliedBonus("x", BonusType.CHIPS, 5),
            AppliedBonus("y", BonusType.XMULT, 3),
            AppliedBonus("z", BonusType.MULT, 1),
        ]
        calc = calculate_score(bare_hand(), bonuses)
        self.assertEqual([b.source for b in calc.applied_bonuses], ["x", "y", "z"])
        self.assertEqual(calc.chip_total, 15)
        self.assertEqual(calc.mult_total, 13)

    def test_floor_and_non_negative(self) -> None:
        calc = calculate_score(bare_hand(15, 1), [AppliedBonus("x", BonusType.XMULT, 1.5)])
        self.assertEqual(calc.final_score, 22)
        calc = calculate_score(bare_hand(15, 1), [AppliedBonus("x", BonusType.MULT, -10)])
        self.assertEqual(calc.final_score, 0)


class CardChipsTest(unittest.TestCase):
    def test_pair_of_kings(self) -> None:
        cards = [Card(Rank.KING, Suit.SPADES), Card(Rank.KING, Suit.HEARTS)]
        calc = calculate_score(evaluate_hand(cards))
        self.assertEqual(calc.chip_total, 30)
        self.assertEqual(calc.final_score, 60)

    def test_chips_enhancement(self) -> None:
        ten = Card(Rank.TEN, Suit.CLUBS, enhancement=Enhancement("chips", 30))
        self.assertEqual(calculate_score(evaluate_hand([ten])).final_score, 45)

    def test_mult_enhancement_applies_first(self) -> None:
        queen = Card(Rank.QUEEN, Suit.HEARTS, enhancement=Enhancement("mult", 4))
        calc = calculate_score(evaluate_hand([queen]), [AppliedBonus("j", BonusType.XMULT, 2)])
        self.assertEqual(calc.mult_total, 10)
        self.assertEqual(calc.final_score, 150)
        self.assertTrue(calc.applied_bonuses[0].source.startswith("Enhancement"))

    def test_retrigger_enhancement(self) -> None:
        two = Card(Rank.TWO, Suit.CLUBS, enhancement=Enhancement("retrigger", 1))
        self.assertEqual(calculate_score(evaluate_hand([two])).final_score, 9)

    def test_joker_retriggers(self) -> None:
        cards = [Card(Rank.TWO, Suit.SPADES), Card(Rank.TWO, Suit.HEARTS)]
        calc = calculate_score(evaluate_hand(cards), retriggers=1)
        self.assertEqual(calc.applied_bonuses[0].source, "Retrigger x1")
        self.assertEqual(calc.final_score, 36)

    def test_gold_card_scores_no_chips(self) -> None:
        king = Card(Rank.KING, Suit.DIAMONDS, is_gold=True)
        self.assertEqual(calculate_score(evaluate_hand([king])).final_score, 5)


class GoldAndBreakdownTest(unittest.TestCase):
    def test_gold_from_enhancements(self) -> None:
        cards = [
            Card(Rank.KING, Suit.DIAMONDS, enhancement=Enhancement("gold", 3)),
            Card(Rank.TWO, Suit.DIAMONDS),
        ]
        self.assertEqual(gold_from_enhancements(cards), 3)

    def test_unknown_enhancement(self) -> None:
        with self.assertRaises(ValueError):
            Enhancement("bogus", 1)

    def test_breakdown(self) -> None:
        calc = calculate_score(bare_hand(), [AppliedBonus("Joker", BonusType.MULT, 4)])
        text = format_score_breakdown(calc)
        self.assertIn("+4 mult (Joker)", text)
        self.assertIn("= 80", text)


if __name__ == "__main__":
    unittest.main()
