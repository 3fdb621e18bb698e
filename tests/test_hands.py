from __future__ import annotations

import unittest

from fortune_sim.cards import Card
from fortune_sim.enums import HandType, Rank, Suit
from fortune_sim.hands import compare_hands, evaluate_hand

SUITS = {"h": Suit.HEARTS, "d": Suit.DIAMONDS, "c": Suit.CLUBS, "s": Suit.SPADES}


def card(text: str, **kwargs) -> Card:
    """card("Ah"), card("10s"), card("Kd", is_wild=True)."""
    return Card(Rank.from_display(text[:-1]), SUITS[text[-1]], **kwargs)


def hand(*texts: str) -> list[Card]:
    return [card(t) for t in texts]


class EvaluateHandTest(unittest.TestCase):
    def test_two_pair(self) -> None:
        result = evaluate_hand(hand("Ah", "Ad", "Ks", "Kd", "Qc"))
        self.assertEqual(result.hand_type, HandType.TWO_PAIR)
        self.assertEqual(
            sorted(c.id for c in result.scoring_cards),
            ["A_diamonds", "A_hearts", "K_diamonds", "K_spades"],
        )

    def test_straight_flush(self) -> None:
        result = evaluate_hand(hand("5s", "6s", "7s", "8s", "9s"))
        self.assertEqual(result.hand_type, HandType.STRAIGHT_FLUSH)
        self.assertEqual((result.base_chips, result.base_mult), (100, 8))

    def test_wheel_straight(self) -> None:
        result = evaluate_hand(hand("As", "2h", "3d", "4c", "5s"))
        self.assertEqual(result.hand_type, HandType.STRAIGHT)
        self.assertEqual(len(result.scoring_cards), 5)

    def test_royal_flush(self) -> None:
        result = evaluate_hand(hand("10h", "Jh", "Qh", "Kh", "Ah"))
        self.assertEqual(result.hand_type, HandType.ROYAL_FLUSH)

    def test_categories(self) -> None:
        cases = [
            (("9s", "9h", "9d", "9c", "2s"), HandType.FOUR_OF_A_KIND),
            (("9s", "9h", "9d", "2c", "2s"), HandType.FULL_HOUSE),
            (("2h", "7h", "9h", "Jh", "Kh"), HandType.FLUSH),
            (("9s", "9h", "9d", "2c", "5s"), HandType.THREE_OF_A_KIND),
            (("Ks", "Kh", "2c", "5d", "9s"), HandType.PAIR),
            (("Ks", "Jh", "2c", "5d", "9s"), HandType.HIGH_CARD),
        ]
        for texts, expected in cases:
            with self.subTest(hand=texts):
                self.assertEqual(evaluate_hand(hand(*texts)).hand_type, expected)

    def test_pair_scores_only_the_pair(self) -> None:
        result = evaluate_hand(hand("Ks", "Kh", "2c", "5d", "9s"))
        self.assertEqual({c.id for c in result.scoring_cards}, {"K_spades", "K_hearts"})

    def test_high_card_scores_highest_card(self) -> None:
        result = evaluate_hand(hand("3s", "Jh", "2c", "5d", "9s"))
        self.assertEqual([c.id for c in result.scoring_cards], ["J_hearts"])

    def test_straight_picks_highest_run(self) -> None:
        long_run = evaluate_hand(hand("3s", "4h", "5c", "6d", "7s", "8h"))
        short_run = evaluate_hand(hand("2s", "3h", "4c", "5d", "6s"))
        self.assertEqual(long_run.hand_type, HandType.STRAIGHT)
        self.assertNotIn("3_spades", [c.id for c in long_run.scoring_cards])
        self.assertGreater(compare_hands(long_run, short_run), 0)

    def test_short_selection(self) -> None:
        self.assertEqual(evaluate_hand(hand("2h", "2s")).hand_type, HandType.PAIR)
        self.assertEqual(evaluate_hand(hand("2h")).hand_type, HandType.HIGH_CARD)

    def test_empty_selection(self) -> None:
        result = evaluate_hand([])
        self.assertEqual(result.hand_type, HandType.HIGH_CARD)
        self.assertEqual(result.scoring_cards, ())


class WildCardTest(unittest.TestCase):
    def test_single_wild_completes_trips(self) -> None:
        cards = [card("As"), card("Ah"), card("Kd", is_wild=True), card("5c"), card("9d")]
        result = evaluate_hand(cards)
        self.assertEqual(result.hand_type, HandType.THREE_OF_A_KIND)
        self.assertIn("K_diamonds", [c.id for c in result.scoring_cards])

    def test_single_wild_completes_flush(self) -> None:
        cards = [card("2h"), card("7h"), card("9h"), card("Jh"), card("3s", is_wild=True)]
        self.assertEqual(evaluate_hand(cards).hand_type, HandType.FLUSH)

    def test_all_wild_five_is_royal(self) -> None:
        cards = [card(t, is_wild=True) for t in ("2h", "3d", "4c", "5s", "7h")]
        self.assertEqual(evaluate_hand(cards).hand_type, HandType.ROYAL_FLUSH)


class CompareHandsTest(unittest.TestCase):
    def test_category_then_rank(self) -> None:
        pair = evaluate_hand(hand("Ks", "Kh"))
        two_pair = evaluate_hand(hand("2s", "2h", "3c", "3d"))
        low_pair = evaluate_hand(hand("4s", "4h"))
        self.assertLess(compare_hands(pair, two_pair), 0)
        self.assertGreater(compare_hands(pair, low_pair), 0)
        self.assertEqual(compare_hands(pair, pair), 0)


if __name__ == "__main__":
    unittest.main()
