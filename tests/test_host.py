from __future__ import annotations

import unittest

from fastapi.testclient import TestClient

from viewer.app import main


class HostTest(unittest.TestCase):
    def setUp(self) -> None:
        main._sessions.clear()
        self.client = TestClient(main.app)

    def create(self, **body) -> dict:
        resp = self.client.post("/api/sessions", json=body)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def act(self, session_id: str, **action) -> dict:
        resp = self.client.post(f"/api/sessions/{session_id}/actions", json=action)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_health(self) -> None:
        data = self.client.get("/api/health").json()
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["sessions"], 0)

    def test_create_session(self) -> None:
        data = self.create(seed="abc")
        session = data["session"]
        self.assertEqual(session["seed"], "abc")
        self.assertEqual(session["phase"], "SLOT_PHASE")
        self.assertEqual(session["gold"], 100)
        self.assertEqual(session["target_score"], 300)
        self.assertIn(data["id"], main._sessions)

    def test_create_with_config(self) -> None:
        session = self.create(seed="abc", config={"starting_gold": 12})["session"]
        self.assertEqual(session["gold"], 12)

    def test_bad_config(self) -> None:
        resp = self.client.post("/api/sessions", json={"config": {"starting_gems": 1}})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(main._sessions, {})

    def test_unknown_voucher_in_config(self) -> None:
        resp = self.client.post("/api/sessions", json={"config": {"vouchers": ["nope"]}})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("nope", resp.json()["detail"])
        self.assertEqual(main._sessions, {})

    def test_get_session_lists_legal_actions(self) -> None:
        session_id = self.create(seed="abc")["id"]
        data = self.client.get(f"/api/sessions/{session_id}").json()
        self.assertEqual(data["legal_actions"], [{"type": "spin_slot"}])

    def test_turn_through_api(self) -> None:
        session_id = self.create(seed="abc")["id"]
        data = self.act(session_id, type="spin_slot")
        self.assertTrue(data["result"]["success"])
        session = data["session"]
        self.assertEqual(session["phase"], "PLAY_PHASE")
        self.assertEqual(len(session["hand"]), 8)
        self.assertIsNotNone(session["slot_result"])

        card_id = session["hand"][0]["id"]
        self.assertTrue(self.act(session_id, type="select_card", card_id=card_id)["result"]["success"])
        data = self.act(session_id, type="play_hand")
        self.assertEqual(data["session"]["phase"], "ROULETTE_PHASE")
        self.assertIsNotNone(data["session"]["score_calculation"])

        data = self.act(session_id, type="skip_roulette")
        self.assertEqual(data["session"]["phase"], "SLOT_PHASE")
        self.assertIsNone(data["session"]["roulette_result"])
        self.assertIsNone(data["session"]["score_calculation"])
        events = self.client.get(f"/api/sessions/{session_id}/events").json()["events"]
        spins = [e for e in events if e["type"] == "ROULETTE_SPIN"]
        self.assertTrue(spins[-1]["payload"]["was_skipped"])

    def test_rejected_action(self) -> None:
        session_id = self.create(seed="abc")["id"]
        data = self.act(session_id, type="play_hand")
        self.assertFalse(data["result"]["success"])
        self.assertEqual(data["result"]["error"], "Invalid action play_hand in phase SLOT_PHASE")

    def test_malformed_action(self) -> None:
        session_id = self.create(seed="abc")["id"]
        resp = self.client.post(f"/api/sessions/{session_id}/actions", json={"type": "fold"})
        self.assertEqual(resp.status_code, 422)
        resp = self.client.post(f"/api/sessions/{session_id}/actions", json={"type": "select_card"})
        self.assertEqual(resp.status_code, 422)

    def test_unknown_session(self) -> None:
        self.assertEqual(self.client.get("/api/sessions/missing").status_code, 404)
        resp = self.client.post("/api/sessions/missing/actions", json={"type": "spin_slot"})
        self.assertEqual(resp.status_code, 404)

    def test_events(self) -> None:
        session_id = self.create(seed="abc")["id"]
        data = self.client.get(f"/api/sessions/{session_id}/events").json()
        self.assertEqual([e["type"] for e in data["events"]], ["GAME_START", "PHASE_CHANGE"])
        self.assertEqual(data["events"][1]["payload"], {"from": "IDLE", "to": "SLOT_PHASE"})
        self.assertEqual(data["next"], 2)

        self.act(session_id, type="spin_slot")
        later = self.client.get(f"/api/sessions/{session_id}/events", params={"since": 2}).json()
        types = [e["type"] for e in later["events"]]
        self.assertEqual(types[0], "SLOT_SPIN")
        self.assertIn("CARDS_DRAWN", types)
        self.assertTrue(all(e["seq"] >= 2 for e in later["events"]))

    def test_delete(self) -> None:
        session_id = self.create(seed="abc")["id"]
        self.assertEqual(self.client.delete(f"/api/sessions/{session_id}").json(), {"deleted": session_id})
        self.assertEqual(self.client.get(f"/api/sessions/{session_id}").status_code, 404)

    def test_catalog(self) -> None:
        jokers = self.client.get("/api/catalog/jokers").json()["jokers"]
        self.assertEqual(len(jokers), 17)
        joker = next(j for j in jokers if j["id"] == "joker")
        self.assertEqual(joker["trigger"], {"kind": "OnScore"})
        self.assertEqual(joker["effect"], {"kind": "AddMult", "value": 4})
        vouchers = self.client.get("/api/catalog/vouchers").json()["vouchers"]
        self.assertEqual(len(vouchers), 10)
        consumables = self.client.get("/api/catalog/consumables").json()["consumables"]
        self.assertEqual(len(consumables), 6)
        self.assertEqual({c["type"] for c in consumables}, {"card_remover", "card_transformer", "card_duplicator"})


if __name__ == "__main__":
    unittest.main()
