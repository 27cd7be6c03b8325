import json
import os
import tempfile
import unittest

from app import app as flask_app  # noqa: E402
import app as app_mod             # noqa: E402
from game import Settings, Level, LevelWonEvent, new_session  # noqa: E402


SOLVABLE = {"number": 3, "columns": [[0, 0, 0], [1, 1, 1, 1], [0]], "capacity": 4}


class TestFlaskAPI(unittest.TestCase):
    def setUp(self):
        self._orig_settings = app_mod.SETTINGS
        app_mod.SETTINGS = Settings(min_spacing=1.0, aspect=0.5)
        self.client = flask_app.test_client()

    def tearDown(self):
        app_mod.SETTINGS = self._orig_settings
        app_mod._pack_cache.clear()

    def _post(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def test_given_deal_params_when_new_then_state_and_layout(self):
        r = self._post("/api/new", {"groups": 5, "empty": 2, "seed": 9})
        self.assertEqual(r.status_code, 200)
        data = r.get_json()
        self.assertTrue(data["ok"])
        state = data["state"]
        self.assertEqual(len(state["holders"]), 7)
        self.assertEqual(state["phase"], "playing")
        self.assertIsNone(state["pending"])
        self.assertEqual(state["history"], [])
        self.assertEqual(data["layout"]["rows"], [4, 3])
        self.assertEqual(len(data["layout"]["positions"]), 7)
        ids = [b["id"] for col in state["holders"] for b in col]
        self.assertEqual(sorted(ids), list(range(20)))

    def test_given_level_when_selecting_twice_then_move_and_win_events(self):
        r = self._post("/api/new", {"level": SOLVABLE})
        state = r.get_json()["state"]

        r1 = self._post("/api/select", {"state": state, "holder": 2})
        self.assertEqual(r1.status_code, 200)
        d1 = r1.get_json()
        self.assertEqual(d1["state"]["pending"], 2)
        self.assertEqual(d1["events"], [])

        r2 = self._post("/api/select", {"state": d1["state"], "holder": 0})
        d2 = r2.get_json()
        self.assertTrue(d2["ok"])
        self.assertTrue(d2["won"])
        self.assertEqual(d2["state"]["phase"], "over")
        self.assertEqual([e["type"] for e in d2["events"]], ["move", "won"])
        self.assertEqual(d2["events"][0]["from"], 2)
        self.assertEqual(d2["events"][0]["to"], 0)
        self.assertEqual(d2["state"]["history"], [{"from": 2, "to": 0, "ball": 7}])

        # Further selections are rejected once the level is over
        r3 = self._post("/api/select", {"state": d2["state"], "holder": 1})
        self.assertEqual(r3.status_code, 400)
        self.assertFalse(r3.get_json()["ok"])

        # Restart is allowed and brings the initial board back
        r4 = self._post("/api/restart", {"state": d2["state"]})
        d4 = r4.get_json()
        self.assertEqual(d4["state"]["phase"], "playing")
        self.assertEqual([len(c) for c in d4["state"]["holders"]], [3, 4, 1])

    def test_given_move_when_undo_then_previous_board(self):
        level = {"number": 1, "columns": [[0, 1], [1, 0], []]}
        state = self._post("/api/new", {"level": level}).get_json()["state"]
        state = self._post("/api/select", {"state": state, "holder": 0}).get_json()["state"]
        state = self._post("/api/select", {"state": state, "holder": 2}).get_json()["state"]
        self.assertTrue(state["hasUndo"])
        r = self._post("/api/undo", {"state": state})
        d = r.get_json()
        self.assertTrue(d["ok"])
        self.assertEqual(d["events"][0]["undo"], True)
        groups = [[b["group"] for b in col] for col in d["state"]["holders"]]
        self.assertEqual(groups, [[0, 1], [1, 0], []])
        self.assertFalse(d["state"]["hasUndo"])

        # Undo on an empty history is a no-op
        r2 = self._post("/api/undo", {"state": d["state"]})
        self.assertEqual(r2.status_code, 200)
        self.assertEqual(r2.get_json()["events"], [])

    def test_given_bad_requests_when_posted_then_400(self):
        state = self._post("/api/new", {"level": SOLVABLE}).get_json()["state"]
        r = self._post("/api/select", {"state": state, "holder": 17})
        self.assertEqual(r.status_code, 400)
        r = self._post("/api/select", {"holder": 0})
        self.assertEqual(r.status_code, 400)
        broken = dict(state, history=[{"from": 0, "to": 2, "ball": 0}])
        r = self._post("/api/undo", {"state": broken})
        self.assertEqual(r.status_code, 400)
        self.assertIn("bad state", r.get_json()["error"])
        r = self._post("/api/new", {"level": {"number": 1, "columns": [[0, 0, 0, 0, 0]]}})
        self.assertEqual(r.status_code, 400)

    def test_given_tampered_state_when_posted_then_400_and_nothing_applied(self):
        state = self._post("/api/new", {"level": SOLVABLE}).get_json()["state"]

        # Every ball relabelled to group 0 keeps the ball count but not the level
        forged = dict(state, holders=[[dict(b, group=0) for b in col] for col in state["holders"]])
        r = self._post("/api/select", {"state": forged, "holder": 1})
        self.assertEqual(r.status_code, 400)
        self.assertIn("bad state", r.get_json()["error"])

        r = self._post("/api/undo", {"state": dict(state, phase="over")})
        self.assertEqual(r.status_code, 400)

        level = {"number": 1, "columns": [[0], [0, 0]], "capacity": 2}
        state = self._post("/api/new", {"level": level}).get_json()["state"]
        overfull = dict(
            state,
            holders=[[], state["holders"][1] + state["holders"][0]],
            history=[{"from": 0, "to": 1, "ball": 0}],
        )
        r = self._post("/api/undo", {"state": overfull})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.get_json()["ok"])

    def test_given_oversized_or_invalid_deal_when_new_then_400(self):
        for params in ({"groups": 1000}, {"capacity": 10 ** 6}, {"empty": 500}, {"capacity": 0}):
            r = self._post("/api/new", params)
            self.assertEqual(r.status_code, 400, params)
            self.assertIn("bad deal", r.get_json()["error"])
        r = self._post("/api/new", {"groups": app_mod.MAX_DEAL_GROUPS, "seed": 1})
        self.assertEqual(r.status_code, 200)

    def test_given_events_when_encoding_then_won_encoded_and_unknown_rejected(self):
        self.assertEqual(
            app_mod.event_to_json(LevelWonEvent(level_number=4, moves=9)),
            {"type": "won", "level": 4, "moves": 9},
        )
        with self.assertRaises(TypeError):
            app_mod.event_to_json(object())

    def test_given_engine_when_state_roundtrip_then_equivalent(self):
        engine = new_session(Level.build(2, [[0, 1], [1, 0], []]))
        engine.select_holder(0)
        engine.select_holder(2)
        engine.select_holder(1)
        back = app_mod.json_to_state(app_mod.state_to_json(engine))
        self.assertEqual(back.snapshot(), engine.snapshot())
        self.assertEqual(back.level, engine.level)
        self.assertEqual(len(back.history), 1)

    def test_given_layout_request_when_posted_then_single_row_centered(self):
        r = self._post("/api/layout", {"count": 3, "minSpacing": 2.0, "aspect": 1.0, "origin": [1.0, 0.0]})
        d = r.get_json()
        self.assertTrue(d["ok"])
        xs = [p[0] for p in d["layout"]["positions"]]
        self.assertEqual(xs, [-1.0, 1.0, 3.0])
        self.assertEqual(d["layout"]["expectedWidth"], 8.0)
        r2 = self._post("/api/layout", {"count": 0})
        self.assertEqual(r2.status_code, 400)

    def test_given_level_pack_when_configured_then_levels_listed_and_loaded(self):
        pack = {"easy": [{"number": 1, "columns": [[0, 1], [1, 0], []]},
                         {"number": 2, "columns": [[1, 0], [0, 1], []]}]}
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "levels.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(pack, f)
            app_mod.SETTINGS = Settings(levels_path=path)
            r = self.client.get("/api/levels")
            self.assertEqual(r.get_json()["modes"], {"easy": [1, 2]})
            r1 = self._post("/api/new", {"mode": "easy", "number": 2})
            self.assertEqual(r1.get_json()["state"]["level"]["number"], 2)
            r2 = self._post("/api/new", {"mode": "easy", "after": 1})
            self.assertEqual(r2.get_json()["state"]["level"]["number"], 2)
            r3 = self._post("/api/new", {"mode": "easy", "after": 2})
            self.assertEqual(r3.status_code, 404)

    def test_given_no_pack_when_listing_levels_then_404(self):
        r = self.client.get("/api/levels")
        self.assertEqual(r.status_code, 404)


if __name__ == "__main__":
    unittest.main(verbosity=2)
