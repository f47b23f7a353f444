import unittest
from unittest.mock import patch

from fakes import FakeSearchClient, InMemoryStore, candidate
from fastapi.testclient import TestClient

from movie_night.deps.sessions import get_registry, get_store
from movie_night.main import app
from movie_night.services.session_registry import SessionRegistry
from movie_night.services.voting_controller import NominationController


def _row(nomination_id: str, imdb_id: str, votes: int = 0) -> dict:
    return {
        "id": nomination_id,
        "movie": f"Movie {nomination_id}",
        "imdb_id": imdb_id,
        "poster": None,
        "votes": votes,
        "watched": False,
    }


class TestSessionsApi(unittest.TestCase):
    def setUp(self) -> None:
        self.now = 0.0
        self.store = InMemoryStore([_row("n1", "tt1", 3), _row("n2", "tt2", 1), _row("n3", "tt3", 5)])
        self.search = FakeSearchClient({"batman": [candidate("tt1"), candidate("tt9", "Batman Forever")]})
        self.registry = SessionRegistry(
            lambda: NominationController(
                store=self.store,
                search_client_factory=self.search,
                max_votes=5,
                debounce_seconds=0.5,
            ),
            idle_ttl=300,
            clock=lambda: self.now,
        )
        app.dependency_overrides[get_registry] = lambda: self.registry
        app.dependency_overrides[get_store] = lambda: self.store
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _open(self) -> str:
        response = self.client.post("/sessions")
        self.assertEqual(response.status_code, 201)
        return response.json()["session_id"]

    def test_open_session_returns_ranked_state(self) -> None:
        response = self.client.post("/sessions")

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual([n["votes"] for n in payload["nominations"]], [5, 3, 1])
        self.assertEqual(payload["nominations"][0]["imdbID"], "tt3")
        self.assertEqual(payload["votes_used"], 0)
        self.assertEqual(payload["votes_remaining"], 5)

    def test_unknown_session_404(self) -> None:
        response = self.client.get("/sessions/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"]["code"], "SESSION_NOT_FOUND")

    def test_search_flags_already_nominated(self) -> None:
        sid = self._open()
        response = self.client.get(f"/sessions/{sid}/search", params={"q": "batman"})

        self.assertEqual(response.status_code, 200)
        items = response.json()["items"]
        self.assertEqual([i["imdbID"] for i in items], ["tt1", "tt9"])
        self.assertEqual([i["already_nominated"] for i in items], [True, False])
        self.assertEqual(items[1]["Title"], "Batman Forever")

    def test_empty_search_skips_network(self) -> None:
        sid = self._open()
        response = self.client.get(f"/sessions/{sid}/search", params={"q": ""})
        self.assertEqual(response.json()["items"], [])
        self.assertEqual(self.search.calls, [])

    def test_select_and_nominate(self) -> None:
        sid = self._open()
        self.client.get(f"/sessions/{sid}/search", params={"q": "batman"})

        selected = self.client.post(f"/sessions/{sid}/selection", json={"imdbID": "tt9"})
        self.assertEqual(selected.status_code, 200)

        created = self.client.post(f"/sessions/{sid}/nominations")
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["imdbID"], "tt9")
        self.assertEqual(created.json()["votes"], 0)

        state = self.client.get(f"/sessions/{sid}").json()
        self.assertEqual(state["search_results"], [])
        self.assertIsNone(state["selected_movie"])
        self.assertEqual(len(state["nominations"]), 4)

    def test_nominate_without_selection(self) -> None:
        sid = self._open()
        response = self.client.post(f"/sessions/{sid}/nominations")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"]["code"], "NO_MOVIE_SELECTED")

    def test_nominate_duplicate_conflict(self) -> None:
        sid = self._open()
        response = self.client.post(
            f"/sessions/{sid}/nominations",
            json={"candidate": {"Title": "Movie n1", "Year": "2000", "imdbID": "tt1"}},
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self.store.creates, [])

    def test_select_unknown_candidate(self) -> None:
        sid = self._open()
        response = self.client.post(f"/sessions/{sid}/selection", json={"imdbID": "tt404"})
        self.assertEqual(response.status_code, 400)

    def test_vote_budget_enforced(self) -> None:
        sid = self._open()
        for target in range(2, 7):
            response = self.client.post(f"/sessions/{sid}/nominations/n2/vote", json={"votes": target})
            self.assertEqual(response.status_code, 200)

        self.assertEqual(response.json()["votes_used"], 5)
        self.assertEqual(response.json()["votes_remaining"], 0)

        refused = self.client.post(f"/sessions/{sid}/nominations/n2/vote", json={"votes": 7})
        self.assertEqual(refused.status_code, 409)
        self.assertEqual(refused.json()["detail"]["error"]["code"], "VOTE_BUDGET_EXCEEDED")
        self.assertEqual(self.store.row("n2")["votes"], 6)

        lowered = self.client.post(f"/sessions/{sid}/nominations/n2/vote", json={"votes": 5})
        self.assertEqual(lowered.status_code, 200)
        self.assertEqual(lowered.json()["votes_used"], 5)

    def test_budget_is_per_session(self) -> None:
        first = self._open()
        self.registry.get(first).state.votes_used = 5
        second = self._open()
        response = self.client.post(f"/sessions/{second}/nominations/n1/vote", json={"votes": 4})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["votes_used"], 1)

    def test_negative_vote_refused(self) -> None:
        sid = self._open()
        response = self.client.post(f"/sessions/{sid}/nominations/n1/vote", json={"votes": -1})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["detail"]["error"]["code"], "NEGATIVE_VOTE")
        self.assertEqual(self.store.updates, [])

    def test_vote_unknown_nomination(self) -> None:
        sid = self._open()
        response = self.client.post(f"/sessions/{sid}/nominations/zz/vote", json={"votes": 1})
        self.assertEqual(response.status_code, 404)

    def test_vote_store_down_is_503(self) -> None:
        sid = self._open()
        self.store.fail = True
        response = self.client.post(f"/sessions/{sid}/nominations/n1/vote", json={"votes": 4})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(self.registry.get(sid).state.votes_used, 0)

    def test_toggle_watched(self) -> None:
        sid = self._open()
        response = self.client.post(f"/sessions/{sid}/nominations/n1/watched", json={"watched": False})
        self.assertEqual(response.status_code, 200)
        n1 = next(n for n in response.json()["nominations"] if n["id"] == "n1")
        self.assertTrue(n1["watched"])
        self.assertEqual(n1["votes"], 3)

    def test_query_accepted(self) -> None:
        sid = self._open()
        with patch.object(NominationController, "set_search_text") as set_text:
            response = self.client.put(f"/sessions/{sid}/query", json={"text": "bat"})
        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json(), {"search_text": "bat", "debounce_ms": 500})
        set_text.assert_called_once_with("bat")

    def test_close_session(self) -> None:
        sid = self._open()
        self.assertEqual(self.client.delete(f"/sessions/{sid}").status_code, 204)
        self.assertEqual(self.client.delete(f"/sessions/{sid}").status_code, 404)
        self.assertEqual(len(self.registry), 0)

    def test_list_nominations_ranked(self) -> None:
        response = self.client.get("/nominations")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([n["id"] for n in response.json()], ["n3", "n1", "n2"])

    def test_list_nominations_store_down(self) -> None:
        self.store.fail = True
        response = self.client.get("/nominations")
        self.assertEqual(response.status_code, 503)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_idle_session_expires(self) -> None:
        sid = self._open()
        controller = self.registry.get(sid)
        self.now += 301

        with patch.object(controller, "close", wraps=controller.close) as close:
            response = self.client.get(f"/sessions/{sid}")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"]["code"], "SESSION_NOT_FOUND")
        close.assert_called_once_with()
