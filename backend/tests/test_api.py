"""HTTP tests for the v1 API with storage, dispatch and the engine swapped out."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from tripsignals.dependencies.auth import require_user_id
from tripsignals.dependencies.services import get_dispatcher, get_gateway, get_notifier
from tripsignals.main import app
from tripsignals.models.base import get_db
from tripsignals.services.recommendation_gateway import RecommendationGateway
from tripsignals.tasks.signal_tasks import process_pending_delta

ENGINE_URL = "https://engine.test/functions/v1/recommendations"


class Notifier:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, *args):
        self.calls.append(args)
        if self.error is not None:
            raise self.error


def engine_gateway(handler):
    return RecommendationGateway(
        async_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        url=ENGINE_URL,
        api_key="secret",
    )


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def overrides(catalog, recording_dispatch, notifier):
    def override_db():
        yield catalog

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_dispatcher] = lambda: recording_dispatch
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_gateway] = lambda: engine_gateway(
        lambda request: httpx.Response(200, json={"listings": [{"id": "L1", "title": "Beach bungalow"}]})
    )
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous(overrides):
    return TestClient(app)


@pytest.fixture
def client(overrides):
    overrides[require_user_id] = lambda: "u1"
    return TestClient(app)


# --- Auth ---

@pytest.mark.parametrize(
    "method, path",
    [
        ("post", "/api/v1/interactions"),
        ("put", "/api/v1/ratings/L1"),
        ("get", "/api/v1/preferences"),
        ("get", "/api/v1/recommendations/fyp"),
        ("delete", "/api/v1/me/data"),
    ],
)
def test_requires_login(anonymous, method, path):
    kwargs = {"json": {"target_id": "L1", "kind": "view", "rating": 4}} if method in ("post", "put") else {}
    response = getattr(anonymous, method)(path, **kwargs)
    assert response.status_code == 401
    assert response.json()["error"] == "NotAuthenticated"


# --- Interactions ---

def test_record_interaction(client, recording_dispatch):
    response = client.post(
        "/api/v1/interactions",
        json={"target_id": "L1", "kind": "save", "metadata": {"source": "feed"}},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == "u1"
    assert body["interaction_type"] == "save"
    assert body["weight"] == 3
    assert body["metadata"] == {"source": "feed"}
    assert len(recording_dispatch.dispatched) == 1


def test_record_swipe(client):
    response = client.post("/api/v1/interactions", json={"target_id": "E1", "kind": "swipe", "direction": "left"})
    assert response.status_code == 201
    assert response.json()["interaction_type"] == "swipe_left"
    assert response.json()["weight"] == -2


def test_unknown_kind_is_422(client, recording_dispatch):
    response = client.post("/api/v1/interactions", json={"target_id": "L1", "kind": "teleport"})
    assert response.status_code == 422
    assert response.json()["error"] == "UnknownInteractionKind"
    assert recording_dispatch.dispatched == []


def test_batch_statuses(client):
    complete = client.post("/api/v1/interactions/batch", json={"items": [
        {"target_id": "L1", "kind": "view"},
        {"target_id": "L2", "kind": "click"},
    ]})
    assert complete.status_code == 200
    assert complete.json()["status"] == "complete"

    partial = client.post("/api/v1/interactions/batch", json={"items": [
        {"target_id": "L1", "kind": "view"},
        {"target_id": "L1", "kind": "teleport"},
    ]})
    assert partial.status_code == 207
    body = partial.json()
    assert body["status"] == "partial"
    assert [f["index"] for f in body["failed"]] == [1]
    assert len(body["persisted"]) == 1

    failed = client.post("/api/v1/interactions/batch", json={"items": [{"target_id": "L1", "kind": "teleport"}]})
    assert failed.status_code == 422
    assert failed.json()["status"] == "failed"


def test_recent_interactions(client):
    client.post("/api/v1/interactions", json={"target_id": "L1", "kind": "view"})
    client.post("/api/v1/interactions", json={"target_id": "E1", "kind": "share"})

    response = client.get("/api/v1/interactions/recent", params={"limit": 1})
    assert response.status_code == 200
    assert [e["target_id"] for e in response.json()] == ["E1"]


# --- Ratings and preferences ---

def test_rating_flow(client, catalog, recording_dispatch):
    response = client.put("/api/v1/ratings/L1", json={"rating": 5, "comment": "Lovely"})
    assert response.status_code == 200
    assert response.json() == {"rating": 5, "average": 5.0, "count": 1}

    own = client.get("/api/v1/ratings/L1").json()
    assert own["rating"] == 5
    assert own["comment"] == "Lovely"

    summary = client.get("/api/v1/ratings/L1/summary").json()
    assert summary == {"target_id": "L1", "average": 5.0, "count": 1}

    for delta_id in recording_dispatch.dispatched:
        process_pending_delta(catalog, delta_id)
    assert client.get("/api/v1/preferences").json() == {"beach": 2.0, "surf": 2.0}


def test_invalid_rating_is_422(client):
    response = client.put("/api/v1/ratings/L1", json={"rating": 9})
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidRating"


def test_missing_rating_is_404(client):
    response = client.get("/api/v1/ratings/L2")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


# --- Trips ---

def test_trip_items(client):
    first = client.post("/api/v1/trips/items", json={"target_id": "L1", "trip_id": "T1"})
    assert first.status_code == 201
    assert first.json()["trip_id"] == "T1"

    again = client.post("/api/v1/trips/items", json={"target_id": "L1", "trip_id": "T1"})
    assert again.status_code == 200
    assert again.json()["id"] == first.json()["id"]

    client.post("/api/v1/trips/items", json={"target_id": "E1"})
    items = client.get("/api/v1/trips/items").json()
    assert sorted(i["target_id"] for i in items) == ["E1", "L1"]
    assert [i["trip_id"] for i in items if i["target_id"] == "E1"] == [None]


# --- Recommendations ---

def test_recommendations(client):
    response = client.get("/api/v1/recommendations/fyp")
    assert response.status_code == 200
    body = response.json()
    assert body["degraded"] is False
    card = body["cards"][0]
    assert card["id"] == "L1"
    assert card["pricePerNight"] == 0.0
    assert card["location"] == {"city": "", "country": "", "lat": None, "lng": None}
    assert body["metadata"]["context"] == "fyp"


def test_recommendations_forward_params(client, overrides):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"listings": []})

    overrides[get_gateway] = lambda: engine_gateway(handler)
    client.get("/api/v1/recommendations/explore", params={"lat": 38.7, "lng": -9.1, "limit": 10})

    assert json.loads(seen[0].content) == {
        "context": "explore",
        "userId": "u1",
        "params": {"location": {"lat": 38.7, "lng": -9.1}, "limit": 10},
    }


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(500, json={"error": "boom"}),
        lambda request: httpx.Response(200, json={"cards": []}),
        lambda request: httpx.Response(200, content=b"not json"),
    ],
)
def test_engine_failure_degrades(client, overrides, handler):
    overrides[get_gateway] = lambda: engine_gateway(handler)

    response = client.get("/api/v1/recommendations/after_booking", params={"seed_target_id": "L1"})
    assert response.status_code == 200
    assert response.json()["cards"] == []
    assert response.json()["degraded"] is True


def test_one_bad_card_does_not_blank_the_feed(client, overrides):
    overrides[get_gateway] = lambda: engine_gateway(
        lambda request: httpx.Response(200, json={"listings": [{"id": "A"}, {"id": "B", "reviewCount": 4.5}]})
    )
    body = client.get("/api/v1/recommendations/fyp").json()
    assert body["degraded"] is False
    assert [c["id"] for c in body["cards"]] == ["A"]


def test_unknown_context_is_422(client):
    assert client.get("/api/v1/recommendations/nearby").status_code == 422


def test_feedback_accepted(client, notifier):
    response = client.post(
        "/api/v1/recommendations/feedback",
        json={"targetId": "L1", "interactionType": "save", "context": "fyp"},
    )
    assert response.status_code == 202
    assert notifier.calls == [("u1", "L1", "save", "fyp", None)]


def test_feedback_swallows_queue_errors(client, overrides):
    overrides[get_notifier] = lambda: Notifier(error=ConnectionError("broker down"))
    response = client.post(
        "/api/v1/recommendations/feedback",
        json={"targetId": "L1", "interactionType": "view", "context": "explore"},
    )
    assert response.status_code == 202


# --- Privacy ---

def test_erase_my_data(client, catalog, recording_dispatch):
    client.post("/api/v1/interactions", json={"target_id": "L1", "kind": "book"})
    process_pending_delta(catalog, recording_dispatch.dispatched[0])

    response = client.delete("/api/v1/me/data")
    assert response.status_code == 200
    assert response.json()["preference_scores"] == 2
    assert client.get("/api/v1/preferences").json() == {}


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
