"""Tests for the recommendation engine gateway, using httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from tripsignals.errors import (
    GatewayUnavailable,
    MalformedGatewayResponse,
    NotAuthenticated,
    UnknownRecommendationContext,
)
from tripsignals.schemas.recommendation import RecommendationParams
from tripsignals.services.recommendation_gateway import RecommendationGateway

ENGINE_URL = "https://engine.test/functions/v1/recommendations"


# --- Helpers ---

class Engine:
    """Mock engine that records request bodies and answers with a fixed payload."""

    def __init__(self, payload=None, status_code=200, raw=None, exc=None):
        self.payload = payload if payload is not None else {"listings": []}
        self.status_code = status_code
        self.raw = raw
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]


def make_gateway(engine, api_key="secret"):
    return RecommendationGateway(
        client=httpx.Client(transport=httpx.MockTransport(engine)),
        url=ENGINE_URL,
        api_key=api_key,
        timeout=2.0,
    )


FULL_CARD = {
    "id": "L1",
    "title": "Beach bungalow",
    "description": "Steps from the sand",
    "imageUrls": ["https://img.test/1.jpg"],
    "pricePerNight": 120.5,
    "averageRating": 4.6,
    "reviewCount": 31,
    "location": {"city": "Lisbon", "country": "PT", "lat": 38.7, "lng": -9.1},
    "amenities": ["wifi"],
    "isAvailable": True,
    "hostId": "H1",
    "score": 0.92,
    "explanation": "Because you saved beach stays",
}


# --- Request shaping ---

def test_build_request_is_camel_case():
    gateway = make_gateway(Engine())
    body = gateway.build_request(
        "explore", "u1", RecommendationParams(location={"lat": 38.7, "lng": -9.1}, limit=20, exclude_seen=True),
    )
    assert body == {
        "context": "explore",
        "userId": "u1",
        "params": {"location": {"lat": 38.7, "lng": -9.1}, "limit": 20, "excludeSeen": True},
    }


def test_build_request_without_params():
    assert make_gateway(Engine()).build_request("fyp", "u1") == {"context": "fyp", "userId": "u1"}


def test_build_request_requires_user():
    with pytest.raises(NotAuthenticated):
        make_gateway(Engine()).build_request("fyp", "")


def test_unknown_context_rejected_before_sending():
    engine = Engine()
    with pytest.raises(UnknownRecommendationContext):
        make_gateway(engine).fetch("nearby", "u1")
    assert engine.requests == []


# --- Read path ---

def test_fetch_sends_one_authenticated_post():
    engine = Engine({"listings": [FULL_CARD], "metadata": {"context": "fyp", "totalCount": 40, "hasMore": True}})
    page = make_gateway(engine).fetch("fyp", "u1")

    assert len(engine.requests) == 1
    request = engine.requests[0]
    assert request.method == "POST"
    assert str(request.url) == ENGINE_URL
    assert request.headers["Authorization"] == "Bearer secret"
    assert engine.bodies[0] == {"context": "fyp", "userId": "u1"}

    card = page.cards[0]
    assert card.id == "L1"
    assert card.price_per_night == 120.5
    assert card.location.city == "Lisbon"
    assert card.explanation == "Because you saved beach stays"
    assert page.metadata.total_count == 40
    assert page.metadata.has_more is True


def test_no_auth_header_without_key():
    engine = Engine()
    make_gateway(engine, api_key="").fetch("fyp", "u1")
    assert "Authorization" not in engine.requests[0].headers


def test_missing_card_fields_get_defaults():
    engine = Engine({"listings": [{"id": "L9", "title": None, "location": {"city": "Porto"}}]})
    card = make_gateway(engine).request("fyp", "u1")[0]

    assert card.title == ""
    assert card.description == ""
    assert card.image_urls == []
    assert card.price_per_night == 0.0
    assert card.average_rating == 0.0
    assert card.review_count == 0
    assert card.amenities == []
    assert card.is_available is False
    assert card.host_id == ""
    assert card.location.city == "Porto"
    assert card.location.country == ""
    assert card.score is None


def test_metadata_defaults_from_request():
    engine = Engine({"listings": [FULL_CARD, {"id": "L2"}]})
    page = make_gateway(engine).fetch("trip", "u1", {"trip_id": "T1", "page": 3})

    assert engine.bodies[0]["params"] == {"tripId": "T1", "page": 3}
    assert page.metadata.context == "trip"
    assert page.metadata.total_count == 2
    assert page.metadata.page == 3


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"cards": []},
        {"listings": None},
        {"listings": "L1,L2"},
        {"listings": [42]},
    ],
)
def test_malformed_payloads(payload):
    with pytest.raises(MalformedGatewayResponse):
        make_gateway(Engine(payload)).fetch("fyp", "u1")


def test_invalid_card_is_skipped_not_fatal():
    engine = Engine({"listings": [
        {"id": "A", "title": "ok"},
        {"id": "B", "reviewCount": 4.5},
        {"id": "C", "pricePerNight": "cheap"},
        FULL_CARD,
    ]})
    page = make_gateway(engine).fetch("fyp", "u1")

    assert [c.id for c in page.cards] == ["A", "L1"]
    assert page.metadata.total_count == 2


def test_non_json_body_is_malformed():
    with pytest.raises(MalformedGatewayResponse):
        make_gateway(Engine(raw=b"<html>bad gateway</html>")).fetch("fyp", "u1")


def test_server_error_is_unavailable():
    with pytest.raises(GatewayUnavailable):
        make_gateway(Engine({"error": "boom"}, status_code=500)).fetch("fyp", "u1")


def test_timeout_is_unavailable():
    engine = Engine(exc=httpx.ReadTimeout("read timed out"))
    with pytest.raises(GatewayUnavailable) as info:
        make_gateway(engine).fetch("fyp", "u1")
    assert "timed out" in str(info.value)
    assert len(engine.requests) == 1


def test_connection_error_is_unavailable():
    with pytest.raises(GatewayUnavailable):
        make_gateway(Engine(exc=httpx.ConnectError("refused"))).fetch("fyp", "u1")


def test_shortcuts_pick_context_and_params():
    engine = Engine()
    gateway = make_gateway(engine)

    gateway.for_you("u1")
    gateway.explore("u1", {"lat": 1.0, "lng": 2.0})
    gateway.after_booking("u1", "L1")
    gateway.trip_suggestions("u1", "T1")

    assert [b["context"] for b in engine.bodies] == ["fyp", "explore", "after_booking", "trip"]
    assert engine.bodies[1]["params"] == {"location": {"lat": 1.0, "lng": 2.0}}
    assert engine.bodies[2]["params"] == {"seedTargetId": "L1"}
    assert engine.bodies[3]["params"] == {"tripId": "T1"}


def test_fetch_async():
    engine = Engine({"listings": [FULL_CARD]})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(engine)) as client:
            gateway = RecommendationGateway(async_client=client, url=ENGINE_URL, api_key="secret")
            return await gateway.request_async("after_booking", "u1", {"seed_target_id": "L1"})

    cards = asyncio.run(run())
    assert [c.id for c in cards] == ["L1"]
    assert engine.bodies[0]["params"] == {"seedTargetId": "L1"}


def test_fetch_async_unavailable():
    engine = Engine(exc=httpx.ConnectTimeout("connect timed out"))

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(engine)) as client:
            gateway = RecommendationGateway(async_client=client, url=ENGINE_URL)
            await gateway.fetch_async("fyp", "u1")

    with pytest.raises(GatewayUnavailable):
        asyncio.run(run())


# --- Fire-and-forget path ---

def test_notify_interaction_body():
    engine = Engine({"ok": True})
    assert make_gateway(engine).notify_interaction("u1", "L1", "save", "fyp", {"position": 2}) is True

    body = engine.bodies[0]
    assert body["action"] == "record_interaction"
    assert body["userId"] == "u1"
    assert body["targetId"] == "L1"
    assert body["interactionType"] == "save"
    assert body["context"] == "fyp"
    assert body["metadata"] == {"position": 2}
    assert "timestamp" in body


def test_refresh_user_body():
    engine = Engine({"ok": True})
    assert make_gateway(engine).refresh_user("u1") is True
    assert engine.bodies[0] == {"action": "refresh_user", "userId": "u1"}


@pytest.mark.parametrize(
    "engine",
    [
        Engine(status_code=503),
        Engine(exc=httpx.ReadTimeout("slow")),
        Engine(exc=RuntimeError("unexpected")),
    ],
)
def test_hints_never_raise(engine):
    gateway = make_gateway(engine)
    assert gateway.refresh_user("u1") is False
    assert gateway.notify_interaction("u1", "L1", "view", "explore") is False
