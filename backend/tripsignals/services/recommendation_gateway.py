"""Recommendation gateway — the only channel to the external recommendation engine.

Builds context-scoped requests, calls the engine once per request, and turns
its answer into validated recommendation cards. Ranking happens entirely on
the engine side.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx
from pydantic import ValidationError

from tripsignals.config import get_settings
from tripsignals.errors import (
    GatewayUnavailable,
    MalformedGatewayResponse,
    NotAuthenticated,
    UnknownRecommendationContext,
)
from tripsignals.schemas.recommendation import (
    RECOMMENDATION_CONTEXTS,
    RecommendationCard,
    RecommendationPage,
    RecommendationParams,
    RecommendationRequest,
    ResponseMetadata,
)

logger = logging.getLogger(__name__)


class RecommendationGateway:
    """
    HTTP client for the recommendation engine.

    Clients may be injected (tests pass ``httpx.MockTransport``-backed
    clients); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        async_client: httpx.AsyncClient | None = None,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.client = client
        self.async_client = async_client
        self.url = url or settings.recommendation_engine_url
        self.api_key = api_key if api_key is not None else settings.recommendation_engine_key
        self.timeout = timeout or settings.gateway_timeout_seconds

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    # --- Request shaping ---

    def build_request(
        self,
        context: str,
        user_id: str,
        params: RecommendationParams | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the wire body: {context, userId, params?} in camelCase."""
        if not user_id:
            raise NotAuthenticated("Recommendations require a user")
        if context not in RECOMMENDATION_CONTEXTS:
            raise UnknownRecommendationContext(f"Unknown recommendation context: {context!r}")

        request = RecommendationRequest(context=context, user_id=user_id, params=params)
        body = request.model_dump(by_alias=True, exclude_none=True)
        if not body.get("params"):
            body.pop("params", None)
        return body

    def parse_response(self, payload: Any, context: str, page: int | None = None) -> RecommendationPage:
        """Validate the engine's answer and normalize its cards.

        Cards that fail validation are dropped with a warning; only a missing
        listings array or a non-object card rejects the whole response.
        """
        if not isinstance(payload, dict):
            raise MalformedGatewayResponse("Response body must be a JSON object")

        listings = payload.get("listings")
        if not isinstance(listings, list):
            raise MalformedGatewayResponse("Invalid response format: listings must be an array")

        cards = []
        for index, raw in enumerate(listings):
            if not isinstance(raw, dict):
                raise MalformedGatewayResponse(f"Card {index} is not an object")
            try:
                cards.append(RecommendationCard.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping %s card %d (%s): %s", context, index, raw.get("id"), e)

        raw_meta = payload.get("metadata") or {}
        if not isinstance(raw_meta, dict):
            raise MalformedGatewayResponse("Response metadata must be an object")
        defaults = {"context": context, "totalCount": len(cards), "page": page or 1}
        try:
            metadata = ResponseMetadata.model_validate(
                {**defaults, **{k: v for k, v in raw_meta.items() if v is not None}}
            )
        except ValidationError as e:
            raise MalformedGatewayResponse(f"Response metadata failed validation: {e}") from e

        return RecommendationPage(cards=cards, metadata=metadata)

    # --- Transport ---

    def _post(self, body: dict[str, Any]) -> httpx.Response:
        try:
            if self.client is not None:
                response = self.client.post(self.url, json=body, headers=self._headers(), timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.url, json=body, headers=self._headers())
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise GatewayUnavailable(f"Recommendation engine timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise GatewayUnavailable(f"Recommendation engine error: {e}") from e

    async def _post_async(self, body: dict[str, Any]) -> httpx.Response:
        try:
            if self.async_client is not None:
                response = await self.async_client.post(
                    self.url, json=body, headers=self._headers(), timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=body, headers=self._headers())
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise GatewayUnavailable(f"Recommendation engine timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise GatewayUnavailable(f"Recommendation engine error: {e}") from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedGatewayResponse("Response body is not JSON") from e

    # --- Read path ---

    def fetch(
        self,
        context: str,
        user_id: str,
        params: RecommendationParams | Mapping[str, Any] | None = None,
    ) -> RecommendationPage:
        """Call the engine exactly once and return the validated page."""
        body = self.build_request(context, user_id, params)
        try:
            response = self._post(body)
            return self.parse_response(self._json(response), context, body.get("params", {}).get("page"))
        except (GatewayUnavailable, MalformedGatewayResponse) as e:
            logger.error("Recommendation request failed for context %s: %s", context, e)
            raise

    def request(
        self,
        context: str,
        user_id: str,
        params: RecommendationParams | Mapping[str, Any] | None = None,
    ) -> list[RecommendationCard]:
        return self.fetch(context, user_id, params).cards

    async def fetch_async(
        self,
        context: str,
        user_id: str,
        params: RecommendationParams | Mapping[str, Any] | None = None,
    ) -> RecommendationPage:
        """Async version of fetch."""
        body = self.build_request(context, user_id, params)
        try:
            response = await self._post_async(body)
            return self.parse_response(self._json(response), context, body.get("params", {}).get("page"))
        except (GatewayUnavailable, MalformedGatewayResponse) as e:
            logger.error("Recommendation request failed for context %s: %s", context, e)
            raise

    async def request_async(
        self,
        context: str,
        user_id: str,
        params: RecommendationParams | Mapping[str, Any] | None = None,
    ) -> list[RecommendationCard]:
        page = await self.fetch_async(context, user_id, params)
        return page.cards

    def for_you(self, user_id: str) -> list[RecommendationCard]:
        return self.request("fyp", user_id)

    def explore(self, user_id: str, location: Mapping[str, float] | None = None) -> list[RecommendationCard]:
        return self.request("explore", user_id, {"location": location} if location else None)

    def after_booking(self, user_id: str, seed_target_id: str) -> list[RecommendationCard]:
        return self.request("after_booking", user_id, {"seed_target_id": seed_target_id})

    def trip_suggestions(self, user_id: str, trip_id: str) -> list[RecommendationCard]:
        return self.request("trip", user_id, {"trip_id": trip_id})

    # --- Fire-and-forget path ---

    def _fire(self, body: dict[str, Any]) -> bool:
        """Send an action to the engine. Never raises; returns whether it was delivered."""
        try:
            self._post(body)
            return True
        except GatewayUnavailable as e:
            logger.warning("Recommendation engine %s hint dropped: %s", body.get("action"), e)
        except Exception:
            logger.exception("Unexpected failure sending %s hint", body.get("action"))
        return False

    def notify_interaction(
        self,
        user_id: str,
        target_id: str,
        kind: str,
        context: str,
        metadata: Mapping[str, Any] | None = None,
    ) -> bool:
        """Tell the engine a user interacted with a recommended target."""
        return self._fire({
            "action": "record_interaction",
            "userId": user_id,
            "targetId": target_id,
            "interactionType": kind,
            "context": context,
            "metadata": dict(metadata) if metadata else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def refresh_user(self, user_id: str) -> bool:
        """Ask the engine to refresh a user's recommendations."""
        return self._fire({"action": "refresh_user", "userId": user_id})
