"""Error taxonomy shared by the scoring services and the recommendation gateway."""


class TripSignalsError(Exception):
    """Base class for all domain errors."""


class NotAuthenticated(TripSignalsError):
    """No caller identity is available."""


class NotFound(TripSignalsError):
    """A point lookup found no row."""


class InvalidRating(TripSignalsError):
    """Rating is not an integer between 1 and 5."""


class UnknownInteractionKind(TripSignalsError):
    """Interaction kind has no entry in the weight table."""


class PersistenceError(TripSignalsError):
    """A durable write (event insert, rating upsert) failed."""


class UnknownRecommendationContext(TripSignalsError):
    """Recommendation context is not one of the supported contexts."""


class MalformedGatewayResponse(TripSignalsError):
    """The recommendation engine answered with an unexpected shape."""


class GatewayUnavailable(TripSignalsError):
    """The recommendation engine could not be reached in time."""
