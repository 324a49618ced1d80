"""Data ingestors for the Overhead backend."""

from .opensky import FeedDecodeError, FeedError, FeedFetchError, FeedPayload, OpenSkyFeed
from .state_vectors import StateVectorParser, parse_state_vector

__all__ = [
    "FeedDecodeError",
    "FeedError",
    "FeedFetchError",
    "FeedPayload",
    "OpenSkyFeed",
    "StateVectorParser",
    "parse_state_vector",
]
