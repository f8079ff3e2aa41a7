"""Engine components: records, fetchers and the first-answer race."""

from .context import RaceContext
from .errors import (
    DecodeError,
    ErrorKind,
    FetchError,
    HTTPStatusError,
    NotFoundError,
    RaceTimeoutError,
    RequestBuildError,
    TransportError,
)
from .fetcher import Fetcher, HttpJsonFetcher
from .providers import (
    FETCHER_REGISTRY,
    BrasilAPIFetcher,
    ViaCEPFetcher,
    build_fetchers,
    register_fetcher,
)
from .race import CANCEL_GRACE, DEFAULT_TIMEOUT, Race, RaceCoordinator, RaceState, race
from .records import Address, ResultEnvelope

__all__ = [
    "Address",
    "BrasilAPIFetcher",
    "CANCEL_GRACE",
    "DEFAULT_TIMEOUT",
    "DecodeError",
    "ErrorKind",
    "FETCHER_REGISTRY",
    "FetchError",
    "Fetcher",
    "HTTPStatusError",
    "HttpJsonFetcher",
    "NotFoundError",
    "Race",
    "RaceContext",
    "RaceCoordinator",
    "RaceState",
    "RaceTimeoutError",
    "RequestBuildError",
    "ResultEnvelope",
    "TransportError",
    "ViaCEPFetcher",
    "build_fetchers",
    "race",
    "register_fetcher",
]
