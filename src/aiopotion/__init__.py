from .client import Client
from .errors import (
    AIOPotionError,
    ConfigurationError,
    HTTPError,
    TooManyRedirects,
    UnexpectedTransportResult,
)
from .hooks import Hooks
from .models import (
    AsyncChunk,
    AsyncEnd,
    AsyncHeaders,
    AsyncResponse,
    HeaderMap,
    Options,
    Response,
)
from .types import Method

__all__ = (
    "AIOPotionError",
    "AsyncChunk",
    "AsyncEnd",
    "AsyncHeaders",
    "AsyncResponse",
    "Client",
    "ConfigurationError",
    "HTTPError",
    "HeaderMap",
    "Hooks",
    "Method",
    "Options",
    "Response",
    "TooManyRedirects",
    "UnexpectedTransportResult",
)
