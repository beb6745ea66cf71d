import logging
from typing import Any, Optional

from yarl import URL

from .errors import HTTPError

logger = logging.getLogger("aiopotion")


def normalize_location(location: Optional[str], url: str) -> str:
    """
    Resolve a redirect target against the request it came from.

    Absolute locations are used as-is, everything else is resolved against
    the scheme and host of ``url``.
    """
    if not location:
        raise HTTPError(f"invalid redirect location {location!r} from {url}")
    if location.startswith("http"):
        return location
    return str(URL(url).origin().join(URL(location)))


def to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)
