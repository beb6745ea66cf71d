from typing import Any


class AIOPotionError(Exception):
    pass


class HTTPError(AIOPotionError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TooManyRedirects(HTTPError):
    pass


class ConfigurationError(AIOPotionError):
    pass


class UnexpectedTransportResult(AIOPotionError):
    """
    The transport handed back something outside of its contract.
    """

    def __init__(self, result: Any):
        self.result = result
        super().__init__(result)


class InvalidStatusCode(UnexpectedTransportResult):
    pass


def error_to_string(error: Any) -> str:
    if isinstance(error, str):
        return error
    if isinstance(error, bytes):
        return error.decode("utf-8", "replace")
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return repr(error)
