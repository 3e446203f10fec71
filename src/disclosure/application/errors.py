"""Failures reported by the external contact services."""


class DisclosureError(Exception):
    """Base class for errors raised by contact-resolution and messaging gateways."""


class NetworkError(DisclosureError):
    """The request never completed (connectivity, timeout). Eligible for automatic retry."""

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        super().__init__(message)
        self.timeout = timeout


class ServiceError(DisclosureError):
    """The request completed but the service reported failure. Manual retry only."""


def is_network_error(exc: BaseException) -> bool:
    return isinstance(exc, NetworkError)
