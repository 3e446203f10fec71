"""Infrastructure layer: concrete implementations of application ports."""

from disclosure.infrastructure.contact_api import HttpContactGateway, RecordingLinkOpener
from disclosure.infrastructure.factory import build_disclosure_service
from disclosure.infrastructure.identity import IDENTITY_KEY, IdentityStore
from disclosure.infrastructure.number_cache import NumberCache
from disclosure.infrastructure.phone import (
    get_phone_error,
    to_international_display,
    validate_phone,
)
from disclosure.infrastructure.storage import InMemoryKeyValueStore, JsonFileKeyValueStore

__all__ = [
    "IDENTITY_KEY",
    "HttpContactGateway",
    "IdentityStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "NumberCache",
    "RecordingLinkOpener",
    "build_disclosure_service",
    "get_phone_error",
    "to_international_display",
    "validate_phone",
]
