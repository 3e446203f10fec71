"""
Contact disclosure core: clean-architecture layout.

- domain: entities (ContactContext, UserIdentity, RevealedNumbers), validation, deep links.
- application: DisclosureService (state machine + submission pipeline), ContactStateStore,
  retry primitive, ports, DTOs.
- infrastructure: adapters (key/value stores, IdentityStore, NumberCache, phone
  validation, HTTP gateway).
"""

from disclosure.application import (
    AwaitingIdentity,
    ContactState,
    ContactStateStore,
    DisclosureService,
    Failed,
    Invalid,
    NetworkError,
    RateLimited,
    RetryPolicy,
    Revealed,
    Sent,
    ServiceError,
    Stale,
)
from disclosure.domain import (
    Channel,
    ContactContext,
    ContactForm,
    RevealedNumbers,
    UserIdentity,
    context_key,
)
from disclosure.infrastructure import (
    HttpContactGateway,
    IdentityStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    NumberCache,
    build_disclosure_service,
)

__all__ = [
    "AwaitingIdentity",
    "Channel",
    "ContactContext",
    "ContactForm",
    "ContactState",
    "ContactStateStore",
    "DisclosureService",
    "Failed",
    "HttpContactGateway",
    "IdentityStore",
    "InMemoryKeyValueStore",
    "Invalid",
    "JsonFileKeyValueStore",
    "NetworkError",
    "NumberCache",
    "RateLimited",
    "RetryPolicy",
    "Revealed",
    "RevealedNumbers",
    "Sent",
    "ServiceError",
    "Stale",
    "UserIdentity",
    "build_disclosure_service",
    "context_key",
]
