"""Application layer: disclosure pipeline, shared state, ports, and DTOs. Depends only on domain."""

from disclosure.application.disclosure_service import DisclosureService
from disclosure.application.dto import (
    AwaitingIdentity,
    Failed,
    Invalid,
    RateLimited,
    Revealed,
    Sent,
    Stale,
)
from disclosure.application.errors import DisclosureError, NetworkError, ServiceError
from disclosure.application.ports import (
    ContactResolver,
    EnquirySender,
    IdentityRepository,
    KeyValueStore,
    LinkOpener,
    NumberCacheRepository,
)
from disclosure.application.retry import RetryExhausted, RetryPolicy, run_with_retry
from disclosure.application.state_store import ContactState, ContactStateStore

__all__ = [
    "AwaitingIdentity",
    "ContactResolver",
    "ContactState",
    "ContactStateStore",
    "DisclosureError",
    "DisclosureService",
    "EnquirySender",
    "Failed",
    "IdentityRepository",
    "Invalid",
    "KeyValueStore",
    "LinkOpener",
    "NetworkError",
    "NumberCacheRepository",
    "RateLimited",
    "RetryExhausted",
    "RetryPolicy",
    "Revealed",
    "Sent",
    "ServiceError",
    "Stale",
    "run_with_retry",
]
