"""Wire a DisclosureService from concrete adapters."""

import asyncio
import time
from collections.abc import Awaitable, Callable

from disclosure.application import (
    ContactResolver,
    ContactStateStore,
    DisclosureService,
    EnquirySender,
    KeyValueStore,
    LinkOpener,
    RetryPolicy,
)
from disclosure.infrastructure.identity import IdentityStore
from disclosure.infrastructure.number_cache import NumberCache
from disclosure.infrastructure.phone import DEFAULT_REGION, validate_phone


def build_disclosure_service(
    gateway: ContactResolver,
    *,
    enquiry_sender: EnquirySender | None = None,
    store: KeyValueStore | None = None,
    link_opener: LinkOpener | None = None,
    default_region: str = DEFAULT_REGION,
    rate_limit_ms: int = 2000,
    retry_policy: RetryPolicy | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> DisclosureService:
    """Return a service whose identity and number cache share one key/value store.

    gateway doubles as the enquiry sender unless one is given.
    """
    number_cache = NumberCache(store)
    return DisclosureService(
        resolver=gateway,
        enquiry_sender=enquiry_sender or gateway,
        identity_store=IdentityStore(store),
        number_cache=number_cache,
        phone_validator=validate_phone,
        state_store=ContactStateStore(number_cache),
        link_opener=link_opener,
        default_region=default_region,
        rate_limit_ms=rate_limit_ms,
        retry_policy=retry_policy,
        clock=clock,
        sleep=sleep,
    )
