"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from disclosure.domain import RevealedNumbers, UserIdentity


class KeyValueStore(Protocol):
    """String key/value persistence surviving a reload (browser-storage equivalent)."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class IdentityRepository(Protocol):
    """Persists the visitor's own identity, shared by every context."""

    def load(self) -> UserIdentity | None:
        """Return the saved identity, or None if absent, corrupt or storage is unavailable."""
        ...

    def save(self, identity: UserIdentity) -> None:
        ...

    def clear(self) -> None:
        ...


class NumberCacheRepository(Protocol):
    """Persists revealed numbers per context key. Entries never expire."""

    def get(self, context_key: str) -> RevealedNumbers | None:
        ...

    def set(self, context_key: str, numbers: RevealedNumbers) -> None:
        ...


class ContactResolver(Protocol):
    """External contact-resolution service."""

    async def resolve_contact_number(
        self, name: str, phone: str, entity_id: str
    ) -> RevealedNumbers:
        """Return the broker numbers. Raises NetworkError or ServiceError."""
        ...


class EnquirySender(Protocol):
    """External messaging endpoint."""

    async def send_enquiry(self, fields: dict[str, str]) -> str:
        """Send the enquiry form fields and return the reported status ("sent" on success)."""
        ...


class LinkOpener(Protocol):
    """Opens an outbound deep link (WhatsApp chat, telephone)."""

    def open(self, url: str) -> None:
        ...
