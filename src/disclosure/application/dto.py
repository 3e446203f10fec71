"""Result types returned by DisclosureService. Every action ends in exactly one of these."""

from dataclasses import dataclass, field

from disclosure.domain import Channel, FormDraft


@dataclass(frozen=True)
class Revealed:
    """Numbers are available for the context (fresh resolution or cache hit)."""

    context_key: str
    channel: Channel
    display_number: str
    whatsapp_number: str
    link: str | None = None
    from_cache: bool = False


@dataclass(frozen=True)
class Sent:
    """Email enquiry delivered. Terminal for this click."""

    context_key: str


@dataclass(frozen=True)
class AwaitingIdentity:
    """The lead-capture form must be shown (prefilled from any saved identity)."""

    context_key: str
    channel: Channel
    draft: FormDraft


@dataclass(frozen=True)
class Invalid:
    """Field-level validation errors. No network call was made."""

    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RateLimited:
    """Submission rejected locally; the previous one started too recently."""

    message: str


@dataclass(frozen=True)
class Failed:
    """Network retries exhausted or the service rejected the request."""

    context_key: str
    channel: Channel
    message: str
    attempts: int = 1


@dataclass(frozen=True)
class Stale:
    """A newer submission superseded this one; its result was discarded."""

    ticket_id: int


SubmitResult = Revealed | Sent | Invalid | RateLimited | Failed | Stale
OpenResult = Revealed | AwaitingIdentity | Invalid | RateLimited | Failed | Stale
