"""Domain entities: contact context, visitor identity, revealed numbers, tickets, forms."""

from dataclasses import dataclass, field
from enum import Enum

KIND_LISTING = "listing"
KIND_PROJECT = "project"
CONTEXT_KINDS = frozenset({KIND_LISTING, KIND_PROJECT})

# Shown in place of the broker's number until it is revealed.
MASKED_NUMBER = "+233 xx xxx xxxx"


class Channel(str, Enum):
    """The three contact paths, each with its own submission pipeline."""

    CALL = "call"
    WHATSAPP = "whatsapp"
    EMAIL = "email"

    @property
    def reveals_number(self) -> bool:
        return self is not Channel.EMAIL


def context_key(kind: str, entity_id: str) -> str:
    """Return the key partitioning all disclosure state for one entity.

    An empty entity_id yields a degenerate but deterministic key ("listing:").
    """
    return f"{kind}:{entity_id}"


@dataclass(frozen=True)
class ContactContext:
    """
    The entity (listing or project) a contact surface belongs to.
    subject is an optional display name used in pre-filled messages; it does not
    take part in the key.
    """

    kind: str
    entity_id: str
    subject: str | None = field(default=None, compare=False)

    def __post_init__(self):
        if self.kind not in CONTEXT_KINDS:
            raise ValueError(
                f"Unsupported context kind '{self.kind}'. Expected one of {sorted(CONTEXT_KINDS)}."
            )
        object.__setattr__(self, "entity_id", str(self.entity_id))

    @property
    def key(self) -> str:
        return context_key(self.kind, self.entity_id)


@dataclass(frozen=True)
class UserIdentity:
    """The visitor's own contact details, captured once and reused for every entity."""

    name: str
    phone: str
    country_iso: str | None = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("UserIdentity name must be non-empty.")
        if not self.phone or not self.phone.strip():
            raise ValueError("UserIdentity phone must be non-empty.")
        iso = (self.country_iso or "").strip().upper() or None
        object.__setattr__(self, "country_iso", iso)


@dataclass(frozen=True)
class RevealedNumbers:
    """Broker numbers disclosed for one context."""

    display_number: str
    whatsapp_number: str


@dataclass(frozen=True)
class SubmissionTicket:
    """Identifies one in-flight submission; only the newest per pipeline may commit."""

    id: int
    channel: Channel
    context_key: str
    identity_epoch: int = 0


@dataclass(frozen=True)
class ContactForm:
    """Input collected by a lead-capture dialog. email/message only matter for email."""

    name: str = ""
    phone: str = ""
    country_iso: str | None = None
    email: str = ""
    message: str = ""

    @classmethod
    def from_identity(cls, identity: UserIdentity) -> "ContactForm":
        return cls(
            name=identity.name,
            phone=identity.phone,
            country_iso=identity.country_iso,
        )


@dataclass
class FormDraft:
    """Transient dialog state handed back to the caller. Never persisted."""

    name: str = ""
    phone: str = ""
    country_iso: str | None = None
    email: str = ""
    message: str = ""
    errors: dict[str, str] = field(default_factory=dict)
    loading: bool = False
