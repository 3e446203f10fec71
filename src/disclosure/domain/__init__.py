"""Domain layer: entities, value objects, validation, deep links. No dependencies on outer layers."""

from disclosure.domain.entities import (
    MASKED_NUMBER,
    Channel,
    ContactContext,
    ContactForm,
    FormDraft,
    RevealedNumbers,
    SubmissionTicket,
    UserIdentity,
    context_key,
)

__all__ = [
    "MASKED_NUMBER",
    "Channel",
    "ContactContext",
    "ContactForm",
    "FormDraft",
    "RevealedNumbers",
    "SubmissionTicket",
    "UserIdentity",
    "context_key",
]
