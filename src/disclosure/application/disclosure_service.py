"""Disclosure pipeline: lead capture -> contact resolution -> reveal. One instance per visitor session."""

import asyncio
import itertools
import logging
import time
from collections.abc import Awaitable, Callable

from disclosure.application import machine
from disclosure.application.dto import (
    AwaitingIdentity,
    Failed,
    Invalid,
    OpenResult,
    RateLimited,
    Revealed,
    Sent,
    Stale,
    SubmitResult,
)
from disclosure.application.errors import NetworkError, ServiceError
from disclosure.application.ports import (
    ContactResolver,
    EnquirySender,
    IdentityRepository,
    LinkOpener,
    NumberCacheRepository,
)
from disclosure.application.retry import RetryExhausted, RetryPolicy, run_with_retry
from disclosure.application.state_store import ContactState, ContactStateStore
from disclosure.domain import (
    Channel,
    ContactContext,
    ContactForm,
    FormDraft,
    RevealedNumbers,
    SubmissionTicket,
    UserIdentity,
)
from disclosure.domain.links import tel_url, whatsapp_greeting, whatsapp_url
from disclosure.domain.validation import (
    get_email_error,
    get_message_error,
    get_name_error,
    sanitize_email,
    sanitize_message,
)

logger = logging.getLogger(__name__)

DEFAULT_REGION = "GH"
RATE_LIMIT_MS = 2000

PHONE_INVALID = "Valid phone number is required"
RATE_LIMIT_MESSAGE = "Please wait a moment before trying again."
PHONE_FETCH_FAILED = "Failed to get phone number. Please try again."
MESSAGE_SEND_FAILED = "Failed to send message. Please try again."
NETWORK_FAILED = "Network error. Please check your connection and try again."
TIMEOUT_FAILED = "Request timed out. Please try again."
NOTHING_TO_RETRY = "There is no failed request to retry."

# Fixed fields the messaging endpoint expects alongside the visitor's input.
ENQUIRY_SOURCE_FIELDS = {"rfisrc": "3", "reqid": "-1", "app": "vercel"}

PhoneValidator = Callable[[str, str | None], bool]


class DisclosureService:
    """
    Runs the per-(context, channel) disclosure state machine.

    open() is the button click: it reveals from cache, auto-submits a saved
    identity, or asks for the form. submit() validates, throttles, calls the
    external service with bounded retry, and commits only the newest ticket's
    result for its pipeline.
    """

    def __init__(
        self,
        resolver: ContactResolver,
        enquiry_sender: EnquirySender,
        identity_store: IdentityRepository,
        number_cache: NumberCacheRepository,
        *,
        phone_validator: PhoneValidator,
        state_store: ContactStateStore | None = None,
        link_opener: LinkOpener | None = None,
        default_region: str = DEFAULT_REGION,
        rate_limit_ms: int = RATE_LIMIT_MS,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._resolver = resolver
        self._enquiry_sender = enquiry_sender
        self._identity = identity_store
        self._number_cache = number_cache
        self._phone_validator = phone_validator
        self._state_store = state_store or ContactStateStore(number_cache)
        self._link_opener = link_opener
        self._default_region = (default_region or DEFAULT_REGION).upper()
        self._rate_limit_ms = rate_limit_ms
        self._retry_policy = retry_policy or RetryPolicy()
        self._clock = clock
        self._sleep = sleep
        self._tickets = itertools.count(1)
        self._identity_epoch = 0
        self._latest_ticket: dict[tuple[str, Channel], int] = {}
        self._states: dict[tuple[str, Channel], str] = {}
        self._last_forms: dict[tuple[str, Channel], ContactForm] = {}
        self._last_submission_at: float | None = None

    @property
    def state_store(self) -> ContactStateStore:
        return self._state_store

    # --- queries ---

    def state(self, context: ContactContext, channel: Channel | str) -> str:
        """Current state value of the (context, channel) pipeline."""
        return self._states.get((context.key, Channel(channel)), machine.initial_state())

    def contact_state(self, context: ContactContext) -> ContactState:
        return self._state_store.get(context.key)

    def saved_identity(self) -> UserIdentity | None:
        return self._identity.load()

    def draft(self) -> FormDraft:
        """Empty form, prefilled with the saved identity when there is one."""
        identity = self._identity.load()
        if identity is None:
            return FormDraft()
        return FormDraft(
            name=identity.name,
            phone=identity.phone,
            country_iso=identity.country_iso,
        )

    # --- actions ---

    async def open(self, context: ContactContext, channel: Channel | str) -> OpenResult:
        """Handle a show-number / WhatsApp / email click for the context."""
        channel = Channel(channel)
        key = context.key
        if channel is Channel.EMAIL:
            self._fire(key, channel, "OPEN_FORM")
            return AwaitingIdentity(context_key=key, channel=channel, draft=self.draft())

        if self._is_rate_limited():
            logger.info("Rejected %s click on %s: rate limited", channel.value, key)
            return RateLimited(message=RATE_LIMIT_MESSAGE)

        current = self._state_store.get(key)
        if current.show_number:
            numbers = RevealedNumbers(current.phone_number, current.whatsapp_number)
            self._fire(key, channel, "CACHE_HIT")
            identity = self._identity.load()
            link = self._deliver(context, channel, numbers, identity)
            return Revealed(
                context_key=key,
                channel=channel,
                display_number=numbers.display_number,
                whatsapp_number=numbers.whatsapp_number,
                link=link,
                from_cache=True,
            )

        identity = self._identity.load()
        if identity is None:
            self._fire(key, channel, "OPEN_FORM")
            return AwaitingIdentity(context_key=key, channel=channel, draft=self.draft())

        form = ContactForm.from_identity(identity)
        errors = self._validate(channel, form)
        if errors:
            logger.warning("Saved identity failed validation for %s: %s", key, errors)
            self._fire(key, channel, "OPEN_FORM")
            draft = self.draft()
            draft.errors = errors
            return AwaitingIdentity(context_key=key, channel=channel, draft=draft)
        return await self._submit(context, channel, form, event="AUTO_SUBMIT")

    async def submit(
        self, context: ContactContext, channel: Channel | str, form: ContactForm
    ) -> SubmitResult:
        """Submit the lead-capture form for the (context, channel) pipeline."""
        return await self._submit(context, Channel(channel), form, event="SUBMIT")

    async def retry(self, context: ContactContext, channel: Channel | str) -> SubmitResult:
        """Manually retry the last failed submission of the pipeline."""
        channel = Channel(channel)
        form = self._last_forms.get((context.key, channel))
        if self.state(context, channel) != machine.FAILED or form is None:
            return Invalid(errors={"retry": NOTHING_TO_RETRY})
        return await self._submit(context, channel, form, event="RETRY")

    def use_different_info(
        self, context: ContactContext, channel: Channel | str
    ) -> AwaitingIdentity:
        """Forget the saved identity and show the form again. Cached numbers are kept."""
        channel = Channel(channel)
        key = context.key
        self._identity.clear()
        # In-flight submissions on any pipeline belong to the old identity.
        self._identity_epoch += 1
        self._latest_ticket[(key, channel)] = next(self._tickets)
        if self._fire(key, channel, "RESET_IDENTITY") != machine.AWAITING_IDENTITY:
            self._fire(key, channel, "OPEN_FORM")
        return AwaitingIdentity(context_key=key, channel=channel, draft=FormDraft())

    # --- pipeline ---

    async def _submit(
        self,
        context: ContactContext,
        channel: Channel,
        form: ContactForm,
        *,
        event: str,
    ) -> SubmitResult:
        key = context.key
        errors = self._validate(channel, form)
        if errors:
            return Invalid(errors=errors)

        now = self._clock()
        if self._is_rate_limited(now):
            logger.info("Rejected %s submission on %s: rate limited", channel.value, key)
            return RateLimited(message=RATE_LIMIT_MESSAGE)
        self._last_submission_at = now

        ticket = self._issue_ticket(key, channel)
        self._last_forms[(key, channel)] = form
        self._fire(key, channel, event)
        logger.debug("Ticket %d issued for %s/%s", ticket.id, key, channel.value)

        attempts = 0

        def count_attempt(attempt: int) -> None:
            nonlocal attempts
            attempts = attempt

        try:
            numbers = await run_with_retry(
                lambda: self._call(context, channel, form),
                self._retry_policy,
                sleep=self._sleep,
                on_attempt=count_attempt,
            )
        except RetryExhausted as exc:
            message = TIMEOUT_FAILED if _is_timeout(exc.last_error) else NETWORK_FAILED
            return self._fail(ticket, message, exc.attempts)
        except ServiceError as exc:
            logger.warning("Service rejected %s for %s: %s", channel.value, key, exc)
            return self._fail(ticket, _service_failure_message(channel), attempts)
        except Exception:
            logger.exception("Unexpected failure during %s for %s", channel.value, key)
            return self._fail(ticket, _service_failure_message(channel), attempts)

        if not self._is_current(ticket):
            logger.debug("Discarding stale result of ticket %d for %s", ticket.id, key)
            return Stale(ticket_id=ticket.id)
        return self._commit(context, channel, form, numbers, ticket)

    async def _call(
        self, context: ContactContext, channel: Channel, form: ContactForm
    ) -> RevealedNumbers | None:
        if not channel.reveals_number:
            status = await self._enquiry_sender.send_enquiry(self._enquiry_fields(context, form))
            if status != "sent":
                raise ServiceError(f"Enquiry not sent (status {status!r})")
            return None
        return await self._resolver.resolve_contact_number(
            form.name.strip(), form.phone.strip(), context.entity_id
        )

    def _commit(
        self,
        context: ContactContext,
        channel: Channel,
        form: ContactForm,
        numbers: RevealedNumbers | None,
        ticket: SubmissionTicket,
    ) -> Revealed | Sent:
        key = context.key
        if not channel.reveals_number:
            self._fire(key, channel, "SENT")
            logger.info("Enquiry sent for %s", key)
            return Sent(context_key=key)

        identity = UserIdentity(
            name=form.name.strip(), phone=form.phone.strip(), country_iso=form.country_iso
        )
        if ticket.identity_epoch == self._identity_epoch:
            self._identity.save(identity)
        else:
            logger.info("Not saving identity from ticket %d: cleared while in flight", ticket.id)
        self._number_cache.set(key, numbers)
        self._state_store.set_phone_numbers(key, numbers.display_number, numbers.whatsapp_number)
        self._fire(key, channel, "SUCCESS")
        link = self._deliver(context, channel, numbers, identity)
        logger.info("Numbers revealed for %s via %s", key, channel.value)
        return Revealed(
            context_key=key,
            channel=channel,
            display_number=numbers.display_number,
            whatsapp_number=numbers.whatsapp_number,
            link=link,
        )

    def _fail(self, ticket: SubmissionTicket, message: str, attempts: int) -> Failed | Stale:
        if not self._is_current(ticket):
            logger.debug("Discarding stale failure of ticket %d", ticket.id)
            return Stale(ticket_id=ticket.id)
        self._fire(ticket.context_key, ticket.channel, "FAILURE")
        return Failed(
            context_key=ticket.context_key,
            channel=ticket.channel,
            message=message,
            attempts=attempts,
        )

    def _deliver(
        self,
        context: ContactContext,
        channel: Channel,
        numbers: RevealedNumbers,
        identity: UserIdentity | None,
    ) -> str:
        """Return the deep link for the channel; WhatsApp links are also opened."""
        if channel is not Channel.WHATSAPP:
            return tel_url(numbers.display_number)
        text = None
        if identity is not None:
            text = whatsapp_greeting(context.subject, identity.name, identity.phone)
        url = whatsapp_url(numbers.whatsapp_number, text)
        if self._link_opener is not None:
            self._link_opener.open(url)
        return url

    # --- helpers ---

    def _validate(self, channel: Channel, form: ContactForm) -> dict[str, str]:
        errors: dict[str, str] = {}
        name_error = get_name_error(form.name)
        if name_error:
            errors["name"] = name_error
        region = (form.country_iso or self._default_region).upper()
        if not form.phone or not self._phone_validator(form.phone.strip(), region):
            errors["phone"] = PHONE_INVALID
        if channel is Channel.EMAIL:
            email_error = get_email_error(form.email)
            if email_error:
                errors["email"] = email_error
            message_error = get_message_error(form.message)
            if message_error:
                errors["message"] = message_error
        return errors

    def _enquiry_fields(self, context: ContactContext, form: ContactForm) -> dict[str, str]:
        fields = {
            "rfifrom": sanitize_email(form.email),
            "rfimessage": sanitize_message(form.message),
            "rfifromph": form.phone.strip(),
            "nurfiname": form.name.strip(),
            "rfilid": context.entity_id,
        }
        fields.update(ENQUIRY_SOURCE_FIELDS)
        return fields

    def _is_rate_limited(self, now: float | None = None) -> bool:
        if self._last_submission_at is None:
            return False
        if now is None:
            now = self._clock()
        return (now - self._last_submission_at) * 1000.0 < self._rate_limit_ms

    def _issue_ticket(self, key: str, channel: Channel) -> SubmissionTicket:
        ticket = SubmissionTicket(
            id=next(self._tickets),
            channel=channel,
            context_key=key,
            identity_epoch=self._identity_epoch,
        )
        self._latest_ticket[(key, channel)] = ticket.id
        return ticket

    def _is_current(self, ticket: SubmissionTicket) -> bool:
        return self._latest_ticket.get((ticket.context_key, ticket.channel)) == ticket.id

    def _fire(self, key: str, channel: Channel, event: str) -> str:
        current = self._states.get((key, channel), machine.initial_state())
        next_state = machine.transition(current, event)
        if next_state is None:
            logger.debug("Ignoring %s in state %s for %s/%s", event, current, key, channel.value)
            return current
        self._states[(key, channel)] = next_state
        return next_state


def _is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, NetworkError) and exc.timeout


def _service_failure_message(channel: Channel) -> str:
    return MESSAGE_SEND_FAILED if channel is Channel.EMAIL else PHONE_FETCH_FAILED
