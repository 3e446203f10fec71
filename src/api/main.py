"""
FastAPI backend: contact-disclosure actions over HTTP.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import re
from collections import OrderedDict
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.settings import Settings, load_settings
from disclosure.application import (
    AwaitingIdentity,
    DisclosureService,
    Failed,
    Invalid,
    RateLimited,
    RetryPolicy,
    Revealed,
    Sent,
    Stale,
)
from disclosure.domain import MASKED_NUMBER, Channel, ContactContext, ContactForm
from disclosure.infrastructure import (
    HttpContactGateway,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RecordingLinkOpener,
    build_disclosure_service,
    to_international_display,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

# One visitor session per header value; each has its own identity and number cache.
SESSION_ID_HEADER = "X-Session-Id"

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Per-session DisclosureService cache (same visitor keeps same tickets, rate limit, shared state).
# Least recently used sessions are evicted past settings.max_sessions.
_service_cache: OrderedDict[str, DisclosureService] = OrderedDict()


def _get_settings(app: FastAPI) -> Settings:
    if getattr(app.state, "settings", None) is None:
        app.state.settings = load_settings()
    return app.state.settings


def _get_gateway(app: FastAPI):
    if getattr(app.state, "gateway", None) is None:
        settings = _get_settings(app)
        app.state.gateway = HttpContactGateway(
            settings.api_base_url, timeout=settings.http_timeout
        )
    return app.state.gateway


def _session_store(session_id: str, settings: Settings):
    if not settings.storage_dir:
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(Path(settings.storage_dir) / f"{session_id}.json")


def get_service(session_id: str, app: FastAPI) -> DisclosureService:
    settings = _get_settings(app)
    if session_id in _service_cache:
        _service_cache.move_to_end(session_id)
    else:
        while len(_service_cache) >= settings.max_sessions:
            evicted, _ = _service_cache.popitem(last=False)
            logger.info("Evicted idle session %s", evicted)
        opener = RecordingLinkOpener()
        _service_cache[session_id] = build_disclosure_service(
            _get_gateway(app),
            store=_session_store(session_id, settings),
            link_opener=opener,
            default_region=settings.default_region,
            rate_limit_ms=settings.rate_limit_ms,
            retry_policy=RetryPolicy(
                max_attempts=settings.max_attempts, delay_ms=settings.retry_delay_ms
            ),
        )
    return _service_cache[session_id]


def _session_id(value: str | None) -> str:
    session_id = (value or "").strip()
    if not session_id:
        raise HTTPException(status_code=400, detail=f"Missing {SESSION_ID_HEADER}")
    if not _SESSION_ID_RE.match(session_id):
        raise HTTPException(status_code=400, detail=f"Invalid {SESSION_ID_HEADER}")
    return session_id


def _context(kind: str, entity_id: str, subject: str | None = None) -> ContactContext:
    try:
        return ContactContext(kind=kind, entity_id=entity_id, subject=subject)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.settings = None
    app.state.gateway = None
    try:
        settings = _get_settings(app)
        logger.info("Contact service base URL: %s", settings.api_base_url)
        yield
    finally:
        gateway = getattr(app.state, "gateway", None)
        if gateway is not None and hasattr(gateway, "aclose"):
            await gateway.aclose()


app = FastAPI(title="Contact Disclosure API", lifespan=lifespan)


# --- request / response models ---


class ChannelBody(BaseModel):
    channel: Channel
    subject: str | None = None


class SubmitBody(BaseModel):
    channel: Channel
    name: str = ""
    phone: str = ""
    country_iso: str | None = None
    email: str = ""
    message: str = ""
    subject: str | None = None


def _result_response(service: DisclosureService, result) -> JSONResponse:
    """Map a service result DTO to an HTTP response."""
    if isinstance(result, Revealed):
        identity = service.saved_identity()
        region = identity.country_iso if identity else None
        return JSONResponse(
            {
                "status": "revealed",
                "context_key": result.context_key,
                "channel": result.channel.value,
                "display_number": to_international_display(result.display_number, region),
                "whatsapp_number": result.whatsapp_number,
                "link": result.link,
                "from_cache": result.from_cache,
            }
        )
    if isinstance(result, Sent):
        return JSONResponse({"status": "sent", "context_key": result.context_key})
    if isinstance(result, AwaitingIdentity):
        draft = result.draft
        return JSONResponse(
            {
                "status": "awaiting_identity",
                "context_key": result.context_key,
                "channel": result.channel.value,
                "draft": {
                    "name": draft.name,
                    "phone": draft.phone,
                    "country_iso": draft.country_iso,
                    "email": draft.email,
                    "message": draft.message,
                },
                "errors": draft.errors,
            }
        )
    if isinstance(result, Invalid):
        return JSONResponse({"status": "invalid", "errors": result.errors}, status_code=422)
    if isinstance(result, RateLimited):
        return JSONResponse({"status": "rate_limited", "message": result.message}, status_code=429)
    if isinstance(result, Failed):
        return JSONResponse(
            {
                "status": "failed",
                "context_key": result.context_key,
                "channel": result.channel.value,
                "message": result.message,
                "attempts": result.attempts,
            },
            status_code=502,
        )
    if isinstance(result, Stale):
        return JSONResponse({"status": "stale", "ticket_id": result.ticket_id}, status_code=409)
    raise HTTPException(status_code=500, detail="Unexpected result")


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contexts ---


@app.get("/contexts/{kind}/{entity_id}")
def get_contact_state(
    kind: str,
    entity_id: str,
    request: Request,
    x_session_id: str | None = Header(None, alias=SESSION_ID_HEADER),
):
    """Shared reveal state of the entity plus each channel's state."""
    context = _context(kind, entity_id)
    service = get_service(_session_id(x_session_id), request.app)
    state = service.contact_state(context)
    identity = service.saved_identity()
    region = identity.country_iso if identity else None
    return {
        "context_key": context.key,
        "show_number": state.show_number,
        "phone_number": (
            to_international_display(state.phone_number, region)
            if state.show_number
            else MASKED_NUMBER
        ),
        "whatsapp_number": state.whatsapp_number if state.show_number else None,
        "states": {channel.value: service.state(context, channel) for channel in Channel},
    }


@app.post("/contexts/{kind}/{entity_id}/open")
async def open_contact(
    kind: str,
    entity_id: str,
    body: ChannelBody,
    request: Request,
    x_session_id: str | None = Header(None, alias=SESSION_ID_HEADER),
):
    context = _context(kind, entity_id, body.subject)
    service = get_service(_session_id(x_session_id), request.app)
    result = await service.open(context, body.channel)
    return _result_response(service, result)


@app.post("/contexts/{kind}/{entity_id}/submit")
async def submit_contact(
    kind: str,
    entity_id: str,
    body: SubmitBody,
    request: Request,
    x_session_id: str | None = Header(None, alias=SESSION_ID_HEADER),
):
    context = _context(kind, entity_id, body.subject)
    service = get_service(_session_id(x_session_id), request.app)
    form = ContactForm(
        name=body.name,
        phone=body.phone,
        country_iso=body.country_iso,
        email=body.email,
        message=body.message,
    )
    result = await service.submit(context, body.channel, form)
    return _result_response(service, result)


@app.post("/contexts/{kind}/{entity_id}/retry")
async def retry_contact(
    kind: str,
    entity_id: str,
    body: ChannelBody,
    request: Request,
    x_session_id: str | None = Header(None, alias=SESSION_ID_HEADER),
):
    context = _context(kind, entity_id, body.subject)
    service = get_service(_session_id(x_session_id), request.app)
    result = await service.retry(context, body.channel)
    return _result_response(service, result)


@app.post("/contexts/{kind}/{entity_id}/use-different-info")
def use_different_info(
    kind: str,
    entity_id: str,
    body: ChannelBody,
    request: Request,
    x_session_id: str | None = Header(None, alias=SESSION_ID_HEADER),
):
    context = _context(kind, entity_id, body.subject)
    service = get_service(_session_id(x_session_id), request.app)
    result = service.use_different_info(context, body.channel)
    return _result_response(service, result)


# --- REST: identity ---


@app.get("/identity")
def get_identity(
    request: Request,
    x_session_id: str | None = Header(None, alias=SESSION_ID_HEADER),
):
    service = get_service(_session_id(x_session_id), request.app)
    identity = service.saved_identity()
    if identity is None:
        raise HTTPException(status_code=404, detail="No saved contact info")
    return {
        "name": identity.name,
        "phone": identity.phone,
        "country_iso": identity.country_iso,
    }
