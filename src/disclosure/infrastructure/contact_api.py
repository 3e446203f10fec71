"""HTTP clients for the external contact-resolution and messaging endpoints."""

import logging

import httpx

from disclosure.application.errors import NetworkError, ServiceError
from disclosure.domain import RevealedNumbers

logger = logging.getLogger(__name__)

VIEW_NUMBER_PATH = "/api/contact/view-number"
SEND_MESSAGE_PATH = "/api/contact/send-message"
DEFAULT_TIMEOUT = 10.0


class HttpContactGateway:
    """Implements ContactResolver and EnquirySender over httpx.

    Transport failures become NetworkError (timeout flagged), error statuses and
    malformed payloads become ServiceError.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, **kwargs) -> dict:
        client = self._get_client()
        try:
            response = await client.post(path, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {path} timed out", timeout=True) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("POST %s returned HTTP %s", path, status)
            raise ServiceError(f"{path} responded with HTTP {status}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"Network error calling {path}: {exc}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise ServiceError(f"{path} returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise ServiceError(f"{path} returned an unexpected payload")
        return data

    async def resolve_contact_number(
        self, name: str, phone: str, entity_id: str
    ) -> RevealedNumbers:
        data = await self._post(
            VIEW_NUMBER_PATH,
            json={"name": name, "phone": phone, "entityId": entity_id},
        )
        display = data.get("displayNumber") or data.get("stph2")
        whatsapp = data.get("whatsappNumber") or data.get("stph3")
        if not isinstance(display, str) or not isinstance(whatsapp, str) or not display or not whatsapp:
            raise ServiceError("Contact resolution returned no numbers")
        return RevealedNumbers(display_number=display, whatsapp_number=whatsapp)

    async def send_enquiry(self, fields: dict[str, str]) -> str:
        data = await self._post(SEND_MESSAGE_PATH, data=fields)
        status = data.get("mess")
        return status if isinstance(status, str) else ""


class RecordingLinkOpener:
    """LinkOpener for server-side sessions: remembers links for the client to open."""

    def __init__(self) -> None:
        self.opened: list[str] = []

    def open(self, url: str) -> None:
        logger.debug("Deep link ready: %s", url)
        self.opened.append(url)

    @property
    def last(self) -> str | None:
        return self.opened[-1] if self.opened else None
