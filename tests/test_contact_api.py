"""Tests for HttpContactGateway error mapping, run against httpx.MockTransport."""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from disclosure.application import NetworkError, ServiceError
from disclosure.domain import RevealedNumbers
from disclosure.infrastructure import HttpContactGateway

BASE_URL = "http://contact.test"


def _gateway(handler) -> HttpContactGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return HttpContactGateway(BASE_URL, client=client)


def test_resolve_posts_json_and_reads_numbers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"stph2": "0302123456", "stph3": "+233244123456"})

    numbers = asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1001"))

    assert numbers == RevealedNumbers("0302123456", "+233244123456")
    assert seen["path"] == "/api/contact/view-number"
    assert seen["body"] == {"name": "Ama", "phone": "0244123456", "entityId": "1001"}


def test_resolve_accepts_named_fields():
    def handler(request):
        return httpx.Response(200, json={"displayNumber": "0302123456", "whatsappNumber": "233244123456"})

    numbers = asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1"))
    assert numbers.whatsapp_number == "233244123456"


def test_resolve_without_numbers_is_service_error():
    def handler(request):
        return httpx.Response(200, json={"stph2": "0302123456"})

    with pytest.raises(ServiceError):
        asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1"))


def test_http_error_status_is_service_error():
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    with pytest.raises(ServiceError, match="500"):
        asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1"))


def test_non_json_body_is_service_error():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(ServiceError):
        asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1"))


def test_connect_error_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1"))
    assert excinfo.value.timeout is False


def test_timeout_is_flagged_network_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(_gateway(handler).resolve_contact_number("Ama", "0244123456", "1"))
    assert excinfo.value.timeout is True


def test_send_enquiry_posts_form_fields():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"mess": "sent"})

    fields = {"rfifrom": "ama@example.com", "rfimessage": "Still available?", "rfilid": "1001"}
    status = asyncio.run(_gateway(handler).send_enquiry(fields))

    assert status == "sent"
    assert seen["path"] == "/api/contact/send-message"
    assert seen["form"]["rfifrom"] == ["ama@example.com"]
    assert seen["form"]["rfilid"] == ["1001"]


def test_send_enquiry_without_status_returns_empty():
    def handler(request):
        return httpx.Response(200, json={"other": 1})

    assert asyncio.run(_gateway(handler).send_enquiry({})) == ""
