"""Tests for domain entities: context keys, identity, deep links."""

import pytest

from disclosure.domain import Channel, ContactContext, UserIdentity, context_key
from disclosure.domain.links import tel_url, whatsapp_greeting, whatsapp_url


def test_context_key_format():
    assert context_key("listing", "1001") == "listing:1001"
    assert ContactContext("project", "77").key == "project:77"


def test_context_key_is_injective_across_kinds_and_ids():
    keys = {
        ContactContext(kind, entity_id).key
        for kind in ("listing", "project")
        for entity_id in ("1", "10", "01", "1001", "abc")
    }
    assert len(keys) == 10


def test_context_key_is_stable_and_ignores_subject():
    a = ContactContext("project", "77", subject="Palm Court")
    b = ContactContext("project", "77")
    assert a.key == b.key
    assert a == b


def test_numeric_entity_id_is_stringified():
    assert ContactContext("listing", 1001).key == "listing:1001"


def test_empty_entity_id_gives_degenerate_key():
    assert ContactContext("listing", "").key == "listing:"


def test_unknown_kind_raises():
    with pytest.raises(ValueError, match="Unsupported context kind"):
        ContactContext("agent", "1")


def test_identity_requires_name_and_phone():
    with pytest.raises(ValueError, match="name"):
        UserIdentity(name=" ", phone="0244123456")
    with pytest.raises(ValueError, match="phone"):
        UserIdentity(name="Ama", phone="")


def test_channel_reveals_number():
    assert Channel.CALL.reveals_number
    assert Channel.WHATSAPP.reveals_number
    assert not Channel.EMAIL.reveals_number
    assert Channel("whatsapp") is Channel.WHATSAPP


def test_whatsapp_url_uses_digits_only():
    assert whatsapp_url("+233 24 412-3456") == "https://wa.me/233244123456"


def test_whatsapp_url_encodes_text():
    url = whatsapp_url("+233244123456", "Hi, I'm interested")
    assert url == "https://wa.me/233244123456?text=Hi%2C%20I%27m%20interested"


def test_tel_url():
    assert tel_url("030 212 3456") == "tel:0302123456"


def test_whatsapp_greeting():
    assert whatsapp_greeting(None, "Ama", "0244123456") is None
    assert whatsapp_greeting("Palm Court", "Ama", "0244123456") == (
        "Hi, I'm interested in Palm Court. My name is Ama and my phone is 0244123456."
    )
