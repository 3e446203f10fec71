"""Identity layer: the visitor's own name, phone and country, persisted once per session.

Every contact surface reads the same global key, so a visitor fills the
lead-capture form at most once until they choose "use different info".
"""

import json
import logging

from disclosure.application.ports import KeyValueStore
from disclosure.domain import UserIdentity

logger = logging.getLogger(__name__)

IDENTITY_KEY = "contact_info"


class IdentityStore:
    """load/save/clear of UserIdentity over a KeyValueStore.

    With store=None (no persistent storage available) every call is a no-op and
    load() returns None.
    """

    def __init__(self, store: KeyValueStore | None, *, key: str = IDENTITY_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> UserIdentity | None:
        if self._store is None:
            return None
        raw = self._store.get(self._key)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt identity payload under %s", self._key)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring identity payload under %s: not an object", self._key)
            return None
        name = data.get("name")
        phone = data.get("phone")
        country_iso = data.get("countryIso")
        if not isinstance(name, str) or not isinstance(phone, str):
            logger.warning("Ignoring identity payload under %s: missing name or phone", self._key)
            return None
        if country_iso is not None and not isinstance(country_iso, str):
            country_iso = None
        try:
            return UserIdentity(name=name, phone=phone, country_iso=country_iso)
        except ValueError:
            logger.warning("Ignoring identity payload under %s: empty name or phone", self._key)
            return None

    def save(self, identity: UserIdentity) -> None:
        if self._store is None:
            return
        payload = {
            "name": identity.name,
            "phone": identity.phone,
            "countryIso": identity.country_iso,
        }
        self._store.set(self._key, json.dumps(payload, ensure_ascii=False))

    def clear(self) -> None:
        if self._store is None:
            return
        self._store.delete(self._key)
