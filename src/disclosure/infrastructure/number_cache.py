"""Revealed numbers per context key. Entries are sticky until overwritten."""

import json
import logging

from disclosure.application.ports import KeyValueStore
from disclosure.domain import RevealedNumbers

logger = logging.getLogger(__name__)

NAMESPACE = "contact_numbers"

# Upstream field names for the display and WhatsApp numbers.
DISPLAY_FIELD = "stph2"
WHATSAPP_FIELD = "stph3"


class NumberCache:
    """get/set RevealedNumbers under "contact_numbers:<context_key>". No expiry."""

    def __init__(self, store: KeyValueStore | None, *, namespace: str = NAMESPACE) -> None:
        self._store = store
        self._namespace = namespace

    def storage_key(self, context_key: str) -> str:
        return f"{self._namespace}:{context_key}"

    def get(self, context_key: str) -> RevealedNumbers | None:
        if self._store is None:
            return None
        raw = self._store.get(self.storage_key(context_key))
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt cached numbers for %s", context_key)
            return None
        if not isinstance(data, dict):
            return None
        display = data.get(DISPLAY_FIELD)
        whatsapp = data.get(WHATSAPP_FIELD)
        if not isinstance(display, str) or not isinstance(whatsapp, str):
            return None
        if not display or not whatsapp:
            return None
        return RevealedNumbers(display_number=display, whatsapp_number=whatsapp)

    def set(self, context_key: str, numbers: RevealedNumbers) -> None:
        if self._store is None:
            return
        payload = {DISPLAY_FIELD: numbers.display_number, WHATSAPP_FIELD: numbers.whatsapp_number}
        self._store.set(self.storage_key(context_key), json.dumps(payload))
