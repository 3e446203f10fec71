"""
Disclosure state machine as an XState-compatible config, evaluated with xstate-python.

One instance of this machine runs per (context_key, channel) pipeline. The
service only stores the current state value; transitions are resolved here.
"""

import logging

from xstate.machine import Machine

logger = logging.getLogger(__name__)

UNREVEALED = "unrevealed"
AWAITING_IDENTITY = "awaiting_identity"
AUTO_SUBMITTING = "auto_submitting"
SUBMITTING = "submitting"
REVEALED = "revealed"
SENT = "sent"
FAILED = "failed"

DISCLOSURE_MACHINE = {
    "id": "disclosure",
    "initial": UNREVEALED,
    "states": {
        UNREVEALED: {
            "on": {
                "OPEN_FORM": AWAITING_IDENTITY,
                "AUTO_SUBMIT": AUTO_SUBMITTING,
                "CACHE_HIT": REVEALED,
                "SUBMIT": SUBMITTING,
            }
        },
        AWAITING_IDENTITY: {
            "on": {
                "SUBMIT": SUBMITTING,
                "AUTO_SUBMIT": AUTO_SUBMITTING,
                "CACHE_HIT": REVEALED,
            }
        },
        AUTO_SUBMITTING: {
            "on": {
                "SUCCESS": REVEALED,
                "FAILURE": FAILED,
                "SUBMIT": SUBMITTING,
                "RESET_IDENTITY": AWAITING_IDENTITY,
            }
        },
        SUBMITTING: {
            "on": {
                "SUCCESS": REVEALED,
                "SENT": SENT,
                "FAILURE": FAILED,
                "RESET_IDENTITY": AWAITING_IDENTITY,
            }
        },
        REVEALED: {
            "on": {
                "SUBMIT": SUBMITTING,
                "AUTO_SUBMIT": AUTO_SUBMITTING,
                "RESET_IDENTITY": AWAITING_IDENTITY,
            }
        },
        SENT: {
            "on": {
                "SUBMIT": SUBMITTING,
                "OPEN_FORM": AWAITING_IDENTITY,
                "RESET_IDENTITY": AWAITING_IDENTITY,
            }
        },
        FAILED: {
            "on": {
                "RETRY": SUBMITTING,
                "SUBMIT": SUBMITTING,
                "AUTO_SUBMIT": AUTO_SUBMITTING,
                "OPEN_FORM": AWAITING_IDENTITY,
                "CACHE_HIT": REVEALED,
                "RESET_IDENTITY": AWAITING_IDENTITY,
            }
        },
    },
}

_machine: Machine | None = None


def _machine_instance() -> Machine:
    global _machine
    if _machine is None:
        _machine = Machine(DISCLOSURE_MACHINE)
    return _machine


def initial_state() -> str:
    return DISCLOSURE_MACHINE["initial"]


def can_transition(state_value: str, event: str) -> bool:
    return event in DISCLOSURE_MACHINE["states"].get(state_value, {}).get("on", {})


def transition(state_value: str, event: str) -> str | None:
    """
    Return next state value for (state_value, event), or None if the event is not
    accepted in that state.
    """
    if not can_transition(state_value, event):
        return None
    try:
        instance = _machine_instance()
        state = instance.state_from(state_value)
        next_state = instance.transition(state, event)
    except (ValueError, KeyError):
        logger.exception("Machine rejected %s in state %s", event, state_value)
        return None
    return next_state.value
