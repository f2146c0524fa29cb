"""Trigger bus module."""

from .dispatch import DispatchResult, dispatch
from .observer import BusObserver, IBusObserver
from .policy import DERIVED_TRIGGER_RULES, PolicyRule, any_severity, derive_trigger
from .status import ALLOWED_TRANSITIONS, StatusBoard, can_transition
from .trigger_bus import SYSTEM_LABEL, SYSTEM_SOURCE, ITriggerBus, TriggerBus

__all__ = [
    "TriggerBus",
    "ITriggerBus",
    "SYSTEM_SOURCE",
    "SYSTEM_LABEL",
    "BusObserver",
    "IBusObserver",
    "DispatchResult",
    "dispatch",
    "DERIVED_TRIGGER_RULES",
    "PolicyRule",
    "any_severity",
    "derive_trigger",
    "ALLOWED_TRANSITIONS",
    "StatusBoard",
    "can_transition",
]
