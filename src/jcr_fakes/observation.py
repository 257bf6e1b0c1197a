"""A static registry of event listeners.

Listeners are only recorded; no events are ever delivered to them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Event type bits
NODE_ADDED = 0x1
NODE_REMOVED = 0x2
PROPERTY_ADDED = 0x4
PROPERTY_REMOVED = 0x8
PROPERTY_CHANGED = 0x10
NODE_MOVED = 0x20
PERSIST = 0x40
ALL_EVENT_TYPES = 0x7F


@dataclass
class ListenerRegistration:
    """A listener with the filter it was registered with."""

    listener: Any
    event_types: int = ALL_EVENT_TYPES
    abs_path: str = "/"
    is_deep: bool = True
    uuids: tuple[str, ...] | None = None
    node_type_names: tuple[str, ...] | None = None
    no_local: bool = False


class ObservationManager:
    """Keeps the listeners registered for a workspace and an event journal."""

    def __init__(self) -> None:
        self._registrations: list[ListenerRegistration] = []
        self._event_journal: Any = None

    def add_event_listener(
        self,
        listener: Any,
        event_types: int = ALL_EVENT_TYPES,
        abs_path: str = "/",
        is_deep: bool = True,
        uuids: list[str] | None = None,
        node_type_names: list[str] | None = None,
        no_local: bool = False,
    ) -> None:
        self._registrations.append(
            ListenerRegistration(
                listener,
                event_types,
                abs_path,
                is_deep,
                tuple(uuids) if uuids is not None else None,
                tuple(node_type_names) if node_type_names is not None else None,
                no_local,
            )
        )

    def remove_event_listener(self, listener: Any) -> None:
        self._registrations = [r for r in self._registrations if r.listener is not listener]

    def get_registered_event_listeners(self) -> list[Any]:
        return [registration.listener for registration in self._registrations]

    def get_registrations(self) -> list[ListenerRegistration]:
        return list(self._registrations)

    def get_event_journal(self) -> Any:
        return self._event_journal

    def set_event_journal(self, journal: Any) -> None:
        self._event_journal = journal
