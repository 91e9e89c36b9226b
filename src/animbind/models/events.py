"""
Event system for the binding layer

Engine callbacks never touch registry state directly: they are turned into
events, queued, and drained by the registry in order.
"""

from dataclasses import dataclass
import time
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from animbind.models.enums import InputKind, PropertyKind


class EventType(Enum):
    """Event types in the system"""
    PROPERTY_CHANGED = auto()
    INPUT_CHANGED = auto()
    STATE_MACHINE_EVENT = auto()
    PROPERTIES_DISCOVERED = auto()
    INSTANCE_REGISTERED = auto()
    INSTANCE_DEREGISTERED = auto()


class EventSource(Enum):
    """Where an event originated"""
    ENGINE = auto()     # Native change listener or state-machine callback
    HOST = auto()       # Host-issued update
    REGISTRY = auto()   # Registry lifecycle


@dataclass
class Event:
    """
    Base event class

    All events inherit from this and must specify:
    - type: EventType (what kind of event)
    - source: EventSource (where it came from)
    - data: dict (event-specific payload)
    - timestamp: float (when it happened)

    instance_id is empty until the registry stamps it while draining, since
    listener shims are created before the instance is registered.
    """
    type: EventType
    source: Optional[EventSource]
    data: Dict[str, Any]
    timestamp: float
    instance_id: str = ""


@dataclass
class PropertyChangedEvent(Event):
    """A property value changed (engine side or host update)"""

    def __init__(self, path: str, kind: PropertyKind, value: Any,
                 instance_id: str = "", source: EventSource = EventSource.ENGINE,
                 node: Any = None):
        super().__init__(
            type=EventType.PROPERTY_CHANGED,
            source=source,
            data={"path": path, "kind": kind, "value": value},
            timestamp=time.time(),
            instance_id=instance_id,
        )
        # Node the listener was attached to; kept out of data
        self.node = node

    @property
    def path(self) -> str:
        return self.data["path"]

    @property
    def kind(self) -> PropertyKind:
        return self.data["kind"]

    @property
    def value(self) -> Any:
        return self.data["value"]


@dataclass
class InputChangedEvent(Event):
    """A state-machine input changed or fired"""

    def __init__(self, name: str, kind: InputKind, value: Any,
                 instance_id: str = "", source: EventSource = EventSource.ENGINE):
        super().__init__(
            type=EventType.INPUT_CHANGED,
            source=source,
            data={"name": name, "kind": kind, "value": value},
            timestamp=time.time(),
            instance_id=instance_id,
        )

    @property
    def name(self) -> str:
        return self.data["name"]

    @property
    def kind(self) -> InputKind:
        return self.data["kind"]

    @property
    def value(self) -> Any:
        return self.data["value"]


@dataclass
class StateMachineEvent(Event):
    """Named event fired by the state machine"""

    def __init__(self, event_name: str, state_name: str, instance_id: str = "",
                 properties: Optional[Dict[str, Any]] = None):
        super().__init__(
            type=EventType.STATE_MACHINE_EVENT,
            source=EventSource.ENGINE,
            data={"event_name": event_name, "state_name": state_name,
                  "properties": properties or {}},
            timestamp=time.time(),
            instance_id=instance_id,
        )

    @property
    def event_name(self) -> str:
        return self.data["event_name"]

    @property
    def state_name(self) -> str:
        return self.data["state_name"]


@dataclass
class PropertiesDiscoveredEvent(Event):
    """Discovery finished for an instance"""

    def __init__(self, instance_id: str, paths: List[str]):
        super().__init__(
            type=EventType.PROPERTIES_DISCOVERED,
            source=EventSource.REGISTRY,
            data={"paths": paths, "count": len(paths)},
            timestamp=time.time(),
            instance_id=instance_id,
        )

    @property
    def paths(self) -> List[str]:
        return self.data["paths"]


@dataclass
class InstanceLifecycleEvent(Event):
    """Instance registered or deregistered"""

    def __init__(self, instance_id: str, registered: bool, replaced: bool = False):
        super().__init__(
            type=EventType.INSTANCE_REGISTERED if registered else EventType.INSTANCE_DEREGISTERED,
            source=EventSource.REGISTRY,
            data={"replaced": replaced},
            timestamp=time.time(),
            instance_id=instance_id,
        )
