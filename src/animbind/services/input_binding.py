"""
State-machine input binding

Inputs are the state machine's own trigger/boolean/number parameters, separate
from the view-model property graph. They are collected once per instance and
addressed by name.
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from animbind.engine.protocols import INativeInput
from animbind.models.enums import InputKind
from animbind.models.errors import KindMismatchError
from animbind.models.events import InputChangedEvent
from animbind.utils.enum_helper import EnumHelper
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.INPUT)

# Engine spellings that differ from InputKind values
_KIND_ALIASES = {"bool": InputKind.BOOLEAN, "smibool": InputKind.BOOLEAN,
                 "smitrigger": InputKind.TRIGGER, "sminumber": InputKind.NUMBER}


@dataclass(eq=False)
class InputBinding:
    """One state-machine input"""
    name: str
    kind: InputKind
    handle: INativeInput
    _listeners: List[Tuple[Any, Callable]] = field(default_factory=list, repr=False)

    @property
    def value(self) -> Any:
        if self.kind == InputKind.TRIGGER:
            return None
        return getattr(self.handle, "value", None)

    def fire(self) -> None:
        self.handle.fire()

    def set_bool(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise KindMismatchError(self.kind.value, value)
        self.handle.value = value
        return value

    def set_number(self, value: Any) -> float:
        if not isinstance(value, Real) or isinstance(value, bool):
            raise KindMismatchError(self.kind.value, value)
        self.handle.value = float(value)
        return float(value)

    def detach(self) -> int:
        removed = 0
        while self._listeners:
            handle, callback = self._listeners.pop()
            removed += 1
            try:
                handle.remove_listener(callback)
            except Exception as ex:
                log.error("Failed to remove input listener", input=self.name,
                          error=str(ex), error_type=type(ex).__name__)
        return removed

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "kind": self.kind.value, "value": self.value}


def parse_input_kind(tag: Any) -> Optional[InputKind]:
    if tag is None:
        return None
    if isinstance(tag, str) and tag.strip().lower() in _KIND_ALIASES:
        return _KIND_ALIASES[tag.strip().lower()]
    try:
        return EnumHelper.to_enum(InputKind, tag)
    except (ValueError, TypeError):
        return None


def bind_inputs(
    handles: Optional[Iterable[INativeInput]],
    on_change: Optional[Callable[[InputChangedEvent], None]] = None
) -> Dict[str, InputBinding]:
    """
    Collect state-machine inputs by name.

    Inputs whose handle supports listeners report engine-side changes to
    on_change as InputChangedEvents. Unknown kinds are skipped.
    """
    bindings: Dict[str, InputBinding] = {}
    for handle in handles or []:
        name = getattr(handle, "name", None)
        kind = parse_input_kind(getattr(handle, "kind", None))
        if not name or kind is None:
            log.warn("Skipping input with unsupported kind", input=name,
                     kind=EnumHelper.to_name(getattr(handle, "kind", None)))
            continue
        if name in bindings:
            log.warn("Duplicate input name skipped", input=name)
            continue

        binding = InputBinding(name=name, kind=kind, handle=handle)
        if on_change is not None and hasattr(handle, "add_listener"):
            callback = _make_input_listener(name, kind, on_change)
            handle.add_listener(callback)
            binding._listeners.append((handle, callback))
        bindings[name] = binding

    if bindings:
        log.debug("Inputs bound", count=len(bindings), names=", ".join(bindings))
    return bindings


def _make_input_listener(
    name: str,
    kind: InputKind,
    on_change: Callable[[InputChangedEvent], None]
) -> Callable[[Any], None]:
    def on_input_change(value: Any = None) -> None:
        if kind == InputKind.TRIGGER:
            on_change(InputChangedEvent(name, kind, True))
        else:
            on_change(InputChangedEvent(name, kind, value))
    return on_input_change
