"""
Engine boundary protocols
=========================
Minimal contracts the binding layer needs from the animation engine and the
asset layer. Host applications adapt their engine objects to these shapes;
nothing here is implemented by the binding layer itself.
"""

from __future__ import annotations
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence, Union, runtime_checkable

ChangeListener = Callable[[Any], None]


class IPropertyDescriptor(Protocol):
    """Entry of a view model's property list."""

    @property
    def name(self) -> str:
        ...

    @property
    def type(self) -> Any:
        """Kind tag: an engine enum member or a string such as 'enumType'."""
        ...


@runtime_checkable
class INativeProperty(Protocol):
    """
    Typed property handle.

    `value` reads and writes the engine value; setters may raise to reject a
    value (e.g. an enum option that does not exist). Listeners receive the
    new native value.
    """

    value: Any

    def add_listener(self, callback: ChangeListener) -> None:
        ...

    def remove_listener(self, callback: ChangeListener) -> None:
        ...


@runtime_checkable
class INativeTrigger(Protocol):
    """Write-only trigger handle; listeners receive True when it fires."""

    def trigger(self) -> None:
        ...

    def add_listener(self, callback: ChangeListener) -> None:
        ...

    def remove_listener(self, callback: ChangeListener) -> None:
        ...


@runtime_checkable
class INativeList(Protocol):
    """List of nested view-model instances."""

    def __len__(self) -> int:
        ...

    def instance_at(self, index: int) -> Optional['INativeViewModel']:
        ...


@runtime_checkable
class INativeViewModel(Protocol):
    """
    Bound view-model instance with typed accessors.

    integer and symbolListIndex properties are read through number().
    Accessors return None when the name does not exist.
    """

    @property
    def properties(self) -> Sequence[IPropertyDescriptor]:
        ...

    def number(self, name: str) -> Optional[INativeProperty]: ...
    def boolean(self, name: str) -> Optional[INativeProperty]: ...
    def string(self, name: str) -> Optional[INativeProperty]: ...
    def color(self, name: str) -> Optional[INativeProperty]: ...
    def enumerator(self, name: str) -> Optional[INativeProperty]: ...
    def trigger(self, name: str) -> Optional[INativeTrigger]: ...
    def image(self, name: str) -> Optional[INativeProperty]: ...
    def font(self, name: str) -> Optional[INativeProperty]: ...
    def artboard(self, name: str) -> Optional[INativeProperty]: ...
    def view_model(self, name: str) -> Optional['INativeViewModel']: ...
    def list(self, name: str) -> Optional[INativeList]: ...


@runtime_checkable
class INativeInput(Protocol):
    """State-machine input: trigger, boolean or number."""

    @property
    def name(self) -> str:
        ...

    @property
    def kind(self) -> Any:
        """'trigger', 'boolean'/'bool' or 'number' (string or enum member)."""
        ...

    value: Any

    def fire(self) -> None:
        ...


@runtime_checkable
class IAssetSlot(Protocol):
    """Image or font asset intercepted while the animation file loaded."""

    def decode(self, data: bytes) -> Union[Any, Awaitable[Any]]:
        """Decode bytes into the slot (may be a coroutine)."""
        ...

    def render(self, decoded: Any) -> None:
        """Swap an already decoded asset into the slot."""
        ...


@runtime_checkable
class IAssetDecoder(Protocol):
    """Byte-decode service for image and font property values."""

    def decode(self, data: bytes) -> Union[Any, Awaitable[Any]]:
        """Return the decoded asset, or None when the bytes are not decodable."""
        ...


@runtime_checkable
class ITextArtboard(Protocol):
    """Artboard whose named text runs can be read and written."""

    def set_text(self, name: str, value: str, path: Optional[str] = None) -> Any:
        """Write a text run; path addresses a run inside a nested artboard."""
        ...

    def get_text(self, name: str, path: Optional[str] = None) -> Optional[str]:
        ...
