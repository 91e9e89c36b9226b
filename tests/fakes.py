"""
In-memory fake animation engine

Implements the engine boundary protocols closely enough to exercise
discovery, listener delivery, native rejection and asset slots.
"""

from typing import Any, Dict, List, Optional


class FakeDescriptor:
    def __init__(self, name: str, type: Any):
        self.name = name
        self.type = type


class FakeProperty:
    """
    Value handle. Setting .value notifies listeners when the value changes,
    the way the engine reports changes after a write.
    """

    def __init__(self, value: Any = None):
        self._value = value
        self.listeners: List = []
        self.writes: List[Any] = []

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_value: Any) -> None:
        self._check(new_value)
        self.writes.append(new_value)
        changed = new_value != self._value
        self._value = new_value
        if changed:
            self._notify(new_value)

    def _check(self, new_value: Any) -> None:
        pass

    def add_listener(self, callback) -> None:
        self.listeners.append(callback)

    def remove_listener(self, callback) -> None:
        self.listeners.remove(callback)

    def _notify(self, value: Any) -> None:
        for callback in list(self.listeners):
            callback(value)

    def engine_set(self, value: Any) -> None:
        """Change the value from the engine side (animation playback)"""
        self._value = value
        self._notify(value)


class FakeEnumProperty(FakeProperty):
    def __init__(self, value: str, values: List[str]):
        super().__init__(value)
        self.values = list(values)

    def _check(self, new_value: Any) -> None:
        if new_value not in self.values:
            raise ValueError(f"'{new_value}' is not one of {self.values}")


class FakeTrigger:
    def __init__(self):
        self.fired = 0
        self.listeners: List = []

    def trigger(self) -> None:
        self.fired += 1
        for callback in list(self.listeners):
            callback(True)

    def add_listener(self, callback) -> None:
        self.listeners.append(callback)

    def remove_listener(self, callback) -> None:
        self.listeners.remove(callback)


class FakeList:
    def __init__(self, items: List['FakeViewModel']):
        self.items = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def instance_at(self, index: int) -> Optional['FakeViewModel']:
        if 0 <= index < len(self.items):
            return self.items[index]
        return None


class FakeViewModel:
    """
    View model with typed accessors.

    Example:
        vm = FakeViewModel()
        vm.add("title", "string", FakeProperty("Hello"))
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._descriptors: List[FakeDescriptor] = []
        self._handles: Dict[str, Any] = {}
        self.broken: Dict[str, Exception] = {}

    def add(self, name: str, kind: Any, handle: Any = None) -> Any:
        self._descriptors.append(FakeDescriptor(name, kind))
        self._handles[name] = handle
        return handle

    def break_property(self, name: str, error: Exception) -> None:
        """Make the accessor for name raise"""
        self.broken[name] = error

    @property
    def properties(self) -> List[FakeDescriptor]:
        return list(self._descriptors)

    def _get(self, name: str) -> Any:
        if name in self.broken:
            raise self.broken[name]
        return self._handles.get(name)

    def number(self, name): return self._get(name)
    def boolean(self, name): return self._get(name)
    def string(self, name): return self._get(name)
    def color(self, name): return self._get(name)
    def enumerator(self, name): return self._get(name)
    def trigger(self, name): return self._get(name)
    def image(self, name): return self._get(name)
    def font(self, name): return self._get(name)
    def artboard(self, name): return self._get(name)
    def view_model(self, name): return self._get(name)
    def list(self, name): return self._get(name)


class FakeInput:
    def __init__(self, name: str, kind: str, value: Any = None):
        self.name = name
        self.kind = kind
        self.value = value
        self.fired = 0

    def fire(self) -> None:
        self.fired += 1


class FakeImage:
    def __init__(self, data: bytes):
        self.data = data


class FakeDecoder:
    """Decodes any non-empty bytes into a FakeImage"""

    def __init__(self):
        self.calls = 0

    def decode(self, data: bytes) -> Optional[FakeImage]:
        self.calls += 1
        return FakeImage(data) if data else None


class AsyncFakeDecoder(FakeDecoder):
    async def decode(self, data: bytes) -> Optional[FakeImage]:
        self.calls += 1
        return FakeImage(data) if data else None


class FakeImageSlot:
    """Intercepted image asset: decode() loads bytes, render() swaps a decoded image"""

    def __init__(self):
        self.decoded: List[bytes] = []
        self.rendered: List[Any] = []

    def decode(self, data: bytes) -> bool:
        if not data:
            return False
        self.decoded.append(data)
        return True

    def render(self, decoded: Any) -> None:
        self.rendered.append(decoded)


class FakeArtboard:
    def __init__(self, name: str):
        self.name = name


class FakeTextArtboard:
    """Artboard with text runs; nested artboards are keyed by path"""

    def __init__(self, runs: Optional[Dict[str, str]] = None):
        self.runs: Dict[Optional[str], Dict[str, str]] = {None: dict(runs or {})}

    def add_nested(self, path: str, runs: Dict[str, str]) -> None:
        self.runs[path] = dict(runs)

    def set_text(self, name: str, value: str, path: Optional[str] = None) -> bool:
        runs = self.runs.get(path)
        if runs is None or name not in runs:
            return False
        runs[name] = value
        return True

    def get_text(self, name: str, path: Optional[str] = None) -> Optional[str]:
        runs = self.runs.get(path)
        if runs is None:
            raise KeyError(path)
        return runs.get(name)


def build_item(label: str) -> FakeViewModel:
    item = FakeViewModel(name="Item")
    item.add("label", "string", FakeProperty(label))
    item.add("done", "boolean", FakeProperty(False))
    return item


def build_view_model() -> FakeViewModel:
    """
    Root used across the tests:

        title: string "Hello"          visible: boolean True
        progress: number 0.25          count: integer 3
        accent: color 0xFF3EC293       mode: enumType "auto" (auto|manual)
        pulse: trigger                 cover: image
        stage: artboard                slot: symbolListIndex 1
        settings: viewModel { theme: string "dark", scale: number 1.0 }
        items: list [ {label "a", done}, {label "b", done} ]
        legacy: kind "none" (skipped)
    """
    settings = FakeViewModel(name="Settings")
    settings.add("theme", "string", FakeProperty("dark"))
    settings.add("scale", "number", FakeProperty(1.0))

    root = FakeViewModel(name="Root")
    root.add("title", "string", FakeProperty("Hello"))
    root.add("visible", "boolean", FakeProperty(True))
    root.add("progress", "number", FakeProperty(0.25))
    root.add("count", "integer", FakeProperty(3.0))
    root.add("accent", "color", FakeProperty(0xFF3EC293))
    root.add("mode", "enumType", FakeEnumProperty("auto", ["auto", "manual"]))
    root.add("pulse", "trigger", FakeTrigger())
    root.add("cover", "image", FakeProperty(None))
    root.add("stage", "artboard", FakeProperty(None))
    root.add("slot", "symbolListIndex", FakeProperty(1.0))
    root.add("settings", "viewModel", settings)
    root.add("items", "list", FakeList([build_item("a"), build_item("b")]))
    root.add("legacy", "none", None)
    return root


def build_inputs() -> List[FakeInput]:
    return [
        FakeInput("jump", "trigger"),
        FakeInput("hover", "bool", False),
        FakeInput("speed", "number", 1.0),
    ]
