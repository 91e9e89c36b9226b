"""
Tests for state-machine input binding
"""

from animbind.models.enums import InputKind
from animbind.models.events import EventSource, EventType
from animbind.services.input_binding import bind_inputs, parse_input_kind

from tests.fakes import FakeInput


class ListeningInput(FakeInput):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.listeners = []

    def add_listener(self, callback):
        self.listeners.append(callback)

    def remove_listener(self, callback):
        self.listeners.remove(callback)


def test_kind_spellings():
    assert parse_input_kind("bool") == InputKind.BOOLEAN
    assert parse_input_kind("Boolean") == InputKind.BOOLEAN
    assert parse_input_kind("SMITrigger") == InputKind.TRIGGER
    assert parse_input_kind("number") == InputKind.NUMBER
    assert parse_input_kind("vector") is None
    assert parse_input_kind(None) is None


def test_bind_skips_unknown_and_duplicates():
    bindings = bind_inputs([
        FakeInput("jump", "trigger"),
        FakeInput("jump", "bool"),
        FakeInput("aim", "vector"),
    ])
    assert list(bindings) == ["jump"]
    assert bindings["jump"].kind == InputKind.TRIGGER


def test_engine_side_changes_are_reported():
    events = []
    hover = ListeningInput("hover", "bool", False)
    bindings = bind_inputs([hover], on_change=events.append)

    hover.listeners[0](True)
    assert events[0].name == "hover"
    assert events[0].value is True

    assert bindings["hover"].detach() == 1
    assert hover.listeners == []


class TestRegistryInputs:
    def test_get_inputs(self, registry, hero):
        inputs = {b.name: b.to_dict() for b in registry.get_inputs("hero")}
        assert inputs["hover"] == {"name": "hover", "kind": "boolean", "value": False}
        assert inputs["jump"]["value"] is None

    def test_trigger(self, registry, hero):
        assert registry.trigger_input("hero", "jump") is True
        assert hero.inputs["jump"].handle.fired == 1

    def test_bool(self, registry, hero):
        assert registry.update_bool("hero", "hover", True) is True
        assert hero.inputs["hover"].value is True
        assert registry.update_bool("hero", "hover", "yes") is False

    def test_number(self, registry, hero):
        assert registry.update_number("hero", "speed", 2) is True
        assert hero.inputs["speed"].value == 2.0
        assert registry.update_number("hero", "speed", True) is False

    def test_wrong_kind_or_name(self, registry, hero):
        assert registry.trigger_input("hero", "hover") is False
        assert registry.update_bool("hero", "speed", True) is False
        assert registry.update_number("hero", "missing", 1) is False

    def test_host_updates_are_published(self, registry, hero, event_bus):
        seen = []
        event_bus.subscribe(EventType.INPUT_CHANGED, seen.append)
        registry.update_number("hero", "speed", 3.5)
        assert seen[0].source == EventSource.HOST
        assert (seen[0].name, seen[0].value) == ("speed", 3.5)
