"""
Tests for the instance registry: lifecycle, updates, queries and change delivery
"""

import threading

import pytest

from animbind.models.color import Color
from animbind.models.enums import PropertyKind
from animbind.models.events import EventType
from animbind.models.instance import AnimationInstance
from animbind.services.instance_registry import InstanceRegistry

from tests.fakes import FakeArtboard, FakeImage, build_view_model


class TestLifecycle:
    def test_load_registers(self, registry, hero):
        assert registry.instance_ids() == ["hero"]
        assert registry.get_instance("hero") is hero
        assert "hero" in registry
        assert hero.artboards == ["Main", "Alt"]

    def test_root_without_view_model(self, registry):
        instance = registry.load("plain", None)
        assert instance.graph == []
        assert registry.get_all_property_values("plain") == {}

    def test_register_replaces(self, registry, hero, view_model):
        replacement = AnimationInstance(id="ignored")
        registry.register("hero", replacement)

        assert registry.get_instance("hero") is replacement
        assert replacement.id == "hero"
        # the replaced entry was torn down
        assert view_model.string("title").listeners == []

    def test_lifecycle_events(self, registry, event_bus, view_model):
        seen = []
        event_bus.subscribe(EventType.INSTANCE_REGISTERED, seen.append)
        event_bus.subscribe(EventType.INSTANCE_DEREGISTERED, seen.append)
        event_bus.subscribe(EventType.PROPERTIES_DISCOVERED, seen.append)

        registry.load("hero", view_model)
        registry.deregister("hero")

        assert [e.type for e in seen] == [
            EventType.INSTANCE_REGISTERED,
            EventType.PROPERTIES_DISCOVERED,
            EventType.INSTANCE_DEREGISTERED,
        ]
        assert "settings/theme" in seen[1].paths


class TestDeregister:
    def test_cleanup(self, registry, hero, view_model, changes):
        registry.update_nested_property("hero", "settings/theme", "light")
        assert registry.get_cache_stats()["total_cached_paths"] == 1
        changes.clear()

        assert registry.deregister("hero") is True

        assert registry.get_all_property_values("hero") == {}
        assert registry.get_property_value("hero", "title") is None
        stats = registry.get_cache_stats()
        assert stats["instance_count"] == 0
        assert stats["total_cached_paths"] == 0
        assert hero.path_cache == {}
        assert hero.image_handle is None and hero.font_handle is None

        # engine keeps running; nothing reaches the host any more
        view_model.string("title").engine_set("late")
        view_model.view_model("settings").string("theme").engine_set("late")
        view_model.trigger("pulse").trigger()
        registry.drain_events()
        assert changes == []

    def test_listeners_detached_recursively(self, registry, hero, view_model):
        registry.deregister("hero")
        item = view_model.list("items").instance_at(0)
        assert item.string("label").listeners == []
        assert view_model.view_model("settings").number("scale").listeners == []

    def test_unknown_id_is_noop(self, registry):
        assert registry.deregister("nobody") is False

    def test_failing_remove_listener_does_not_abort(self, registry, hero, view_model, monkeypatch):
        def refuse(callback):
            raise RuntimeError("handle disposed")

        monkeypatch.setattr(view_model.string("title"), "remove_listener", refuse)

        assert registry.deregister("hero") is True
        assert "hero" not in registry
        assert view_model.view_model("settings").string("theme").listeners == []
        assert hero.root is None

    def test_failing_remove_listener_on_replace(self, registry, hero, view_model, monkeypatch):
        def refuse(callback):
            raise RuntimeError("handle disposed")

        monkeypatch.setattr(view_model.string("title"), "remove_listener", refuse)
        replacement = registry.register("hero", AnimationInstance(id="hero"))

        assert registry.get_instance("hero") is replacement
        assert view_model.view_model("settings").string("theme").listeners == []

    def test_pending_changes_are_dropped(self, registry, hero, view_model, changes):
        view_model.string("title").engine_set("queued")   # enqueued, not drained
        registry.deregister("hero")
        registry.drain_events()
        assert changes == []


class TestUpdates:
    def test_nested_update_scenario(self, registry, hero):
        assert registry.update_nested_property("hero", "settings/theme", "light") is True
        assert registry.get_property_value("hero", "settings/theme") == "light"
        assert registry.get_nested_property_value("hero", "settings.theme") == "light"

        slash = registry.resolver.resolve(hero, "settings/theme")
        dot = registry.resolver.resolve(hero, "settings.theme")
        assert slash is dot

    def test_single_segment_delegates(self, registry, hero, view_model):
        assert registry.update_nested_property("hero", "title", "Bye") is True
        assert view_model.string("title").value == "Bye"
        assert hero.path_cache == {}

    def test_kind_mismatch_is_rejected(self, registry, hero, view_model):
        assert registry.update_property("hero", "visible", "not-a-bool") is False
        assert registry.get_property_value("hero", "visible") is True
        assert view_model.boolean("visible").writes == []

    def test_number_and_integer(self, registry, hero, view_model):
        assert registry.update_property("hero", "progress", 1) is True
        assert registry.update_property("hero", "count", 4.6) is True
        assert view_model.number("count").value == 5.0
        assert registry.get_property_value("hero", "count") == 5
        assert registry.get_property_value("hero", "progress") == 1.0

    def test_color_any_shape(self, registry, hero, view_model):
        assert registry.update_property("hero", "accent", "rgba(255, 0, 0, 0.5)") is True
        assert view_model.color("accent").value == 0x7FFF0000
        assert registry.get_property_value("hero", "accent") == Color(255, 0, 0, 127)

    def test_color_fallback_still_succeeds(self, registry, hero):
        assert registry.update_property("hero", "accent", "chartreuse-ish") is True
        assert registry.get_property_value("hero", "accent") == Color.white()

    def test_enum_rejection_by_engine(self, registry, hero):
        assert registry.update_property("hero", "mode", "manual") is True
        assert registry.update_property("hero", "mode", "turbo") is False
        assert registry.get_property_value("hero", "mode") == "manual"

    def test_trigger(self, registry, hero, view_model, changes):
        assert registry.update_property("hero", "pulse", True) is True
        assert registry.update_property("hero", "pulse", False) is True
        assert view_model.trigger("pulse").fired == 1
        assert ("hero", "pulse", PropertyKind.TRIGGER, True) in changes

    def test_containers_are_read_only(self, registry, hero):
        assert registry.update_property("hero", "settings", {"theme": "x"}) is False
        assert registry.update_property("hero", "items", []) is False

    def test_list_item_update(self, registry, hero, view_model):
        assert registry.update_nested_property("hero", "items.0.done", True) is True
        assert view_model.list("items").instance_at(0).boolean("done").value is True
        assert registry.get_property_value("hero", "items") == [
            {"label": "a", "done": True},
            {"label": "b", "done": False},
        ]

    def test_artboard(self, registry, hero, view_model):
        board = FakeArtboard("Alt")
        assert registry.update_property("hero", "stage", board) is True
        assert view_model.artboard("stage").value is board

    def test_image_from_decoded_object(self, registry, hero):
        image = FakeImage(b"png")
        assert registry.update_property("hero", "cover", image) is True
        assert registry.get_property_value("hero", "cover") is image

    def test_image_from_bytes_uses_decoder(self, registry, hero, decoder):
        assert registry.update_property("hero", "cover", b"png") is True
        assert decoder.calls == 1
        assert registry.get_property_value("hero", "cover").data == b"png"

    def test_image_url_needs_async(self, registry, hero):
        assert registry.update_property("hero", "cover", "https://example.com/a.png") is False

    def test_unknown_property(self, registry, hero):
        assert registry.update_property("hero", "nope", 1) is False
        assert registry.update_nested_property("hero", "settings/nope", 1) is False
        assert registry.update_nested_property("hero", "settings/", 1) is False


class TestUnknownInstance:
    def test_every_operation_is_safe(self, registry):
        assert registry.update_property("ghost", "title", "x") is False
        assert registry.update_nested_property("ghost", "a/b", "x") is False
        assert registry.get_property_value("ghost", "title") is None
        assert registry.get_nested_property_value("ghost", "a/b") is None
        assert registry.get_all_property_values("ghost") == {}
        assert registry.get_properties("ghost") == []
        assert registry.get_inputs("ghost") == []
        assert registry.clear_property_cache("ghost") is False
        assert registry.trigger_input("ghost", "jump") is False
        assert registry.update_bool("ghost", "hover", True) is False
        assert registry.update_number("ghost", "speed", 1) is False
        assert registry.get_current_state_name("ghost") is None
        assert registry.handle_state_machine_event("ghost", "e", "s") is False
        assert registry.update_image_from_cache("ghost", 0) is False
        assert registry.deregister("ghost") is False


class TestQueries:
    def test_all_values_snapshot(self, registry, hero):
        values = registry.get_all_property_values("hero")
        assert values["title"] == "Hello"
        assert values["settings"] == {"theme": "dark", "scale": 1.0}
        assert values["items"][1]["label"] == "b"
        assert values["pulse"] is None
        assert "legacy" not in values

    def test_get_properties(self, registry, hero):
        assert [n.name for n in registry.get_properties("hero")][:2] == ["title", "visible"]

    def test_cache_stats(self, registry, hero):
        registry.update_nested_property("hero", "settings/theme", "light")
        registry.get_property_value("hero", "items/0/label")
        registry.load("other", build_view_model())

        stats = registry.get_cache_stats()
        assert stats["instance_count"] == 2
        assert stats["total_cached_paths"] == 2
        assert stats["instances_with_path_cache"] == 1

    def test_clear_caches(self, registry, hero):
        registry.get_property_value("hero", "settings/theme")
        assert registry.clear_property_cache("hero") is True
        assert hero.path_cache == {}

        registry.get_property_value("hero", "settings/theme")
        assert registry.clear_all_property_caches() == 1


class TestChangeDelivery:
    def test_engine_change_reaches_host(self, registry, hero, view_model, changes):
        view_model.number("progress").engine_set(0.9)
        registry.drain_events()
        assert changes == [("hero", "progress", PropertyKind.NUMBER, 0.9)]
        assert registry.get_property_value("hero", "progress") == 0.9

    def test_reads_drain_pending_changes(self, registry, hero, view_model):
        view_model.view_model("settings").string("theme").engine_set("solar")
        assert registry.get_property_value("hero", "settings/theme") == "solar"

    def test_update_echo_is_ordered(self, registry, hero, changes):
        registry.update_property("hero", "title", "one")
        registry.update_property("hero", "title", "two")
        titles = [value for _, path, _, value in changes if path == "title"]
        assert titles == ["one", "two"]

    def test_event_bus_receives_changes(self, registry, hero, event_bus, view_model):
        seen = []
        event_bus.subscribe(EventType.PROPERTY_CHANGED, seen.append,
                            filter_fn=lambda e: e.instance_id == "hero")
        view_model.boolean("visible").engine_set(False)
        registry.drain_events()
        assert [(e.path, e.value) for e in seen] == [("visible", False)]

    def test_callback_failure_is_contained(self, view_model):
        def broken(*_):
            raise RuntimeError("host bug")

        registry = InstanceRegistry(on_change=broken)
        registry.load("hero", view_model)
        assert registry.update_property("hero", "title", "x") is True

    def test_listener_on_other_thread(self, registry, hero, view_model, changes):
        worker = threading.Thread(target=view_model.number("progress").engine_set, args=(0.5,))
        worker.start()
        worker.join()
        registry.drain_events()
        assert ("hero", "progress", PropertyKind.NUMBER, 0.5) in changes


class TestStateMachine:
    def test_event_records_state(self, registry, hero, event_bus):
        seen = []
        event_bus.subscribe(EventType.STATE_MACHINE_EVENT, seen.append)

        assert registry.handle_state_machine_event("hero", "landed", "Idle") is True
        assert registry.get_current_state_name("hero") == "Idle"
        assert seen[0].event_name == "landed"
        assert seen[0].instance_id == "hero"


class TestTextRuns:
    def test_set_and_get(self, registry, hero, text_artboard):
        assert registry.get_text_run_value("hero", "headline") == "Welcome"
        assert registry.set_text_run_value("hero", "headline", "Hi there") is True
        assert text_artboard.runs[None]["headline"] == "Hi there"
        assert registry.get_text_run_value("hero", "headline") == "Hi there"

    def test_nested_path(self, registry, hero, text_artboard):
        assert registry.set_text_run_value("hero", "label", "Sale", path="badge") is True
        assert registry.get_text_run_value("hero", "label", path="badge") == "Sale"
        assert text_artboard.runs[None] == {"headline": "Welcome"}

    def test_unknown_run_is_rejected(self, registry, hero):
        assert registry.set_text_run_value("hero", "subtitle", "x") is False
        assert registry.get_text_run_value("hero", "subtitle") is None

    def test_engine_error_is_contained(self, registry, hero):
        assert registry.get_text_run_value("hero", "label", path="missing") is None

    def test_unknown_instance(self, registry):
        assert registry.set_text_run_value("ghost", "headline", "x") is False
        assert registry.get_text_run_value("ghost", "headline") is None

    def test_instance_without_artboard(self, registry, view_model):
        registry.load("plain", view_model)
        assert registry.set_text_run_value("plain", "headline", "x") is False
        assert registry.get_text_run_value("plain", "headline") is None

    def test_deregister_drops_artboard(self, registry, hero):
        registry.deregister("hero")
        assert hero.artboard is None
        assert registry.get_text_run_value("hero", "headline") is None


@pytest.mark.parametrize("path", ["settings/theme", "settings.theme"])
def test_separators_resolve_identically(registry, hero, path):
    assert registry.update_nested_property("hero", path, "light") is True
    assert registry.get_property_value("hero", "settings/theme") == "light"
