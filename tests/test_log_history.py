"""Tests for the log history buffer and its logger hookup"""

import json

import pytest

from animbind.models.enums import LogCategory, LogLevel
from animbind.services.log_history import LogHistory, get_log_history, set_log_history
from animbind.utils.logger import configure_logger, get_logger


@pytest.fixture
def history():
    history = LogHistory(max_entries=5)
    get_logger().set_history(history)
    yield history
    get_logger().set_history(None)


def add(history, level, message, category="REGISTRY"):
    history.log(timestamp="2026-10-18T12:00:00", level=level, category=category, message=message)


def test_bounded(history):
    for i in range(8):
        add(history, "INFO", f"entry {i}")

    assert history.count == 5
    assert [e.message for e in history.get_recent(2)] == ["entry 6", "entry 7"]
    assert history.get_recent(0) == []


def test_by_type_and_counts(history):
    add(history, "DEBUG", "discovered")
    add(history, "WARN", "kind mismatch")
    add(history, "ERROR", "native rejection")
    add(history, "INFO", "registered")

    assert history.error_count == 2
    assert history.info_count == 2
    assert [e.level for e in history.get_by_type(expected=False)] == ["WARN", "ERROR"]


def test_search_is_case_insensitive(history):
    add(history, "INFO", "Property updated (path: settings/theme)")
    add(history, "INFO", "Instance registered")

    hits = history.search("SETTINGS/THEME")
    assert len(hits) == 1


def test_subscribers(history):
    seen = []

    def broken(entry):
        raise RuntimeError("subscriber bug")

    history.subscribe(broken)
    history.subscribe(seen.append)
    add(history, "INFO", "one")
    history.unsubscribe(seen.append)
    add(history, "INFO", "two")

    assert [e.message for e in seen] == ["one"]


def test_export(history):
    add(history, "INFO", "one")
    add(history, "WARN", "two")

    assert history.export_as_string() == "one\ntwo"
    exported = json.loads(history.export_as_json())
    assert exported[1]["level"] == "WARN"

    history.clear()
    assert history.count == 0


def test_logger_mirrors_entries_with_details(history):
    log = get_logger().for_category(LogCategory.REGISTRY)
    log.debug("filtered out by level")
    log.warn("Replacing registered instance", instance="hero")

    entries = history.get_recent()
    assert len(entries) == 1
    assert entries[0].category == "REGISTRY"
    assert entries[0].message == "Replacing registered instance (instance: hero)"
    assert entries[0].is_expected is False


def test_registry_failures_reach_history(history, registry, hero):
    registry.update_property("hero", "visible", "not-a-bool")
    registry.update_property("hero", "missing", 1)

    assert history.error_count >= 2
    assert history.search("missing")


def test_global_instance():
    replacement = LogHistory(max_entries=3)
    set_log_history(replacement)
    assert get_log_history() is replacement


def test_configure_keeps_singleton_and_history(history):
    before = get_logger()
    configure_logger(LogLevel.DEBUG, use_colors=False)

    assert get_logger() is before
    assert get_logger().history is history
    get_logger().for_category(LogCategory.PATH).debug("Path cached")
    assert history.search("Path cached")
