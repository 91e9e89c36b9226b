import pytest

from animbind.managers.config_manager import ConfigManager
from animbind.services.asset_loader import AssetLoader
from animbind.services.event_bus import EventBus
from animbind.services.instance_registry import InstanceRegistry
from animbind.services.value_normalizer import ValueNormalizer
from animbind.models.enums import LogLevel
from animbind.utils.logger import configure_logger

from tests.fakes import FakeDecoder, FakeTextArtboard, build_inputs, build_view_model


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep test output readable; WARN/ERROR still print"""
    configure_logger(LogLevel.WARN, use_colors=False)
    yield


@pytest.fixture
def normalizer():
    return ValueNormalizer()


@pytest.fixture
def view_model():
    return build_view_model()


@pytest.fixture
def changes():
    """Collects host callbacks as (instance_id, path, kind, value)"""
    return []


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def decoder():
    return FakeDecoder()


@pytest.fixture
def registry(normalizer, changes, event_bus, decoder):
    return InstanceRegistry(
        normalizer=normalizer,
        asset_loader=AssetLoader(decoder=decoder),
        event_bus=event_bus,
        on_change=lambda *change: changes.append(change),
    )


@pytest.fixture
def text_artboard():
    artboard = FakeTextArtboard({"headline": "Welcome"})
    artboard.add_nested("badge", {"label": "New"})
    return artboard


@pytest.fixture
def hero(registry, view_model, text_artboard):
    """The fake view model loaded as 'hero' with three state-machine inputs"""
    return registry.load("hero", view_model, inputs=build_inputs(), artboards=["Main", "Alt"],
                         artboard=text_artboard)


@pytest.fixture
def config_manager():
    manager = ConfigManager()
    manager.load()
    return manager
