"""Service Container - Dependency injection container for the binding layer"""

from dataclasses import dataclass
from typing import Any, Optional

from animbind.managers.color_manager import ColorManager
from animbind.managers.config_manager import ConfigManager
from animbind.services.asset_loader import AssetLoader
from animbind.services.discovery import PropertyGraphDiscoverer
from animbind.services.event_bus import EventBus
from animbind.services.instance_registry import ChangeCallback, InstanceRegistry
from animbind.services.log_history import LogHistory, set_log_history
from animbind.services.path_resolver import PathResolver
from animbind.services.value_normalizer import ValueNormalizer
from animbind.utils.logger import configure_logger, get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)


@dataclass
class ServiceContainer:
    """
    Everything a host or the HTTP surface needs, wired together once.

    Usage:
        services = build_container(decoder=engine_decoder, on_change=push_to_ui)

        services.registry.load("hero", view_model)
        services.event_bus.subscribe(EventType.STATE_MACHINE_EVENT, on_state)

        app = create_app(services)
    """

    registry: InstanceRegistry
    event_bus: EventBus
    color_manager: ColorManager
    config_manager: ConfigManager
    log_history: LogHistory


def build_container(
    config_manager: Optional[ConfigManager] = None,
    decoder: Any = None,
    on_change: Optional[ChangeCallback] = None,
    transport: Any = None
) -> ServiceContainer:
    """
    Load configuration and build every service.

    Args:
        config_manager: Pre-built config (default: packaged config.yaml)
        decoder: Image/font decoder handed to the AssetLoader
        on_change: Host change callback (instance_id, path, kind, value)
        transport: httpx transport for asset fetches (tests)
    """
    if config_manager is None:
        config_manager = ConfigManager()
        config_manager.load()
    settings = config_manager.settings

    configure_logger(settings.logging.level, settings.logging.use_colors)
    history = LogHistory(max_entries=settings.logging.history_size)
    set_log_history(history)
    get_logger().set_history(history)

    event_bus = EventBus()
    normalizer = ValueNormalizer(config_manager.color_manager)
    registry = InstanceRegistry(
        normalizer=normalizer,
        discoverer=PropertyGraphDiscoverer(normalizer),
        resolver=PathResolver(),
        asset_loader=AssetLoader(settings.assets, decoder=decoder, transport=transport),
        event_bus=event_bus,
        on_change=on_change,
    )

    log.info(
        "Services ready",
        named_colors=len(config_manager.color_manager.named_colors),
        log_level=settings.logging.level.name
    )

    return ServiceContainer(
        registry=registry,
        event_bus=event_bus,
        color_manager=config_manager.color_manager,
        config_manager=config_manager,
        log_history=history,
    )
