"""
Configuration models

Typed, immutable views over the merged YAML configuration.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from animbind.models.enums import LogLevel
from animbind.utils.enum_helper import EnumHelper


@dataclass(frozen=True)
class LoggingConfig:
    level: LogLevel = LogLevel.INFO
    use_colors: bool = True
    history_size: int = 100

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'LoggingConfig':
        data = data or {}
        return cls(
            level=EnumHelper.from_string(LogLevel, str(data.get("level", "INFO")), default=LogLevel.INFO),
            use_colors=bool(data.get("colors", True)),
            history_size=int(data.get("history_size", 100)),
        )


@dataclass(frozen=True)
class AssetConfig:
    http_timeout: float = 10.0
    max_bytes: int = 20 * 1024 * 1024
    follow_redirects: bool = True

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'AssetConfig':
        data = data or {}
        return cls(
            http_timeout=float(data.get("http_timeout", 10.0)),
            max_bytes=int(data.get("max_bytes", 20 * 1024 * 1024)),
            follow_redirects=bool(data.get("follow_redirects", True)),
        )


@dataclass(frozen=True)
class ApiConfig:
    title: str = "animbind"
    description: str = "REST API for animation property bindings"
    docs_enabled: bool = True
    cors_origins: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'ApiConfig':
        data = data or {}
        return cls(
            title=data.get("title", "animbind"),
            description=data.get("description", "REST API for animation property bindings"),
            docs_enabled=bool(data.get("docs_enabled", True)),
            cors_origins=list(data.get("cors_origins", [])),
        )


@dataclass(frozen=True)
class BridgeConfig:
    """All settings the container builder needs"""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    assets: AssetConfig = field(default_factory=AssetConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
