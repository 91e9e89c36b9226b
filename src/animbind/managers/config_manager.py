"""
Config Manager

Main configuration manager with include system support.
Loads modular YAML files and initializes sub-managers.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Optional, Union

from animbind.managers.color_manager import ColorManager
from animbind.models.config import ApiConfig, AssetConfig, BridgeConfig, LoggingConfig
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

PACKAGE_CONFIG_DIR = Path(__file__).parent.parent / "config"


class ConfigManager:
    """
    Main configuration manager with include system support

    Loads config.yaml and processes include: directive to load modular YAML files.
    Initializes the ColorManager and exposes typed settings via `settings`.

    Example:
        config = ConfigManager()
        config.load()

        config.settings.logging.level     # LogLevel.INFO
        config.color_manager.get("teal")  # Color(62, 194, 147, 255)
    """

    def __init__(
        self,
        config_path: Union[str, Path, None] = None,
        defaults_path: Union[str, Path, None] = None
    ):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to main config.yaml (default: packaged config)
            defaults_path: Path to factory defaults fallback (default: packaged)
        """
        self.config_path = Path(config_path) if config_path else PACKAGE_CONFIG_DIR / "config.yaml"
        self.factory_defaults_path = (
            Path(defaults_path) if defaults_path else PACKAGE_CONFIG_DIR / "factory_defaults.yaml"
        )
        self.data: Dict = {}

        # Initialized in load()
        self.color_manager: Optional[ColorManager] = None
        self.settings: BridgeConfig = BridgeConfig()

    def load(self) -> Dict:
        """
        Load YAML configuration with include system support

        Process:
        1. Load main config.yaml
        2. If it has 'include:' list, load and merge those files
        3. Otherwise treat as monolithic config
        4. Fallback to factory defaults on failure
        5. Initialize sub-managers and typed settings

        Returns:
            Merged config data dict
        """
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                main_config = yaml.safe_load(f) or {}

            if 'include' in main_config:
                log.info("Using include-based configuration")
                self.data = self._load_with_includes(main_config['include'], self.config_path.parent)
                # Keys next to include: override included files
                self.data.update({k: v for k, v in main_config.items() if k != 'include'})
            else:
                log.info("Using monolithic configuration")
                self.data = main_config

        except Exception as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")

            with open(self.factory_defaults_path, "r", encoding="utf-8") as f:
                self.data = yaml.safe_load(f) or {}

        self._initialize_managers()

        return self.data

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict:
        """
        Load and merge multiple YAML files from include list

        Args:
            include_list: List of filenames to load (e.g., ["logging.yaml", "colors.yaml"])
            config_dir: Directory containing config files

        Returns:
            Merged config dict
        """
        merged = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                with open(filepath, 'r', encoding='utf-8') as f:
                    file_data = yaml.safe_load(f)
                    if file_data:
                        merged.update(file_data)
                        log.debug(f"Loaded {filename}", keys=str(list(file_data.keys())))
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise
            except Exception as ex:
                log.error(f"Error loading {filename}", error=str(ex))
                raise

        log.info("Config merge complete", total_keys=len(merged), keys=str(list(merged.keys())[:10]))
        return merged

    def _initialize_managers(self):
        """
        Initialize sub-managers and typed settings with loaded config data
        """
        try:
            self.color_manager = ColorManager(self.data.get('colors') or {})
            log.info(f"ColorManager initialized with {len(self.color_manager.named_colors)} named colors")
        except Exception as ex:
            log.warn("Failed to initialize ColorManager, using empty", error=str(ex))
            self.color_manager = ColorManager({})

        self.settings = BridgeConfig(
            logging=LoggingConfig.from_dict(self.data.get('logging')),
            assets=AssetConfig.from_dict(self.data.get('assets')),
            api=ApiConfig.from_dict(self.data.get('api')),
        )


def load_default_color_manager() -> ColorManager:
    """ColorManager built from the packaged colors.yaml"""
    with open(PACKAGE_CONFIG_DIR / "colors.yaml", "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return ColorManager(data.get('colors') or {})
