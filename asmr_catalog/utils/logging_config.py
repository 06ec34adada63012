"""
Centralized logging configuration with categorized loggers.

Each subsystem logs through `logging.getLogger(__name__)`; this module groups
those module loggers into categories whose levels can be tuned together and
optionally persisted in any key/value config store exposing
`get_config(key, default)` / `set_config(key, value)`.
"""
import logging
from typing import Dict, Optional
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler


class LoggerCategory:
    """Named categories for library loggers"""
    CORE = "core"                  # Managers, context, media tree
    API = "api"                    # Catalog API client
    NETWORK = "network"            # HTTP session factory
    TRANSLATION = "translation"    # Batcher and translation transport
    CACHE = "cache"                # LRU caches
    SETTINGS = "settings"          # Settings loading


DEFAULT_LOG_LEVELS = {
    LoggerCategory.CORE: logging.INFO,
    LoggerCategory.API: logging.INFO,
    LoggerCategory.NETWORK: logging.INFO,
    LoggerCategory.TRANSLATION: logging.INFO,
    LoggerCategory.CACHE: logging.WARNING,  # Eviction noise
    LoggerCategory.SETTINGS: logging.INFO,
}


MODULE_TO_CATEGORY = {
    # Core
    'asmr_catalog.core': LoggerCategory.CORE,
    'asmr_catalog.core.context': LoggerCategory.CORE,
    'asmr_catalog.core.works_manager': LoggerCategory.CORE,
    'asmr_catalog.core.media_tree': LoggerCategory.CORE,
    'asmr_catalog.core.pagination': LoggerCategory.CORE,
    'asmr_catalog.core.lyrics': LoggerCategory.CORE,

    # API
    'asmr_catalog.core.api': LoggerCategory.API,
    'asmr_catalog.core.api.base': LoggerCategory.API,
    'asmr_catalog.core.api.asmr_one': LoggerCategory.API,

    # Network
    'asmr_catalog.core.http_client': LoggerCategory.NETWORK,

    # Translation
    'asmr_catalog.core.translation': LoggerCategory.TRANSLATION,
    'asmr_catalog.core.api.google_translate': LoggerCategory.TRANSLATION,

    # Cache
    'asmr_catalog.core.cache': LoggerCategory.CACHE,

    # Settings
    'asmr_catalog.core.settings': LoggerCategory.SETTINGS,
}


class LoggingManager:
    """Manages library-wide logging configuration"""

    def __init__(self, log_dir: Optional[Path] = None, config_store=None):
        """
        Args:
            log_dir: Directory for the rotating log file; console only when None
            config_store: Optional store for persisted category levels
        """
        self.log_dir = log_dir
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        self.config_store = config_store
        self._category_levels: Dict[str, int] = {}
        self._load_levels()

    def _load_levels(self):
        if not self.config_store:
            self._category_levels = DEFAULT_LOG_LEVELS.copy()
            return

        for category, default_level in DEFAULT_LOG_LEVELS.items():
            config_key = f'log_level_{category}'
            level_name = self.config_store.get_config(config_key, logging.getLevelName(default_level))
            level = logging.getLevelName(str(level_name).upper())
            self._category_levels[category] = level if isinstance(level, int) else default_level

    def get_category_level(self, category: str) -> int:
        return self._category_levels.get(category, logging.INFO)

    def set_category_level(self, category: str, level: int):
        self._category_levels[category] = level
        if self.config_store:
            self.config_store.set_config(f'log_level_{category}', logging.getLevelName(level))
        self._apply_category_level(category, level)

    def _apply_category_level(self, category: str, level: int):
        for module_name, cat in MODULE_TO_CATEGORY.items():
            if cat == category:
                logging.getLogger(module_name).setLevel(level)

    def setup_logging(self, root_level: int = logging.INFO):
        """
        Install handlers on the root logger and apply category levels.

        Args:
            root_level: Root logger level (default: INFO)
        """
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        handlers = []
        if self.log_dir is not None:
            file_handler = TimedRotatingFileHandler(
                self.log_dir / "asmr_catalog.log",
                when="midnight",
                interval=1,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        handlers.append(stream_handler)

        root_logger = logging.getLogger()
        root_logger.setLevel(root_level)

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        for handler in handlers:
            root_logger.addHandler(handler)

        for category, level in self._category_levels.items():
            self._apply_category_level(category, level)

        # Silence noisy third-party loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)
        logging.getLogger('aiohttp').setLevel(logging.WARNING)
        logging.getLogger('asyncio').setLevel(logging.WARNING)

    def get_all_levels(self) -> Dict[str, int]:
        return self._category_levels.copy()


_logging_manager: Optional[LoggingManager] = None


def get_logging_manager(log_dir: Optional[Path] = None, config_store=None) -> LoggingManager:
    """Get or create the global logging manager"""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager(log_dir=log_dir, config_store=config_store)
    return _logging_manager


def setup_logging(log_dir: Optional[Path] = None, config_store=None):
    """Setup library logging (convenience function)"""
    manager = get_logging_manager(log_dir, config_store)
    manager.setup_logging()
    return manager
