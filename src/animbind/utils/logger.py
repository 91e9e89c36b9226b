from datetime import datetime
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from animbind.models.enums import LogLevel, LogCategory

if TYPE_CHECKING:
    from animbind.services.log_history import LogHistory

# === ANSI COLORS ===
class Colors:
    """ANSI escape codes used by the console renderer"""
    RESET = '\033[0m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_MAGENTA = '\033[95m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_WHITE = '\033[97m'


# Registry and discovery traffic is the bulk of the output, so they get the
# most distinct colors
CATEGORY_COLORS = {
    LogCategory.CONFIG: Colors.CYAN,
    LogCategory.DISCOVERY: Colors.BRIGHT_BLUE,
    LogCategory.PATH: Colors.BLUE,
    LogCategory.REGISTRY: Colors.BRIGHT_GREEN,
    LogCategory.COLOR: Colors.BRIGHT_MAGENTA,
    LogCategory.ASSET: Colors.BRIGHT_YELLOW,
    LogCategory.INPUT: Colors.BRIGHT_CYAN,
    LogCategory.EVENT: Colors.MAGENTA,
    LogCategory.API: Colors.CYAN,
    LogCategory.SYSTEM: Colors.BRIGHT_WHITE,
}

LEVEL_SYMBOLS = {
    LogLevel.DEBUG: '·',
    LogLevel.INFO: '✓',
    LogLevel.WARN: '⚠',
    LogLevel.ERROR: '✗',
}

LEVEL_COLORS = {
    LogLevel.DEBUG: Colors.DIM,
    LogLevel.INFO: Colors.GREEN,
    LogLevel.WARN: Colors.YELLOW,
    LogLevel.ERROR: Colors.RED,
}

# Severity order, lowest first
LEVEL_ORDER: List[LogLevel] = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]

DETAIL_INDENT = " " * 11


# === CORE LOGGER ===
class Logger:
    """
    Category logger for the binding layer

    Console format:
    [HH:MM:SS] CATEGORY  sym Message
               ├─ key: value
               └─ key: value

    Example:
    [14:23:45] REGISTRY  ⚠ Kind mismatch: boolean cannot take 'yes'
               ├─ instance: hero
               └─ path: visible

    Every emitted entry is also mirrored, flattened to one line, into the
    attached LogHistory so hosts and the HTTP surface can query it.
    """

    def __init__(self, min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
        self.min_level = min_level
        self.use_colors = use_colors
        self._history: Optional['LogHistory'] = None

    def _should_log(self, level: LogLevel) -> bool:
        return LEVEL_ORDER.index(level) >= LEVEL_ORDER.index(self.min_level)

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def _header(self, category: LogCategory, level: LogLevel, message: str) -> str:
        timestamp = datetime.now().strftime('[%H:%M:%S]')
        cat = self._colorize(category.name.ljust(9), CATEGORY_COLORS.get(category, Colors.WHITE))
        level_color = LEVEL_COLORS.get(level, Colors.WHITE)
        sym = self._colorize(LEVEL_SYMBOLS.get(level, '·'), level_color)
        return f"{timestamp} {cat} {sym} {self._colorize(message, level_color)}"

    def _detail_lines(self, details: List[str]) -> List[str]:
        lines = []
        for i, detail in enumerate(details):
            branch = "└─" if i == len(details) - 1 else "├─"
            lines.append(f"{DETAIL_INDENT}{self._colorize(branch, Colors.DIM)} {detail}")
        return lines

    @staticmethod
    def _collect_details(details: Optional[list], fields: Dict[str, Any]) -> List[str]:
        collected = list(details or [])
        collected.extend(f"{key}: {value}" for key, value in fields.items())
        return collected

    def set_history(self, history: Optional['LogHistory']) -> None:
        """Attach the LogHistory that mirrors every emitted entry (None detaches)"""
        self._history = history

    @property
    def history(self) -> Optional['LogHistory']:
        return self._history

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[list] = None,
        **kwargs
    ):
        """
        Emit one entry

        Args:
            category: Subsystem the entry belongs to
            message: Main line
            level: Entries below min_level are dropped entirely
            details: Preformatted detail lines
            **kwargs: Rendered as "key: value" detail lines

        Example:
            logger.log(
                LogCategory.PATH,
                "Path cached",
                instance="hero",
                path="settings/theme"
            )
        """
        if not self._should_log(level):
            return

        all_details = self._collect_details(details, kwargs)
        print(self._header(category, level, message))
        for line in self._detail_lines(all_details):
            print(line)

        if self._history is not None:
            flat = f"{message} ({', '.join(all_details)})" if all_details else message
            self._history.log(
                timestamp=datetime.now().isoformat(),
                level=level.name,
                category=category.name,
                message=flat
            )

    def debug(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.DEBUG, **kw)
    def info(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.INFO, **kw)
    def warn(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.WARN, **kw)
    def error(self, category: LogCategory, message: str, **kw): self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        """Logger with the category filled in; modules keep one at import time"""
        return BoundLogger(self, category)


class BoundLogger:
    """Category-bound view of the shared Logger"""

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self._category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, category: Optional[LogCategory] = None, **kw):
        self._base.log(category or self._category, message, level, **kw)

    def debug(self, message: str, **kw): self.log(message, LogLevel.DEBUG, **kw)
    def info(self, message: str, **kw): self.log(message, LogLevel.INFO, **kw)
    def warn(self, message: str, **kw): self.log(message, LogLevel.WARN, **kw)
    def error(self, message: str, **kw): self.log(message, LogLevel.ERROR, **kw)


# === Global instance helpers ===
_logger = Logger()

def get_logger() -> Logger:
    return _logger

def configure_logger(min_level: LogLevel = LogLevel.INFO, use_colors: bool = True):
    """
    Configure the logger singleton in place.

    Bound loggers created at import time keep pointing at the same instance,
    so the attached history buffer stays valid.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
