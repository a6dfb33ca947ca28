"""
Logging system with colored output for sprinkler discovery runs.

This module provides a Logger class that supports colored console output
using colorama, different log levels with distinct colors, and progress
indicators for long-running operations. Probe jobs log from worker threads,
so every write goes through a single lock.
"""

import sys
import threading
from datetime import datetime
from enum import Enum
from typing import Optional, List
from colorama import Fore, Style, init

# Initialize colorama for cross-platform colored output
init(autoreset=True)

_output_lock = threading.Lock()


class LogLevel(Enum):
    """Enumeration for different log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
}

# Shared by every Logger that has no explicit level
_global_min_level = LogLevel.INFO


class Logger:
    """
    Logger class with colored console output and progress indicators.

    Provides structured logging with different levels, colors, and formatting
    utilities for discovery runs.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: Fore.CYAN,
        LogLevel.INFO: Fore.GREEN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }

    LEVEL_SYMBOLS = {
        LogLevel.DEBUG: "🔍",
        LogLevel.INFO: "ℹ️",
        LogLevel.WARNING: "⚠️",
        LogLevel.ERROR: "❌",
    }

    def __init__(
        self, name: str = "SprinklerDiscovery", min_level: Optional[LogLevel] = None
    ):
        """
        Initialize the Logger.

        Args:
            name: Name of the logger (default: "SprinklerDiscovery")
            min_level: Minimum log level to display. Follows the global level
                set with set_log_level() when omitted.
        """
        self.name = name
        self._min_level = min_level
        self._progress_active = False

    @property
    def min_level(self) -> LogLevel:
        return self._min_level or _global_min_level

    @min_level.setter
    def min_level(self, level: LogLevel) -> None:
        self._min_level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.min_level]

    def _format_timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _emit(self, line: str, stream=None) -> None:
        with _output_lock:
            print(line, file=stream or sys.stdout, flush=True)

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        """
        Internal logging method that handles formatting and output.

        Args:
            level: Log level
            message: Message to log
            **kwargs: Additional context rendered as key=value pairs
        """
        if not self.is_enabled_for(level):
            return

        timestamp = self._format_timestamp()
        color = self.LEVEL_COLORS[level]
        symbol = self.LEVEL_SYMBOLS[level]

        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{color}{symbol} {level.value:<7}{Style.RESET_ALL} "
            f"{message}"
        )

        if kwargs:
            details = " | ".join([f"{k}={v}" for k, v in kwargs.items()])
            formatted_message += f" {Style.DIM}({details}){Style.RESET_ALL}"

        self._emit(
            formatted_message,
            sys.stderr if level == LogLevel.ERROR else sys.stdout,
        )

    def debug(self, message: str, **kwargs) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(
        self, message: str, exception: Optional[Exception] = None, **kwargs
    ) -> None:
        """
        Log an error message.

        Args:
            message: Error message
            exception: Optional exception object for additional context
            **kwargs: Additional context information
        """
        if exception:
            kwargs["exception"] = f"{type(exception).__name__}: {str(exception)}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """
        Log a success message (formatted as INFO with special styling).

        Args:
            message: Success message
            **kwargs: Additional context information
        """
        if not self.is_enabled_for(LogLevel.INFO):
            return

        timestamp = self._format_timestamp()
        formatted_message = (
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{Fore.GREEN}✅ SUCCESS {Style.RESET_ALL} "
            f"{Style.BRIGHT}{message}{Style.RESET_ALL}"
        )

        if kwargs:
            details = " | ".join([f"{k}={v}" for k, v in kwargs.items()])
            formatted_message += f" {Style.DIM}({details}){Style.RESET_ALL}"

        self._emit(formatted_message)

    def section(self, title: str) -> None:
        """
        Log a section header for organizing output.

        Args:
            title: Section title
        """
        if not self.is_enabled_for(LogLevel.INFO):
            return

        separator = "=" * 60
        self._emit(
            f"\n{Fore.BLUE}{Style.BRIGHT}{separator}\n"
            f"  {title.upper()}\n"
            f"{separator}{Style.RESET_ALL}\n"
        )

    def progress_start(self, message: str) -> None:
        """
        Start a progress indicator for long-running operations.

        Args:
            message: Progress message to display
        """
        if not self.is_enabled_for(LogLevel.INFO):
            return

        timestamp = self._format_timestamp()
        self._emit(
            f"{Style.DIM}[{timestamp}]{Style.RESET_ALL} "
            f"{Fore.BLUE}⏳ PROGRESS{Style.RESET_ALL} "
            f"{message}..."
        )
        self._progress_active = True

    def progress_end(self, final_message: Optional[str] = None) -> None:
        """
        End the current progress indicator.

        Args:
            final_message: Optional final message to display
        """
        if not self._progress_active:
            return

        self._progress_active = False

        if final_message:
            self.success(final_message)

    def table_header(self, headers: List[str], widths: List[int]) -> None:
        if not self.is_enabled_for(LogLevel.INFO):
            return

        header_row = " | ".join(
            [f"{header:<{width}}" for header, width in zip(headers, widths)]
        )
        separator = "-+-".join(["-" * width for width in widths])
        self._emit(f"{Style.BRIGHT}{header_row}{Style.RESET_ALL}")
        self._emit(f"{Style.DIM}{separator}{Style.RESET_ALL}")

    def table_row(self, values: List[str], widths: List[int]) -> None:
        if not self.is_enabled_for(LogLevel.INFO):
            return

        row = " | ".join(
            [f"{str(value):<{width}}" for value, width in zip(values, widths)]
        )
        self._emit(row)

    def network_info(self, interface: str, host_ip: str, subnets: List[str]) -> None:
        """
        Display the interface and subnets a run is about to scan.

        Args:
            interface: Name of the interface owning the local address
            host_ip: Resolved local address
            subnets: CIDR strings expanded into scan targets
        """
        if not self.is_enabled_for(LogLevel.INFO):
            return

        self._emit(
            f"\n{Fore.CYAN}{Style.BRIGHT}🌐 NETWORK CONFIGURATION{Style.RESET_ALL}\n"
            f"  Interface:     {Style.BRIGHT}{interface}{Style.RESET_ALL}\n"
            f"  Host IP:       {Style.BRIGHT}{host_ip}{Style.RESET_ALL}\n"
            f"  Subnets:       {Style.BRIGHT}{', '.join(subnets) or 'none'}{Style.RESET_ALL}\n"
        )


# Global logger instance
logger = Logger()


def set_log_level(level: LogLevel) -> None:
    """
    Set the log level for every logger that has no explicit level.

    Args:
        level: Minimum log level to display
    """
    global _global_min_level
    _global_min_level = level


def get_logger(name: str = "SprinklerDiscovery") -> Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return Logger(name)
