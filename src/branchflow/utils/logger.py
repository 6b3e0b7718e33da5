"""Logging configuration for branchflow."""

import logging
import os
from pathlib import Path
from typing import Optional
from rich.logging import RichHandler
from rich.console import Console
from rich.panel import Panel
from rich.traceback import install

# Install rich traceback handler
install(show_locals=bool(os.getenv("BRANCHFLOW_DEBUG")))

# Console for rich output
console = Console()


class Logger:
    """Centralized logging for branchflow."""

    _instance: Optional['Logger'] = None
    _logger: Optional[logging.Logger] = None
    _debug_mode: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._logger is None:
            self.setup_logger(debug=bool(os.getenv("BRANCHFLOW_DEBUG")))

    def setup_logger(self, debug: bool = False, log_file: Optional[Path] = None):
        """Setup the logger with appropriate handlers."""
        Logger._debug_mode = debug

        logger = logging.getLogger("branchflow")
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        logger.handlers.clear()
        logger.propagate = False

        # Console handler with rich formatting
        console_handler = RichHandler(
            console=console,
            show_time=debug,
            show_path=debug,
            rich_tracebacks=True,
            tracebacks_show_locals=debug
        )
        console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        Logger._logger = logger

    @classmethod
    def is_debug(cls) -> bool:
        return cls._debug_mode

    @classmethod
    def debug(cls, message: str, *args, **kwargs):
        """Log debug message."""
        if cls._logger:
            cls._logger.debug(message, *args, **kwargs)

    @classmethod
    def info(cls, message: str, *args, **kwargs):
        """Log info message."""
        if cls._logger:
            cls._logger.info(message, *args, **kwargs)

    @classmethod
    def warning(cls, message: str, *args, **kwargs):
        """Log warning message."""
        if cls._logger:
            cls._logger.warning(message, *args, **kwargs)

    @classmethod
    def error(cls, message: str, *args, **kwargs):
        """Log error message."""
        if cls._logger:
            cls._logger.error(message, *args, **kwargs)

    @classmethod
    def exception(cls, message: str, *args, **kwargs):
        """Log exception with traceback."""
        if cls._logger:
            cls._logger.exception(message, *args, **kwargs)

    @classmethod
    def start(cls, message: str):
        """Announce the start of a step."""
        console.print(f"⏳ {message}", style="cyan")

    @classmethod
    def success(cls, message: str):
        """Log success message (using rich)."""
        console.print(f"✅ {message}", style="green")

    @classmethod
    def fail(cls, message: str):
        """Log failure message (using rich)."""
        console.print(f"❌ {message}", style="red")

    @classmethod
    def warn(cls, message: str):
        """Print a user-facing warning (using rich)."""
        console.print(f"⚠️  {message}", style="yellow")

    @classmethod
    def note(cls, message: str):
        """Print a user-facing informational line."""
        console.print(f"ℹ️  {message}", style="blue")

    @classmethod
    def box(cls, body: str, title: Optional[str] = None, style: str = "cyan"):
        """Print text inside a bordered panel."""
        console.print(Panel(body, title=title, border_style=style, expand=False))

    @classmethod
    def print(cls, message: str = "", style: str = None):
        """Print using rich."""
        if style:
            console.print(message, style=style)
        else:
            console.print(message)


Logger()
