"""Configuration settings for the ttree application."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Application configuration settings.

    Centralized configuration to avoid hardcoded values throughout the codebase.
    """
    # File system
    base_dir: Path = Path("~/.ttree").expanduser()
    data_file: str = "tasks.json"
    log_file: str = "ttree.log"
    log_level: str = "INFO"

    # Tree
    root_text: str = "Projects"

    # Display
    hide_completed: bool = False
    max_search_days: int = 365

    # Colors
    color_primary: str = "#0abdc6"  # Cyan - primary accent
    color_accent: str = "#ff006e"  # Pink - selection highlight
    color_secondary: str = "#8b5cf6"  # Purple - secondary accent
    color_bg_dark: str = "#1a1a2e"  # Dark background
    color_bg_medium: str = "#2d2d44"  # Medium background
    color_text: str = "#e2e8f0"  # Light text
    group_colors: Dict[str, str] = field(default_factory=lambda: {
        "urgent": "#f97316",
        "routine": "#22c55e",
        "project": "#3b82f6",
        "other": "#e2e8f0",
    })

    @classmethod
    def load(cls, environ: Optional[Dict[str, str]] = None) -> 'Config':
        """
        Load configuration.

        Defaults can be overridden with environment variables:
        - TTREE_HOME: data directory
        - TTREE_LOG_LEVEL: logging level name
        - TTREE_HIDE_COMPLETED: start with completed tasks hidden

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Config instance with default or loaded values
        """
        environ = os.environ if environ is None else environ
        loaded = cls()
        if environ.get("TTREE_HOME"):
            loaded.base_dir = Path(environ["TTREE_HOME"]).expanduser()
        if environ.get("TTREE_LOG_LEVEL"):
            loaded.log_level = environ["TTREE_LOG_LEVEL"].upper()
        loaded.hide_completed = _env_flag(environ.get("TTREE_HIDE_COMPLETED"), loaded.hide_completed)
        return loaded

    @property
    def log_path(self) -> Path:
        return self.base_dir / self.log_file


def configure_logging(settings: Optional[Config] = None) -> None:
    """Send log records to the log file in the data directory.

    The terminal belongs to the UI, so nothing is logged to the console.
    """
    settings = settings or config
    settings.base_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        filename=str(settings.log_path),
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global config instance
config = Config.load()
