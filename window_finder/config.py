"""Configuration for the window finder."""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """Configuration class for the window finder."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Catalog cache time-to-live in seconds
        self.cache_ttl = float(os.getenv("WINDOW_FINDER_CACHE_TTL", "300"))

        # Browser history: max entries across all browsers, and how far back to look
        self.history_limit = int(os.getenv("WINDOW_FINDER_HISTORY_LIMIT", "20"))
        self.history_window_hours = float(os.getenv("WINDOW_FINDER_HISTORY_WINDOW_HOURS", "24"))

        # Per-call bounds for source adapters (seconds)
        self.source_timeout = float(os.getenv("WINDOW_FINDER_SOURCE_TIMEOUT", "10"))
        self.automation_timeout = float(os.getenv("WINDOW_FINDER_AUTOMATION_TIMEOUT", "10"))

        # Usage ledger and search history persistence
        self.search_history_size = int(os.getenv("WINDOW_FINDER_SEARCH_HISTORY_SIZE", "50"))
        self.data_path = os.getenv(
            "WINDOW_FINDER_DATA_PATH",
            os.path.expanduser("~/.window_finder_data.json")
        )

        # Favicons for tab and history items
        self.favicons_enabled = _env_bool("WINDOW_FINDER_FAVICONS_ENABLED", "true")
        self.favicon_timeout = float(os.getenv("WINDOW_FINDER_FAVICON_TIMEOUT", "5"))

        # Background refresh interval in seconds (0 = refresh on demand only)
        self.refresh_interval = float(os.getenv("WINDOW_FINDER_REFRESH_INTERVAL", "0"))

        # Local API (for external UI clients like Electron)
        self.api_port = int(os.getenv("WINDOW_FINDER_API_PORT", "8770"))

        self.log_level = os.getenv("WINDOW_FINDER_LOG_LEVEL", "INFO").upper()

        # Validate configuration
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if self.cache_ttl < 0:
            raise ValueError(f"Cache TTL must not be negative, got {self.cache_ttl}")

        if not 0 <= self.history_limit <= 10000:
            raise ValueError(f"History limit must be between 0 and 10000, got {self.history_limit}")

        if self.history_window_hours <= 0:
            raise ValueError(f"History window must be positive, got {self.history_window_hours}")

        for name in ("source_timeout", "automation_timeout", "favicon_timeout"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        if self.search_history_size <= 0:
            raise ValueError(f"Search history size must be positive, got {self.search_history_size}")

        if self.refresh_interval < 0:
            raise ValueError(f"Refresh interval must not be negative, got {self.refresh_interval}")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(valid_levels)}"
            )


__all__ = ["Config"]
