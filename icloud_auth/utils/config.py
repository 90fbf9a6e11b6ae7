"""Configuration management for the rclone iCloud authenticator."""

import os
from dataclasses import replace
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from ..auth.browser_driver import DriverTimings
from ..auth.polling import PollPolicy


# Steps whose poll budget can be overridden with <STEP>_POLL_ATTEMPTS / <STEP>_POLL_INTERVAL_MS
TUNABLE_STEPS = {
    "APPLE_ID": "apple_id",
    "PASSWORD": "password",
    "TWO_FACTOR": "two_factor",
    "TWO_FACTOR_RELOCATE": "two_factor_relocate",
    "TRUST_COOKIE": "trust_cookie",
}

# Manual login gives a human time to type credentials and a 2FA code
DEFAULT_MANUAL_LOGIN_POLL_ATTEMPTS: int = 150


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            env_file: Path to .env file (default: .env in the working directory, if present)
        """
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path.cwd() / ".env"
            if env_path.exists():
                load_dotenv(env_path)

    # Browser settings
    @property
    def headless_mode(self) -> bool:
        """Run browser in headless mode (default: True)."""
        value = os.getenv("HEADLESS_MODE", "true").lower()
        return value in ("true", "1", "yes")

    @property
    def debug_directory(self) -> Path:
        """Directory for diagnostic screenshots."""
        return Path(os.getenv("DEBUG_DIR", "/tmp"))

    # rclone settings
    @property
    def rclone_config_path(self) -> Path:
        """rclone.conf location (RCLONE_CONFIG, as rclone itself honours it)."""
        path_str = os.getenv("RCLONE_CONFIG", "~/.config/rclone/rclone.conf")
        return Path(path_str).expanduser()

    @property
    def preferences_file(self) -> Path:
        path_str = os.getenv("PREFERENCES_FILE", "~/.config/rclone-icloud-auth/preferences.json")
        return Path(path_str).expanduser()

    # Two-factor configuration
    @property
    def two_factor_method(self) -> str:
        """2FA code source: 'manual' or 'webhook'."""
        return os.getenv("TWO_FACTOR_METHOD", "manual").lower()

    @property
    def two_factor_webhook_url(self) -> Optional[str]:
        return os.getenv("TWO_FACTOR_WEBHOOK_URL")

    @property
    def two_factor_webhook_timeout(self) -> int:
        return int(os.getenv("TWO_FACTOR_WEBHOOK_TIMEOUT", "120"))

    # Logging
    @property
    def log_level(self) -> str:
        """Logging level."""
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def log_directory(self) -> Optional[Path]:
        """Directory for per-component log files (optional)."""
        path_str = os.getenv("LOG_DIR")
        return Path(path_str) if path_str else None

    # Poll budgets
    def driver_timings(self, manual: bool = False) -> DriverTimings:
        """Build per-step poll budgets, applying any environment overrides.

        Args:
            manual: Use the long manual-login budget for the trust cookie poll

        Returns:
            DriverTimings
        """
        timings = DriverTimings()
        overrides = {}
        for env_prefix, attribute in TUNABLE_STEPS.items():
            default: PollPolicy = getattr(timings, attribute)
            overrides[attribute] = PollPolicy(
                max_attempts=int(os.getenv(f"{env_prefix}_POLL_ATTEMPTS", default.max_attempts)),
                interval_ms=int(os.getenv(f"{env_prefix}_POLL_INTERVAL_MS", default.interval_ms)),
            )

        if manual:
            overrides["trust_cookie"] = replace(
                overrides["trust_cookie"],
                max_attempts=int(os.getenv("MANUAL_LOGIN_POLL_ATTEMPTS", DEFAULT_MANUAL_LOGIN_POLL_ATTEMPTS)),
            )

        return replace(timings, **overrides)

    def validate(self) -> bool:
        """Validate that the configuration is usable.

        Returns:
            bool: True if configuration is valid

        Raises:
            ValueError: If a setting is invalid
        """
        if self.two_factor_method not in ("manual", "webhook"):
            raise ValueError(
                f"Invalid TWO_FACTOR_METHOD: {self.two_factor_method}. Must be 'manual' or 'webhook'"
            )

        if self.two_factor_method == "webhook" and not self.two_factor_webhook_url:
            raise ValueError("TWO_FACTOR_WEBHOOK_URL required when TWO_FACTOR_METHOD is 'webhook'")

        # Surface malformed numbers here rather than halfway through a login
        timings = self.driver_timings()
        for attribute in TUNABLE_STEPS.values():
            policy: PollPolicy = getattr(timings, attribute)
            if policy.max_attempts < 1 or policy.interval_ms < 0:
                raise ValueError(f"Invalid poll budget for {attribute}: {policy}")

        return True


# Global config instance
_config: Optional[Config] = None


def get_config(env_file: Optional[str] = None) -> Config:
    """Get global configuration instance.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Config: Global configuration instance
    """
    global _config
    if _config is None:
        _config = Config(env_file)
    return _config
