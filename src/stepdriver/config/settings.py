from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

BROWSER_ENGINES = ("chromium", "firefox", "webkit")


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def _env_positive_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        number = float(val)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %g", name, val, default)
        return default
    if not number > 0:
        logger.warning("Ignoring %s=%r: must be greater than 0, using %g", name, val, default)
        return default
    return number


@dataclass
class Settings:
    browser: str = "chromium"  # chromium|firefox|webkit
    browser_path: str | None = None  # executable to launch instead of the bundled build
    cdp_endpoint: str | None = None  # attach to a running browser instead of launching
    headless: bool = True
    wait_timeout: float = 30.0  # seconds, default bound for WaitForSelector
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build ``Settings`` from the current environment."""
    return Settings(
        browser=os.getenv("STEPDRIVER_BROWSER", "chromium"),
        browser_path=os.getenv("STEPDRIVER_BROWSER_PATH") or None,
        cdp_endpoint=os.getenv("STEPDRIVER_CDP_ENDPOINT") or None,
        headless=_env_bool("HEADLESS", True),
        wait_timeout=_env_positive_float("STEPDRIVER_WAIT_TIMEOUT", 30.0),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


settings = load_settings()
