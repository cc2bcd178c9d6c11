"""
Configuration - Rule constants and environment settings.

Rule constants live in RulesConfig (passed to the engine explicitly).
Deployment settings come from environment variables:

    ANTBRIDGE_ENV           development | production        (development)
    ANTBRIDGE_CATALOG_PATH  JSON catalog bundle to load     (built-in set)
    ANTBRIDGE_LOG_LEVEL     logging level name              (INFO)
    ANTBRIDGE_SESSION_TTL   seconds before idle sessions go (3600)
    ALLOWED_ORIGINS         comma-separated CORS origins    (*)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os


@dataclass(frozen=True)
class RulesConfig:
    """Fixed game constants."""
    hand_size: int = 5
    trade_row_size: int = 5
    construction_row_size: int = 1  # Only one visible objective at a time
    scout_reveal_count: int = 3
    attack_vp_reward: int = 1
    feed_limit: int = 200
    # Refuse turn-altering commands while the actor has an unresolved event
    strict_pending: bool = False


DEFAULT_RULES = RulesConfig()


@dataclass
class Settings:
    """Deployment settings read from the environment."""
    env: str = "development"
    catalog_path: str | None = None
    log_level: str = "INFO"
    session_ttl: int = 3600
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("ANTBRIDGE_ENV", "development"),
            catalog_path=os.getenv("ANTBRIDGE_CATALOG_PATH") or None,
            log_level=os.getenv("ANTBRIDGE_LOG_LEVEL", "INFO").upper(),
            session_ttl=int(os.getenv("ANTBRIDGE_SESSION_TTL", "3600")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
        )


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the package logger."""
    logger = logging.getLogger("antbridge")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(getattr(h, "_antbridge", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._antbridge = True
        logger.addHandler(handler)


def load_catalog_from_settings(settings: Settings):
    """Load the configured catalog, or the built-in one."""
    from .catalog import default_catalog, load_catalog

    if settings.catalog_path:
        return load_catalog(settings.catalog_path)
    return default_catalog()
