"""
Engine configuration.

Values come from environment variables so the API, the CLI and tests can
each run the engine with different settings.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
import os

# Environment configuration
COFFERS_ENV = os.getenv("COFFERS_ENV", "development")
COFFERS_LOG_LEVEL = os.getenv("COFFERS_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ReentryPolicy(Enum):
    """What to do when an activation starts while another is in flight."""
    OVERWRITE = "overwrite"  # Warn and discard the in-flight activation
    REJECT = "reject"  # Raise ActivationInProgressError


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass
class EngineConfig:
    """
    Settings for one engine instance.

    seed=None means the engine's random source is seeded from the OS.
    """
    max_hand_size: int = 10
    max_promotion_level: int = 3
    reentry_policy: ReentryPolicy = ReentryPolicy.OVERWRITE
    auto_select_targets: bool = False
    seed: int | None = None

    @classmethod
    def from_env(cls) -> EngineConfig:
        return cls(
            max_hand_size=_env_int("COFFERS_MAX_HAND_SIZE", 10),
            max_promotion_level=_env_int("COFFERS_MAX_PROMOTION_LEVEL", 3),
            reentry_policy=ReentryPolicy(os.getenv("COFFERS_REENTRY_POLICY", "overwrite").lower()),
            auto_select_targets=_env_bool("COFFERS_AUTO_SELECT_TARGETS", False),
            seed=_env_int("COFFERS_SEED", None),
        )


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for command-line and server use."""
    logging.basicConfig(
        level=(level or COFFERS_LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
