# starchain/config.py
"""
Runtime settings, resolved from environment variables with sane defaults.

    STARCHAIN_DB_PATH            SQLite file holding the chain (~/.starchain/chain.db)
    STARCHAIN_VALIDATION_WINDOW  seconds a validation request stays open (300)
    STARCHAIN_SWEEP_INTERVAL     seconds between expiry sweeps (60)
    STARCHAIN_MESSAGE_SUFFIX     trailing part of the challenge message (starRegistry)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_VALIDATION_WINDOW = 300
DEFAULT_SWEEP_INTERVAL = 60.0
DEFAULT_MESSAGE_SUFFIX = "starRegistry"


def default_db_path() -> Path:
    return Path.home() / ".starchain" / "chain.db"


@dataclass(frozen=True)
class Settings:
    db_path: Path
    validation_window: int = DEFAULT_VALIDATION_WINDOW
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL
    message_suffix: str = DEFAULT_MESSAGE_SUFFIX

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        db = env.get("STARCHAIN_DB_PATH")
        db_path = Path(db).expanduser().resolve() if db else default_db_path()

        try:
            window = int(env.get("STARCHAIN_VALIDATION_WINDOW", DEFAULT_VALIDATION_WINDOW))
            interval = float(env.get("STARCHAIN_SWEEP_INTERVAL", DEFAULT_SWEEP_INTERVAL))
        except ValueError as e:
            raise ValueError(f"Invalid starchain setting: {e}") from e
        if window <= 0 or interval <= 0:
            raise ValueError("Validation window and sweep interval must be positive")

        return cls(
            db_path=db_path,
            validation_window=window,
            sweep_interval=interval,
            message_suffix=env.get("STARCHAIN_MESSAGE_SUFFIX", DEFAULT_MESSAGE_SUFFIX),
        )


def get_settings() -> Settings:
    """Settings from the current process environment (read on every call)."""
    return Settings.from_env()
