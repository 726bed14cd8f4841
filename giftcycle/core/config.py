import os
from dataclasses import dataclass
from typing import Hashable, Optional

from dotenv import load_dotenv

from giftcycle.services.participants import DEFAULT_MAX_ATTEMPTS, MAX_WRITE_BATCH, MatchSettings

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str
    log_level: str
    log_path: str
    group_exclusion: bool = True
    match_attempts: int = DEFAULT_MAX_ATTEMPTS
    write_batch_size: int = MAX_WRITE_BATCH

    def match_settings(self, view: Optional[Hashable]) -> MatchSettings:
        return MatchSettings(
            view=view,
            use_groups=self.group_exclusion,
            max_attempts=self.match_attempts,
            batch_size=self.write_batch_size,
        )


def _read_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}.")


def _read_int(name: str, default: int, minimum: int, maximum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc
    if value < minimum or (maximum is not None and value > maximum):
        upper = f" and {maximum}" if maximum is not None else ""
        raise ValueError(f"{name} must be at least {minimum}{upper}, got {value}.")
    return value


def load_settings() -> Settings:
    bot_token = os.getenv("BOT_TOKEN")
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/giftcycle.log")

    if not bot_token:
        raise ValueError("BOT_TOKEN is required. Set it in the environment or .env file.")
    if not database_url:
        raise ValueError("DATABASE_URL is required. Set it in the environment or .env file.")

    return Settings(
        bot_token=bot_token,
        database_url=database_url,
        log_level=log_level,
        log_path=log_path,
        group_exclusion=_read_bool("GROUP_EXCLUSION", True),
        match_attempts=_read_int("MATCH_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, minimum=1),
        write_batch_size=_read_int("WRITE_BATCH_SIZE", MAX_WRITE_BATCH, minimum=1, maximum=MAX_WRITE_BATCH),
    )
