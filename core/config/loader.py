"""
Settings loader

Loads config/settings.yaml into an immutable AppConfig.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT


@dataclass(frozen=True)
class AppConfig:
    """Application settings (loaded from settings.yaml)

    Immutable so settings cannot change at runtime.
    privileged_actors None means any named user may unlock entries;
    an empty tuple means nobody may.
    """

    db_path: Path = Paths.DEFAULT_DB
    privileged_actors: tuple[str, ...] | None = None
    seed_default_accounts: bool = True
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT
    log_level: str = Defaults.LOG_LEVEL


class SettingsLoadError(Exception):
    """Settings load failure"""

    pass


def _section(data: dict, name: str) -> dict:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml: '{name}' must be a mapping")
    return value


def load_config(path: Path | None = None) -> AppConfig:
    """Load settings.yaml

    A missing default file yields the defaults; a missing explicit file
    is an error.

    Args:
        path: settings.yaml path (None uses config/settings.yaml)

    Returns:
        AppConfig

    Raises:
        SettingsLoadError: explicit file missing, unparsable or invalid
    """
    if path is None:
        path = Paths.SETTINGS_FILE
        if not path.exists():
            return AppConfig()
    elif not path.exists():
        raise SettingsLoadError(f"settings file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"failed to parse {path.name}: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise SettingsLoadError(f"{path.name} must contain a mapping")

    database = _section(data, "database")
    ledger = _section(data, "ledger")
    web = _section(data, "web")
    log = _section(data, "logging")

    # Relative DB paths are resolved against the project root
    db_path = Path(database.get("path") or Paths.DEFAULT_DB)
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    actors = ledger.get("privileged_actors")
    if actors is not None and not isinstance(actors, list):
        raise SettingsLoadError("ledger.privileged_actors must be a list")
    privileged = tuple(str(a) for a in actors) if actors is not None else None

    try:
        web_port = int(web.get("port", Defaults.WEB_PORT))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"web.port must be an integer: {web.get('port')!r}") from e

    log_level = str(log.get("level", Defaults.LOG_LEVEL)).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise SettingsLoadError(f"invalid logging.level: {log_level!r}")

    return AppConfig(
        db_path=db_path,
        privileged_actors=privileged,
        seed_default_accounts=bool(ledger.get("seed_default_accounts", True)),
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=web_port,
        log_level=log_level,
    )


class Settings:
    """Application settings (singleton)

    Loads settings.yaml once and exposes the values.
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """Loaded settings"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """Ledger DB path"""
        return self.config.db_path

    @property
    def privileged_actors(self) -> tuple[str, ...] | None:
        """Users allowed to unlock entries"""
        return self.config.privileged_actors

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (tests)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Return the Settings instance

    Args:
        settings_path: settings.yaml path (None uses the default path)

    Returns:
        Settings singleton
    """
    return Settings(settings_path)


def reset_settings() -> None:
    """Forget the cached settings (tests)"""
    Settings.reset()
