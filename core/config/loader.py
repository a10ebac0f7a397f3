"""
Settings loader

Loads config/settings.yaml into immutable dataclasses.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths, WhatsAppDefaults
from core.domain.errors import LedgerError
from core.domain.months import MonthSequence


@dataclass(frozen=True)
class DatabaseConfig:
    """SQLite location (relative paths are anchored at the project root)"""

    path: str = str(Paths.DEFAULT_DB)


@dataclass(frozen=True)
class SchemeConfig:
    """Scheme parameters

    Immutable so the running engine never sees a half-changed config.
    """

    name: str = Defaults.SCHEME_NAME
    start_month: str = Defaults.START_MONTH
    total_months: int = Defaults.TOTAL_MONTHS
    contribution_amount: int = Defaults.CONTRIBUTION_AMOUNT
    payment_deadline_day: int = Defaults.PAYMENT_DEADLINE_DAY
    paid_to_recipients: tuple[str, ...] = ()
    enforce_winner_eligibility: bool = False


@dataclass(frozen=True)
class WhatsAppConfig:
    """WhatsApp HTTP backend"""

    api_url: str = WhatsAppDefaults.API_URL
    timeout_sec: float = WhatsAppDefaults.TIMEOUT_SEC
    max_retries: int = WhatsAppDefaults.MAX_RETRIES
    retry_backoff_sec: float = WhatsAppDefaults.RETRY_BACKOFF_SEC
    message_delay_sec: float = WhatsAppDefaults.MESSAGE_DELAY_SEC


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    scheme: SchemeConfig
    whatsapp: WhatsAppConfig


class SettingsLoadError(Exception):
    """settings.yaml could not be loaded"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"'{name}' section of settings.yaml must be a mapping")
    return section


def _build(cls: type, values: dict[str, Any], section: str) -> Any:
    try:
        return cls(**values)
    except TypeError as e:
        raise SettingsLoadError(f"Invalid '{section}' section in settings.yaml: {e}") from e


def load_settings(path: Path | None = None) -> AppConfig:
    """Load settings.yaml

    Missing sections and keys fall back to defaults.

    Args:
        path: settings.yaml path (None = default path)

    Returns:
        AppConfig instance

    Raises:
        SettingsLoadError: file missing, unparsable, or invalid values
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"Failed to parse settings.yaml: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml must contain a mapping")

    scheme_values = _section(data, "scheme")
    recipients = scheme_values.get("paid_to_recipients") or ()
    if isinstance(recipients, str):
        recipients = (recipients,)
    scheme_values = {**scheme_values, "paid_to_recipients": tuple(recipients)}

    config = AppConfig(
        database=_build(DatabaseConfig, _section(data, "database"), "database"),
        scheme=_build(SchemeConfig, scheme_values, "scheme"),
        whatsapp=_build(WhatsAppConfig, _section(data, "whatsapp"), "whatsapp"),
    )

    # month sequence must be constructible
    try:
        build_month_sequence(config.scheme)
    except LedgerError as e:
        raise SettingsLoadError(f"Invalid scheme months: {e}") from e

    day = config.scheme.payment_deadline_day
    if not 1 <= day <= 28:
        raise SettingsLoadError(f"payment_deadline_day must be 1-28, got {day}")

    return config


def build_month_sequence(scheme: SchemeConfig) -> MonthSequence:
    """Scheme config -> MonthSequence"""
    return MonthSequence.starting_at(scheme.start_month, scheme.total_months)


class Settings:
    """Application settings (singleton)

    Loads settings.yaml once and exposes its sections.
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_settings(settings_path)

    @property
    def config(self) -> AppConfig:
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> str:
        return self.config.database.path

    @property
    def scheme(self) -> SchemeConfig:
        return self.config.scheme

    @property
    def whatsapp(self) -> WhatsAppConfig:
        return self.config.whatsapp

    @property
    def months(self) -> MonthSequence:
        """Month sequence of the scheme"""
        return build_month_sequence(self.config.scheme)

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (tests)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings singleton

    Args:
        settings_path: settings.yaml path (None = default path)
    """
    return Settings(settings_path)
