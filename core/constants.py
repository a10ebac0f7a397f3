"""
Hard-coded constants - fixed values that rarely change

Important: paths must always use pathlib.Path (Windows/Linux cross-platform)
"""

from pathlib import Path


# Project root (two levels above this file: core/constants.py -> project/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """Default values"""

    # Family tag meaning "no grouping"
    FAMILY: str = "Individual"

    # Scheme
    START_MONTH: str = "september_2025"
    TOTAL_MONTHS: int = 16
    CONTRIBUTION_AMOUNT: int = 2000
    PAYMENT_DEADLINE_DAY: int = 11
    SCHEME_NAME: str = "RAFI GOLD SAVING SCHEME"
    TEAM_NAME: str = "Rafi Scheme Team"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"


class WhatsAppDefaults:
    """WhatsApp backend defaults"""

    API_URL: str = "http://localhost:3001"
    SEND_PATH: str = "/api/whatsapp/send"
    STATUS_PATH: str = "/api/whatsapp/status"
    HEALTH_PATH: str = "/health"

    TIMEOUT_SEC: float = 30.0
    MAX_RETRIES: int = 3
    RETRY_BACKOFF_SEC: float = 2.0  # multiplied by attempt number
    MESSAGE_DELAY_SEC: float = 1.5  # between members

    COUNTRY_CODE: str = "91"


class Paths:
    """Project path constants (pathlib - OS independent)"""

    # Directories
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    CLI_LOGS_DIR: Path = LOGS_DIR / "cli"

    # Config file
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB file
    DEFAULT_DB: Path = DATA_DIR / "scheme.db"
