"""
Hardcoded constants - fixed values that almost never change

Paths must always be pathlib.Path (Windows/Linux cross-platform).
"""

from decimal import Decimal
from pathlib import Path


# Project root (two levels above this file: core/constants.py -> project/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """Default values"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # Audit user when the caller does not name one
    ACTOR: str = "system"

    GENERAL_LEDGER_LIMIT: int = 100
    AUDIT_LIMIT: int = 100


class Paths:
    """Project path constants (pathlib - OS independent)"""

    # Directories
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # Config file
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB file
    DEFAULT_DB: Path = DATA_DIR / "ledger.db"


class Money:
    """Fixed-point money constants

    Amounts are stored and summed as integer minor units (cents).
    """

    MINOR_PER_MAJOR: int = 100
    QUANTUM: Decimal = Decimal("0.01")

    # Per-line cap; keeps stored sums inside SQLite's 64-bit INTEGER
    MAX_MINOR: int = 10**15


class AgingBuckets:
    """Receivables aging bucket upper bounds (days overdue, inclusive)"""

    CURRENT: int = 0
    DAYS_30: int = 30
    DAYS_60: int = 60
    DAYS_90: int = 90
