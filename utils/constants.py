from enum import Enum
from pathlib import Path

APP_NAME = "Budget Manager"
DB_FILE = "budget.db"
DB_BACKUP_FILE = "budget_backup.db"
DEFAULT_DB_FOLDER = Path.home() / "Documents" / APP_NAME

# Schema
SCHEMA_VERSION = 2
USERNAME_MAX_LENGTH = 25

# Crypto
AES_KEY_SIZES = (16, 24, 32)
FIELD_KEY_SIZE = 16
DECRYPT_FALLBACK = "0.0"

# Statement import
HEADER_TOKEN_COUNT = 4
STATEMENT_FIELD_COUNT = 4
STATEMENT_DATE_FORMAT = "%d/%m/%Y"
STATEMENT_ENCODING = "cp1252"
UNKNOWN_ACCOUNT = "Unknown Account"

# Storage placeholders
MIGRATED_ACCOUNT_NAME = "Main Account"
MISSING_ACCOUNT_NAME = "Main account"

DATE_FORMAT = "%Y-%m-%d"
CURRENCY_SYMBOL = "€"


class AccountFilter(Enum):
    """Non-localized sentinel for the account selector."""
    ALL = "all"
