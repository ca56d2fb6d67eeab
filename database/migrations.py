"""Versioned, in-place schema upgrades.

The stored version lives in ``PRAGMA user_version``. Each step brings the
database from ``version - 1`` to ``version`` and is guarded by existence checks,
so running it against a database that is already in shape changes nothing.
Steps that re-encrypt data need the credentials of the user logging in.
"""
import logging
from datetime import datetime

from database.db_manager import DatabaseManager
from utils.constants import MIGRATED_ACCOUNT_NAME, SCHEMA_VERSION
from utils.crypto import FieldCipher, hmac_password_digest, password_salt
from utils.date_helpers import format_date, parse_date

logger = logging.getLogger(__name__)


REQUIRED_TABLES = {
    "transactions": {
        "id", "username", "date", "description",
        "custom_description", "account", "credit", "debit",
    },
    "users": {"username", "password"},
}


def table_exists(conn, name):
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name = ?", (name,)
    ).fetchone()
    return row is not None


def get_table_columns(conn, table):
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return {row[1] for row in rows}


def column_exists(conn, table, column):
    if not table_exists(conn, table):
        return False
    return column in get_table_columns(conn, table)


def add_column_if_missing(conn, table, col_def_sql):
    column = col_def_sql.split()[0]
    if not column_exists(conn, table, column):
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {col_def_sql}")


def current_schema_version(conn):
    return DatabaseManager.read_user_version(conn)


def _legacy_date_text(value):
    """Version 0 rows may hold ISO text or epoch milliseconds."""
    if isinstance(value, (int, float)) or (isinstance(value, str) and value.isdigit()):
        return format_date(datetime.fromtimestamp(int(value) / 1000).date())
    text = str(value)
    parsed = parse_date(text[:10])
    return format_date(parsed) if parsed else text


def migration_001(conn, username, password):
    """Attach every legacy row to the user logging in and encrypt it."""
    if not table_exists(conn, "transactions"):
        return
    if column_exists(conn, "transactions", "username"):
        logger.info("transactions already carries usernames, skipping encryption step")
        return

    cipher = FieldCipher(password)
    encrypted_username = cipher.encrypt(username)
    # base64 output never contains a quote
    conn.execute(
        "ALTER TABLE transactions ADD COLUMN username VARCHAR(255) NOT NULL "
        f"DEFAULT '{encrypted_username}'"
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            username VARCHAR(25)  NOT NULL,
            password VARCHAR(255) NOT NULL
        )
        """
    )
    existing = conn.execute(
        "SELECT 1 FROM users WHERE username = ?", (username,)
    ).fetchone()
    if existing is None:
        conn.execute(
            "INSERT INTO users (username, password) VALUES (?, ?)",
            (username, hmac_password_digest(password_salt(username, password), password)),
        )

    rows = conn.execute(
        "SELECT id, date, description, credit, debit FROM transactions"
    ).fetchall()
    logger.warning(
        "Re-encrypting %d legacy transactions under the key of user %r; "
        "rows belonging to anyone else become unreadable",
        len(rows), username,
    )
    for tx_id, date_value, description, credit, debit in rows:
        conn.execute(
            "UPDATE transactions SET credit = ?, debit = ?, description = ?, date = ? WHERE id = ?",
            (
                cipher.encrypt(str(credit)) if credit is not None else None,
                cipher.encrypt(str(debit)) if debit is not None else None,
                cipher.encrypt(description or ""),
                cipher.encrypt(_legacy_date_text(date_value)),
                tx_id,
            ),
        )


def migration_002(conn, username, password):
    """Add custom descriptions and accounts; existing rows go to the main account."""
    if not table_exists(conn, "transactions"):
        return
    add_column_if_missing(conn, "transactions", "custom_description TEXT NULL")
    add_column_if_missing(conn, "transactions", "account VARCHAR(255)")

    cipher = FieldCipher(password)
    conn.execute(
        "UPDATE transactions SET account = ? WHERE username = ? AND account IS NULL",
        (cipher.encrypt(MIGRATED_ACCOUNT_NAME), cipher.encrypt(username)),
    )


MIGRATIONS = [
    (1, migration_001),
    (2, migration_002),
]


def apply_migrations(conn, username, password):
    """Run every pending step on an open connection; returns the final version."""
    version = current_schema_version(conn)
    for step_version, migration_fn in MIGRATIONS:
        if step_version <= version:
            continue
        logger.info("Applying schema migration %d", step_version)
        try:
            if not conn.in_transaction:
                conn.execute("BEGIN")
            migration_fn(conn, username, password)
            DatabaseManager.write_user_version(conn, step_version)
            conn.commit()
        except Exception:
            conn.rollback()
            logger.error("Schema migration %d failed", step_version)
            raise
        version = step_version
    return version


class Migrator:
    def __init__(self, db: DatabaseManager, username: str, password: str):
        self._db = db
        self._username = username
        self._password = password

    def migrate(self) -> int:
        if not self._db.exists():
            # Nothing to upgrade on a fresh install.
            self._db.set_user_version(1)
            logger.info("New database at %s, schema version set to 1", self._db.db_path)
            return 1

        self._db.backup()
        conn = self._db.open_connection()
        try:
            version = apply_migrations(conn, self._username, self._password)
        finally:
            conn.close()
        logger.info("Database schema is at version %d", version)
        return version


def inspect_db_health(conn):
    missing_tables = []
    missing_columns = {}
    for table_name, columns in REQUIRED_TABLES.items():
        if not table_exists(conn, table_name):
            missing_tables.append(table_name)
            missing_columns[table_name] = sorted(columns)
            continue
        table_cols = get_table_columns(conn, table_name)
        missing_columns[table_name] = sorted(c for c in columns if c not in table_cols)

    schema_version = current_schema_version(conn)
    return {
        "ok": not missing_tables
        and not any(missing_columns.values())
        and schema_version == SCHEMA_VERSION,
        "schema_version": schema_version,
        "missing_tables": missing_tables,
        "missing_columns": missing_columns,
    }


def get_db_health(db: DatabaseManager):
    conn = db.open_connection()
    try:
        return inspect_db_health(conn)
    finally:
        conn.close()
