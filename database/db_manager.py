import logging
import shutil
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from utils.constants import DB_BACKUP_FILE, DB_FILE, DEFAULT_DB_FOLDER

logger = logging.getLogger(__name__)


def default_db_path(db_folder: str | None = None) -> Path:
    """Resolve budget.db inside db_folder, or the Documents default."""
    folder = Path(db_folder) if db_folder else DEFAULT_DB_FOLDER
    return folder / DB_FILE


class DatabaseManager:
    """Owns the database file. Every operation opens and closes its own connection."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else default_db_path()

    @property
    def backup_path(self) -> Path:
        return self.db_path.with_name(DB_BACKUP_FILE)

    def exists(self) -> bool:
        return self.db_path.exists()

    def open_connection(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Commit on success, roll back on error, always close."""
        conn = self.open_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self):
        """Create the current schema where tables are missing."""
        with self.connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection):
        # date/credit/debit hold ciphertext, hence TEXT.
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS transactions (
                id                 INTEGER PRIMARY KEY AUTOINCREMENT,
                username           VARCHAR(255) NOT NULL,
                date               TEXT NOT NULL,
                description        TEXT NOT NULL,
                custom_description TEXT NULL,
                account            VARCHAR(255),
                credit             TEXT,
                debit              TEXT
            );

            CREATE TABLE IF NOT EXISTS users (
                username VARCHAR(25)  NOT NULL,
                password VARCHAR(255) NOT NULL
            );
        """)

    # ── Schema version ───────────────────────────────────────────────────────

    @staticmethod
    def read_user_version(conn: sqlite3.Connection) -> int:
        row = conn.execute("PRAGMA user_version").fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def write_user_version(conn: sqlite3.Connection, version: int):
        # PRAGMA takes no bound parameters
        conn.execute(f"PRAGMA user_version = {int(version)}")

    def get_user_version(self) -> int:
        with self.connect() as conn:
            return self.read_user_version(conn)

    def set_user_version(self, version: int):
        with self.connect() as conn:
            self.write_user_version(conn, version)

    # ── Backup ───────────────────────────────────────────────────────────────

    def backup(self) -> Path:
        """Copy the database file next to itself, replacing any previous backup."""
        shutil.copyfile(self.db_path, self.backup_path)
        logger.info("Database backed up to %s", self.backup_path)
        return self.backup_path
