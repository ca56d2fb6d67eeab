from typing import Optional
from database.db_manager import DatabaseManager
from database.migrations import table_exists
from models.user import User


class UserDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def get(self, username: str) -> Optional[User]:
        """First row for username; None when absent or before the users table exists."""
        with self._db.connect() as conn:
            if not table_exists(conn, "users"):
                return None
            row = conn.execute(
                "SELECT username, password FROM users WHERE username = ?", (username,)
            ).fetchone()
        return User(username=row["username"], password=row["password"]) if row else None

    def create(self, username: str, password_digest: str):
        with self._db.connect() as conn:
            conn.execute(
                "INSERT INTO users (username, password) VALUES (?, ?)",
                (username, password_digest),
            )
