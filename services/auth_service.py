import hmac
import logging

from database.db_manager import DatabaseManager
from database.migrations import Migrator
from database.user_dao import UserDAO
from utils.constants import USERNAME_MAX_LENGTH
from utils.crypto import hmac_password_digest, password_salt

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: DatabaseManager, user_dao: UserDAO | None = None):
        self._db = db
        self._dao = user_dao or UserDAO(db)

    def register(self, username: str, password: str):
        """Store the password digest. Existing usernames are not checked."""
        self._validate(username, password)
        self._db.initialize()
        self._dao.create(username, self._digest(username, password))
        logger.info("Registered user %r", username)

    def login(self, username: str, password: str) -> bool:
        """Unknown usernames are registered on the spot and logged in."""
        self._validate(username, password)
        user = self._dao.get(username)

        if user is None:
            self.register(username, password)
        elif not hmac.compare_digest(self._digest(username, password), user.password):
            logger.info("Rejected login for %r", username)
            return False

        Migrator(self._db, username, password).migrate()
        return True

    @staticmethod
    def _digest(username: str, password: str) -> str:
        return hmac_password_digest(password_salt(username, password), password)

    @staticmethod
    def _validate(username: str, password: str):
        if not username or not password:
            raise ValueError("Username and password are required.")
        if len(username) > USERNAME_MAX_LENGTH:
            raise ValueError(
                f"Username must be at most {USERNAME_MAX_LENGTH} characters."
            )
