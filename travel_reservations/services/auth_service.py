"""Account registration, password login and bearer sessions."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from threading import RLock
from typing import Optional

from travel_reservations.domain.models import UserAccount
from travel_reservations.repository.gateway import PersistenceGateway
from travel_reservations.utils.config import Settings, get_settings
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

_HASH_ALGORITHM = "pbkdf2_sha256"


class AuthenticationError(Exception):
    """Base authentication failure."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when username/password do not match a registered account."""


class InvalidSessionError(AuthenticationError):
    """Raised when a bearer token is unknown or was logged out."""


class UsernameTakenError(AuthenticationError):
    """Raised when registering a username that already exists."""


class UnknownUserError(AuthenticationError):
    """Raised when deleting an account that does not exist."""


class AdminRequiredError(AuthenticationError):
    """Raised when a non-admin session calls an administrative operation."""


@dataclass(frozen=True)
class Session:
    username: str
    is_admin: bool


def hash_password(password: str, iterations: int, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return f"{_HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if algorithm != _HASH_ALGORITHM:
        return False
    candidate = hash_password(password, int(iterations), salt)
    return secrets.compare_digest(candidate.rsplit("$", 1)[1], expected)


class AuthService:
    """Validates credentials and hands authenticated usernames to the engine."""

    def __init__(
        self,
        repository: PersistenceGateway,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository
        self._lock = RLock()
        self._accounts: dict[str, UserAccount] = {
            account.username: account for account in repository.load_users()
        }
        self._sessions: dict[str, Session] = {}

    def ensure_bootstrap_admin(self) -> bool:
        """Create the configured admin account on first start."""
        username = self._settings.bootstrap_admin_username
        password = self._settings.bootstrap_admin_password
        if not username or not password:
            return False
        with self._lock:
            if username in self._accounts:
                return False
            self.register(username, password, is_admin=True)
        logger.info("Bootstrap admin account %s created", username)
        return True

    def register(self, username: str, password: str, is_admin: bool = False) -> UserAccount:
        username = username.strip()
        if not username or not password:
            raise InvalidCredentialsError("username and password are required")
        with self._lock:
            if username in self._accounts:
                raise UsernameTakenError(f"Username {username} already exists")
            account = UserAccount(
                username=username,
                password_hash=hash_password(password, self._settings.password_hash_iterations),
                is_admin=is_admin,
            )
            self._repository.store_user(account)
            self._accounts[username] = account
        logger.info("Registered %s account %s", "admin" if is_admin else "user", username)
        return account

    def login(self, username: str, password: str, expect_admin: Optional[bool] = None) -> str:
        with self._lock:
            account = self._accounts.get(username)
            if account is None or not verify_password(password, account.password_hash):
                raise InvalidCredentialsError("Invalid username or password")
            if expect_admin is not None and account.is_admin != expect_admin:
                raise InvalidCredentialsError("Access denied. Incorrect user role.")
            token = secrets.token_urlsafe(32)
            self._sessions[token] = Session(username=account.username, is_admin=account.is_admin)
        return token

    def resolve(self, bearer_token: str) -> Session:
        with self._lock:
            for token, session in self._sessions.items():
                if secrets.compare_digest(token, bearer_token):
                    return session
        raise InvalidSessionError("Invalid or expired bearer token")

    def require_admin(self, bearer_token: str) -> Session:
        session = self.resolve(bearer_token)
        if not session.is_admin:
            raise AdminRequiredError("Administrator privileges are required")
        return session

    def logout(self, bearer_token: str) -> None:
        with self._lock:
            self._sessions.pop(bearer_token, None)

    def list_users(self) -> list[UserAccount]:
        with self._lock:
            return list(self._accounts.values())

    def delete_user(self, username: str) -> None:
        with self._lock:
            if username not in self._accounts:
                raise UnknownUserError(f"User {username} was not found")
            self._repository.delete_user(username)
            del self._accounts[username]
            for token in [t for t, s in self._sessions.items() if s.username == username]:
                del self._sessions[token]
        logger.info("Deleted user %s", username)
