import hashlib
import hmac
import logging
import secrets

from sqlalchemy import insert, or_, select
from sqlalchemy.orm import Session

from storefront_admin.core.database import execute, transaction
from storefront_admin.core.errors import AppError, AuthenticationError, ConflictError
from storefront_admin.models.database import User

logger = logging.getLogger(__name__)

KEY_LENGTH = 64


def hash_password(password: str) -> str:
    """``salt:key`` with a random hex salt and a hex scrypt key"""
    salt = secrets.token_hex(16)
    key = hashlib.scrypt(password.encode(), salt=salt.encode(), n=16384, r=8, p=1, dklen=KEY_LENGTH)
    return f"{salt}:{key.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    salt, _, expected = password_hash.partition(":")
    if not salt or not expected:
        return False
    key = hashlib.scrypt(password.encode(), salt=salt.encode(), n=16384, r=8, p=1, dklen=KEY_LENGTH)
    return hmac.compare_digest(key.hex(), expected)


class AuthService:
    """
    Dashboard users.

    Login only checks credentials; no session or token is issued.
    """

    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, username: str, password: str) -> User:
        user = self.db.scalars(
            select(User).where(User.username == username, User.is_active.is_(True))
        ).first()
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {username}")
            raise AuthenticationError("Invalid credentials")
        logger.info(f"User {username} logged in")
        return user

    def create_user(self, username: str, email: str, password: str, role: str = "admin") -> User:
        existing = self.db.scalars(
            select(User).where(or_(User.username == username, User.email == email))
        ).first()
        if existing is not None:
            if existing.username == username:
                raise ConflictError(f'Username "{username}" already exists.')
            raise ConflictError(f'Email "{email}" already exists.')

        with transaction(self.db):
            result = execute(
                self.db,
                insert(User.__table__).values(
                    username=username,
                    email=email,
                    password_hash=hash_password(password),
                    role=role,
                    is_active=True,
                ),
            )

        user = self.db.get(User, result.last_insert_id)
        if user is None:
            raise AppError("Failed to create user")
        logger.info(f"Created user {username} with id {user.id}")
        return user
