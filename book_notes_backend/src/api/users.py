from typing import Optional

from fastapi import Depends, Request
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.api.database import get_db
from src.api.errors import ConflictError, InternalError
from src.api.logging import get_logger
from src.api.models import User

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """Persisted user records: lowercased email plus salted bcrypt hash."""

    def __init__(self, db: Session, pwd_context: CryptContext):
        self.db = db
        self.pwd_context = pwd_context

    def create_user(self, email: str, raw_password: str) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: the email is already registered.
        """
        user = User(email=normalize_email(email), password_hash=self.pwd_context.hash(raw_password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email already registered")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("database_error", operation="create_user")
            raise InternalError("Failed to register")
        self.db.refresh(user)
        logger.info("user_registered", user_id=user.id)
        return user

    def find_user_by_email(self, email: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.email == normalize_email(email)).first()
        except SQLAlchemyError:
            logger.exception("database_error", operation="find_user_by_email")
            raise InternalError("Failed to login")

    def verify_password(self, raw_password: str, stored_hash: str) -> bool:
        """Verify a plaintext password against its hash."""
        return self.pwd_context.verify(raw_password, stored_hash)

    def authenticate(self, email: str, raw_password: str) -> Optional[User]:
        """
        Return the user when email and password match, else None.

        An unknown email still pays for one bcrypt verification so both
        failure paths take the same time and give the same answer.
        """
        user = self.find_user_by_email(email)
        if user is None:
            self.pwd_context.dummy_verify()
            logger.info("login_failed")
            return None
        if not self.verify_password(raw_password, user.password_hash):
            logger.info("login_failed")
            return None
        return user


def get_credential_store(request: Request, db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db, request.app.state.pwd_context)
