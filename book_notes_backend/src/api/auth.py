from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from src.api.errors import ExpiredTokenError, InvalidTokenError, UnauthenticatedError
from src.api.logging import get_logger

logger = get_logger(__name__)

BEARER_SCHEME = "Bearer"
TOKEN_VALIDITY = timedelta(days=7)


def create_password_context(rounds: int = 10) -> CryptContext:
    """bcrypt context; every hash gets a fresh random salt."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, resolved from token claims."""

    id: int
    email: str


class TokenService:
    """Issues and verifies self-contained, time-limited bearer tokens.

    Validity depends only on signature and expiry; there is no revocation list.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", validity: timedelta = TOKEN_VALIDITY):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.validity = validity

    def issue(self, claims: Dict[str, Any], now: Optional[datetime] = None) -> str:
        """Create a signed token embedding id and email plus iat/exp."""
        issued_at = now or datetime.now(tz=timezone.utc)
        to_encode = {
            "id": claims["id"],
            "email": claims["email"],
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.validity).timestamp()),
        }
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        """
        Validate signature and expiry and return the embedded identity.

        Raises:
            ExpiredTokenError: token is past its expiry.
            InvalidTokenError: bad signature, malformed token or missing claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except JWTError:
            raise InvalidTokenError()

        user_id = payload.get("id")
        email = payload.get("email")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(email, str):
            raise InvalidTokenError()
        return Identity(id=user_id, email=email)


def parse_bearer(header: Optional[str]) -> Optional[str]:
    """Return the token from 'Bearer <token>', or None if the header is malformed."""
    # Exactly "<scheme> <token>"; "Bearer a b" is malformed, not a token with a space.
    parts = (header or "").split()
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        return None
    return parts[1]


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


# PUBLIC_INTERFACE
def get_current_user(request: Request) -> Identity:
    """
    Dependency guarding protected endpoints.

    Resolves the caller from the Authorization header and binds it to
    request.state.user.

    Raises:
        401 "Missing auth token" if the header is absent or not 'Bearer <token>'.
        401 "Invalid or expired token" if verification fails.
    """
    token = parse_bearer(request.headers.get("Authorization"))
    if token is None:
        raise UnauthenticatedError("Missing auth token")

    try:
        identity = get_token_service(request).verify(token)
    except UnauthenticatedError as exc:
        logger.info("token_rejected", reason=type(exc).__name__, path=request.url.path)
        raise UnauthenticatedError("Invalid or expired token")

    request.state.user = identity
    return identity
