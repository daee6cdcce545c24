from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import PayloadReader
from ..core.constants import DEFAULT_TOKEN_TTL_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..logging_config import get_logger
from .model import User
from .repository import UserRepository

logger = get_logger(__name__)

_ALGORITHM = "HS256"
_MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class IssuedToken:
    """A signed bearer token together with the account it was issued for."""

    token: str
    user: User
    expires_at: datetime

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "expiresAt": self.expires_at.isoformat(),
            "user": self.user.to_dict(),
        }


class AuthService:
    """Use case: register / log in owners and resolve bearer tokens to an owner."""

    def __init__(
        self,
        users: UserRepository,
        *,
        secret_key: str,
        token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    ):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._users = users
        self._secret_key = secret_key
        self._ttl = timedelta(hours=int(token_ttl_hours))

    def register(self, payload: Optional[dict]) -> IssuedToken:
        reader = PayloadReader(payload)
        full_name = reader.text("fullName", required=True, message="Full name is required")
        email = reader.text("email", required=True, message="Please include a valid email")
        password = reader.text("password", required=True, message="Password is required")
        if email and "@" not in email:
            reader.fail("email", "Please include a valid email")
        if password and len(password) < _MIN_PASSWORD_LENGTH:
            reader.fail("password", f"Password must be at least {_MIN_PASSWORD_LENGTH} characters")
        reader.raise_if_errors()

        email = email.lower()
        if self._users.get_by_email(email):
            raise ValidationError("User already exists", errors=[{"field": "email", "message": "User already exists"}])

        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.OWNER,
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Account could not be created")

        logger.info("owner registered", extra={"owner_id": user_id})
        return self.issue_token(user)

    def authenticate(self, email: str, password: str) -> IssuedToken:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            logger.info("login rejected", extra={"owner_id": user.user_id})
            raise AuthenticationError("Invalid credentials")

        return self.issue_token(user)

    def issue_token(self, user: User, *, now: Optional[datetime] = None) -> IssuedToken:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self._ttl
        token = jwt.encode(
            {"sub": str(user.user_id), "role": user.role.value, "iat": issued_at, "exp": expires_at},
            self._secret_key,
            algorithm=_ALGORITHM,
        )
        return IssuedToken(token=token, user=user, expires_at=expires_at)

    def resolve_token(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("No token, authorization denied")
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Token is not valid")

        try:
            user_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Token is not valid")

        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Token is not valid")
        return user
