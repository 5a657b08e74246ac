"""
Adapters: password hashing (bcrypt) and bearer tokens (JWT via python-jose).
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from app.domain.market.errors import AuthenticationError
from app.domain.market.ports import PasswordHasher, TokenIssuer

logger = logging.getLogger(__name__)


class BcryptPasswordHasher(PasswordHasher):
    """Salted bcrypt hashes. bcrypt only reads the first 72 bytes."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8")[:72], salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:72], password_hash.encode("utf-8")
            )
        except ValueError:
            logger.warning("Stored password hash is malformed.")
            return False


class JwtTokenIssuer(TokenIssuer):
    """HMAC-signed JWTs whose subject is the user id."""

    def __init__(
        self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=expire_minutes)

    def issue(self, user_id: UUID) -> str:
        now = datetime.now(timezone.utc)
        claims = {"sub": str(user_id), "iat": now, "exp": now + self._ttl}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> UUID:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except JWTError as exc:
            raise AuthenticationError("Invalid token") from exc

        subject = payload.get("sub")
        try:
            return UUID(str(subject))
        except ValueError as exc:
            raise AuthenticationError("Invalid token subject") from exc
