from datetime import timedelta
from typing import Optional
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt
from sqlmodel import Session, select

from .models import User, UserToken, utc_now


class InvalidToken(Exception):
    """The token is malformed, expired or signed with another key."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt directly."""
    password_bytes = password.encode('utf-8')[:72]  # Truncate to 72 bytes (bcrypt limit)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


class TokenService:
    """Issues and checks the bearer tokens stored in a user's token set.

    ``verify`` only proves the token was signed by us and is still within its
    lifetime. Whether it has been revoked is answered by the token set, so
    callers must also look the token up (see ``dependencies.get_auth_session``).
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 0):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def encode(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed JWT for ``user_id`` without storing it."""
        now = utc_now()
        claims = {"sub": user_id, "jti": uuid4().hex, "iat": now}
        if expires_delta is None and self.expire_minutes > 0:
            expires_delta = timedelta(minutes=self.expire_minutes)
        if expires_delta is not None:
            claims["exp"] = now + expires_delta
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def issue(self, db: Session, user: User) -> str:
        token = self.encode(user.id)
        db.add(UserToken(user_id=user.id, token=token))
        db.commit()
        db.refresh(user)
        return token

    def verify(self, token: str) -> str:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise InvalidToken("Token has no subject")
        return user_id

    def revoke(self, db: Session, user: User, token: str) -> None:
        rows = db.exec(
            select(UserToken).where(UserToken.user_id == user.id, UserToken.token == token)
        ).all()
        for row in rows:
            db.delete(row)
        db.commit()
        db.refresh(user)

    def revoke_all(self, db: Session, user: User) -> None:
        for row in db.exec(select(UserToken).where(UserToken.user_id == user.id)).all():
            db.delete(row)
        db.commit()
        db.refresh(user)
