import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlmodel import Session, select

from .context import AppContext
from .errors import AuthenticationFailed
from .models import User, UserToken
from .security import InvalidToken

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    user: User
    token: str


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_db(context: AppContext = Depends(get_context)):
    """Dependency to get database session."""
    db = context.session_factory()
    try:
        yield db
    finally:
        db.close()


def _get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def get_auth_session(
    request: Request,
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> AuthSession:
    """Resolve the bearer token into its user, or fail with 401.

    The token must verify and must still be in the user's token set; both
    are required in a single lookup. Every failure is reported the same way.
    """
    logger.debug("Authenticating %s %s", request.method, request.url.path)

    token = _get_token_from_request(request)
    if not token:
        logger.info("Rejected %s %s: no bearer token", request.method, request.url.path)
        raise AuthenticationFailed()

    try:
        user_id = context.tokens.verify(token)
    except InvalidToken as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        raise AuthenticationFailed()

    user = db.exec(
        select(User)
        .join(UserToken, UserToken.user_id == User.id)
        .where(User.id == user_id, UserToken.token == token)
    ).first()
    if user is None:
        logger.info("Rejected %s %s: token not active", request.method, request.url.path)
        raise AuthenticationFailed()

    request.state.user = user
    request.state.token = token
    return AuthSession(user=user, token=token)


def get_current_user(auth: AuthSession = Depends(get_auth_session)) -> User:
    return auth.user
