import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, Response, UploadFile, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..avatars import AVATAR_MEDIA_TYPE, check_upload, normalize_avatar
from ..context import AppContext
from ..dependencies import AuthSession, get_auth_session, get_context, get_current_user, get_db
from ..errors import InvalidCredentials, NotFound, ValidationError
from ..models import Task, User, utc_now
from ..schemas.user import UPDATABLE_FIELDS, AuthResponse, User as UserSchema, UserCreate, UserLogin, UserUpdate
from ..security import hash_password, verify_password
from ..updates import parse_update

logger = logging.getLogger(__name__)

router = APIRouter()


def _email_taken(db: Session, email: str) -> bool:
    return db.exec(select(User).where(User.email == email)).first() is not None


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    """Create a new user account and sign it in."""
    if _email_taken(db, payload.email):
        raise ValidationError("Email is already registered")

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password, context.settings.bcrypt_rounds),
        age=payload.age,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Email is already registered")
    db.refresh(user)

    access_token = context.tokens.issue(db, user)
    logger.info("Registered user %s", user.id)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.post("/login", response_model=AuthResponse)
def login(
    payload: UserLogin,
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    """Sign in with email and password."""
    email = payload.email.strip().lower()
    user = db.exec(select(User).where(User.email == email)).first()
    if user is None or not verify_password(payload.password.strip(), user.hashed_password):
        raise InvalidCredentials()

    access_token = context.tokens.issue(db, user)
    logger.info("User %s logged in", user.id)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.post("/logout")
def logout(
    auth: AuthSession = Depends(get_auth_session),
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    """Revoke the token used for this request."""
    context.tokens.revoke(db, auth.user, auth.token)
    logger.info("User %s logged out", auth.user.id)
    return {"success": True}


@router.post("/logoutAll")
def logout_all(
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    """Revoke every token of the current user."""
    context.tokens.revoke_all(db, current_user)
    logger.info("User %s logged out of all sessions", current_user.id)
    return {"success": True}


@router.get("/me", response_model=UserSchema)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.patch("/me", response_model=UserSchema)
def update_users_me(
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    """Update name, email, password or age; any other key rejects the update."""
    changes = parse_update(payload, UPDATABLE_FIELDS, UserUpdate)

    if "email" in changes and changes["email"] != current_user.email and _email_taken(db, changes["email"]):
        raise ValidationError("Email is already registered")
    if "password" in changes:
        changes["hashed_password"] = hash_password(changes.pop("password"), context.settings.bcrypt_rounds)

    for field, value in changes.items():
        setattr(current_user, field, value)
    current_user.updated_at = utc_now()

    db.add(current_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Email is already registered")
    db.refresh(current_user)
    return current_user


@router.delete("/me", response_model=UserSchema)
def delete_users_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the account together with all of its tasks.

    Tasks are removed first and committed on their own, then the user.
    """
    deleted = UserSchema.model_validate(current_user)

    for task in db.exec(select(Task).where(Task.owner_id == current_user.id)).all():
        db.delete(task)
    db.commit()

    db.delete(current_user)
    db.commit()
    logger.info("Deleted user %s", deleted.id)
    return deleted


@router.post("/me/avatar")
def upload_avatar(
    avatar: UploadFile = File(..., alias="avatarUpload"),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
    db: Session = Depends(get_db),
):
    """Store an uploaded jpg/jpeg/png as the user's avatar."""
    max_bytes = context.settings.avatar_max_bytes
    data = avatar.file.read(max_bytes + 1)
    check_upload(avatar.filename or "", len(data), max_bytes)

    current_user.avatar = normalize_avatar(data, context.settings.avatar_size)
    current_user.updated_at = utc_now()
    db.add(current_user)
    db.commit()
    logger.info("User %s uploaded an avatar", current_user.id)
    return {"success": True}


@router.delete("/me/avatar")
def delete_avatar(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Clear the avatar. Clearing an empty avatar is not an error."""
    if current_user.avatar is not None:
        current_user.avatar = None
        current_user.updated_at = utc_now()
        db.add(current_user)
        db.commit()
        logger.info("User %s removed their avatar", current_user.id)
    return {"success": True}


@router.get("/{user_id}/avatar")
def read_avatar(user_id: str, db: Session = Depends(get_db)):
    """Serve a user's avatar as PNG."""
    user = db.get(User, user_id)
    if user is None or not user.avatar:
        raise NotFound("Avatar not found")
    return Response(content=user.avatar, media_type=AVATAR_MEDIA_TYPE)
