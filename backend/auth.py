import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from models import User
from schemas import RegisterRequest

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "timewise-dev-secret"
SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
ALGORITHM = "HS256"
# Sessions last a week unless configured otherwise
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
SESSION_COOKIE = "timewise_session"

env = os.getenv("ENV", os.getenv("RENDER", "").lower() or "dev")
if SECRET_KEY == DEFAULT_SECRET_KEY and (env in ("prod", "production") or os.getenv("RENDER")):
    raise RuntimeError("SECRET_KEY missing in production; refusing to sign sessions with the dev key.")

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


class DuplicateUserError(Exception):
    """Raised when registering an email that already has an account."""


@dataclass(frozen=True)
class SessionContext:
    """The signed-in user, passed explicitly into every entry operation."""

    user_id: int
    username: str
    email: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(session_ctx: SessionContext, expires_delta: timedelta | None = None) -> str:
    """Create a JWT carrying the session's user id, username and email."""
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(session_ctx.user_id),
        "username": session_ctx.username,
        "email": session_ctx.email,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> SessionContext | None:
    """Return the session encoded in a token, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected session token: {str(e)}")
        return None

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        logger.warning("Rejected session token without a user id")
        return None
    return SessionContext(
        user_id=int(user_id),
        username=payload.get("username") or payload.get("email") or "",
        email=payload.get("email") or "",
    )


def session_for(user: User) -> SessionContext:
    return SessionContext(user_id=user.id, username=user.username, email=user.email)


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email.strip().lower())).first()


def create_user(session: Session, request: RegisterRequest) -> User:
    """Create a new user; the email must not already be registered."""
    if get_user_by_email(session, request.email):
        raise DuplicateUserError(f"An account already exists for {request.email}")

    user = User(
        email=request.email,
        username=request.username,
        hashed_password=get_password_hash(request.password),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")
    return user


def authenticate_user(session: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(session, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def get_current_session(
    request: Request, token: str | None = Depends(oauth2_scheme)
) -> SessionContext | None:
    """Resolve the current session from a bearer token or the session cookie.

    Returns None when nobody is signed in; callers decide what that means.
    """
    token = token or request.cookies.get(SESSION_COOKIE)
    if not token:
        return None
    return decode_access_token(token)
