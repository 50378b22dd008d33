import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ADMIN_EMAIL,
    ADMIN_NAME,
    ADMIN_PASSWORD,
    JWT_ALGORITHM,
    SECRET_KEY,
)
from .database import get_db
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Password hashing context
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against stored hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed JWT for a back-office user"""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please sign in again.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the signed-in user from the Bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning(f"⚠️ Token with malformed subject: {payload.get('sub')!r}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        logger.warning(f"⚠️ Token presented for missing or inactive user {user_id}")
        raise HTTPException(status_code=401, detail="Authentication failed")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Use this dependency for destructive or user-management routes"""
    if user.role != "admin":
        logger.warning(f"⚠️ User {user.email} attempted an admin-only operation")
        raise HTTPException(status_code=403, detail="You do not have access to this resource")
    return user


def seed_admin_user(db: Session) -> Optional[User]:
    """Create the initial admin from ADMIN_EMAIL/ADMIN_PASSWORD when no users exist"""
    if not ADMIN_EMAIL or not ADMIN_PASSWORD:
        return None
    if db.query(User).count() > 0:
        return None

    user = User(
        email=ADMIN_EMAIL.strip().lower(),
        full_name=ADMIN_NAME,
        password_hash=hash_password(ADMIN_PASSWORD),
        role="admin",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"🆕 Seeded initial admin user: {user.email}")
    return user
