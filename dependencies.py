from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from passlib.context import CryptContext
from database import get_db, settings
from models import User
from permissions import Actor, Resource, Operation, DenyReason, evaluate
from schemas import TokenData
import crud

logger = logging.getLogger(__name__)

# Security setup
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
SESSION_COOKIE = "session"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
security = HTTPBearer(auto_error=False)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

def verify_token(token: str) -> Optional[TokenData]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        return None
    username: str = payload.get("sub")
    if username is None:
        return None
    return TokenData(username=username)

def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    user = crud.get_user_by_username(db, username)
    if user and verify_password(password, user.password):
        return user
    return None

def _session_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE)

async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """The logged-in user, or None for anonymous requests and stale sessions."""
    token = _session_token(request, credentials)
    if not token:
        return None
    token_data = verify_token(token)
    if token_data is None:
        return None
    return crud.get_user_by_username(db, token_data.username)

async def get_current_user(current_user: Optional[User] = Depends(get_optional_user)) -> User:
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user

async def get_actor(current_user: Optional[User] = Depends(get_optional_user)) -> Optional[Actor]:
    return Actor.from_user(current_user)

def enforce(actor: Optional[Actor], resource: Resource, operation: Operation) -> None:
    """Raise the HTTP error matching a denied decision."""
    decision = evaluate(actor, resource, operation)
    if decision.allowed:
        return
    if decision.reason == DenyReason.AUTH_REQUIRED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=decision.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.warning(
        f"Denied {operation.value} on {resource.category.value} "
        f"for user {actor.id}: {decision.reason.value}"
    )
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.message)
