import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from database import get_db
from models import User
from schemas import UserLogin, UserCreate, ProfileUpdate, Token, AuthStatus, UserResponse, Ack, User as UserSchema
from dependencies import (
    SESSION_COOKIE, ACCESS_TOKEN_EXPIRE_MINUTES,
    authenticate_user, get_password_hash, create_access_token,
    get_current_user, get_optional_user,
)
import crud

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: Session = Depends(get_db)):
    """Register a new user. Usernames are unique."""
    if crud.get_user_by_username(db, user.username):
        logger.info(f"Registration refused, username taken: {user.username}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered"
        )

    try:
        db_user = crud.create_user(db, user, get_password_hash(user.password))
    except IntegrityError:
        # Lost a race with a concurrent registration of the same username
        db.rollback()
        logger.info(f"Registration refused, username taken: {user.username}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered"
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating user {user.username}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating user"
        )

    logger.info(f"Registered user {db_user.username} (id={db_user.id})")
    return {"user": UserSchema.model_validate(db_user)}

@router.post("/login", response_model=Token)
async def login(user_credentials: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, user_credentials.username, user_credentials.password)
    if not user:
        logger.warning(f"Failed login for {user_credentials.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": user.username})
    response.set_cookie(
        SESSION_COOKIE,
        access_token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"User {user.username} logged in")
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": UserSchema.model_validate(user)
    }

@router.post("/logout", response_model=Ack)
async def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}

@router.get("/check", response_model=AuthStatus)
async def check(current_user: Optional[User] = Depends(get_optional_user)):
    """Report whether the request carries a valid session."""
    if current_user is None:
        return {"isLoggedIn": False, "user": None}
    return {"isLoggedIn": True, "user": UserSchema.model_validate(current_user)}

@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = crud.update_user_profile(db, current_user, profile.name)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating profile of user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error updating profile"
        )
    return {"user": UserSchema.model_validate(user)}
