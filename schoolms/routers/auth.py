from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from schoolms.core.config import ACCESS_TOKEN_EXPIRE
from schoolms.core.current_user import get_current_user
from schoolms.core.deps import get_db
from schoolms.core.responses import ensure_ok
from schoolms.core.security import create_access_token
from schoolms.crud.accounts import (
    authenticate_user,
    create_user,
    get_user_record,
    username_exists,
)
from schoolms.models.user import User
from schoolms.schemas.auth import LoginRequest, UsernameAvailability
from schoolms.schemas.token import Token
from schoolms.schemas.user import RegisterRequest, UserRecord

router = APIRouter()


@router.get("/username-available", response_model=UsernameAvailability)
def username_available(
    username: str = Query(min_length=1),
    db: Session = Depends(get_db),
):
    username = username.strip()
    return {"username": username, "available": not username_exists(db, username)}


@router.post(
    "/register",
    response_model=UserRecord,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Username already exists"},
        409: {"description": "Username taken while registering"},
    },
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if username_exists(db, payload.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists. Please choose a different username.",
        )

    ensure_ok(
        create_user(
            db,
            payload.username,
            payload.password,
            payload.user_type,
            payload.name,
        )
    )
    return get_user_record(db, payload.username)


@router.post(
    "/login",
    response_model=Token,
    responses={
        401: {"description": "Invalid credentials"},
        403: {"description": "Account is not of the selected user type"},
    },
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.username.strip(), payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials. Please try again.",
        )

    if payload.user_type is not None and user.user_type is not payload.user_type:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid user type for this account",
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.user_type.value},
        expires_delta=ACCESS_TOKEN_EXPIRE,
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
        "message": f"Login successful! Welcome {user.name}",
    }


@router.get("/me", response_model=UserRecord)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_user_record(db, current_user.username)
