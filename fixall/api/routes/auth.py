import logging

from fastapi import APIRouter, Depends, HTTPException, status
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from fixall.core.config import Settings
from fixall.core.security import (
    create_access_token,
    get_password_context,
    get_settings,
    hash_password,
    verify_password,
)
from fixall.db.base import get_db
from fixall.db.models.user import User
from fixall.schemas.auth import AuthResponse, LoginRequest, SignupRequest
from fixall.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    pwd_context: CryptContext = Depends(get_password_context),
):
    if payload.role == "admin" and payload.secret != settings.admin_secret:
        logger.warning(f"Admin signup rejected for {payload.email}: bad secret")
        raise HTTPException(status_code=403, detail="Invalid admin secret")

    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user = User(
        name=payload.name,
        email=payload.email,
        phone=payload.phone or "",
        password_hash=hash_password(pwd_context, payload.password),
        role=payload.role,
        approved=payload.role != "technician",
        skills=payload.skills,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    token = create_access_token(user, settings)
    logger.info(f"New user registered: {user.email} ({user.role})")

    if user.role == "technician":
        message = "Account created. Awaiting admin approval."
    else:
        message = "Account created successfully!"
    return AuthResponse(token=token, user=UserResponse.model_validate(user), message=message)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    pwd_context: CryptContext = Depends(get_password_context),
):
    user = db.query(User).filter(User.email == payload.email).first()

    if not user or not verify_password(pwd_context, payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user.role == "technician" and not user.approved:
        raise HTTPException(status_code=403, detail="Your account is pending admin approval")

    token = create_access_token(user, settings)
    logger.info(f"User logged in: {user.email}")
    return AuthResponse(token=token, user=UserResponse.model_validate(user), message="Login successful")
