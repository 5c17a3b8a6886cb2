import logging

from fastapi import APIRouter, Depends, HTTPException
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from fixall.core.security import get_current_user, get_password_context, hash_password, verify_password
from fixall.db.base import get_db
from fixall.db.models.user import User
from fixall.schemas.booking import StatusMessage
from fixall.schemas.profile import PasswordChange, ProfileUpdate, ProfileUpdateResponse
from fixall.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profile"])


@router.get("", response_model=UserResponse)
@router.get("/", response_model=UserResponse, include_in_schema=False)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("", response_model=ProfileUpdateResponse)
@router.put("/", response_model=ProfileUpdateResponse, include_in_schema=False)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = payload.model_dump(exclude_unset=True, exclude_none=True)

    new_email = data.pop("email", None)
    if new_email and new_email != current_user.email:
        taken = db.query(User).filter(User.email == new_email, User.id != current_user.id).first()
        if taken:
            raise HTTPException(status_code=400, detail="Email already in use")
        current_user.email = new_email

    for field, value in data.items():
        # empty strings leave the stored value alone
        if value == "":
            continue
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    logger.info(f"Profile updated: {current_user.id}")
    return ProfileUpdateResponse(message="Profile updated successfully", user=UserResponse.model_validate(current_user))


@router.put("/password", response_model=StatusMessage)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    pwd_context: CryptContext = Depends(get_password_context),
):
    if not verify_password(pwd_context, payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    current_user.password_hash = hash_password(pwd_context, payload.new_password)
    db.commit()
    logger.info(f"Password changed for user: {current_user.id}")
    return {"message": "Password changed successfully"}
