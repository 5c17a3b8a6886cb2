from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional, Union

from fixall.schemas.user import UserResponse


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    bio: Optional[str] = None
    # list, or a comma separated string as sent by the profile form
    skills: Optional[Union[List[str], str]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v else v

    @field_validator("skills")
    @classmethod
    def split_skills(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            v = v.split(",")
        return [s.strip() for s in v if s and s.strip()]


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserResponse
