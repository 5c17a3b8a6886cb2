from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import List, Literal, Optional

from fixall.schemas.user import UserResponse


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal["customer", "technician", "admin"]
    phone: Optional[str] = ""
    secret: Optional[str] = Field(default=None, description="Required when role is admin")
    skills: List[str] = []

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def skills_only_for_technicians(self):
        if self.role != "technician":
            self.skills = []
        else:
            self.skills = [s.strip() for s in self.skills if s and s.strip()]
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthResponse(BaseModel):
    token: str
    user: UserResponse
    message: str
