"""User schemas (DTOs)."""

from pydantic import BaseModel, EmailStr, Field


# Request schemas
class UserRegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    email: EmailStr
