from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from schemas.common import ORMBase

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str
    remember_me: bool = False

# Schema for user registration requests; the role is never taken from the client
class UserCreate(UserBase):
    name: str = Field(min_length=2, max_length=50)
    password: str = Field(min_length=6)

# Output schema for user profile details
class UserResponse(ORMBase):
    id: int
    name: str
    email: str
    role: str
    status: str
    is_email_verified: bool
    created_at: Optional[datetime] = None

# Short user reference embedded in orders and reviews
class UserBrief(ORMBase):
    id: int
    name: str
    email: Optional[str] = None

# Schema for JWT authentication token response
class Token(BaseModel):
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str

class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=6)
