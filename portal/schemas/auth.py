from typing import Optional
from pydantic import BaseModel, Field
from portal.schemas.base import CamelModel


class LoginRequest(BaseModel):
    username: Optional[str] = Field(None, max_length=150)
    email: Optional[str] = Field(None, max_length=150)
    password: Optional[str] = None

    @property
    def login_id(self) -> Optional[str]:
        value = self.email or self.username
        return value.strip() if value else None


class ChangePasswordRequest(CamelModel):
    old_password: Optional[str] = None
    new_password: Optional[str] = None


class CustomerProfile(CamelModel):
    id: int
    customer_id: int
    customer_code: Optional[str] = None
    username: str
    email: Optional[str] = None
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    user_type: Optional[str] = None
    role_id: Optional[int] = None
    role_name: Optional[str] = None


class LoginResponse(CamelModel):
    token: str
    customer: CustomerProfile


class TokenResponse(CamelModel):
    token: str
