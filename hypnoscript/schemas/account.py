"""Account DTOs exchanged over HTTP."""

from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from ..domain.account import Account

MIN_PASSWORD_LENGTH = 8


class AccountOut(BaseModel):
    account_id: str
    email: str
    created_at: datetime

    @classmethod
    def from_domain(cls, account: Account) -> "AccountOut":
        """Build a response model from the domain record, leaving the credential hash behind."""
        return cls(
            account_id=account.account_id,
            email=account.email,
            created_at=account.created_at,
        )


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    account: AccountOut
