from typing import Literal

from pydantic import BaseModel, Field

from app.domain.entities import User


class UserOut(BaseModel):
    id: int = Field(..., description="The id of the user")
    email: str = Field(..., description="The email of the user")
    phone_number: str
    full_name: str
    verification_type: str
    email_verified: bool

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            email=user.email,
            phone_number=user.phone_number,
            full_name=user.full_name,
            verification_type=user.verification_type,
            email_verified=user.email_verified,
        )


class TokenOut(BaseModel):
    token: str
    token_type: Literal["bearer"] = "bearer"
    user_id: int


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"


class AcceptedOut(BaseModel):
    status: Literal["accepted"] = "accepted"
