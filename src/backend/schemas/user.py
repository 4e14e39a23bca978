"""
User registration schemas.
"""

from pydantic import BaseModel, Field


class UserRegister(BaseModel):
    """Schema for registering a participant. Validated by the gateway, not here."""

    name: str | None = None


class RegisteredUser(BaseModel):
    """Public view of a registered participant."""

    id: str
    name: str


class RegisterResponse(BaseModel):
    """Response after successful registration."""

    success: bool = True
    user: RegisteredUser = Field(..., description="The created participant")
