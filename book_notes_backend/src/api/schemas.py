from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


# Users / Auth

class RegisterRequest(BaseModel):
    """Request model to register a new user"""
    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=6, description="Plaintext password (min 6 chars, max 72 bytes)")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserResponse(BaseModel):
    """User response without sensitive fields"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class AuthResponse(BaseModel):
    """Token plus the user it was issued for"""
    token: str = Field(..., description="Bearer token, valid for 7 days")
    user: UserResponse


class MeResponse(BaseModel):
    user: UserResponse


# Notes

class NoteCreateRequest(BaseModel):
    """Create note request"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255, alias="bookTitle")
    author: str = Field("", max_length=255)
    note: str = Field(..., min_length=1, description="Note text")


class NoteSummary(BaseModel):
    """Listing entry; the note text is left out.

    Serialized with the frontend's field names (bookTitle, createdAt).
    """
    id: int
    title: str = Field(..., serialization_alias="bookTitle")
    author: str
    created_at: datetime = Field(..., serialization_alias="createdAt")


class NoteResponse(NoteSummary):
    note: str


class DeleteResponse(BaseModel):
    ok: bool = True


# AI enhancement

class EnhanceRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Raw note text")


class EnhanceResponse(BaseModel):
    text: str


class HealthResponse(BaseModel):
    status: str
    database: bool

