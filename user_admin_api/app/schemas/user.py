"""
Pydantic models for user data.

``UserRecord`` is the entity persisted in the users document.  The
remaining models describe request and response payloads.  Request
models keep every field optional so that missing values reach the
service layer, which reports them with a readable message instead of
a schema error.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Fixed set of role tags.  A role only selects the dashboard."""

    DIRECTOR = "director"
    SPECIALIST = "specialist"
    EMPLOYEE = "employee"
    ADMIN = "admin"


class UserBase(BaseModel):
    role: Optional[str] = Field(None, examples=["employee"])
    login: Optional[str] = Field(None, examples=["user@example.com"])
    first_name: Optional[str] = Field(None, alias="firstName", examples=["Иван"])
    last_name: Optional[str] = Field(None, alias="lastName", examples=["Иванов"])
    avatar: Optional[str] = Field(
        None,
        description="Inlined image, usually a ``data:image/...;base64,`` URL (at most 2 MiB decoded)",
    )
    department: Optional[str] = Field(None, examples=["Sales"])

    model_config = ConfigDict(populate_by_name=True)


class UserCreate(UserBase):
    """Schema for the "add user" form."""

    password: Optional[str] = Field(None, examples=["secret"])


class UserUpdate(UserBase):
    """Schema for updating a user.

    All fields are optional; only provided fields are merged into the
    stored record.  ``id`` and ``createdAt`` are not accepted and are
    silently dropped if present in the body.
    """

    password: Optional[str] = None


class UserRecord(BaseModel):
    """A persisted user account.

    Unknown fields found in the users document are kept on the model
    and written back unchanged.
    """

    id: str
    role: str
    login: str
    password: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    avatar: Optional[str] = None
    created_at: str = Field(alias="createdAt")
    department: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_document(self) -> dict:
        """Return the JSON object stored for this record."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class UserPublic(BaseModel):
    """A user record as returned to the owner of a session (no password)."""

    id: str
    role: str
    login: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    avatar: Optional[str] = None
    created_at: str = Field(alias="createdAt")
    department: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserPublic":
        return cls.model_validate(record.model_dump(by_alias=True, exclude_unset=True, exclude={"password"}))


class Credentials(BaseModel):
    """Login form payload."""

    login: Optional[str] = Field(None, examples=["user@example.com"])
    password: Optional[str] = Field(None, examples=["secret"])


class Session(BaseModel):
    """The signed‑in user together with the dashboard for their role."""

    user: UserPublic
    dashboard: str


class TokenResponse(BaseModel):
    """Bearer token issued by ``POST /auth/token``."""

    access_token: str
    token_type: str = "bearer"
    user: UserPublic
    dashboard: str
