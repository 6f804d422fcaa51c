from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    surname: str | None = None
    username: str
    email: EmailStr
    phone: str | None = None
    role: str
    status: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OwnerOut(BaseModel):
    """Display subset of the user that created a record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
