import enum

from sqlalchemy import String, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from coperex.models.base import Base, TimestampMixin


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    CLIENT = "CLIENT"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    surname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    role: Mapped[str] = mapped_column(String(32), default=Role.CLIENT.value)  # ADMIN | CLIENT
    # False once logically deleted
    status: Mapped[bool] = mapped_column(Boolean, default=True)
