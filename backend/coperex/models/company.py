import enum

from sqlalchemy import String, Integer, Boolean, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coperex.models.base import Base, TimestampMixin
from coperex.models.user import User


class LevelImpact(str, enum.Enum):
    LOW = "Bajo"
    MEDIUM = "Medio"
    HIGH = "Alto"


class Company(TimestampMixin, Base):
    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("years_trajectory >= 0", name="ck_companies_years_trajectory"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text)
    level_impact: Mapped[str] = mapped_column(String(16))  # Bajo | Medio | Alto
    years_trajectory: Mapped[int] = mapped_column(Integer)
    category: Mapped[str] = mapped_column(String(100), index=True)
    created_by_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"))
    status: Mapped[bool] = mapped_column(Boolean, default=True)

    # Display-only join; companies are not owned for deletion purposes
    created_by: Mapped[User] = relationship(lazy="joined")
