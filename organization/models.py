from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Float, String
from core.database import Base

class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # company settings; NULL columns fall back to defaults when read
    locale: Mapped[str | None] = mapped_column(String(16), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(8), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    week_starts_on: Mapped[str | None] = mapped_column(String(3), nullable=True)
    default_shift_start: Mapped[str | None] = mapped_column(String(5), nullable=True)
    default_shift_end: Mapped[str | None] = mapped_column(String(5), nullable=True)
    weekly_budget_limit: Mapped[float | None] = mapped_column(Float, nullable=True)

    # relationships
    employees = relationship("Employee", back_populates="org", cascade="all, delete-orphan")
    locations = relationship("Location", back_populates="org", cascade="all, delete-orphan")
    jobroles = relationship("JobRole", back_populates="org", cascade="all, delete-orphan")
