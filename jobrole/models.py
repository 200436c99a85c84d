from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Float, String, ForeignKey, UniqueConstraint, CheckConstraint
from core.database import Base

class JobRole(Base):
    __tablename__ = "job_roles"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    hourly_wage_default: Mapped[float | None] = mapped_column(Float, nullable=True)

    __table_args__ = (
        UniqueConstraint("org_id", "name", name="uq_jobrole_org_name"),
        CheckConstraint("hourly_wage_default IS NULL OR hourly_wage_default >= 0", name="ck_jobrole_wage_nonneg"),
    )

    #relationship
    org = relationship("Organization", back_populates="jobroles")
