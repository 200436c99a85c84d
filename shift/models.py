from __future__ import annotations
from typing import TYPE_CHECKING
from datetime import datetime
from sqlalchemy import (
    CheckConstraint,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base, UTCDateTime
from scheduling.lifecycle import ShiftStatus

if TYPE_CHECKING:
    from employee.models import Employee
    from jobrole.models import JobRole
    from location.models import Location

class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(primary_key=True)

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )
    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id", ondelete="CASCADE"), index=True
    )
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"), index=True
    )
    role_id: Mapped[int] = mapped_column(ForeignKey("job_roles.id", ondelete="RESTRICT"))

    start_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    end_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hourly_wage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)

    status: Mapped[ShiftStatus] = mapped_column(
        SAEnum(ShiftStatus, name="shift_status"), nullable=False, default=ShiftStatus.open
    )
    cancel_reason: Mapped[str | None] = mapped_column(Text(), nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # temporary id the client created the shift under; makes re-sent batches idempotent
    client_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        UniqueConstraint("org_id", "client_ref", name="uq_shift_org_client_ref"),
        CheckConstraint("end_at > start_at", name="ck_shift_end_after_start"),
        CheckConstraint("break_minutes >= 0", name="ck_shift_break_nonneg"),
        CheckConstraint("hourly_wage >= 0", name="ck_shift_wage_nonneg"),
    )

    # relationships
    location: Mapped["Location"] = relationship("Location")
    employee: Mapped["Employee"] = relationship("Employee")
    role: Mapped["JobRole"] = relationship("JobRole")

# week lookups: org + location + start time
Index("ix_shifts_org_location_start", Shift.org_id, Shift.location_id, Shift.start_at)
