import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class EmployeeAbsence(Base):
    __tablename__ = "employee_absences"
    __table_args__ = (
        Index("ix_employee_absences_employee_id", "employee_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(nullable=False)

    absence_type: Mapped[str] = mapped_column(
        String(50), nullable=False
    )  # sick | vacation | training | unavailable | emergency | family_event
    family_event_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)  # inclusive
    business_days: Mapped[Decimal | None] = mapped_column(Numeric(5, 1), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending | approved | rejected
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
