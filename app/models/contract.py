import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Contract(Base):
    __tablename__ = "contracts"
    __table_args__ = (
        Index("ix_contracts_employee_id", "employee_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    employee_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    employer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)  # NULL = en cours

    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    weekly_hours: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    # Jours fériés travaillés habituellement → majoration 60 % au lieu de 100 %
    habitual_holiday_work: Mapped[bool] = mapped_column(default=False)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    shifts: Mapped[list["Shift"]] = relationship(back_populates="contract")  # type: ignore[name-defined]
    leave_balances: Mapped[list["LeaveBalanceEntry"]] = relationship(  # type: ignore[name-defined]
        back_populates="contract"
    )
