import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.utils.time_utils import duration


class Shift(Base):
    __tablename__ = "shifts"
    __table_args__ = (
        Index("ix_shifts_employee_date", "employee_id", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    contract_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(nullable=False)

    date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)  # == start_time → 24h (garde)
    break_minutes: Mapped[int] = mapped_column(Integer, default=0)

    shift_type: Mapped[str] = mapped_column(
        String(20), default="effective"
    )  # effective | presence_day | presence_night | guard_24h
    has_night_action: Mapped[bool] = mapped_column(Boolean, default=False)
    night_interventions_count: Mapped[int] = mapped_column(Integer, default=0)
    # [{"start_time": "08:00", "type": "effective", "break_minutes": 30}, ...]
    guard_segments: Mapped[list | None] = mapped_column(JSON, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), default="planned"
    )  # planned | completed | cancelled | absent
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Derived by the engine on every save
    is_requalified: Mapped[bool] = mapped_column(Boolean, default=False)
    effective_hours: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    computed_pay: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    validated_by_employer: Mapped[bool] = mapped_column(Boolean, default=False)
    validated_by_employee: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    contract: Mapped["Contract"] = relationship(back_populates="shifts")  # type: ignore[name-defined]

    @property
    def duration_hours(self) -> float:
        return duration(self.start_time, self.end_time, self.break_minutes or 0) / 60
