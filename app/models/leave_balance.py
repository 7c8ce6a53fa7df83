import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class LeaveBalanceEntry(Base):
    """Stored adjustments and manual history takeover for one leave year."""
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("contract_id", "leave_year", name="uq_leave_balance_contract_year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    contract_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False
    )
    leave_year: Mapped[str] = mapped_column(String(9), nullable=False)  # "2025-2026"

    # NULL → accrual from the contract start
    months_worked: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), nullable=True)
    adjustment_days: Mapped[Decimal] = mapped_column(Numeric(5, 1), default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    contract: Mapped["Contract"] = relationship(back_populates="leave_balances")  # type: ignore[name-defined]
