import enum
from datetime import date, datetime
from sqlalchemy import ForeignKey, String, Text, Enum, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from employee_portal.db.base import Base, utcnow

class LeaveType(str, enum.Enum):
    sick = "sick"
    vacation = "vacation"
    personal = "personal"

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"

class Leave(Base):
    __tablename__ = "leaves"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), index=True)
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)
    type: Mapped[LeaveType] = mapped_column(Enum(LeaveType))
    reason: Mapped[str] = mapped_column(Text)
    status: Mapped[LeaveStatus] = mapped_column(Enum(LeaveStatus), default=LeaveStatus.pending)
    admin_note: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    employee: Mapped["Employee"] = relationship()
