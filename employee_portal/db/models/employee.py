from datetime import date, datetime
from typing import Optional
from sqlalchemy import String, ForeignKey, Float, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from employee_portal.db.base import Base, utcnow

class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    position: Mapped[str] = mapped_column(String(200))
    department_id: Mapped[int] = mapped_column(ForeignKey("departments.id"), index=True)
    salary: Mapped[float] = mapped_column(Float)
    joining_date: Mapped[date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    department: Mapped["Department"] = relationship(back_populates="employees")
    user: Mapped[Optional["User"]] = relationship(back_populates="employee")
