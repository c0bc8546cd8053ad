from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from employee_portal.db.base import Base

class Department(Base):
    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    employees: Mapped[list["Employee"]] = relationship(back_populates="department")
