from fastapi import APIRouter, Body, Depends
from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from employee_portal.api.schemas import AttendanceListItem, AttendanceOut, CheckInIn, CheckOutIn, CheckOutResult
from employee_portal.core.deps_api import require
from employee_portal.core.errors import NotFound
from employee_portal.core.permissions import Action
from employee_portal.core.validation import parse_timestamp, validate
from employee_portal.db.models.attendance import Attendance
from employee_portal.db.models.employee import Employee
from employee_portal.db.session import get_db

router = APIRouter(prefix="/attendance")

RECENT_LIMIT = 100

async def ensure_employee(db: AsyncSession, employee_id: int):
    found = (await db.execute(select(Employee.id).where(Employee.id == employee_id))).scalar_one_or_none()
    if found is None:
        raise NotFound("Employee not found")

@router.post("/check-in", response_model=AttendanceOut, dependencies=[Depends(require("attendance", Action.create))])
async def check_in(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(CheckInIn, payload)
    await ensure_employee(db, data.employee_id)
    record = Attendance(
        employee_id=data.employee_id,
        check_in=parse_timestamp(data.check_in),
        check_out=parse_timestamp(data.check_out) if data.check_out else None,
    )
    db.add(record)
    await db.commit()
    return record

@router.post("/check-out", response_model=CheckOutResult, dependencies=[Depends(require("attendance", Action.create))])
async def check_out(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(CheckOutIn, payload)
    # closes every open record for the employee
    result = await db.execute(
        update(Attendance)
        .where(Attendance.employee_id == data.employee_id, Attendance.check_out.is_(None))
        .values(check_out=parse_timestamp(data.check_out))
    )
    await db.commit()
    return {"count": result.rowcount}

@router.get("", response_model=list[AttendanceListItem], dependencies=[Depends(require("attendance", Action.read))])
async def list_attendance(db: AsyncSession = Depends(get_db)):
    q = await db.execute(
        select(Attendance)
        .options(selectinload(Attendance.employee))
        .order_by(desc(Attendance.date), desc(Attendance.id))
        .limit(RECENT_LIMIT)
    )
    return q.scalars().all()

@router.get("/{employee_id}", response_model=list[AttendanceOut], dependencies=[Depends(require("attendance", Action.read))])
async def employee_attendance(employee_id: int, db: AsyncSession = Depends(get_db)):
    q = await db.execute(
        select(Attendance).where(Attendance.employee_id == employee_id).order_by(desc(Attendance.date), desc(Attendance.id))
    )
    return q.scalars().all()
