import logging
from datetime import date
from fastapi import APIRouter, Body, Depends
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from employee_portal.api.schemas import LeaveIn, LeaveOut, LeaveUpdateIn, LeaveWithEmployee, MessageOut
from employee_portal.core.deps_api import require
from employee_portal.core.errors import Forbidden, NotFound, ValidationFailed, field_error
from employee_portal.core.permissions import Action
from employee_portal.core.security import Claims
from employee_portal.core.validation import validate
from employee_portal.db.models.employee import Employee
from employee_portal.db.models.leave import Leave, LeaveStatus, LeaveType
from employee_portal.db.models.user import Role, User
from employee_portal.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leaves")

async def get_leave_or_404(db: AsyncSession, leave_id: int) -> Leave:
    leave = (await db.execute(select(Leave).where(Leave.id == leave_id))).scalar_one_or_none()
    if not leave:
        raise NotFound("Leave request not found")
    return leave

@router.get("", response_model=list[LeaveWithEmployee])
async def list_leaves(claims: Claims = Depends(require("leaves", Action.read)), db: AsyncSession = Depends(get_db)):
    """Admins see every request; employees see their own."""
    user = (await db.execute(select(User).where(User.id == claims.user_id))).scalar_one_or_none()
    if not user:
        raise NotFound("User not found")

    q = (
        select(Leave)
        .options(selectinload(Leave.employee).selectinload(Employee.department))
        .order_by(desc(Leave.created_at), desc(Leave.id))
    )
    if user.role != Role.admin:
        if user.employee_id is None:
            raise NotFound("Employee record not found")
        q = q.where(Leave.employee_id == user.employee_id)
    return (await db.execute(q)).scalars().all()

@router.post("", status_code=201, response_model=LeaveOut)
async def create_leave(
    payload: dict = Body(...),
    claims: Claims = Depends(require("leaves", Action.create)),
    db: AsyncSession = Depends(get_db),
):
    data = validate(LeaveIn, payload)
    start, end = date.fromisoformat(data.start_date), date.fromisoformat(data.end_date)
    if end < start:
        raise ValidationFailed(details=[field_error("endDate", "End date cannot be before start date")])
    if claims.role != Role.admin and claims.employee_id != data.employee_id:
        logger.warning("User %s tried to file leave for employee %s", claims.user_id, data.employee_id)
        raise Forbidden()

    employee = (await db.execute(select(Employee.id).where(Employee.id == data.employee_id))).scalar_one_or_none()
    if employee is None:
        raise NotFound("Employee not found")

    leave = Leave(
        employee_id=data.employee_id,
        start_date=start,
        end_date=end,
        type=LeaveType(data.type),
        reason=data.reason,
        status=LeaveStatus.pending,
    )
    db.add(leave)
    await db.commit()
    return leave

@router.put("/{leave_id}", response_model=LeaveOut, dependencies=[Depends(require("leaves", Action.update))])
async def update_leave(leave_id: int, payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(LeaveUpdateIn, payload)
    leave = await get_leave_or_404(db, leave_id)
    leave.status = LeaveStatus(data.status)
    leave.admin_note = data.admin_note
    await db.commit()
    return leave

@router.delete("/{leave_id}", response_model=MessageOut, dependencies=[Depends(require("leaves", Action.delete))])
async def delete_leave(leave_id: int, db: AsyncSession = Depends(get_db)):
    leave = await get_leave_or_404(db, leave_id)
    await db.delete(leave)
    await db.commit()
    return {"message": "Leave request deleted successfully"}
