from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from employee_portal.api.schemas import DepartmentIn, DepartmentOut, MessageOut
from employee_portal.core.deps_api import require
from employee_portal.core.errors import Conflict, NotFound
from employee_portal.core.permissions import Action
from employee_portal.core.validation import validate
from employee_portal.db.models.department import Department
from employee_portal.db.models.employee import Employee
from employee_portal.db.session import get_db

router = APIRouter(prefix="/departments")

async def get_department_or_404(db: AsyncSession, department_id: int) -> Department:
    department = (await db.execute(select(Department).where(Department.id == department_id))).scalar_one_or_none()
    if not department:
        raise NotFound("Department not found")
    return department

@router.get("", response_model=list[DepartmentOut], dependencies=[Depends(require("departments", Action.read))])
async def list_departments(db: AsyncSession = Depends(get_db)):
    q = await db.execute(select(Department).order_by(Department.id))
    return q.scalars().all()

@router.get("/{department_id}", response_model=DepartmentOut, dependencies=[Depends(require("departments", Action.read))])
async def get_department(department_id: int, db: AsyncSession = Depends(get_db)):
    return await get_department_or_404(db, department_id)

@router.post("", response_model=DepartmentOut, dependencies=[Depends(require("departments", Action.create))])
async def create_department(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(DepartmentIn, payload)
    department = Department(name=data.name, description=data.description)
    db.add(department)
    await db.commit()
    return department

@router.put("/{department_id}", response_model=DepartmentOut, dependencies=[Depends(require("departments", Action.update))])
async def update_department(department_id: int, payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(DepartmentIn, payload)
    department = await get_department_or_404(db, department_id)
    department.name = data.name
    department.description = data.description
    await db.commit()
    return department

@router.delete("/{department_id}", response_model=MessageOut, dependencies=[Depends(require("departments", Action.delete))])
async def delete_department(department_id: int, db: AsyncSession = Depends(get_db)):
    department = await get_department_or_404(db, department_id)
    in_use = (await db.execute(select(Employee.id).where(Employee.department_id == department_id).limit(1))).scalar_one_or_none()
    if in_use is not None:
        raise Conflict("Department has employees")
    await db.delete(department)
    await db.commit()
    return {"message": "Department deleted successfully"}
