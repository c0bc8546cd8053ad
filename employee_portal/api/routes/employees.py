from datetime import date
from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from employee_portal.api.schemas import EmployeeIn, EmployeeListItem, EmployeeOut, MessageOut
from employee_portal.core.deps_api import require
from employee_portal.core.errors import Conflict, NotFound, field_error
from employee_portal.core.permissions import Action
from employee_portal.core.validation import validate
from employee_portal.db.models.department import Department
from employee_portal.db.models.employee import Employee
from employee_portal.db.session import get_db

router = APIRouter(prefix="/employees")

async def get_employee_or_404(db: AsyncSession, employee_id: int) -> Employee:
    employee = (await db.execute(select(Employee).where(Employee.id == employee_id))).scalar_one_or_none()
    if not employee:
        raise NotFound("Employee not found")
    return employee

async def check_references(db: AsyncSession, data: EmployeeIn, employee_id: int | None = None):
    department = (await db.execute(select(Department.id).where(Department.id == data.department_id))).scalar_one_or_none()
    if department is None:
        raise NotFound("Department not found", [field_error("departmentId", "Department does not exist")])
    q = select(Employee.id).where(Employee.email == data.email)
    if employee_id is not None:
        q = q.where(Employee.id != employee_id)
    if (await db.execute(q)).scalar_one_or_none() is not None:
        raise Conflict("Email already exists", [field_error("email", "Another employee already uses this email")])

def apply(employee: Employee, data: EmployeeIn) -> Employee:
    employee.name = data.name
    employee.email = data.email
    employee.position = data.position
    employee.department_id = data.department_id
    employee.salary = data.salary
    employee.joining_date = date.fromisoformat(data.joining_date)
    return employee

@router.get("", response_model=list[EmployeeListItem], dependencies=[Depends(require("employees", Action.read))])
async def list_employees(db: AsyncSession = Depends(get_db)):
    q = await db.execute(select(Employee).options(selectinload(Employee.department)).order_by(Employee.id))
    return q.scalars().all()

@router.get("/{employee_id}", response_model=EmployeeOut, dependencies=[Depends(require("employees", Action.read))])
async def get_employee(employee_id: int, db: AsyncSession = Depends(get_db)):
    return await get_employee_or_404(db, employee_id)

@router.post("", response_model=EmployeeOut, dependencies=[Depends(require("employees", Action.create))])
async def create_employee(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(EmployeeIn, payload)
    await check_references(db, data)
    employee = apply(Employee(), data)
    db.add(employee)
    await db.commit()
    return employee

@router.put("/{employee_id}", response_model=EmployeeOut, dependencies=[Depends(require("employees", Action.update))])
async def update_employee(employee_id: int, payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(EmployeeIn, payload)
    employee = await get_employee_or_404(db, employee_id)
    await check_references(db, data, employee_id)
    apply(employee, data)
    await db.commit()
    return employee

@router.delete("/{employee_id}", response_model=MessageOut, dependencies=[Depends(require("employees", Action.delete))])
async def delete_employee(employee_id: int, db: AsyncSession = Depends(get_db)):
    employee = await get_employee_or_404(db, employee_id)
    await db.delete(employee)
    await db.commit()
    return {"message": "Employee deleted successfully"}
