from datetime import date, datetime
from typing import Annotated
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from employee_portal.core.validation import (
    DateString,
    Email,
    MaxLength,
    Minimum,
    MinLength,
    OneOf,
    Pattern,
    RequestSchema,
    Timestamp,
)
from employee_portal.db.models.leave import LeaveStatus, LeaveType
from employee_portal.db.models.user import Role

# ---- requests ----

Password = Annotated[
    str,
    MinLength(6, "Password must be at least 6 characters"),
    Pattern(r"[A-Z]", "Must contain at least one uppercase letter"),
    Pattern(r"[0-9]", "Must contain at least one number"),
]

class RegisterIn(RequestSchema):
    username: Annotated[
        str,
        MinLength(3, "Username must be at least 3 characters"),
        MaxLength(20, "Username cannot exceed 20 characters"),
    ]
    password: Password
    email: Annotated[str, Email()]

class LoginIn(RequestSchema):
    username: str
    password: str

class PasswordIn(RequestSchema):
    password: Password

class DepartmentIn(RequestSchema):
    name: Annotated[str, MinLength(2, "Department name must be at least 2 characters")]
    description: str | None = None

class EmployeeIn(RequestSchema):
    name: Annotated[str, MinLength(2, "Name must be at least 2 characters")]
    email: Annotated[str, Email()]
    position: Annotated[str, MinLength(2, "Position must be at least 2 characters")]
    department_id: Annotated[int, Minimum(1, "Department ID is required")]
    salary: Annotated[float, Minimum(0, "Salary cannot be negative")]
    joining_date: Annotated[str, DateString("Date must be YYYY-MM-DD")]

class CheckInIn(RequestSchema):
    employee_id: Annotated[int, Minimum(1, "Employee ID is required")]
    check_in: Annotated[str, Timestamp()]
    check_out: Annotated[str | None, Timestamp()] = None

class CheckOutIn(RequestSchema):
    employee_id: Annotated[int, Minimum(1, "Employee ID is required")]
    check_out: Annotated[str, Timestamp()]

class LeaveIn(RequestSchema):
    employee_id: Annotated[int, Minimum(1, "Employee ID is required")]
    start_date: Annotated[str, DateString("Start date must be in YYYY-MM-DD format")]
    end_date: Annotated[str, DateString("End date must be in YYYY-MM-DD format")]
    type: Annotated[str, OneOf([t.value for t in LeaveType], "Invalid leave type")]
    reason: Annotated[str, MinLength(5, "Reason must be at least 5 characters long")]

class LeaveUpdateIn(RequestSchema):
    status: Annotated[str, OneOf([s.value for s in LeaveStatus], "Invalid leave status")]
    admin_note: str | None = None

# ---- responses ----

class ApiModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

class DepartmentOut(ApiModel):
    id: int
    name: str
    description: str | None = None

class DepartmentName(ApiModel):
    name: str

class EmployeeOut(ApiModel):
    id: int
    name: str
    email: str
    position: str
    department_id: int
    salary: float
    joining_date: date
    created_at: datetime | None = None

class EmployeeWithDepartment(EmployeeOut):
    department: DepartmentOut | None = None

class EmployeeListItem(EmployeeOut):
    department: DepartmentName | None = None

class UserOut(ApiModel):
    id: int
    username: str
    role: Role
    employee_id: int | None = None

class UserWithEmployee(UserOut):
    employee: EmployeeWithDepartment | None = None

class RegisterOut(BaseModel):
    message: str
    user: UserOut

class LoginOut(BaseModel):
    message: str
    token: str
    user: UserWithEmployee

class AttendanceOut(ApiModel):
    id: int
    employee_id: int
    date: datetime
    check_in: datetime
    check_out: datetime | None = None

class EmployeeName(ApiModel):
    name: str

class AttendanceListItem(AttendanceOut):
    employee: EmployeeName | None = None

class CheckOutResult(BaseModel):
    count: int

class LeaveOut(ApiModel):
    id: int
    employee_id: int
    start_date: date
    end_date: date
    type: LeaveType
    reason: str
    status: LeaveStatus
    admin_note: str | None = None
    created_at: datetime | None = None

class LeaveWithEmployee(LeaveOut):
    employee: EmployeeWithDepartment | None = None

class MessageOut(BaseModel):
    message: str
