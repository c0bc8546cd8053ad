from employee_portal.db.models.department import Department
from employee_portal.db.models.employee import Employee
from employee_portal.db.models.user import Role, User
from employee_portal.db.models.attendance import Attendance
from employee_portal.db.models.leave import Leave, LeaveStatus, LeaveType

__all__ = [
    "Attendance",
    "Department",
    "Employee",
    "Leave",
    "LeaveStatus",
    "LeaveType",
    "Role",
    "User",
]
