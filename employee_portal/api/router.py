from fastapi import APIRouter
from employee_portal.api.routes import auth, departments, employees, attendance, leaves

api = APIRouter()
api.include_router(auth.router, tags=["auth"])
api.include_router(departments.router, tags=["departments"])
api.include_router(employees.router, tags=["employees"])
api.include_router(attendance.router, tags=["attendance"])
api.include_router(leaves.router, tags=["leaves"])
