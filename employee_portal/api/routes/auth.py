import logging
from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from employee_portal.api.schemas import LoginIn, LoginOut, RegisterIn, RegisterOut, UserOut, UserWithEmployee
from employee_portal.core.deps_api import require
from employee_portal.core.errors import Conflict, NotFound, Unauthenticated, field_error
from employee_portal.core.permissions import Action
from employee_portal.core.security import Claims, create_access_token, hash_password, verify_password
from employee_portal.core.validation import validate
from employee_portal.db.models.employee import Employee
from employee_portal.db.models.user import Role, User
from employee_portal.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

def _with_employee():
    return selectinload(User.employee).selectinload(Employee.department)

async def find_login_user(db: AsyncSession, username: str) -> User | None:
    """Resolve by username first, then treat ``username`` as an employee email."""
    q = await db.execute(select(User).where(User.username == username).options(_with_employee()))
    user = q.scalar_one_or_none()
    if user:
        return user
    employee_id = (await db.execute(select(Employee.id).where(Employee.email == username))).scalar_one_or_none()
    if employee_id is None:
        return None
    q = await db.execute(select(User).where(User.employee_id == employee_id).options(_with_employee()))
    return q.scalar_one_or_none()

async def username_taken(db: AsyncSession, username: str) -> bool:
    found = (await db.execute(select(User.id).where(User.username == username))).scalar_one_or_none()
    return found is not None

@router.post("/register", status_code=201, response_model=RegisterOut)
async def register(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(RegisterIn, payload)

    if await username_taken(db, data.username):
        raise Conflict("Username already exists", [field_error("username", "This username is already taken")])

    employee = (await db.execute(select(Employee).where(Employee.email == data.email))).scalar_one_or_none()
    if not employee:
        raise NotFound("Email not found", [field_error("email", "This email is not registered as an employee")])

    linked = (await db.execute(select(User.id).where(User.employee_id == employee.id))).scalar_one_or_none()
    if linked is not None:
        raise Conflict("Account exists", [field_error("email", "An account already exists for this employee")])

    user = User(
        username=data.username,
        password_hash=hash_password(data.password),
        role=Role.employee,
        employee_id=employee.id,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent registration won the race on one of the unique columns.
        await db.rollback()
        raise Conflict("Account exists", [field_error("username", "Username or employee account already taken")])

    logger.info("Registered user %s for employee %s", user.id, employee.id)
    return RegisterOut(message="User registered successfully", user=UserOut.model_validate(user))

@router.post("/login", response_model=LoginOut)
async def login(payload: dict = Body(...), db: AsyncSession = Depends(get_db)):
    data = validate(LoginIn, payload)
    user = await find_login_user(db, data.username)
    if not user:
        logger.info("Login failed: unknown user %r", data.username)
        raise NotFound("Authentication failed", [field_error("username", "User not found")])
    if not verify_password(data.password, user.password_hash):
        logger.info("Login failed: bad password for user %s", user.id)
        raise Unauthenticated("Authentication failed", [field_error("password", "Invalid password")])

    token = create_access_token(Claims(user_id=user.id, role=user.role, employee_id=user.employee_id))
    return LoginOut(message="Login successful", token=token, user=UserWithEmployee.model_validate(user))

@router.get("/current-user", response_model=UserWithEmployee)
async def current_user(claims: Claims = Depends(require("profile", Action.read)), db: AsyncSession = Depends(get_db)):
    q = await db.execute(select(User).where(User.id == claims.user_id).options(_with_employee()))
    user = q.scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    return user
