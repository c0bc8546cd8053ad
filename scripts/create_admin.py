import asyncio
from getpass import getpass
from sqlalchemy import select

from employee_portal.core.errors import ValidationFailed
from employee_portal.core.security import hash_password
from employee_portal.core.validation import validate
from employee_portal.api.schemas import PasswordIn
from employee_portal.db.session import AsyncSessionLocal, engine
from employee_portal.db.base import Base
from employee_portal.db.models.user import User, Role

async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    username = input("Admin username: ").strip()
    password = getpass("Admin password: ").strip()
    try:
        validate(PasswordIn, {"password": password})
    except ValidationFailed as exc:
        for d in exc.details:
            print("Password:", d["message"])
        return

    async with AsyncSessionLocal() as db:
        existing = (await db.execute(select(User).where(User.username == username))).scalar_one_or_none()
        if existing:
            print("User already exists.")
            return
        u = User(username=username, password_hash=hash_password(password), role=Role.admin)
        db.add(u)
        await db.commit()
        print("Admin created:", username)

if __name__ == "__main__":
    asyncio.run(main())
