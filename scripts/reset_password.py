import asyncio
from getpass import getpass
from sqlalchemy import select

from employee_portal.core.errors import ValidationFailed
from employee_portal.core.security import hash_password
from employee_portal.core.validation import validate
from employee_portal.api.schemas import PasswordIn
from employee_portal.db.session import AsyncSessionLocal, engine
from employee_portal.db.base import Base
from employee_portal.db.models.user import User


async def reset_password(username: str, new_pass: str) -> bool:
    """Replace the stored hash; False when the user does not exist."""
    validate(PasswordIn, {"password": new_pass})
    async with AsyncSessionLocal() as db:
        u = (await db.execute(select(User).where(User.username == username))).scalar_one_or_none()
        if not u:
            return False
        u.password_hash = hash_password(new_pass)
        await db.commit()
        return True


async def main():
    # ensure tables exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    username = input("Username to reset: ").strip()
    new_pass = getpass("New password: ").strip()

    try:
        ok = await reset_password(username, new_pass)
    except ValidationFailed as exc:
        for d in exc.details:
            print("Password:", d["message"])
        return

    if not ok:
        print("User not found:", username)
        return
    print("Password reset OK for:", username)


if __name__ == "__main__":
    asyncio.run(main())
