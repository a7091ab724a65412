# quotation_backend/scripts/create_admin.py
import asyncio
import os

from quotation_backend.core.db import AsyncSessionLocal, init_models
from quotation_backend.core.enums import UserRole
from quotation_backend.services.auth_service import create_user


async def create_admin():
    await init_models()
    async with AsyncSessionLocal() as session:
        user = await create_user(
            session,
            username=os.getenv("ADMIN_USERNAME", "admin"),
            password=os.getenv("ADMIN_PASSWORD", "admin123"),
            role=UserRole.ADMIN.value,
        )
        print(f"Admin user '{user.username}' created!")


if __name__ == "__main__":
    asyncio.run(create_admin())
