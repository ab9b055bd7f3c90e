"""UserRepository — read-only lookups used by the order core."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_USER_EXISTS_SQL = text("""
    SELECT 1 FROM users WHERE id = CAST(:user_id AS UUID) AND is_active
""")


class UserRepository:
    async def exists(self, user_id: str, db: AsyncSession) -> bool:
        result = await db.execute(_USER_EXISTS_SQL, {"user_id": user_id})
        return result.fetchone() is not None
