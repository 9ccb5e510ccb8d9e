"""SQL implementation of `WebLogUserData`."""

from typing import List, Optional

from sqlalchemy import delete, func, select, update

from myweblog.data.interfaces import WebLogUserData
from myweblog.data.utils import restore_in_batches
from myweblog.database.sql.helpers import SqlPort, sql_operation
from myweblog.database.sql.tables import page, post, web_log_user
from myweblog.models.results import DataResult, RestoreReport
from myweblog.models.view_models import UserDisplayName
from myweblog.models.weblog_models import WebLogUser, utc_now

UPDATE_FIELDS = [
    "email",
    "first_name",
    "last_name",
    "preferred_name",
    "password_hash",
    "salt",
    "url",
    "access_level",
]


class SqlWebLogUserData(SqlPort, WebLogUserData):
    async def _find(self, *criteria) -> List[WebLogUser]:
        rows = await self.fetch_all(
            select(web_log_user).where(*criteria).order_by(func.lower(web_log_user.c.preferred_name), web_log_user.c.id)
        )
        return [WebLogUser.model_validate(dict(row)) for row in rows]

    @sql_operation("WebLogUser.add")
    async def add(self, user: WebLogUser) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(web_log_user.insert().values(**user.model_dump()))

    @sql_operation("WebLogUser.delete")
    async def delete(self, user_id: str, web_log_id: str) -> DataResult:
        key = (web_log_user.c.id == user_id, web_log_user.c.web_log_id == web_log_id)
        async with self.engine.begin() as conn:
            if await conn.scalar(select(func.count()).select_from(web_log_user).where(*key)) == 0:
                return DataResult.not_found(f"User {user_id} not found")

            pages = await conn.scalar(
                select(func.count()).select_from(page).where(page.c.web_log_id == web_log_id, page.c.author_id == user_id)
            )
            posts = await conn.scalar(
                select(func.count()).select_from(post).where(post.c.web_log_id == web_log_id, post.c.author_id == user_id)
            )
            if pages + posts > 0:
                return DataResult.blocked(f"User has pages ({pages}) or posts ({posts}); cannot delete")

            await conn.execute(delete(web_log_user).where(*key))
        return DataResult.success(user_id)

    @sql_operation("WebLogUser.find_by_email")
    async def find_by_email(self, email: str, web_log_id: str) -> Optional[WebLogUser]:
        found = await self._find(web_log_user.c.email == email, web_log_user.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("WebLogUser.find_by_id")
    async def find_by_id(self, user_id: str, web_log_id: str) -> Optional[WebLogUser]:
        found = await self._find(web_log_user.c.id == user_id, web_log_user.c.web_log_id == web_log_id)
        return found[0] if found else None

    @sql_operation("WebLogUser.find_by_web_log")
    async def find_by_web_log(self, web_log_id: str) -> List[WebLogUser]:
        return await self._find(web_log_user.c.web_log_id == web_log_id)

    @sql_operation("WebLogUser.find_names")
    async def find_names(self, user_ids: List[str], web_log_id: str) -> List[UserDisplayName]:
        if not user_ids:
            return []
        users = await self._find(web_log_user.c.web_log_id == web_log_id, web_log_user.c.id.in_(list(user_ids)))
        return [UserDisplayName(id=user.id, display_name=user.display_name) for user in users]

    @sql_operation("WebLogUser.restore")
    async def restore(self, users: List[WebLogUser]) -> RestoreReport:
        async def write(batch: List[WebLogUser]) -> None:
            async with self.engine.begin() as conn:
                await conn.execute(web_log_user.insert(), [user.model_dump() for user in batch])

        return await restore_in_batches("user", users, self.batch_size, write)

    @sql_operation("WebLogUser.set_last_seen")
    async def set_last_seen(self, user_id: str, web_log_id: str) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(
                update(web_log_user)
                .where(web_log_user.c.id == user_id, web_log_user.c.web_log_id == web_log_id)
                .values(last_seen_on=utc_now())
            )

    @sql_operation("WebLogUser.update")
    async def update(self, user: WebLogUser) -> bool:
        values = user.model_dump(include=set(UPDATE_FIELDS))
        async with self.engine.begin() as conn:
            result = await conn.execute(
                update(web_log_user)
                .where(web_log_user.c.id == user.id, web_log_user.c.web_log_id == user.web_log_id)
                .values(**values)
            )
        return result.rowcount > 0
