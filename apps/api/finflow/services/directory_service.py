from __future__ import annotations

import asyncio
from typing import Protocol

from sqlalchemy import select

from finflow.core.database import Database
from finflow.models.user import User
from finflow.models.watchlist import Watchlist
from finflow.schemas.digest import UserRef


class UserDirectory(Protocol):
    async def all_users_for_digest(self) -> list[UserRef]: ...


class WatchlistStore(Protocol):
    async def symbols_for_user(self, user: UserRef) -> list[str]: ...


class SqlUserDirectory:
    def __init__(self, db: Database) -> None:
        self.db = db

    def _load(self) -> list[UserRef]:
        with self.db.session() as session:
            rows = session.scalars(
                select(User).where(User.news_digest_enabled.is_(True)).order_by(User.created_at, User.email)
            ).all()
            return [UserRef(id=row.id, email=row.email, name=row.full_name) for row in rows if row.email]

    async def all_users_for_digest(self) -> list[UserRef]:
        return await asyncio.to_thread(self._load)


class SqlWatchlistStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def _load(self, user_id: str) -> list[str]:
        with self.db.session() as session:
            return list(
                session.scalars(
                    select(Watchlist.symbol).where(Watchlist.user_id == user_id).order_by(Watchlist.added_at, Watchlist.symbol)
                ).all()
            )

    async def symbols_for_user(self, user: UserRef) -> list[str]:
        return await asyncio.to_thread(self._load, user.id)
