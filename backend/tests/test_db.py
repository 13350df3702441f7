from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from leaveflow.db import build_engine

if TYPE_CHECKING:
    from pathlib import Path


async def test_in_memory_sqlite_shares_one_connection() -> None:
    engine = build_engine("sqlite+aiosqlite://")
    assert isinstance(engine.pool, StaticPool)

    async with engine.begin() as conn:
        await conn.execute(text("CREATE TABLE scratch (id INTEGER)"))
    async with engine.connect() as conn:
        result = await conn.execute(text("SELECT count(*) FROM scratch"))
        assert result.scalar_one() == 0
    await engine.dispose()


async def test_file_sqlite_uses_regular_pool(tmp_path: Path) -> None:
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'leave.db'}")
    assert not isinstance(engine.pool, StaticPool)
    await engine.dispose()
