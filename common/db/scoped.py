"""
Operation-scoped database sessions.

Repositories call ``get_session()``; outside a transaction it acquires a
connection, commits and releases it right away, so no connection is held
while a generation pipeline waits on an LLM or the object store.

    async with transaction():
        await account_repo.debit(user_id, amount)
        await reservation_repo.create(...)
    # both writes commit together

Inside ``transaction()`` every ``get_session()`` reuses the same session.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from common.core.otel_axiom_exporter import get_logger
from common.db.session import AsyncSessionLocal, AsyncSessionLocalReadonly
from common.db.context import (
    get_current_session,
    set_current_session,
    reset_current_session,
    is_readonly_forced,
)

logger = get_logger(__name__)


def _factory(readonly: bool):
    # Looked up at call time so tests can swap the module attributes
    return AsyncSessionLocalReadonly if readonly else AsyncSessionLocal


@asynccontextmanager
async def _owned_session(
    readonly: bool, publish: bool
) -> AsyncGenerator[AsyncSession, None]:
    start = time.perf_counter()
    async with _factory(readonly)() as session:
        logger.debug(
            f"Session acquire: {(time.perf_counter() - start) * 1000:.2f}ms, readonly={readonly}"
        )
        token = set_current_session(session, readonly=readonly) if publish else None
        try:
            yield session
            if not readonly:
                await session.commit()
        except Exception as e:
            logger.error(f"Session rollback due to: {e}")
            await session.rollback()
            raise
        finally:
            if token is not None:
                reset_current_session(token, readonly=readonly)


@asynccontextmanager
async def transaction(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """
    Explicit transaction boundary.

    Commits on success (unless readonly), rolls back and re-raises on error.
    """
    effective_readonly = readonly or is_readonly_forced()
    async with _owned_session(effective_readonly, publish=True) as session:
        yield session


@asynccontextmanager
async def get_session(readonly: bool = False) -> AsyncGenerator[AsyncSession, None]:
    """Session for a single operation; joins the enclosing transaction if there is one."""
    effective_readonly = readonly or is_readonly_forced()
    existing = get_current_session(readonly=effective_readonly)

    if existing is not None:
        yield existing
        return

    async with _owned_session(effective_readonly, publish=False) as session:
        yield session
