"""Request-scoped dependencies shared by the API routers."""

from typing import AsyncGenerator

from fastapi import Request

from shotlab.uow import UnitOfWork


async def get_uow(request: Request) -> AsyncGenerator[UnitOfWork, None]:
    """Yield one UnitOfWork per request.

    The transaction commits after the endpoint returns and rolls back if it
    raises (HTTPException included).

    Example:
        @router.get("/api/history/{entry_id}")
        async def get_entry(entry_id: str, uow: UnitOfWork = Depends(get_uow)):
            return await uow.history.get_by_id(entry_id)
    """
    async with await request.app.state.uow_factory() as uow:
        yield uow
