"""FastAPI dependencies for objects created in the application lifespan."""

from typing import Callable

from fastapi import HTTPException, Request, status

from shotlab.services.credentials import CredentialMonitor
from shotlab.uow import UnitOfWork
from shotlab.workers.batch_worker import BatchRunner


def get_uow_factory(request: Request) -> Callable[[], UnitOfWork]:
    """Get UnitOfWork factory from app state.

    Example:
        >>> @router.get("/endpoint")
        >>> async def endpoint(uow_factory=Depends(get_uow_factory)):
        ...     async with await uow_factory() as uow:
        ...         await uow.stats.get()
    """
    return request.app.state.uow_factory


def get_batch_runner(request: Request) -> BatchRunner:
    """Get the batch runner, or 503 when no generative backend is configured."""
    runner = getattr(request.app.state, "batch_runner", None)
    if runner is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Generation backend is not configured (GEMINI_API_KEY missing)",
        )
    return runner


def get_credential_monitor(request: Request) -> CredentialMonitor:
    return request.app.state.credentials
