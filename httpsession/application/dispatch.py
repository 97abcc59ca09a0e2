"""Async dispatch: run a session's blocking perform on a work queue.

The synchronous engine stays the single source of truth; these helpers only
move the call onto an executor and hand the outcome back to the caller.
"""
from __future__ import annotations

import asyncio
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger

from httpsession.config.settings import Settings
from httpsession.core import SERVICE_NAME
from httpsession.domain.models import HTTPResponse

if TYPE_CHECKING:
    from httpsession.domain.session import HTTPSession

Completion = Callable[[Exception | None, HTTPResponse | None], None]


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def perform_async(session: HTTPSession, executor: Executor, completion: Completion) -> Future[None]:
    """Submit session.perform to executor; call completion(error, response) once.

    Exactly one of error/response is set. Completion runs on the executor's
    worker thread.
    """

    def run() -> None:
        try:
            response = session.perform()
        except Exception as exc:
            _log("async_dispatch_failed", url=session.url, error=str(exc))
            completion(exc, None)
            return
        completion(None, response)

    return executor.submit(run)


async def aperform(session: HTTPSession, executor: Executor | None = None) -> HTTPResponse:
    """Await session.perform from a coroutine without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, session.perform)


def create_dispatch_executor(settings: Settings | None = None) -> ThreadPoolExecutor:
    settings = settings or Settings()
    return ThreadPoolExecutor(
        max_workers=settings.dispatch_max_workers,
        thread_name_prefix=SERVICE_NAME,
    )
